"""Quest Manager - Per-pet activity rotation.

Owns the QuestState documents and the user's rotation pointer.

Flow:
    EconomyManager.earn_coins() emits COINS_EARNED(pet_id, amount, activity)
    -> _on_coins_earned converts coins to progress units (10 coins = 1 unit)
    -> record_progress() applies them when the activity matches the pet's
       current InProgress quest
    -> reaching the target completes the quest and starts an 8 hour cooldown
    -> the first read after the cooldown rotates to the next activity
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..engines.quest_engine import InvalidActivityError, QuestEngine
from ..utils.dt_utils import local_date_for
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from homeassistant.core import HomeAssistant

    from ..coordinator import PetQuestCoordinator
    from ..type_defs import QuestDisplay, QuestState

__all__ = ["InvalidActivityError", "QuestManager"]


class QuestManager(BaseManager):
    """Manager for the quest rotation state machine."""

    def __init__(self, hass: HomeAssistant, coordinator: PetQuestCoordinator) -> None:
        """Initialize the QuestManager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Subscribe to coin earnings."""
        self.listen(const.SIGNAL_SUFFIX_COINS_EARNED, self._on_coins_earned)
        const.LOGGER.debug("QuestManager async_setup complete for entry %s", self.entry_id)

    @callback
    def _on_coins_earned(self, payload: dict[str, Any]) -> None:
        """Advance the earning pet's quest by the coins' progress units."""
        pet_id = payload.get("pet_id")
        activity = payload.get("activity")
        if not pet_id or not activity:
            return
        units = QuestEngine.progress_units_for_coins(int(payload.get("amount", 0)))
        if units:
            self.record_progress(pet_id, activity, units)

    # =========================================================================
    # Queries
    # =========================================================================

    def _key(self, pet_id: str) -> str:
        return f"{const.ENTITY_PREFIX_QUEST}{pet_id}"

    def ensure_quest(self, pet_id: str) -> QuestState:
        """Return the pet's quest, creating it at the first activity if missing."""
        quest = self.sync.get(self._key(pet_id))
        if quest is None:
            quest = self.sync.write(self._key(pet_id), dict(QuestEngine.new_quest()))
            const.LOGGER.debug("QuestManager: Assigned first activity to pet %s", pet_id)
        return quest  # type: ignore[return-value]

    def get_quest(self, pet_id: str) -> QuestState:
        """Return the pet's quest with an elapsed cooldown resolved.

        Once now >= cooldown_until the quest rotates to the next activity with
        progress 0, and the rotation is written back.
        """
        quest = self.ensure_quest(pet_id)
        now = self.now_ms()
        if not QuestEngine.needs_rotation(quest, now):
            return quest

        rotated = QuestEngine.rotate(quest)
        stored = self.sync.write(self._key(pet_id), dict(rotated))
        const.LOGGER.debug(
            "QuestManager: Pet %s rotated from '%s' to '%s'",
            pet_id,
            quest.get(const.DATA_QUEST_ACTIVITY),
            rotated[const.DATA_QUEST_ACTIVITY],
        )
        self.emit(
            const.SIGNAL_SUFFIX_QUEST_ROTATED,
            pet_id=pet_id,
            previous_activity=quest.get(const.DATA_QUEST_ACTIVITY),
            activity=rotated[const.DATA_QUEST_ACTIVITY],
        )
        return stored  # type: ignore[return-value]

    def get_quest_display(self, pet_id: str) -> QuestDisplay:
        """Return what the UI shows for the pet's quest."""
        return QuestEngine.display(self.get_quest(pet_id), self.now_ms())

    def current_activity(self, pet_id: str) -> str:
        """Return the activity the pet is currently assigned."""
        return self.get_quest(pet_id).get(
            const.DATA_QUEST_ACTIVITY, const.ACTIVITY_SEQUENCE[0]
        )

    def completed_on(self, pet_id: str, day: date) -> bool:
        """Return True if the pet's most recent quest completion fell on `day`."""
        quest = self.sync.get(self._key(pet_id)) or {}
        last_completed_at = quest.get(const.DATA_QUEST_LAST_COMPLETED_AT)
        if last_completed_at is None:
            return False
        return local_date_for(last_completed_at) == day

    def any_completed_on(self, pet_ids: Iterable[str], day: date) -> bool:
        """Return True if any of the pets completed a quest on `day`."""
        return any(self.completed_on(pet_id, day) for pet_id in pet_ids)

    # =========================================================================
    # Commands
    # =========================================================================

    def record_progress(self, pet_id: str, activity: str, delta: int) -> bool:
        """Apply progress for `activity` to the pet's quest.

        Ignored unless the quest is InProgress on the same activity. Progress
        is capped at the target.

        Returns:
            True if the progress counted

        Raises:
            InvalidActivityError: If activity is unknown
        """
        QuestEngine.validate_activity(activity)
        quest = self.get_quest(pet_id)
        now = self.now_ms()
        result = QuestEngine.apply_progress(quest, activity, delta, now)
        if not result.applied:
            const.LOGGER.debug(
                "QuestManager: Ignored %s progress for pet %s ('%s' vs current '%s')",
                delta,
                pet_id,
                activity,
                quest.get(const.DATA_QUEST_ACTIVITY),
            )
            return False

        self.sync.write(self._key(pet_id), dict(result.quest))
        if result.completed:
            const.LOGGER.info(
                "INFO: Pet %s completed quest '%s'", pet_id, activity
            )
            self.emit(
                const.SIGNAL_SUFFIX_QUEST_COMPLETED,
                pet_id=pet_id,
                activity=activity,
                completed_at=now,
            )
        return True

    def advance_rotation_pointer(self, step: int, size: int) -> int:
        """Advance the user's rotation pointer.

        This is the only writer of UserState.rotation_pointer.

        Args:
            step: How far to move the pointer
            size: Collection size the pointer wraps around

        Returns:
            The pointer value in effect before the advance
        """
        user = self.coordinator.pet_manager.get_user()
        start = int(user.get(const.DATA_USER_ROTATION_POINTER, 0))
        if size <= 0:
            return start
        start %= size
        self.sync.write(
            const.ENTITY_KEY_USER,
            {const.DATA_USER_ROTATION_POINTER: (start + step) % size},
        )
        return start
