"""Mood Manager - The user's active mood period and derived pet moods.

There is exactly one active MoodPeriod per user, shared by every owned pet.
A period is replaced when a read observes now >= next_reset_at, or
re-anchored early when any pet completes a full sleep cycle. The set of
pets that start the period sad is fixed for the life of the period.

Mood itself is never stored: it is derived on every read from the period,
the pet's sleep state and its coin total.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from .. import const
from ..engines.mood_engine import MoodEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import PetQuestCoordinator
    from ..type_defs import MoodPeriod


class MoodManager(BaseManager):
    """Manager for mood period assignment and mood derivation."""

    def __init__(self, hass: HomeAssistant, coordinator: PetQuestCoordinator) -> None:
        """Initialize the MoodManager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Set up the MoodManager.

        Periods are created on demand by ensure_current_period().
        """
        const.LOGGER.debug("MoodManager async_setup complete for entry %s", self.entry_id)

    def get_period(self) -> MoodPeriod | None:
        """Return the stored period without checking its deadline."""
        return self.sync.get(const.ENTITY_KEY_MOOD_PERIOD)  # type: ignore[return-value]

    # =========================================================================
    # Period assignment
    # =========================================================================

    def ensure_current_period(
        self, owned_pet_ids: list[str] | None = None
    ) -> MoodPeriod | None:
        """Return the active period, replacing it first if it has elapsed.

        With no owned pets no period is created.
        """
        owned = (
            owned_pet_ids
            if owned_pet_ids is not None
            else self.coordinator.pet_manager.owned_pet_ids()
        )
        period = self.get_period()
        now = self.now_ms()
        if not MoodEngine.is_expired(period, now) or not owned:
            return period

        sleep_manager = self.coordinator.sleep_manager
        reason = MoodEngine.rollover_reason(
            period,
            (sleep_manager.last_completed_at(pet_id) for pet_id in owned),
        )
        return self._assign_period(owned, reason, now, period)

    def anchor_on_sleep(
        self, owned_pet_ids: list[str] | None = None, at: int | None = None
    ) -> MoodPeriod | None:
        """Start a new period anchored at a sleep completion.

        Args:
            owned_pet_ids: Pets to build the period for (all owned by default)
            at: Completion time; the clock's current reading by default
        """
        owned = (
            owned_pet_ids
            if owned_pet_ids is not None
            else self.coordinator.pet_manager.owned_pet_ids()
        )
        if not owned:
            return None
        anchor_at = self.now_ms() if at is None else at
        return self._assign_period(
            owned, const.ASSIGNMENT_REASON_SLEEP_ANCHOR, anchor_at, self.get_period()
        )

    def _assign_period(
        self,
        owned: list[str],
        reason: str,
        anchor_at: int,
        previous: MoodPeriod | None,
    ) -> MoodPeriod:
        """Build, store and announce a new period."""
        previous_sad = previous.get("sad_pet_ids", []) if previous else []
        rotation_start = 0
        if len(owned) > const.SMALL_COLLECTION_MAX:
            rotation_start = self.coordinator.quest_manager.advance_rotation_pointer(
                MoodEngine.sad_count(len(owned)), len(owned)
            )
        sad_pet_ids = MoodEngine.select_sad_pets(owned, previous_sad, rotation_start)

        economy = self.coordinator.economy_manager
        baseline = {pet_id: economy.get_pet_total(pet_id) for pet_id in owned}
        period = MoodEngine.build_period(
            f"{anchor_at}:{uuid.uuid4().hex[:8]}",
            anchor_at,
            sad_pet_ids,
            baseline,
            reason,
        )
        self.sync.write(const.ENTITY_KEY_MOOD_PERIOD, dict(period))

        const.LOGGER.info(
            "INFO: New mood period %s (%s), sad pets: %s",
            period["period_id"],
            reason,
            sad_pet_ids,
        )
        self.emit(const.SIGNAL_SUFFIX_MOOD_PERIOD_ASSIGNED, **period)
        return period

    # =========================================================================
    # Queries
    # =========================================================================

    def is_pet_sad_at_period_start(self, pet_id: str) -> bool:
        """Return True if the pet is in the active period's sad set."""
        return MoodEngine.is_sad_at_period_start(self.ensure_current_period(), pet_id)

    def period_relative_quest_done(self, pet_id: str) -> bool:
        """Return True once the pet earned 50 coins within the active period."""
        return MoodEngine.period_relative_quest_done(
            self.ensure_current_period(),
            pet_id,
            self.coordinator.economy_manager.get_pet_total(pet_id),
        )

    def get_mood(self, pet_id: str) -> str:
        """Derive the pet's displayed mood."""
        period = self.ensure_current_period()
        if period is None:
            return const.MOOD_UNKNOWN
        slept = MoodEngine.slept_since_anchor(
            period, self.coordinator.sleep_manager.last_completed_at(pet_id)
        )
        quest_done = MoodEngine.period_relative_quest_done(
            period, pet_id, self.coordinator.economy_manager.get_pet_total(pet_id)
        )
        sad = MoodEngine.is_sad_at_period_start(period, pet_id)
        return MoodEngine.derive_mood(slept, quest_done, sad)

    def get_heart_fill(self, pet_id: str) -> int:
        """Return the pet's heart meter fill (0-100)."""
        progress = self.coordinator.pet_manager.get_progress(pet_id)
        return MoodEngine.heart_fill_percent(
            int(progress.get(const.DATA_PROGRESS_FEEDING_COUNT, 0)),
            int(progress.get(const.DATA_PROGRESS_ADVENTURE_COINS_TODAY, 0)),
            bool(progress.get(const.DATA_PROGRESS_SLEEP_COMPLETED_TODAY, False)),
        )
