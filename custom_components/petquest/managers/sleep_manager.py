"""Sleep Manager - Per-pet sleep cycle and heart resets.

Three accepted interactions put an awake pet to sleep for 8 hours. Finishing
the cycle re-anchors the mood period and may count the day toward the
user's streak. Waking up (observed lazily on read) restores the pet's heart
counters; a 24-hour fallback does the same for pets that never sleep.

Interactions are gated: a pet that started the period sad must finish its
period quest (50 coins since the anchor) before clicks count.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..engines.sleep_engine import SleepEngine
from ..utils.dt_utils import remaining_ms, today_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import PetQuestCoordinator
    from ..type_defs import SleepDisplay, SleepState


class SleepManager(BaseManager):
    """Manager for the sleep state machine."""

    def __init__(self, hass: HomeAssistant, coordinator: PetQuestCoordinator) -> None:
        """Initialize the SleepManager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Set up the SleepManager.

        Wake-ups are evaluated on read; nothing is scheduled.
        """
        const.LOGGER.debug("SleepManager async_setup complete for entry %s", self.entry_id)

    def _key(self, pet_id: str) -> str:
        return f"{const.ENTITY_PREFIX_SLEEP}{pet_id}"

    # =========================================================================
    # State access
    # =========================================================================

    def ensure_state(self, pet_id: str) -> SleepState:
        """Return the pet's sleep state, creating Awake(0) if missing."""
        state = self.sync.get(self._key(pet_id))
        if state is None:
            state = self.sync.write(self._key(pet_id), dict(SleepEngine.new_state()))
        return state  # type: ignore[return-value]

    def last_completed_at(self, pet_id: str) -> int | None:
        """Return when the pet last finished a sleep cycle."""
        state = self.sync.get(self._key(pet_id)) or {}
        return state.get(const.DATA_SLEEP_LAST_COMPLETED_AT)

    def tick(self, pet_id: str) -> SleepState:
        """Apply any elapsed time-based transition for the pet.

        - Asleep and now >= until: wake to Awake(0) and reset heart counters
        - Awake and now >= next_heart_reset_at: reset heart counters

        Returns:
            The current sleep state
        """
        state = self.ensure_state(pet_id)
        now = self.now_ms()
        if SleepEngine.should_wake(state, now):
            state = self.sync.write(self._key(pet_id), dict(SleepEngine.wake(state)))  # type: ignore[assignment]
            const.LOGGER.debug("SleepManager: Pet %s woke up", pet_id)
            self._reset_hearts(pet_id, now, "wake")
        elif SleepEngine.fallback_reset_due(
            state, self.coordinator.pet_manager.get_progress(pet_id), now
        ):
            self._reset_hearts(pet_id, now, "fallback")
        return state

    def _reset_hearts(self, pet_id: str, now: int, trigger: str) -> None:
        """Restore the pet's hungry baseline."""
        self.sync.write(
            f"{const.ENTITY_PREFIX_PROGRESS}{pet_id}", SleepEngine.heart_reset_patch(now)
        )
        const.LOGGER.debug("SleepManager: Heart reset for pet %s (%s)", pet_id, trigger)
        self.emit(const.SIGNAL_SUFFIX_HEART_RESET, pet_id=pet_id, trigger=trigger)

    def get_sleep_display(self, pet_id: str) -> SleepDisplay:
        """Return what the UI shows for the pet's sleep machine."""
        return SleepEngine.display(self.tick(pet_id), self.now_ms())

    def remaining_ms(self, pet_id: str) -> int:
        """Return milliseconds of sleep left (0 when awake)."""
        state = self.tick(pet_id)
        if not state.get(const.DATA_SLEEP_ASLEEP):
            return 0
        return remaining_ms(state.get(const.DATA_SLEEP_UNTIL), self.now_ms())

    # =========================================================================
    # Commands
    # =========================================================================

    def interact(self, pet_id: str) -> bool:
        """Register one sleep interaction for the pet.

        Returns:
            True if the click counted

        Raises:
            ValueError: If the pet does not exist
        """
        self.coordinator.pet_manager.require_pet(pet_id, "SleepManager.interact")
        state = self.tick(pet_id)

        mood = self.coordinator.mood_manager
        if mood.is_pet_sad_at_period_start(pet_id) and not mood.period_relative_quest_done(
            pet_id
        ):
            const.LOGGER.warning(
                "WARNING: SleepManager: Pet %s is sad and has not finished its period "
                "quest, ignoring sleep interaction",
                pet_id,
            )
            return False

        now = self.now_ms()
        result = SleepEngine.interact(state, now)
        if not result.changed:
            const.LOGGER.debug("SleepManager: Pet %s is already asleep", pet_id)
            return False

        self.sync.write(self._key(pet_id), dict(result.state))
        if result.completed:
            self._complete_cycle(pet_id, result.state, now)
        return True

    def _complete_cycle(self, pet_id: str, state: SleepState, now: int) -> None:
        """Apply the effects of a finished sleep cycle."""
        self.sync.increment(
            f"{const.ENTITY_PREFIX_PROGRESS}{pet_id}",
            {const.DATA_PROGRESS_TOTAL_SLEEPS: 1},
            {
                const.DATA_PROGRESS_SLEEP_COMPLETED_TODAY: True,
                const.DATA_PROGRESS_NEXT_HEART_RESET_AT: state.get(const.DATA_SLEEP_UNTIL),
            },
        )
        const.LOGGER.info("INFO: Pet %s fell asleep", pet_id)

        coordinator = self.coordinator
        coordinator.economy_manager.evaluate_milestones(pet_id)

        owned = coordinator.pet_manager.owned_pet_ids()
        coordinator.mood_manager.anchor_on_sleep(owned, at=now)

        today = today_local(now)
        if coordinator.quest_manager.any_completed_on(owned, today):
            coordinator.streak_manager.register_qualifying_day(today)

        self.emit(
            const.SIGNAL_SUFFIX_SLEEP_COMPLETED,
            pet_id=pet_id,
            completed_at=now,
            until=state.get(const.DATA_SLEEP_UNTIL),
        )
