"""Sleep Engine - Pure logic for the per-pet sleep cycle.

States per pet:
- Awake(clicks 0..2)
- Asleep(since, until), entered on the third interaction and lasting 8 hours

Leaving Asleep is lazy: callers check `should_wake` on read. Waking also
restores the pet's heart counters to the hungry baseline, which is what
makes a pet needy again after a full cycle.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
State management belongs in SleepManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import remaining_ms

if TYPE_CHECKING:
    from ..type_defs import PetProgress, SleepDisplay, SleepState


@dataclass
class InteractionResult:
    """Outcome of SleepEngine.interact().

    Attributes:
        state: Resulting sleep state
        changed: Whether the click counted
        completed: Whether this click put the pet to sleep
    """

    state: SleepState
    changed: bool = False
    completed: bool = False


class SleepEngine:
    """Pure logic engine for the sleep state machine.

    All methods are static - no instance state.
    """

    @staticmethod
    def new_state() -> SleepState:
        """Return an Awake(0) state with no sleep history."""
        return {
            "clicks": 0,
            "asleep": False,
            "since": None,
            "until": None,
            "last_completed_at": None,
        }

    @staticmethod
    def interact(state: SleepState, now: int) -> InteractionResult:
        """Register one sleep interaction.

        A click while asleep is a no-op. The third click moves the pet to
        Asleep(now, now + 8h).
        """
        if state.get("asleep"):
            return InteractionResult(state=state)

        updated = dict(state)
        clicks = min(const.SLEEP_CLICKS_REQUIRED, state.get("clicks", 0) + 1)
        updated["clicks"] = clicks

        if clicks < const.SLEEP_CLICKS_REQUIRED:
            return InteractionResult(state=updated, changed=True)  # type: ignore[arg-type]

        updated["asleep"] = True
        updated["since"] = now
        updated["until"] = now + const.SLEEP_DURATION_MS
        updated["last_completed_at"] = now
        return InteractionResult(state=updated, changed=True, completed=True)  # type: ignore[arg-type]

    @staticmethod
    def should_wake(state: SleepState, now: int) -> bool:
        """Return True when an Asleep pet's window has elapsed."""
        until = state.get("until")
        return bool(state.get("asleep")) and until is not None and now >= until

    @staticmethod
    def wake(state: SleepState) -> SleepState:
        """Return the Awake(0) state that follows a finished sleep window."""
        woken = dict(state)
        woken["clicks"] = 0
        woken["asleep"] = False
        woken["since"] = None
        woken["until"] = None
        return woken  # type: ignore[return-value]

    @staticmethod
    def fallback_reset_due(state: SleepState, progress: PetProgress, now: int) -> bool:
        """Return True when the 24-hour fallback heart reset should fire.

        Only applies while awake; an asleep pet resets when it wakes.
        """
        if state.get("asleep"):
            return False
        next_reset = progress.get("next_heart_reset_at")
        return next_reset is not None and now >= next_reset

    @staticmethod
    def heart_reset_patch(now: int) -> dict[str, Any]:
        """Return the PetProgress fields for the hungry baseline."""
        return {
            const.DATA_PROGRESS_FEEDING_COUNT: 0,
            const.DATA_PROGRESS_ADVENTURE_COINS_TODAY: 0,
            const.DATA_PROGRESS_SLEEP_COMPLETED_TODAY: False,
            const.DATA_PROGRESS_NEXT_HEART_RESET_AT: now + const.HEART_RESET_FALLBACK_MS,
        }

    @staticmethod
    def display(state: SleepState, now: int) -> SleepDisplay:
        """Build the UI-facing view of the sleep machine."""
        asleep = bool(state.get("asleep"))
        return {
            "state": const.SLEEP_STATE_ASLEEP if asleep else const.SLEEP_STATE_AWAKE,
            "clicks": state.get("clicks", 0),
            "clicks_required": const.SLEEP_CLICKS_REQUIRED,
            "remaining_ms": remaining_ms(state.get("until"), now) if asleep else 0,
            "since": state.get("since"),
            "until": state.get("until"),
        }
