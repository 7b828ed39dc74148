"""Quest Engine - Pure logic for the per-pet activity rotation.

This engine provides stateless, pure Python functions for:
- Activity validation against the canonical sequence
- The InProgress -> Completed -> Cooldown -> InProgress(next) state machine
- Progress application gated on the current activity
- The UI display rule (pinned to the completed activity during cooldown)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and an
explicit `now` in epoch milliseconds. State management belongs in QuestManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import remaining_ms

if TYPE_CHECKING:
    from ..type_defs import QuestDisplay, QuestState


class InvalidActivityError(Exception):
    """Raised when an activity is neither sequenced nor the story activity."""

    def __init__(self, activity: str) -> None:
        """Initialize InvalidActivityError.

        Args:
            activity: The rejected activity name
        """
        self.activity = activity
        super().__init__(f"Unknown activity: {activity}")


# =============================================================================
# PROGRESS RESULT
# =============================================================================


@dataclass
class ProgressResult:
    """Outcome of QuestEngine.apply_progress().

    Attributes:
        quest: Resulting quest state (same values as input when not applied)
        applied: Whether the delta counted toward the quest
        completed: Whether this delta completed the quest
    """

    quest: QuestState
    applied: bool = False
    completed: bool = False


# =============================================================================
# QUEST ENGINE
# =============================================================================


class QuestEngine:
    """Pure logic engine for quest rotation and cooldown.

    All methods are static - no instance state.
    """

    @staticmethod
    def validate_activity(activity: str) -> None:
        """Accept sequenced activities and the story activity.

        Raises:
            InvalidActivityError: For anything else
        """
        if activity != const.ACTIVITY_STORY and activity not in const.ACTIVITY_SEQUENCE:
            raise InvalidActivityError(activity)

    @staticmethod
    def next_activity(activity: str) -> str:
        """Return the activity after `activity`, wrapping to the start.

        Unknown activities restart the rotation at the first activity.
        """
        if activity not in const.ACTIVITY_SEQUENCE:
            return const.ACTIVITY_SEQUENCE[0]
        index = const.ACTIVITY_SEQUENCE.index(activity)
        return const.ACTIVITY_SEQUENCE[(index + 1) % len(const.ACTIVITY_SEQUENCE)]

    @staticmethod
    def new_quest(
        activity: str = const.ACTIVITY_SEQUENCE[0],
        target: int = const.QUEST_TARGET,
    ) -> QuestState:
        """Build a fresh InProgress quest."""
        return {
            "activity": activity,
            "progress": 0,
            "target": target,
            "completed_at": None,
            "cooldown_until": None,
            "last_completed_activity": None,
            "last_completed_at": None,
            "completions": 0,
        }

    @staticmethod
    def state_of(quest: QuestState, now: int) -> str:
        """Return the quest's state name at `now`.

        Cooldown expiry is not applied here; callers resolve it first.
        """
        cooldown_until = quest.get("cooldown_until")
        if cooldown_until is not None:
            if now < cooldown_until:
                return const.QUEST_STATE_COOLDOWN
            return const.QUEST_STATE_COMPLETED
        if quest.get("progress", 0) >= quest.get("target", const.QUEST_TARGET):
            return const.QUEST_STATE_COMPLETED
        return const.QUEST_STATE_IN_PROGRESS

    @staticmethod
    def needs_rotation(quest: QuestState, now: int) -> bool:
        """Return True when a completed quest's cooldown has elapsed."""
        cooldown_until = quest.get("cooldown_until")
        return cooldown_until is not None and now >= cooldown_until

    @staticmethod
    def rotate(quest: QuestState) -> QuestState:
        """Advance a finished quest to the next activity with progress 0.

        last_completed_activity and last_completed_at are kept so the day's
        completion can still be found after rotation.
        """
        rotated = dict(quest)
        rotated["activity"] = QuestEngine.next_activity(
            quest.get("activity", const.ACTIVITY_SEQUENCE[0])
        )
        rotated["progress"] = 0
        rotated["completed_at"] = None
        rotated["cooldown_until"] = None
        return rotated  # type: ignore[return-value]

    @staticmethod
    def apply_progress(
        quest: QuestState, activity: str, delta: int, now: int
    ) -> ProgressResult:
        """Apply `delta` progress units for `activity`.

        Only counts when the quest is InProgress and `activity` matches its
        current activity. Reaching the target completes the quest and starts
        the cooldown at once.

        Args:
            quest: Current quest state (cooldown already resolved)
            activity: Activity the progress came from
            delta: Progress units (non-positive deltas are ignored)
            now: Current time in epoch milliseconds

        Returns:
            ProgressResult describing the new state
        """
        if delta <= 0:
            return ProgressResult(quest=quest)
        if QuestEngine.state_of(quest, now) != const.QUEST_STATE_IN_PROGRESS:
            return ProgressResult(quest=quest)
        if quest.get("activity") != activity:
            return ProgressResult(quest=quest)

        updated = dict(quest)
        target = quest.get("target", const.QUEST_TARGET)
        updated["progress"] = min(target, quest.get("progress", 0) + delta)

        if updated["progress"] < target:
            return ProgressResult(quest=updated, applied=True)  # type: ignore[arg-type]

        updated["completed_at"] = now
        updated["cooldown_until"] = now + const.QUEST_COOLDOWN_MS
        updated["last_completed_activity"] = activity
        updated["last_completed_at"] = now
        updated["completions"] = quest.get("completions", 0) + 1
        return ProgressResult(quest=updated, applied=True, completed=True)  # type: ignore[arg-type]

    @staticmethod
    def display(quest: QuestState, now: int) -> QuestDisplay:
        """Build the UI-facing view of a quest.

        During cooldown the activity stays pinned to the completed activity
        and is shown as complete.
        """
        state = QuestEngine.state_of(quest, now)
        target = quest.get("target", const.QUEST_TARGET)
        if state in (const.QUEST_STATE_COOLDOWN, const.QUEST_STATE_COMPLETED):
            return {
                "activity": quest.get("last_completed_activity")
                or quest.get("activity", const.ACTIVITY_SEQUENCE[0]),
                "progress": target,
                "target": target,
                "state": state,
                "completed": True,
                "cooldown_remaining_ms": remaining_ms(quest.get("cooldown_until"), now),
            }
        return {
            "activity": quest.get("activity", const.ACTIVITY_SEQUENCE[0]),
            "progress": quest.get("progress", 0),
            "target": target,
            "state": state,
            "completed": False,
            "cooldown_remaining_ms": 0,
        }

    @staticmethod
    def progress_units_for_coins(amount: int) -> int:
        """Convert earned coins to quest progress units (10 coins per unit)."""
        return max(0, amount) // const.COINS_PER_PROGRESS_UNIT
