"""Engine modules for PetQuest integration.

Contains pure computation engines:
- economy_engine: Levels, balance checks, purchase entries and milestones
- quest_engine: Activity rotation, progress and cooldown
- mood_engine: Mood periods, sad selection and derived mood
- sleep_engine: Sleep interactions, wake-up and heart reset
- streak_engine: Weekday streaks and weekly hearts
"""

# Use relative imports within package to avoid mypy module resolution issues
from .economy_engine import EconomyEngine, InsufficientBalanceError
from .mood_engine import MoodEngine
from .quest_engine import InvalidActivityError, ProgressResult, QuestEngine
from .sleep_engine import InteractionResult, SleepEngine
from .streak_engine import StreakEngine, StreakUpdate

__all__ = [
    "EconomyEngine",
    "InsufficientBalanceError",
    "InteractionResult",
    "InvalidActivityError",
    "MoodEngine",
    "ProgressResult",
    "QuestEngine",
    "SleepEngine",
    "StreakEngine",
    "StreakUpdate",
]
