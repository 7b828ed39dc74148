"""Manager modules for PetQuest integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and read and write documents through the
synchronization layer.
"""

from .base_manager import BaseManager
from .economy_manager import EconomyManager
from .mood_manager import MoodManager
from .pet_manager import PetManager
from .quest_manager import QuestManager
from .sleep_manager import SleepManager
from .streak_manager import StreakManager
from .sync_manager import SyncManager

__all__ = [
    "BaseManager",
    "EconomyManager",
    "MoodManager",
    "PetManager",
    "QuestManager",
    "SleepManager",
    "StreakManager",
    "SyncManager",
]
