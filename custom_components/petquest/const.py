# File: const.py
"""Constants for the PetQuest integration.

This file centralizes configuration keys, defaults, storage document keys,
signal suffixes, game rules, and platform identifiers for consistency across
the integration.
"""

import logging

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
PETQUEST_TITLE = "PetQuest"

# Integration Domain
DOMAIN = "petquest"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_MANAGER = "storage_manager"
STORAGE_KEY = "petquest_data"
STORAGE_VERSION = 1
REMOTE_STORAGE_KEY = "petquest_remote"
REMOTE_STORAGE_VERSION = 1
REMOTE_STORE = "remote_store"

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# Update Interval (minutes) for the periodic remote refresh
DEFAULT_UPDATE_INTERVAL = 5

# Remote timeout (seconds) for reads and replayed writes
REMOTE_READ_TIMEOUT = 10

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_USER_ID = "user_id"
CONF_UPDATE_INTERVAL = "update_interval"

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Storage Layout (local cache)
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_MIGRATED_USERS = "migrated_users"
DATA_DOCUMENTS = "documents"
DATA_PENDING = "pending"
DATA_PENDING_PATCH = "patch"
DATA_PENDING_INCREMENTS = "increments"
DATA_PENDING_STAMP = "stamp"

SCHEMA_VERSION_CURRENT = 1

# Remote document paths: users/{user_id}/{entity_key}
REMOTE_PATH_FMT = "users/{}/{}"

# ------------------------------------------------------------------------------------------------
# Entity Keys (one document per key)
# ------------------------------------------------------------------------------------------------
ENTITY_PREFIX_PET = "pets/"
ENTITY_PREFIX_PROGRESS = "progress/"
ENTITY_PREFIX_QUEST = "quests/"
ENTITY_PREFIX_SLEEP = "sleep/"
ENTITY_KEY_MOOD_PERIOD = "mood_period"
ENTITY_KEY_STREAK = "streak"
ENTITY_KEY_LEDGER = "ledger"
ENTITY_KEY_USER = "user"

# Common document field
DATA_UPDATED_AT = "updated_at"

# Pet
DATA_PET_ID = "pet_id"
DATA_PET_SPECIES = "species"
DATA_PET_OWNER_ID = "owner_id"
DATA_PET_DISPLAY_NAME = "display_name"
DATA_PET_OWNED_AT = "owned_at"

# PetProgress
DATA_PROGRESS_FEEDING_COUNT = "feeding_count"
DATA_PROGRESS_ADVENTURE_COINS_TODAY = "adventure_coins_today"
DATA_PROGRESS_SLEEP_COMPLETED_TODAY = "sleep_completed_today"
DATA_PROGRESS_NEXT_HEART_RESET_AT = "next_heart_reset_at"
DATA_PROGRESS_TOTAL_COINS_EARNED = "total_coins_earned"
DATA_PROGRESS_CURRENT_LEVEL = "current_level"
DATA_PROGRESS_LEVEL_UP_AT = "level_up_at"
DATA_PROGRESS_COINS_BY_ACTIVITY = "coins_by_activity"
DATA_PROGRESS_DAILY_COINS = "daily_coins"
DATA_PROGRESS_DAILY_COINS_DATE = "date"
DATA_PROGRESS_DAILY_COINS_AMOUNT = "coins"
DATA_PROGRESS_TOTAL_FEEDINGS = "total_feedings"
DATA_PROGRESS_TOTAL_ADVENTURES = "total_adventures"
DATA_PROGRESS_TOTAL_SLEEPS = "total_sleeps"
DATA_PROGRESS_MILESTONES = "milestones"
DATA_PROGRESS_CURRENT_ACCESSORY = "current_accessory"

# QuestState
DATA_QUEST_ACTIVITY = "activity"
DATA_QUEST_PROGRESS = "progress"
DATA_QUEST_TARGET = "target"
DATA_QUEST_COMPLETED_AT = "completed_at"
DATA_QUEST_COOLDOWN_UNTIL = "cooldown_until"
DATA_QUEST_LAST_COMPLETED_ACTIVITY = "last_completed_activity"
DATA_QUEST_LAST_COMPLETED_AT = "last_completed_at"
DATA_QUEST_COMPLETIONS = "completions"

# SleepState
DATA_SLEEP_CLICKS = "clicks"
DATA_SLEEP_ASLEEP = "asleep"
DATA_SLEEP_SINCE = "since"
DATA_SLEEP_UNTIL = "until"
DATA_SLEEP_LAST_COMPLETED_AT = "last_completed_at"

# MoodPeriod
DATA_PERIOD_ID = "period_id"
DATA_PERIOD_ANCHOR_AT = "anchor_at"
DATA_PERIOD_NEXT_RESET_AT = "next_reset_at"
DATA_PERIOD_SAD_PET_IDS = "sad_pet_ids"
DATA_PERIOD_ENGAGEMENT_BASELINE = "engagement_baseline"
DATA_PERIOD_ASSIGNMENT_REASON = "assignment_reason"

# StreakRecord
DATA_STREAK = "streak"
DATA_STREAK_LAST_FEED_DATE = "last_feed_date"
DATA_STREAK_RECENT_DATES = "recent_dates"
DATA_STREAK_WEEKLY_HEARTS = "weekly_hearts"
DATA_STREAK_LONGEST = "longest_streak"

# CoinLedger
DATA_LEDGER_CUMULATIVE_COINS_EARNED = "cumulative_coins_earned"
DATA_LEDGER_SPENDABLE_BALANCE = "spendable_balance"
DATA_LEDGER_PURCHASES = "purchases"
DATA_LEDGER_OWNED_ITEMS = "owned_items"
DATA_LEDGER_ENTRY_ITEM_ID = "item_id"
DATA_LEDGER_ENTRY_COST = "cost"
DATA_LEDGER_ENTRY_BALANCE_AFTER = "balance_after"
DATA_LEDGER_ENTRY_TIMESTAMP = "timestamp"

# UserState
DATA_USER_ID = "user_id"
DATA_USER_ROTATION_POINTER = "rotation_pointer"
DATA_USER_PET_IDS = "pet_ids"

# Counters that must never drop below zero on the remote store
NON_NEGATIVE_COUNTERS = frozenset(
    {
        DATA_LEDGER_SPENDABLE_BALANCE,
    }
)

# ------------------------------------------------------------------------------------------------
# Game Rules
# ------------------------------------------------------------------------------------------------
HOUR_MS = 60 * 60 * 1000
EIGHT_HOURS_MS = 8 * HOUR_MS
HEART_RESET_FALLBACK_MS = 24 * HOUR_MS

# Quests
QUEST_TARGET = 5
QUEST_COOLDOWN_MS = EIGHT_HOURS_MS
COINS_PER_PROGRESS_UNIT = 10

ACTIVITY_HOUSE = "house"
ACTIVITY_FRIEND = "friend"
ACTIVITY_DRESSING_COMPETITION = "dressing-competition"
ACTIVITY_WHO_MADE_THE_PETS_SICK = "who-made-the-pets-sick"
ACTIVITY_TRAVEL = "travel"
ACTIVITY_FOOD = "food"
ACTIVITY_PLANT_DREAMS = "plant-dreams"
ACTIVITY_PET_SCHOOL = "pet-school"
ACTIVITY_PET_THEME_PARK = "pet-theme-park"
ACTIVITY_PET_MALL = "pet-mall"
ACTIVITY_PET_CARE = "pet-care"
ACTIVITY_STORY = "story"

ACTIVITY_SEQUENCE = (
    ACTIVITY_HOUSE,
    ACTIVITY_FRIEND,
    ACTIVITY_DRESSING_COMPETITION,
    ACTIVITY_WHO_MADE_THE_PETS_SICK,
    ACTIVITY_TRAVEL,
    ACTIVITY_FOOD,
    ACTIVITY_PLANT_DREAMS,
    ACTIVITY_PET_SCHOOL,
    ACTIVITY_PET_THEME_PARK,
    ACTIVITY_PET_MALL,
    ACTIVITY_PET_CARE,
)

QUEST_STATE_IN_PROGRESS = "in_progress"
QUEST_STATE_COMPLETED = "completed"
QUEST_STATE_COOLDOWN = "cooldown"

# Mood periods
MOOD_PERIOD_MS = EIGHT_HOURS_MS
PERIOD_QUEST_COINS = 50
SMALL_COLLECTION_MAX = 3
SAD_FRACTION_DIVISOR = 3

MOOD_VERY_HAPPY = "very_happy"
MOOD_HAPPY = "happy"
MOOD_SAD = "sad"
MOOD_NEUTRAL = "neutral"
MOOD_UNKNOWN = "unknown"

ASSIGNMENT_REASON_INIT = "init"
ASSIGNMENT_REASON_ROLLOVER = "rollover"
ASSIGNMENT_REASON_SLEEP_ANCHOR = "sleep_anchor"
ASSIGNMENT_REASON_ELAPSED_NO_SLEEP = "elapsed_no_sleep"

# Sleep
SLEEP_CLICKS_REQUIRED = 3
SLEEP_DURATION_MS = EIGHT_HOURS_MS

SLEEP_STATE_AWAKE = "awake"
SLEEP_STATE_ASLEEP = "asleep"

# Streaks
RECENT_DATES_MAX = 30
WEEK_KEY_PREFIX = "week_"

EVOLUTION_STAGE_SMALL = "small"
EVOLUTION_STAGE_MEDIUM = "medium"
EVOLUTION_STAGE_LARGE = "large"

# Ledger
LEDGER_MAX_PURCHASES = 50

# Levels: thresholds for levels 1-4, linear step afterwards
LEVEL_THRESHOLDS = (0, 50, 120, 200)
LEVEL_STEP_AFTER_FOUR = 150

LEVEL_UNLOCKS = {
    2: ("level2_variant1", "basic_collar"),
    3: ("level3_variant1", "level3_variant2", "fancy_collar", "bow_tie", "happy_glow"),
    4: (
        "level4_variant1",
        "level4_variant2",
        "level4_special",
        "crown",
        "cape",
        "golden",
        "rainbow",
    ),
}

# Unlocks that can be worn; one at a time per pet
ACCESSORIES = frozenset({"basic_collar", "fancy_collar", "bow_tie", "crown", "cape"})

# Heart meter
HEART_FILL_FULL = 100
HEART_FILL_FEEDING_SCORES = ((2, 40), (1, 20))
HEART_FILL_COIN_SCORES = ((100, 90), (75, 80), (50, 70), (25, 60), (1, 30))

# Milestones: (metric, threshold, milestone_id)
MILESTONE_METRIC_FEEDINGS = "feedings"
MILESTONE_METRIC_ADVENTURES = "adventures"
MILESTONE_METRIC_COINS = "coins"
MILESTONE_METRIC_SLEEPS = "sleeps"

MILESTONES = (
    (MILESTONE_METRIC_FEEDINGS, 1, "first_feeding"),
    (MILESTONE_METRIC_FEEDINGS, 10, "feeding_enthusiast"),
    (MILESTONE_METRIC_FEEDINGS, 50, "feeding_master"),
    (MILESTONE_METRIC_FEEDINGS, 100, "feeding_legend"),
    (MILESTONE_METRIC_ADVENTURES, 1, "first_adventure"),
    (MILESTONE_METRIC_ADVENTURES, 10, "adventure_seeker"),
    (MILESTONE_METRIC_ADVENTURES, 50, "adventure_master"),
    (MILESTONE_METRIC_ADVENTURES, 100, "adventure_legend"),
    (MILESTONE_METRIC_COINS, 100, "coin_collector"),
    (MILESTONE_METRIC_COINS, 500, "coin_hoarder"),
    (MILESTONE_METRIC_COINS, 1000, "coin_master"),
    (MILESTONE_METRIC_SLEEPS, 1, "first_sleep"),
    (MILESTONE_METRIC_SLEEPS, 10, "sleep_lover"),
    (MILESTONE_METRIC_SLEEPS, 50, "sleep_master"),
)

# Pet species and default display names
SPECIES_DEFAULT_NAMES = {
    "dog": "Buddy",
    "cat": "Whiskers",
    "hamster": "Peanut",
    "bobo": "Bobo",
    "feather": "Feather",
}
DEFAULT_PET_NAME = "Pet"

# ------------------------------------------------------------------------------------------------
# Signals (instance-scoped dispatcher suffixes)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_COINS_EARNED = "coins_earned"
SIGNAL_SUFFIX_COINS_SPENT = "coins_spent"
SIGNAL_SUFFIX_LEVEL_UP = "level_up"
SIGNAL_SUFFIX_MILESTONE_REACHED = "milestone_reached"
SIGNAL_SUFFIX_QUEST_COMPLETED = "quest_completed"
SIGNAL_SUFFIX_QUEST_ROTATED = "quest_rotated"
SIGNAL_SUFFIX_MOOD_PERIOD_ASSIGNED = "mood_period_assigned"
SIGNAL_SUFFIX_SLEEP_COMPLETED = "sleep_completed"
SIGNAL_SUFFIX_HEART_RESET = "heart_reset"
SIGNAL_SUFFIX_STREAK_UPDATED = "streak_updated"
SIGNAL_SUFFIX_PET_ADOPTED = "pet_adopted"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_ADOPT_PET = "adopt_pet"
SERVICE_RENAME_PET = "rename_pet"
SERVICE_FEED = "feed"
SERVICE_EARN_ADVENTURE_COINS = "earn_adventure_coins"
SERVICE_INTERACT_SLEEP = "interact_sleep"
SERVICE_PURCHASE = "purchase"
SERVICE_SYNC_NOW = "sync_now"
SERVICE_GET_PET_STATUS = "get_pet_status"
SERVICE_EQUIP_ACCESSORY = "equip_accessory"

FIELD_PET_ID = "pet_id"
FIELD_SPECIES = "species"
FIELD_DISPLAY_NAME = "display_name"
FIELD_AMOUNT = "amount"
FIELD_ACTIVITY = "activity"
FIELD_ITEM_ID = "item_id"
FIELD_COST = "cost"
FIELD_ACCESSORY = "accessory"
FIELD_CONFIG_ENTRY_ID = "config_entry_id"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_MOOD = "_mood"
SENSOR_UID_SUFFIX_QUEST = "_quest"
SENSOR_UID_SUFFIX_SLEEP = "_sleep"
SENSOR_UID_SUFFIX_LEVEL = "_level"
SENSOR_UID_SUFFIX_HEART_FILL = "_heart_fill"
SENSOR_UID_SUFFIX_STREAK = "_streak"
SENSOR_UID_SUFFIX_COINS = "_coins"
SENSOR_UID_SUFFIX_WEEKLY_HEARTS = "_weekly_hearts"

TRANS_KEY_SENSOR_MOOD = "pet_mood_sensor"
TRANS_KEY_SENSOR_QUEST = "pet_quest_sensor"
TRANS_KEY_SENSOR_SLEEP = "pet_sleep_sensor"
TRANS_KEY_SENSOR_LEVEL = "pet_level_sensor"
TRANS_KEY_SENSOR_HEART_FILL = "pet_heart_fill_sensor"
TRANS_KEY_SENSOR_STREAK = "user_streak_sensor"
TRANS_KEY_SENSOR_COINS = "user_coins_sensor"
TRANS_KEY_SENSOR_WEEKLY_HEARTS = "user_weekly_hearts_sensor"
TRANS_KEY_SENSOR_ATTR_PET_NAME = "pet_name"

ATTR_PET_ID = "pet_id"
ATTR_PET_NAME = "pet_name"

# ------------------------------------------------------------------------------------------------
# Errors / Messages
# ------------------------------------------------------------------------------------------------
ERROR_PET_NOT_FOUND_FMT = "Pet '{}' not found"
ERROR_INSUFFICIENT_BALANCE_FMT = "Not enough coins: balance {}, cost {}"
ERROR_NO_ENTRY_FOUND = "No PetQuest entry found"
ERROR_ACCESSORY_LOCKED_FMT = "Accessory '{}' is not unlocked for pet '{}'"
TRANS_KEY_ERROR_USER_ID_REQUIRED = "user_id_required"
