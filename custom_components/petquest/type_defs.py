"""Type definitions for PetQuest data structures.

Uses the same hybrid strategy throughout the integration:

1. **TypedDict for STATIC structures** (fixed keys known at design time):
   - Documents: PetData, PetProgress, QuestState, SleepState, MoodPeriod,
     StreakRecord, CoinLedger, UserState
   - Query results: QuestDisplay, SleepDisplay, LevelInfo

2. **dict[str, Any] for DYNAMIC structures** (keys determined at runtime):
   - engagement_baseline[pet_id], weekly_hearts[week_key][iso_date],
     coins_by_activity[activity]

NOTE: TypedDict is STATIC ANALYSIS ONLY. Documents arrive from storage and
from the remote store, so runtime code keeps using .get() with defaults.

IMPORTANT: This file must NOT import from coordinator.py or managers.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

PetId = str
UserId = str
EntityKey = str  # "pets/{pet_id}", "mood_period", ...
EpochMs = int  # Milliseconds since the Unix epoch
ISODate = str  # "2026-01-05"
WeekKey = str  # "week_2026-01-05"


# =============================================================================
# Documents
# =============================================================================


class PetData(TypedDict):
    """A companion owned by the user. Immutable except display_name."""

    pet_id: PetId
    species: str
    owner_id: UserId
    display_name: str
    owned_at: EpochMs
    updated_at: NotRequired[EpochMs]


class DailyCoins(TypedDict):
    """Coins earned on one local calendar day."""

    date: ISODate
    coins: int


class PetProgress(TypedDict):
    """Per-pet engagement counters.

    total_coins_earned is monotonic; the heart counters (feeding_count,
    adventure_coins_today, sleep_completed_today) are reset by the sleep
    cycle or the 24-hour fallback.
    """

    feeding_count: int
    adventure_coins_today: int
    sleep_completed_today: bool
    next_heart_reset_at: EpochMs
    total_coins_earned: int
    current_level: int
    level_up_at: EpochMs | None
    coins_by_activity: dict[str, int]
    daily_coins: DailyCoins
    total_feedings: int
    total_adventures: int
    total_sleeps: int
    milestones: list[str]
    current_accessory: str | None
    updated_at: NotRequired[EpochMs]


class QuestState(TypedDict):
    """Per-pet position in the activity rotation."""

    activity: str
    progress: int
    target: int
    completed_at: EpochMs | None
    cooldown_until: EpochMs | None
    last_completed_activity: str | None
    last_completed_at: EpochMs | None
    completions: int
    updated_at: NotRequired[EpochMs]


class SleepState(TypedDict):
    """Per-pet sleep machine: Awake(clicks) or Asleep(since, until)."""

    clicks: int
    asleep: bool
    since: EpochMs | None
    until: EpochMs | None
    last_completed_at: EpochMs | None
    updated_at: NotRequired[EpochMs]


class MoodPeriod(TypedDict):
    """The single active engagement window for a user."""

    period_id: str
    anchor_at: EpochMs
    next_reset_at: EpochMs
    sad_pet_ids: list[PetId]
    engagement_baseline: dict[PetId, int]
    assignment_reason: str
    updated_at: NotRequired[EpochMs]


class StreakRecord(TypedDict):
    """Weekday streak plus the week-by-week heart grid."""

    streak: int
    last_feed_date: ISODate | None
    recent_dates: list[ISODate]
    weekly_hearts: dict[WeekKey, dict[ISODate, bool]]
    longest_streak: int
    updated_at: NotRequired[EpochMs]


class PurchaseEntry(TypedDict):
    """A single purchase in the coin ledger."""

    item_id: str
    cost: int
    balance_after: int
    timestamp: EpochMs


class CoinLedger(TypedDict):
    """User-level coin counters."""

    cumulative_coins_earned: int
    spendable_balance: int
    purchases: list[PurchaseEntry]
    owned_items: list[str]
    updated_at: NotRequired[EpochMs]


class UserState(TypedDict):
    """User-level bookkeeping."""

    user_id: UserId
    rotation_pointer: int
    pet_ids: list[PetId]
    updated_at: NotRequired[EpochMs]


# =============================================================================
# Query Results
# =============================================================================


class QuestDisplay(TypedDict):
    """What the UI shows for a pet's quest."""

    activity: str
    progress: int
    target: int
    state: str
    completed: bool
    cooldown_remaining_ms: int


class SleepDisplay(TypedDict):
    """What the UI shows for a pet's sleep machine."""

    state: str
    clicks: int
    clicks_required: int
    remaining_ms: int
    since: EpochMs | None
    until: EpochMs | None


class LevelInfo(TypedDict):
    """Level plus progress toward the next threshold."""

    level: int
    total_coins: int
    current_threshold: int
    next_threshold: int
    coins_to_next_level: int
    progress_percent: float


# Documents as they are passed around the sync layer
Document = dict[str, Any]
