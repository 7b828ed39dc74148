# File: utils/dt_utils.py
"""Date and time utilities for PetQuest.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

All engine time math is expressed as integer milliseconds since the Unix
epoch. Calendar questions (what day is "today", which week a day belongs to)
are answered in the configured local timezone.

Functions:
    - now_ms: Current wall clock in milliseconds
    - ms_to_datetime: Convert epoch milliseconds to an aware datetime
    - local_date_for: Local calendar date for a timestamp
    - today_local: Local calendar date for "now"
    - is_weekend: Saturday/Sunday check
    - previous_weekday: Prior Monday-Friday date
    - week_key_for: Key for the Monday-based week containing a date
    - remaining_ms: Clamped time remaining until a deadline
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import MO, relativedelta

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

WEEK_KEY_PREFIX = "week_"
SATURDAY = 5


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Clock
# ==============================================================================


def now_ms() -> int:
    """Return the current wall clock as integer milliseconds since epoch."""
    return int(datetime.now(UTC).timestamp() * 1000)


def ms_to_datetime(value_ms: int, tz: ZoneInfo | None = None) -> datetime:
    """Convert epoch milliseconds to a timezone-aware datetime.

    Args:
        value_ms: Milliseconds since the Unix epoch.
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Aware datetime in the requested timezone.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.fromtimestamp(value_ms / 1000, tz=UTC).astimezone(tz_info)


def local_date_for(value_ms: int, tz: ZoneInfo | None = None) -> date:
    """Return the local calendar date a timestamp falls on.

    Example:
        local_date_for(1767607200000) -> datetime.date(2026, 1, 5)
    """
    return ms_to_datetime(value_ms, tz).date()


def today_local(value_ms: int | None = None, tz: ZoneInfo | None = None) -> date:
    """Return today's local date, using `value_ms` as "now" when given."""
    return local_date_for(now_ms() if value_ms is None else value_ms, tz)


def remaining_ms(deadline_ms: int | None, now: int) -> int:
    """Return milliseconds left until `deadline_ms`, never negative."""
    if deadline_ms is None:
        return 0
    return max(0, deadline_ms - now)


# ==============================================================================
# Calendar Helpers
# ==============================================================================


def is_weekend(day: date) -> bool:
    """Return True for Saturday and Sunday."""
    return day.weekday() >= SATURDAY


def previous_weekday(day: date) -> date:
    """Return the closest Monday-Friday date strictly before `day`.

    Monday (and the weekend) map back to the preceding Friday.

    Example:
        previous_weekday(date(2026, 1, 5))  # Monday -> date(2026, 1, 2)
    """
    candidate = day - timedelta(days=1)
    while is_weekend(candidate):
        candidate -= timedelta(days=1)
    return candidate


def week_start(day: date) -> date:
    """Return the Monday of the ISO week containing `day`."""
    return day + relativedelta(weekday=MO(-1))


def week_key_for(day: date) -> str:
    """Return the week key ("week_YYYY-MM-DD", Monday date) for `day`."""
    return f"{WEEK_KEY_PREFIX}{week_start(day).isoformat()}"


def parse_iso_date(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD string, returning None for empty or invalid input."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
