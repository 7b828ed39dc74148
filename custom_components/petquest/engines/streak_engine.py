"""Streak Engine - Pure logic for weekday streaks and the weekly heart grid.

Streaks count consecutive weekdays (Monday-Friday) with a qualifying sleep
completion. Weekends neither extend nor break a streak: Friday is followed
by Monday.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
Dates are passed in already converted to the local calendar.
State management belongs in StreakManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import is_weekend, parse_iso_date, previous_weekday, week_key_for

if TYPE_CHECKING:
    from datetime import date

    from ..type_defs import StreakRecord


@dataclass
class StreakUpdate:
    """Outcome of StreakEngine.register_qualifying_day().

    Attributes:
        record: Resulting streak record
        changed: False when the call was a no-op (same day or weekend)
        week_key: Week the heart cell was filled in (None when unchanged)
    """

    record: StreakRecord
    changed: bool = False
    week_key: str | None = None


class StreakEngine:
    """Pure logic engine for streak bookkeeping.

    All methods are static - no instance state.
    """

    @staticmethod
    def new_record() -> StreakRecord:
        """Return an empty streak record."""
        return {
            "streak": 0,
            "last_feed_date": None,
            "recent_dates": [],
            "weekly_hearts": {},
            "longest_streak": 0,
        }

    @staticmethod
    def register_qualifying_day(record: StreakRecord, today: date) -> StreakUpdate:
        """Count `today` toward the streak.

        No-op if today was already counted or today is Saturday/Sunday.
        Extends the streak when the last counted day is the previous weekday,
        otherwise restarts it at 1. Idempotent per calendar day.
        """
        today_iso = today.isoformat()
        last_feed_date = record.get("last_feed_date")
        if last_feed_date == today_iso:
            return StreakUpdate(record=record)
        if is_weekend(today):
            return StreakUpdate(record=record)

        updated = dict(record)
        if last_feed_date == previous_weekday(today).isoformat():
            updated["streak"] = record.get("streak", 0) + 1
        else:
            updated["streak"] = 1
        updated["longest_streak"] = max(
            record.get("longest_streak", 0), updated["streak"]
        )
        updated["last_feed_date"] = today_iso

        recent = [d for d in record.get("recent_dates", []) if d != today_iso]
        recent.append(today_iso)
        updated["recent_dates"] = recent[-const.RECENT_DATES_MAX :]

        week_key = week_key_for(today)
        hearts = {key: dict(cells) for key, cells in record.get("weekly_hearts", {}).items()}
        hearts.setdefault(week_key, {})[today_iso] = True
        updated["weekly_hearts"] = hearts

        return StreakUpdate(record=updated, changed=True, week_key=week_key)  # type: ignore[arg-type]

    @staticmethod
    def weekly_heart_count(record: StreakRecord, week_key: str) -> int:
        """Count filled heart cells in one week."""
        cells = record.get("weekly_hearts", {}).get(week_key, {})
        return sum(1 for filled in cells.values() if filled)

    @staticmethod
    def effective_streak(record: StreakRecord, today: date) -> int:
        """Return the streak as it stands today.

        A streak whose last counted day is older than the previous weekday is
        broken and reads as 0. The stored record is left untouched.
        """
        last = parse_iso_date(record.get("last_feed_date"))
        if last is None:
            return 0
        if last == today or last >= previous_weekday(today):
            return record.get("streak", 0)
        return 0

    @staticmethod
    def evolution_stage(streak: int) -> str:
        """Map a streak length to the pet's growth stage."""
        if streak >= 3:
            return const.EVOLUTION_STAGE_LARGE
        if streak >= 2:
            return const.EVOLUTION_STAGE_MEDIUM
        return const.EVOLUTION_STAGE_SMALL
