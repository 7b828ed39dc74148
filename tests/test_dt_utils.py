"""Tests for the pure date/time helpers in utils/dt_utils.py."""

from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

from freezegun import freeze_time
import pytest

from custom_components.petquest.utils import dt_utils
from tests.helpers import MONDAY_10AM_MS, ms_at


class TestClock:
    """Tests for clock conversions."""

    @freeze_time("2026-01-05 10:00:00", tz_offset=0)
    def test_now_ms(self) -> None:
        """Test now_ms reads the wall clock in milliseconds."""
        assert dt_utils.now_ms() == MONDAY_10AM_MS

    def test_ms_at_helper_agrees(self) -> None:
        """Test the fixture constant is Monday 10:00 UTC."""
        assert ms_at(2026, 1, 5, 10) == MONDAY_10AM_MS

    def test_local_date_uses_timezone(self) -> None:
        """Test the same instant can fall on different local dates."""
        late_sunday_utc = ms_at(2026, 1, 4, 23, 30)

        assert dt_utils.local_date_for(late_sunday_utc) == date(2026, 1, 4)
        assert dt_utils.local_date_for(late_sunday_utc, ZoneInfo("Europe/Berlin")) == date(
            2026, 1, 5
        )

    def test_default_timezone_override(self) -> None:
        """Test set_default_timezone changes today_local."""
        dt_utils.set_default_timezone(ZoneInfo("America/Los_Angeles"))

        assert dt_utils.today_local(MONDAY_10AM_MS) == date(2026, 1, 5)
        assert dt_utils.today_local(ms_at(2026, 1, 5, 5)) == date(2026, 1, 4)
        assert dt_utils.get_default_timezone() == ZoneInfo("America/Los_Angeles")

    def test_remaining_ms(self) -> None:
        """Test remaining time is clamped at zero."""
        assert dt_utils.remaining_ms(None, 10) == 0
        assert dt_utils.remaining_ms(5, 10) == 0
        assert dt_utils.remaining_ms(15, 10) == 5


class TestCalendar:
    """Tests for weekday and week helpers."""

    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (date(2026, 1, 6), date(2026, 1, 5)),
            (date(2026, 1, 5), date(2026, 1, 2)),
            (date(2026, 1, 10), date(2026, 1, 9)),
            (date(2026, 1, 11), date(2026, 1, 9)),
        ],
    )
    def test_previous_weekday(self, day: date, expected: date) -> None:
        """Test Monday and weekends map back to Friday."""
        assert dt_utils.previous_weekday(day) == expected

    def test_is_weekend(self) -> None:
        """Test Saturday and Sunday only."""
        assert dt_utils.is_weekend(date(2026, 1, 10))
        assert dt_utils.is_weekend(date(2026, 1, 11))
        assert not dt_utils.is_weekend(date(2026, 1, 9))

    def test_week_key_uses_monday(self) -> None:
        """Test every day of a week shares the Monday key."""
        keys = {dt_utils.week_key_for(date(2026, 1, d)) for d in range(5, 12)}
        assert keys == {"week_2026-01-05"}
        assert dt_utils.week_key_for(date(2026, 1, 4)) == "week_2025-12-29"

    def test_parse_iso_date(self) -> None:
        """Test invalid and empty strings parse to None."""
        assert dt_utils.parse_iso_date("2026-01-05") == date(2026, 1, 5)
        assert dt_utils.parse_iso_date("") is None
        assert dt_utils.parse_iso_date(None) is None
        assert dt_utils.parse_iso_date("not-a-date") is None
