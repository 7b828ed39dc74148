"""Streak Manager - Weekday streak and weekly heart grid for the user."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.streak_engine import StreakEngine
from ..utils.dt_utils import today_local, week_key_for
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import date

    from homeassistant.core import HomeAssistant

    from ..coordinator import PetQuestCoordinator
    from ..type_defs import StreakRecord


class StreakManager(BaseManager):
    """Manager for the StreakRecord document."""

    def __init__(self, hass: HomeAssistant, coordinator: PetQuestCoordinator) -> None:
        """Initialize the StreakManager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Set up the StreakManager."""
        const.LOGGER.debug("StreakManager async_setup complete for entry %s", self.entry_id)

    def get_record(self) -> StreakRecord:
        """Return the stored streak record with defaults filled in."""
        record = self.sync.get(const.ENTITY_KEY_STREAK) or {}
        for key, default in StreakEngine.new_record().items():
            record.setdefault(key, default)
        return record  # type: ignore[return-value]

    def register_qualifying_day(self, today: date | None = None) -> bool:
        """Count `today` (local) toward the streak.

        Idempotent per calendar day and skipped on weekends.

        Returns:
            True if the record changed
        """
        day = today or today_local(self.now_ms())
        update = StreakEngine.register_qualifying_day(self.get_record(), day)
        if not update.changed:
            const.LOGGER.debug("StreakManager: %s does not change the streak", day)
            return False

        self.sync.write(const.ENTITY_KEY_STREAK, dict(update.record))
        const.LOGGER.info(
            "INFO: Streak is now %s (longest %s)",
            update.record["streak"],
            update.record["longest_streak"],
        )
        self.emit(
            const.SIGNAL_SUFFIX_STREAK_UPDATED,
            streak=update.record["streak"],
            date=day.isoformat(),
            week_key=update.week_key,
        )
        return True

    def weekly_heart_count(self, week_key: str | None = None) -> int:
        """Count filled heart cells in a week (the current week by default)."""
        key = week_key or week_key_for(today_local(self.now_ms()))
        return StreakEngine.weekly_heart_count(self.get_record(), key)

    def get_streak(self) -> dict[str, Any]:
        """Return the streak as it stands today plus the stored details."""
        record = self.get_record()
        effective = StreakEngine.effective_streak(record, today_local(self.now_ms()))
        return {
            "streak": effective,
            "stored_streak": record["streak"],
            "longest_streak": record["longest_streak"],
            "last_feed_date": record["last_feed_date"],
            "recent_dates": list(record["recent_dates"]),
            "evolution_stage": StreakEngine.evolution_stage(effective),
        }

    def get_weekly_hearts(self, week_key: str | None = None) -> dict[str, Any]:
        """Return one week's heart cells and their count."""
        key = week_key or week_key_for(today_local(self.now_ms()))
        record = self.get_record()
        return {
            "week_key": key,
            "days": dict(record["weekly_hearts"].get(key, {})),
            "count": StreakEngine.weekly_heart_count(record, key),
        }
