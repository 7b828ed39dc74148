"""Mood Engine - Pure logic for mood periods and derived pet mood.

This engine provides stateless, pure Python functions for:
- Building a new mood period (anchor, deadline, baseline, sad set)
- Selecting which pets start a period sad
- Period-relative quest completion (coins earned since the anchor)
- Deriving the displayed mood, which is never stored
- The heart meter percentage

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
State management belongs in MoodManager.

Sad selection for more than three pets:
    k = ceil(n / 3) pets are chosen. Owned pet ids are sorted and rotated by
    the user's rotation pointer; the first k ids that were NOT sad in the
    previous period are taken. Since k <= n - k for every n >= 4, enough
    non-repeating candidates exist while the owned set is unchanged. When
    the collection has just grown past three pets (or pets were removed),
    fewer than k may qualify; only those are chosen, so no pet is sad in two
    consecutive periods.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import MoodPeriod


class MoodEngine:
    """Pure logic engine for mood periods.

    All methods are static - no instance state.
    """

    @staticmethod
    def sad_count(owned_count: int) -> int:
        """Return how many pets start a period sad."""
        if owned_count <= const.SMALL_COLLECTION_MAX:
            return owned_count
        return math.ceil(owned_count / const.SAD_FRACTION_DIVISOR)

    @staticmethod
    def select_sad_pets(
        owned_pet_ids: Iterable[str],
        previous_sad_ids: Iterable[str],
        rotation_start: int,
    ) -> list[str]:
        """Choose the sad set for a new period.

        Args:
            owned_pet_ids: Every pet the user owns
            previous_sad_ids: Sad set of the period being replaced
            rotation_start: Rotation pointer value to start from

        Returns:
            Sorted list of sad pet ids
        """
        owned = sorted(set(owned_pet_ids))
        count = MoodEngine.sad_count(len(owned))
        if len(owned) <= const.SMALL_COLLECTION_MAX:
            return owned

        offset = rotation_start % len(owned)
        ordered = owned[offset:] + owned[:offset]
        previous = set(previous_sad_ids)

        chosen = [pet_id for pet_id in ordered if pet_id not in previous][:count]
        return sorted(chosen)

    @staticmethod
    def build_period(
        period_id: str,
        now: int,
        sad_pet_ids: list[str],
        engagement_baseline: Mapping[str, int],
        reason: str,
    ) -> MoodPeriod:
        """Create a period anchored at `now` that ends 8 hours later."""
        return {
            "period_id": period_id,
            "anchor_at": now,
            "next_reset_at": now + const.MOOD_PERIOD_MS,
            "sad_pet_ids": sorted(sad_pet_ids),
            "engagement_baseline": dict(engagement_baseline),
            "assignment_reason": reason,
        }

    @staticmethod
    def is_expired(period: MoodPeriod | None, now: int) -> bool:
        """Return True when there is no period or its deadline has passed."""
        if not period or period.get("next_reset_at") is None:
            return True
        return now >= period["next_reset_at"]

    @staticmethod
    def rollover_reason(
        previous: MoodPeriod | None, sleep_completions: Iterable[int | None]
    ) -> str:
        """Pick the assignment reason for a period replacing `previous`.

        Args:
            previous: The period that has elapsed (None on first ownership)
            sleep_completions: Each owned pet's last sleep completion time

        Returns:
            init, rollover (a sleep completed during the period) or
            elapsed_no_sleep
        """
        if not previous:
            return const.ASSIGNMENT_REASON_INIT
        anchor_at = previous.get("anchor_at", 0)
        deadline = previous.get("next_reset_at", anchor_at)
        for completed_at in sleep_completions:
            if completed_at is not None and anchor_at <= completed_at < deadline:
                return const.ASSIGNMENT_REASON_ROLLOVER
        return const.ASSIGNMENT_REASON_ELAPSED_NO_SLEEP

    @staticmethod
    def is_sad_at_period_start(period: MoodPeriod | None, pet_id: str) -> bool:
        """Look the pet up in the period's sad set."""
        if not period:
            return False
        return pet_id in period.get("sad_pet_ids", [])

    @staticmethod
    def period_relative_coins(
        period: MoodPeriod | None, pet_id: str, total_coins_earned: int
    ) -> int:
        """Return coins the pet earned since the period anchor."""
        if not period:
            return 0
        baseline = period.get("engagement_baseline", {}).get(pet_id, 0)
        return total_coins_earned - baseline

    @staticmethod
    def period_relative_quest_done(
        period: MoodPeriod | None, pet_id: str, total_coins_earned: int
    ) -> bool:
        """Return True once the pet earned 50 coins within the period."""
        if not period:
            return False
        return (
            MoodEngine.period_relative_coins(period, pet_id, total_coins_earned)
            >= const.PERIOD_QUEST_COINS
        )

    @staticmethod
    def slept_since_anchor(
        period: MoodPeriod | None, last_sleep_completed_at: int | None
    ) -> bool:
        """Return True if the pet finished a sleep cycle at or after the anchor."""
        if not period or last_sleep_completed_at is None:
            return False
        return last_sleep_completed_at >= period.get("anchor_at", 0)

    @staticmethod
    def derive_mood(slept_since_anchor: bool, quest_done: bool, sad_at_start: bool) -> str:
        """Compute the displayed mood.

        Order matters: sleep beats the period quest, which beats the sad flag.
        """
        if slept_since_anchor:
            return const.MOOD_VERY_HAPPY
        if quest_done:
            return const.MOOD_HAPPY
        if sad_at_start:
            return const.MOOD_SAD
        return const.MOOD_NEUTRAL

    @staticmethod
    def heart_fill_percent(
        feeding_count: int, adventure_coins_today: int, sleep_completed_today: bool
    ) -> int:
        """Return the heart meter fill (0-100).

        Sleep fills the heart. Otherwise the larger of the feeding score and
        the coin score is shown.
        """
        if sleep_completed_today:
            return const.HEART_FILL_FULL

        feeding_score = 0
        for minimum, score in const.HEART_FILL_FEEDING_SCORES:
            if feeding_count >= minimum:
                feeding_score = score
                break

        coin_score = 0
        for minimum, score in const.HEART_FILL_COIN_SCORES:
            if adventure_coins_today >= minimum:
                coin_score = score
                break

        return max(feeding_score, coin_score)
