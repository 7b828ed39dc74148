"""Tests for SleepManager - the sleep cycle, its gate and heart resets."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from custom_components.petquest import const
from custom_components.petquest.coordinator import PetQuestCoordinator
from tests.helpers import DAY_MS, HOUR_MS, MONDAY_10AM_MS, FakeClock, emitted

SAD_PET = "pet-1"
CALM_PET = "pet-2"


@pytest.fixture
async def pets(coordinator: PetQuestCoordinator) -> PetQuestCoordinator:
    """Return a coordinator with a sad first pet and a neutral second pet."""
    coordinator.adopt_pet("dog", pet_id=SAD_PET)
    coordinator.adopt_pet("cat", pet_id=CALM_PET)
    return coordinator


def _tuck_in(coordinator: PetQuestCoordinator, pet_id: str) -> list[bool]:
    return [coordinator.interact_sleep(pet_id) for _ in range(const.SLEEP_CLICKS_REQUIRED)]


class TestSadGate:
    """Tests for the sad-pet interaction gate."""

    async def test_sad_pet_cannot_sleep_before_quest(self, pets: PetQuestCoordinator) -> None:
        """Test clicks are ignored until the period quest is done."""
        assert not pets.interact_sleep(SAD_PET)
        assert pets.get_sleep_state(SAD_PET)["clicks"] == 0

        pets.earn_adventure_coins(SAD_PET, 50)

        assert pets.interact_sleep(SAD_PET)
        assert pets.get_sleep_state(SAD_PET)["clicks"] == 1

    async def test_neutral_pet_sleeps_freely(self, pets: PetQuestCoordinator) -> None:
        """Test pets outside the sad set are not gated."""
        assert pets.interact_sleep(CALM_PET)


class TestSleepCycle:
    """Tests for completing and leaving the sleep cycle."""

    async def test_third_click_completes_cycle(
        self, pets: PetQuestCoordinator, mock_dispatcher_send: MagicMock
    ) -> None:
        """Test the effects of a finished cycle."""
        assert _tuck_in(pets, CALM_PET) == [True, True, True]

        sleep = pets.get_sleep_state(CALM_PET)
        assert sleep["state"] == const.SLEEP_STATE_ASLEEP
        assert sleep["until"] == MONDAY_10AM_MS + const.SLEEP_DURATION_MS
        assert sleep["remaining_ms"] == const.SLEEP_DURATION_MS

        progress = pets.pet_manager.get_progress(CALM_PET)
        assert progress[const.DATA_PROGRESS_SLEEP_COMPLETED_TODAY]
        assert progress[const.DATA_PROGRESS_NEXT_HEART_RESET_AT] == sleep["until"]
        assert progress[const.DATA_PROGRESS_TOTAL_SLEEPS] == 1
        assert "first_sleep" in progress[const.DATA_PROGRESS_MILESTONES]
        assert pets.get_heart_fill(CALM_PET) == 100

        period = pets.mood_manager.get_period()
        assert period[const.DATA_PERIOD_ASSIGNMENT_REASON] == const.ASSIGNMENT_REASON_SLEEP_ANCHOR
        assert period[const.DATA_PERIOD_ANCHOR_AT] == MONDAY_10AM_MS
        assert pets.get_mood(CALM_PET) == const.MOOD_VERY_HAPPY

        completed = emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_SLEEP_COMPLETED)
        assert [event["pet_id"] for event in completed] == [CALM_PET]

    async def test_click_while_asleep_ignored(self, pets: PetQuestCoordinator) -> None:
        """Test a fourth click does nothing."""
        _tuck_in(pets, CALM_PET)

        assert not pets.interact_sleep(CALM_PET)
        assert pets.pet_manager.get_progress(CALM_PET)[const.DATA_PROGRESS_TOTAL_SLEEPS] == 1

    async def test_remaining_time_counts_down(
        self, pets: PetQuestCoordinator, clock: FakeClock
    ) -> None:
        """Test remaining sleep shrinks with the clock."""
        _tuck_in(pets, CALM_PET)
        clock.advance(HOUR_MS)

        assert pets.sleep_manager.remaining_ms(CALM_PET) == 7 * HOUR_MS

    async def test_wake_resets_hearts(
        self,
        pets: PetQuestCoordinator,
        clock: FakeClock,
        mock_dispatcher_send: MagicMock,
    ) -> None:
        """Test the first read after the window wakes the pet and empties its heart."""
        pets.feed(CALM_PET)
        _tuck_in(pets, CALM_PET)

        clock.advance(const.SLEEP_DURATION_MS)
        sleep = pets.get_sleep_state(CALM_PET)

        assert sleep["state"] == const.SLEEP_STATE_AWAKE
        assert sleep["clicks"] == 0
        progress = pets.pet_manager.get_progress(CALM_PET)
        assert progress[const.DATA_PROGRESS_FEEDING_COUNT] == 0
        assert not progress[const.DATA_PROGRESS_SLEEP_COMPLETED_TODAY]
        assert progress[const.DATA_PROGRESS_NEXT_HEART_RESET_AT] == clock.now + DAY_MS
        assert pets.get_heart_fill(CALM_PET) == 0

        resets = emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_HEART_RESET)
        assert resets == [{"pet_id": CALM_PET, "trigger": "wake"}]

    async def test_fallback_reset_after_a_day_awake(
        self,
        pets: PetQuestCoordinator,
        clock: FakeClock,
        mock_dispatcher_send: MagicMock,
    ) -> None:
        """Test a pet that never sleeps still gets hungry after 24 hours."""
        pets.feed(SAD_PET)
        pets.feed(SAD_PET)
        assert pets.get_heart_fill(SAD_PET) == 40

        clock.advance(DAY_MS)

        assert pets.get_heart_fill(SAD_PET) == 0
        assert pets.pet_manager.get_progress(SAD_PET)[
            const.DATA_PROGRESS_TOTAL_FEEDINGS
        ] == 2
        resets = emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_HEART_RESET)
        assert {"pet_id": SAD_PET, "trigger": "fallback"} in resets

    async def test_unknown_pet(self, pets: PetQuestCoordinator) -> None:
        """Test interacting with an unknown pet raises ValueError."""
        with pytest.raises(ValueError):
            pets.interact_sleep("missing")
