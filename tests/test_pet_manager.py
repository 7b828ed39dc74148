"""Tests for PetManager - adoption, renaming, feeding and the owned pet index."""

from __future__ import annotations

from unittest.mock import MagicMock

from homeassistant.core import HomeAssistant
import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.petquest import const
from custom_components.petquest.coordinator import PetQuestCoordinator
from custom_components.petquest.storage_manager import PetQuestStorageManager
from tests.helpers import (
    DAY_MS,
    MONDAY_10AM_MS,
    TEST_USER_ID,
    FakeClock,
    FlakyDocumentStore,
    emitted,
)

USER_PATH = f"users/{TEST_USER_ID}/{const.ENTITY_KEY_USER}"


class TestSetup:
    """Tests for PetManager.async_setup()."""

    async def test_user_document_created(
        self, coordinator: PetQuestCoordinator, remote: FlakyDocumentStore
    ) -> None:
        """Test the user document exists with an empty pet index."""
        user = coordinator.pet_manager.get_user()

        assert user[const.DATA_USER_ID] == TEST_USER_ID
        assert user[const.DATA_USER_ROTATION_POINTER] == 0
        assert user[const.DATA_USER_PET_IDS] == []
        assert coordinator.owned_pet_ids == []

        stored = remote.peek(USER_PATH)
        assert stored[const.DATA_USER_ID] == TEST_USER_ID
        assert stored[const.DATA_UPDATED_AT] == 0

    async def test_existing_remote_user_not_overwritten(
        self,
        hass: HomeAssistant,
        mock_config_entry: MockConfigEntry,
        remote: FlakyDocumentStore,
        clock: FakeClock,
    ) -> None:
        """Test a fresh cache loads the user document another device created."""
        await remote.async_set_merge(
            USER_PATH,
            {
                const.DATA_USER_ID: TEST_USER_ID,
                const.DATA_USER_PET_IDS: ["a", "b"],
                const.DATA_USER_ROTATION_POINTER: 2,
                const.DATA_UPDATED_AT: MONDAY_10AM_MS - DAY_MS,
            },
        )
        storage = PetQuestStorageManager(hass, "petquest_second_device")
        await storage.async_initialize()
        mock_config_entry.add_to_hass(hass)

        coord = PetQuestCoordinator(hass, mock_config_entry, storage, remote, clock=clock)
        await coord.async_setup_managers()
        await hass.async_block_till_done()

        stored = remote.peek(USER_PATH)
        assert stored[const.DATA_USER_PET_IDS] == ["a", "b"]
        assert stored[const.DATA_USER_ROTATION_POINTER] == 2
        assert coord.pet_manager.get_user()[const.DATA_USER_PET_IDS] == ["a", "b"]

    async def test_offline_setup_yields_to_remote_user(
        self,
        hass: HomeAssistant,
        mock_config_entry: MockConfigEntry,
        storage_manager: PetQuestStorageManager,
        remote: FlakyDocumentStore,
        clock: FakeClock,
    ) -> None:
        """Test defaults cached while offline lose to any remote copy later."""
        remote.fail = True
        mock_config_entry.add_to_hass(hass)
        coord = PetQuestCoordinator(
            hass, mock_config_entry, storage_manager, remote, clock=clock
        )
        await coord.async_setup_managers()

        assert coord.pet_manager.get_user()[const.DATA_USER_PET_IDS] == []

        remote.fail = False
        await remote.async_set_merge(
            USER_PATH, {const.DATA_USER_PET_IDS: ["a"], const.DATA_UPDATED_AT: 1}
        )
        await coord.sync_manager.async_read(const.ENTITY_KEY_USER)

        assert coord.pet_manager.get_user()[const.DATA_USER_PET_IDS] == ["a"]


class TestAdoptPet:
    """Tests for PetManager.adopt_pet()."""

    async def test_adopt_creates_every_document(
        self, coordinator: PetQuestCoordinator, mock_dispatcher_send: MagicMock
    ) -> None:
        """Test pet, progress, quest and sleep documents are created."""
        pet_id = coordinator.pet_manager.adopt_pet("dog")

        pet = coordinator.pet_manager.get_pet(pet_id)
        assert pet[const.DATA_PET_DISPLAY_NAME] == "Buddy"
        assert pet[const.DATA_PET_OWNER_ID] == TEST_USER_ID
        assert pet[const.DATA_PET_OWNED_AT] == MONDAY_10AM_MS

        progress = coordinator.pet_manager.get_progress(pet_id)
        assert progress[const.DATA_PROGRESS_FEEDING_COUNT] == 0
        assert progress[const.DATA_PROGRESS_NEXT_HEART_RESET_AT] == MONDAY_10AM_MS + DAY_MS

        quest = coordinator.quest_manager.get_quest(pet_id)
        assert quest[const.DATA_QUEST_ACTIVITY] == const.ACTIVITY_HOUSE
        assert quest[const.DATA_QUEST_PROGRESS] == 0

        sleep = coordinator.sleep_manager.ensure_state(pet_id)
        assert sleep[const.DATA_SLEEP_CLICKS] == 0
        assert not sleep[const.DATA_SLEEP_ASLEEP]

        assert coordinator.owned_pet_ids == [pet_id]
        assert emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_PET_ADOPTED) == [
            {"pet_id": pet_id, "display_name": "Buddy", "species": "dog"}
        ]

    async def test_adopt_with_explicit_name_and_id(
        self, coordinator: PetQuestCoordinator
    ) -> None:
        """Test caller-supplied names and ids are used."""
        pet_id = coordinator.pet_manager.adopt_pet("cat", "Mittens", pet_id="pet-1")

        assert pet_id == "pet-1"
        assert coordinator.pet_manager.get_pet("pet-1")[const.DATA_PET_DISPLAY_NAME] == "Mittens"

    async def test_unknown_species_gets_generic_name(
        self, coordinator: PetQuestCoordinator
    ) -> None:
        """Test species without a default name fall back to 'Pet'."""
        pet_id = coordinator.pet_manager.adopt_pet("dragon")

        assert coordinator.pet_manager.get_pet(pet_id)[const.DATA_PET_DISPLAY_NAME] == "Pet"

    async def test_duplicate_id_rejected(self, coordinator: PetQuestCoordinator) -> None:
        """Test adopting an existing id raises ValueError."""
        coordinator.pet_manager.adopt_pet("dog", pet_id="pet-1")

        with pytest.raises(ValueError):
            coordinator.pet_manager.adopt_pet("cat", pet_id="pet-1")

    async def test_owned_index_needs_local_document(
        self, coordinator: PetQuestCoordinator
    ) -> None:
        """Test indexed pets without a fetched document are not listed yet."""
        coordinator.pet_manager.adopt_pet("dog", pet_id="pet-1")
        coordinator.sync_manager.write(
            const.ENTITY_KEY_USER, {const.DATA_USER_PET_IDS: ["pet-1", "ghost"]}
        )

        assert coordinator.owned_pet_ids == ["pet-1"]


class TestRenameAndFeed:
    """Tests for rename_pet() and feed()."""

    async def test_rename(self, coordinator: PetQuestCoordinator) -> None:
        """Test display names change and are trimmed."""
        coordinator.pet_manager.adopt_pet("dog", pet_id="pet-1")

        coordinator.pet_manager.rename_pet("pet-1", "  Rex ")

        assert coordinator.pet_manager.get_pet("pet-1")[const.DATA_PET_DISPLAY_NAME] == "Rex"

    async def test_rename_rejects_empty_and_unknown(
        self, coordinator: PetQuestCoordinator
    ) -> None:
        """Test empty names and unknown pets raise ValueError."""
        coordinator.pet_manager.adopt_pet("dog", pet_id="pet-1")

        with pytest.raises(ValueError):
            coordinator.pet_manager.rename_pet("pet-1", "   ")
        with pytest.raises(ValueError):
            coordinator.pet_manager.rename_pet("missing", "Rex")

    async def test_feed_counts_and_milestone(
        self, coordinator: PetQuestCoordinator, mock_dispatcher_send: MagicMock
    ) -> None:
        """Test feeding raises the heart counter and lifetime feedings."""
        coordinator.pet_manager.adopt_pet("dog", pet_id="pet-1")

        assert coordinator.pet_manager.feed("pet-1") == 1
        assert coordinator.pet_manager.feed("pet-1") == 2

        progress = coordinator.pet_manager.get_progress("pet-1")
        assert progress[const.DATA_PROGRESS_TOTAL_FEEDINGS] == 2
        assert progress[const.DATA_PROGRESS_MILESTONES] == ["first_feeding"]
        assert emitted(mock_dispatcher_send, const.SIGNAL_SUFFIX_MILESTONE_REACHED) == [
            {"pet_id": "pet-1", "milestone_id": "first_feeding"}
        ]

    async def test_feed_unknown_pet(self, coordinator: PetQuestCoordinator) -> None:
        """Test feeding an unknown pet raises ValueError."""
        with pytest.raises(ValueError):
            coordinator.pet_manager.feed("missing")


class TestAccessories:
    """Tests for PetManager.equip_accessory()."""

    async def test_locked_accessory_rejected(self, coordinator: PetQuestCoordinator) -> None:
        """Test a level 1 pet cannot wear anything."""
        coordinator.pet_manager.adopt_pet("dog", pet_id="pet-1")

        with pytest.raises(ValueError, match="not unlocked"):
            coordinator.pet_manager.equip_accessory("pet-1", "basic_collar")

        assert coordinator.pet_manager.get_progress("pet-1")[
            const.DATA_PROGRESS_CURRENT_ACCESSORY
        ] is None

    async def test_equip_and_remove(self, coordinator: PetQuestCoordinator) -> None:
        """Test an unlocked accessory is stored and None takes it off."""
        coordinator.pet_manager.adopt_pet("dog", pet_id="pet-1")
        coordinator.earn_adventure_coins("pet-1", 50)

        assert coordinator.pet_manager.equip_accessory("pet-1", "basic_collar") == "basic_collar"
        assert coordinator.get_pet_status("pet-1")[
            const.DATA_PROGRESS_CURRENT_ACCESSORY
        ] == "basic_collar"

        with pytest.raises(ValueError):
            coordinator.pet_manager.equip_accessory("pet-1", "crown")

        coordinator.pet_manager.equip_accessory("pet-1", None)
        assert coordinator.pet_manager.get_progress("pet-1")[
            const.DATA_PROGRESS_CURRENT_ACCESSORY
        ] is None

    async def test_non_wearable_unlock_rejected(
        self, coordinator: PetQuestCoordinator
    ) -> None:
        """Test unlocked images cannot be equipped."""
        coordinator.pet_manager.adopt_pet("dog", pet_id="pet-1")
        coordinator.earn_adventure_coins("pet-1", 50)

        with pytest.raises(ValueError):
            coordinator.pet_manager.equip_accessory("pet-1", "level2_variant1")
        with pytest.raises(ValueError):
            coordinator.pet_manager.equip_accessory("missing", None)
