"""Tests for two PetQuest devices sharing one user's remote documents.

Each config entry keeps its own local cache; both entries use the same
shared remote store, which is how a second device for the same user looks
to the integration.
"""

from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.petquest import const
from custom_components.petquest.const import CONF_USER_ID, COORDINATOR, DOMAIN, REMOTE_STORE
from tests.helpers import TEST_USER_ID

USER_PATH = f"users/{TEST_USER_ID}/{const.ENTITY_KEY_USER}"
SECOND_ENTRY_ID = "second_device"


async def _async_setup_second_device(hass: HomeAssistant) -> MockConfigEntry:
    """Load a second entry for the test user and return it."""
    entry = MockConfigEntry(
        domain=DOMAIN,
        title="PetQuest (tablet)",
        data={CONF_USER_ID: TEST_USER_ID},
        options={},
        entry_id=SECOND_ENTRY_ID,
        unique_id=SECOND_ENTRY_ID,
    )
    entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(entry.entry_id)
    await hass.async_block_till_done()
    return entry


def _has_pet_sensors(hass: HomeAssistant, entry_id: str, pet_id: str) -> bool:
    registry = er.async_get(hass)
    return all(
        registry.async_get_entity_id("sensor", DOMAIN, f"{entry_id}_{pet_id}{suffix}")
        is not None
        for suffix in (
            const.SENSOR_UID_SUFFIX_MOOD,
            const.SENSOR_UID_SUFFIX_QUEST,
            const.SENSOR_UID_SUFFIX_SLEEP,
            const.SENSOR_UID_SUFFIX_LEVEL,
            const.SENSOR_UID_SUFFIX_HEART_FILL,
        )
    )


async def test_second_device_keeps_pet_index(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
) -> None:
    """Test a device with an empty cache loads the pets and leaves the index intact."""
    remote = hass.data[DOMAIN][REMOTE_STORE]
    coordinator_a = hass.data[DOMAIN][init_integration.entry_id][COORDINATOR]
    coordinator_a.adopt_pet("dog", "Rex", pet_id="a")
    coordinator_a.adopt_pet("cat", "Tom", pet_id="b")
    await hass.async_block_till_done()

    assert (await remote.async_get(USER_PATH))[const.DATA_USER_PET_IDS] == ["a", "b"]

    second = await _async_setup_second_device(hass)
    coordinator_b = hass.data[DOMAIN][second.entry_id][COORDINATOR]

    assert (await remote.async_get(USER_PATH))[const.DATA_USER_PET_IDS] == ["a", "b"]
    assert coordinator_b.owned_pet_ids == ["a", "b"]
    assert coordinator_b.get_pet_status("a")[const.DATA_PET_DISPLAY_NAME] == "Rex"
    assert _has_pet_sensors(hass, second.entry_id, "a")
    assert _has_pet_sensors(hass, second.entry_id, "b")

    assert await hass.config_entries.async_unload(second.entry_id)
    await hass.async_block_till_done()


async def test_pet_adopted_elsewhere_gets_sensors(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
) -> None:
    """Test a pet adopted on one device gets sensors on the other after a refresh."""
    coordinator_a = hass.data[DOMAIN][init_integration.entry_id][COORDINATOR]
    coordinator_a.adopt_pet("dog", "Rex", pet_id="a")
    await hass.async_block_till_done()

    second = await _async_setup_second_device(hass)
    coordinator_b = hass.data[DOMAIN][second.entry_id][COORDINATOR]
    assert not _has_pet_sensors(hass, second.entry_id, "c")

    coordinator_a.adopt_pet("cat", "Tom", pet_id="c")
    await hass.async_block_till_done()
    await coordinator_b.async_refresh()
    await hass.async_block_till_done()

    assert coordinator_b.owned_pet_ids == ["a", "c"]
    assert _has_pet_sensors(hass, second.entry_id, "c")

    assert await hass.config_entries.async_unload(second.entry_id)
    await hass.async_block_till_done()


async def test_coins_from_both_devices_add_up(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,
) -> None:
    """Test coins credited on two devices both reach the shared balance."""
    coordinator_a = hass.data[DOMAIN][init_integration.entry_id][COORDINATOR]
    coordinator_a.adopt_pet("dog", pet_id="a")
    coordinator_a.earn_adventure_coins("a", 10)
    await hass.async_block_till_done()

    second = await _async_setup_second_device(hass)
    coordinator_b = hass.data[DOMAIN][second.entry_id][COORDINATOR]
    assert coordinator_b.get_balance() == 10

    coordinator_b.earn_adventure_coins("a", 10)
    await hass.async_block_till_done()
    await coordinator_a.async_refresh()

    assert coordinator_a.get_balance() == 20
    assert coordinator_b.get_balance() == 20

    assert await hass.config_entries.async_unload(second.entry_id)
    await hass.async_block_till_done()
