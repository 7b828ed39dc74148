"""Shared fixtures for PetQuest tests."""

from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest
from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from homeassistant.helpers.dispatcher import async_dispatcher_send
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.petquest.const import CONF_USER_ID, DOMAIN
from custom_components.petquest.coordinator import PetQuestCoordinator
from custom_components.petquest.storage_manager import PetQuestStorageManager
from custom_components.petquest.utils import dt_utils
from tests.helpers import MONDAY_10AM_MS, TEST_USER_ID, FakeClock, FlakyDocumentStore

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def utc_calendar() -> Iterator[None]:
    """Answer calendar questions in UTC unless a test says otherwise.

    Entry setup pushes the Home Assistant timezone into dt_utils, which is
    module state; restore it after every test.
    """
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="PetQuest",
        data={CONF_USER_ID: TEST_USER_ID},
        options={},
        entry_id="test_entry_id",
        unique_id=TEST_USER_ID,
    )


@pytest.fixture
def clock() -> FakeClock:
    """Return a controllable clock starting Monday 2026-01-05 10:00 UTC."""
    return FakeClock(MONDAY_10AM_MS)


@pytest.fixture
def remote() -> FlakyDocumentStore:
    """Return an empty in-memory remote store that can be taken offline."""
    return FlakyDocumentStore()


@pytest.fixture
async def storage_manager(hass: HomeAssistant) -> PetQuestStorageManager:
    """Return an initialized local cache backed by mocked storage."""
    manager = PetQuestStorageManager(hass, "petquest_test")
    await manager.async_initialize()
    return manager


@pytest.fixture
async def coordinator(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    storage_manager: PetQuestStorageManager,  # pylint: disable=redefined-outer-name
    remote: FlakyDocumentStore,  # pylint: disable=redefined-outer-name
    clock: FakeClock,  # pylint: disable=redefined-outer-name
) -> PetQuestCoordinator:
    """Return a coordinator with managers set up, without loading platforms."""
    mock_config_entry.add_to_hass(hass)
    coord = PetQuestCoordinator(
        hass, mock_config_entry, storage_manager, remote, clock=clock
    )
    await coord.async_setup_managers()
    return coord


@pytest.fixture
def mock_dispatcher_send() -> Iterator[MagicMock]:
    """Record manager events while still delivering them to listeners."""
    with patch(
        "custom_components.petquest.managers.base_manager.async_dispatcher_send",
        wraps=async_dispatcher_send,
    ) as mock_send:
        yield mock_send


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
) -> Any:
    """Set up the PetQuest integration and unload it after the test."""
    mock_config_entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    yield mock_config_entry

    if mock_config_entry.state is ConfigEntryState.LOADED:
        await hass.config_entries.async_unload(mock_config_entry.entry_id)
        await hass.async_block_till_done()
