# File: __init__.py
"""Initialization file for the PetQuest integration.

Handles setting up the integration, including loading configuration entries,
initializing the local cache and the shared remote store, and preparing the
coordinator.

Key Features:
- Config entry setup and unload support.
- Coordinator initialization for remote synchronization.
- One-time migration of local-only documents to the remote store.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from . import const
from .coordinator import PetQuestCoordinator
from .helpers.entity_helpers import get_loaded_entry_ids
from .remote_store import RemoteUnavailableError, SharedDocumentStore
from .services import async_setup_services, async_unload_services
from .storage_manager import PetQuestStorageManager
from .utils import dt_utils


def _storage_key(entry: ConfigEntry) -> str:
    """Return the local cache storage key for an entry."""
    return f"{const.DOMAIN}_{entry.entry_id}"


async def _async_get_remote_store(hass: HomeAssistant) -> SharedDocumentStore:
    """Return the remote store shared by every PetQuest entry, loading it once."""
    domain_data = hass.data.setdefault(const.DOMAIN, {})
    remote = domain_data.get(const.REMOTE_STORE)
    if remote is None:
        remote = SharedDocumentStore(hass, const.REMOTE_STORAGE_KEY)
        await remote.async_initialize()
        domain_data[const.REMOTE_STORE] = remote
    return remote


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for PetQuest entry: %s", entry.entry_id)

    # Set the home assistant configured timezone for date/time operations
    # Must be done early before any components that use datetime helpers
    const.set_default_timezone(hass)
    if const.DEFAULT_TIME_ZONE is not None:
        dt_utils.set_default_timezone(const.DEFAULT_TIME_ZONE)

    # Initialize the local cache.
    storage_manager = PetQuestStorageManager(hass, _storage_key(entry))
    await storage_manager.async_initialize()

    try:
        remote = await _async_get_remote_store(hass)
    except RemoteUnavailableError as err:
        const.LOGGER.error("ERROR: Failed to load the remote store: %s", err)
        raise ConfigEntryNotReady from err

    coordinator = PetQuestCoordinator(hass, entry, storage_manager, remote)
    await coordinator.async_setup_managers()

    # Push documents created before this user had a remote copy.
    await coordinator.sync_manager.async_migrate_local_only_to_remote()

    try:
        # Perform the first refresh to load data.
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise ConfigEntryNotReady from e

    # Store the coordinator and data manager in hass.data.
    hass.data[const.DOMAIN][entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORAGE_MANAGER: storage_manager,
    }

    # Set up services required by the integration.
    async_setup_services(hass)

    # Forward the setup to supported platforms.
    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    const.LOGGER.info("INFO: PetQuest setup complete for entry: %s", entry.entry_id)
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options change."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading PetQuest entry: %s", entry.entry_id)

    # Unload platforms
    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        entry_data = hass.data[const.DOMAIN].pop(entry.entry_id)
        await entry_data[const.STORAGE_MANAGER].async_save()

        # Services are shared; remove them with the last entry.
        if not get_loaded_entry_ids(hass):
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry.

    Deletes the entry's local cache. Remote documents belong to the user and
    are kept so another device or a re-added entry can restore them.
    """
    const.LOGGER.info("INFO: Removing PetQuest entry: %s", entry.entry_id)

    storage_manager = PetQuestStorageManager(hass, _storage_key(entry))
    await storage_manager.async_delete_storage()

    const.LOGGER.info("INFO: PetQuest entry data cleared: %s", entry.entry_id)
