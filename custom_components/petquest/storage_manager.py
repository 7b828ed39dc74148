# File: storage_manager.py
"""Handles the local document cache for the PetQuest integration.

Uses Home Assistant's Storage helper to keep every engine document (pets,
progress, quests, sleep, mood period, streak, ledger, user state) on disk so
state is preserved across restarts. Reads and writes are synchronous against
the in-memory copy; persisting to disk is scheduled on the event loop.

Layout:
    meta       schema version, users already migrated to the remote store
    documents  {entity_key: document}
    pending    {entity_key: {"patch": {...}, "increments": {...}}} awaiting
               remote propagation
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class PetQuestStorageManager:
    """Manages loading, saving, and accessing the local document cache."""

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the storage manager.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).

        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}  # In-memory data cache for quick access.

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return the canonical empty cache structure.

        Returns:
            dict: Default structure with meta, documents and pending initialized.
        """
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION_CURRENT,
                const.DATA_META_MIGRATED_USERS: [],
            },
            const.DATA_DOCUMENTS: {},
            const.DATA_PENDING: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure.
        """
        const.LOGGER.debug("DEBUG: PetQuestStorageManager: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = self.get_default_structure()
        else:
            self._data = existing_data
            for key, default in self.get_default_structure().items():
                self._data.setdefault(key, default)
            const.LOGGER.debug(
                "DEBUG: Loaded existing data from storage: %s documents, %s pending",
                len(self._data[const.DATA_DOCUMENTS]),
                len(self._data[const.DATA_PENDING]),
            )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def get_storage_path(self) -> str:
        """Get the storage file path."""
        return self._store.path

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def get_document(self, entity_key: str) -> dict[str, Any] | None:
        """Return a copy of one cached document, or None if absent."""
        doc = self._data.get(const.DATA_DOCUMENTS, {}).get(entity_key)
        return copy.deepcopy(doc) if doc is not None else None

    def set_document(self, entity_key: str, document: dict[str, Any]) -> None:
        """Replace one cached document and schedule a save."""
        self._data.setdefault(const.DATA_DOCUMENTS, {})[entity_key] = copy.deepcopy(
            document
        )
        self.async_schedule_save()

    def document_keys(self, prefix: str = "") -> list[str]:
        """Return sorted entity keys, optionally limited to a prefix."""
        return sorted(
            key
            for key in self._data.get(const.DATA_DOCUMENTS, {})
            if key.startswith(prefix)
        )

    # -------------------------------------------------------------------------
    # Pending remote work
    # -------------------------------------------------------------------------

    def get_pending(self, entity_key: str) -> dict[str, Any] | None:
        """Return the pending remote work for a key, if any."""
        pending = self._data.get(const.DATA_PENDING, {}).get(entity_key)
        return copy.deepcopy(pending) if pending is not None else None

    def set_pending(self, entity_key: str, pending: dict[str, Any]) -> None:
        """Record pending remote work for a key."""
        self._data.setdefault(const.DATA_PENDING, {})[entity_key] = copy.deepcopy(
            pending
        )
        self.async_schedule_save()

    def clear_pending(self, entity_key: str) -> None:
        """Forget pending remote work for a key."""
        if self._data.get(const.DATA_PENDING, {}).pop(entity_key, None) is not None:
            self.async_schedule_save()

    def pending_keys(self) -> list[str]:
        """Return keys that still have remote work outstanding."""
        return sorted(self._data.get(const.DATA_PENDING, {}))

    # -------------------------------------------------------------------------
    # Meta
    # -------------------------------------------------------------------------

    def is_user_migrated(self, user_id: str) -> bool:
        """Return True once local-only records were pushed for `user_id`."""
        meta = self._data.get(const.DATA_META, {})
        return user_id in meta.get(const.DATA_META_MIGRATED_USERS, [])

    def mark_user_migrated(self, user_id: str) -> None:
        """Remember that the local-to-remote migration ran for `user_id`."""
        meta = self._data.setdefault(const.DATA_META, {})
        migrated = meta.setdefault(const.DATA_META_MIGRATED_USERS, [])
        if user_id not in migrated:
            migrated.append(user_id)
            self.async_schedule_save()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def async_schedule_save(self) -> None:
        """Persist the cache without blocking the caller."""
        self.hass.async_create_task(
            self.async_save(), f"{const.DOMAIN} save {self._storage_key}"
        )

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Raises:
            No exceptions raised - errors are logged but do not stop execution.
            OSError: Logged when file system issues prevent saving.
            TypeError: Logged when data contains non-serializable types.
            ValueError: Logged when data is invalid for JSON serialization.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s. "
                "Data contains types that cannot be converted to JSON",
                err,
            )
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s. "
                "Data structure may be corrupted",
                err,
            )

    async def async_clear_data(self) -> None:
        """Clear all stored data and reset to default structure."""
        const.LOGGER.warning("WARNING: Clearing all PetQuest data and resetting storage")
        self._data = self.get_default_structure()
        await self.async_save()

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        await self.async_clear_data()

        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
