# File: remote_store.py
"""Remote durable document store for the PetQuest integration.

The synchronization layer only needs three operations from a remote store:

- async_get(path): fetch one document (None when missing)
- async_set_merge(path, patch): merge fields into a document, creating it
- async_run_transaction(path, fn): read-modify-write one document atomically

Any document database with per-document transactions can sit behind
RemoteDocumentClient. The shipped SharedDocumentStore keeps documents in a
Home Assistant Store shared by every PetQuest entry on this instance, with
a lock serializing transactions. Store failures surface as
RemoteUnavailableError so callers can degrade to the local cache.
"""

from __future__ import annotations

import asyncio
import copy
from typing import TYPE_CHECKING, Any, Protocol

from homeassistant.helpers.storage import Store

from . import const
from .utils.merge_utils import deep_merge

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant


class RemoteUnavailableError(Exception):
    """Raised when the remote store cannot be reached or fails an operation."""


class RemoteDocumentClient(Protocol):
    """Contract for the remote durable store."""

    async def async_get(self, path: str) -> dict[str, Any] | None:
        """Return the document at `path`, or None if it does not exist."""

    async def async_set_merge(self, path: str, patch: dict[str, Any]) -> None:
        """Merge `patch` into the document at `path`, creating it if needed."""

    async def async_run_transaction(
        self,
        path: str,
        fn: Callable[[dict[str, Any] | None], dict[str, Any] | None],
    ) -> dict[str, Any] | None:
        """Atomically replace the document with `fn(current)`.

        Returning None from `fn` leaves the document unchanged. Returns the
        document as stored after the transaction.
        """


class InMemoryDocumentStore:
    """Document store held in memory, serialized by an asyncio lock."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def async_get(self, path: str) -> dict[str, Any] | None:
        """Return a copy of the document at `path`."""
        doc = self._documents.get(path)
        return copy.deepcopy(doc) if doc is not None else None

    async def async_set_merge(self, path: str, patch: dict[str, Any]) -> None:
        """Merge `patch` into the document at `path`."""
        async with self._lock:
            self._documents[path] = deep_merge(self._documents.get(path, {}), patch)
            await self._async_persist()

    async def async_run_transaction(
        self,
        path: str,
        fn: Callable[[dict[str, Any] | None], dict[str, Any] | None],
    ) -> dict[str, Any] | None:
        """Run `fn` against the current document while holding the lock."""
        async with self._lock:
            current = self._documents.get(path)
            result = fn(copy.deepcopy(current) if current is not None else None)
            if result is None:
                return copy.deepcopy(current) if current is not None else None
            self._documents[path] = copy.deepcopy(result)
            await self._async_persist()
            return copy.deepcopy(result)

    async def _async_persist(self) -> None:
        """Hook for subclasses that write documents to durable storage."""


class SharedDocumentStore(InMemoryDocumentStore):
    """Durable document store on Home Assistant storage.

    One instance is shared by all PetQuest entries (hass.data[DOMAIN]), so
    several users' documents live side by side under their own path prefix.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.REMOTE_STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Storage file key (default: const.REMOTE_STORAGE_KEY).
        """
        super().__init__()
        self.hass = hass
        self._store: Store = Store(hass, const.REMOTE_STORAGE_VERSION, storage_key)

    async def async_initialize(self) -> None:
        """Load documents from disk."""
        try:
            existing = await self._store.async_load()
        except (OSError, ValueError) as err:
            raise RemoteUnavailableError(f"Failed to load remote store: {err}") from err
        self._documents = existing or {}
        const.LOGGER.debug(
            "DEBUG: SharedDocumentStore loaded %s documents", len(self._documents)
        )

    async def _async_persist(self) -> None:
        """Write all documents to disk."""
        try:
            await self._store.async_save(self._documents)
        except (OSError, TypeError, ValueError) as err:
            raise RemoteUnavailableError(f"Failed to save remote store: {err}") from err

