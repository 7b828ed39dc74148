"""Sync Manager - Local cache / remote store reconciliation.

Every PetQuest document is read and written through this manager.

Contract:
- write(entity_key, patch): merge into the local cache immediately, stamp a
  strictly increasing `updated_at`, then propagate to the remote store in a
  background task. Remote merges are last-write-wins on `updated_at`: a
  patch older than the remote document is dropped inside the transaction.
- increment(entity_key, increments): counters are changed locally at once and
  remotely as a single-document transaction that adds to the stored values,
  never as read-compute-overwrite.
- async_read(entity_key): remote first, merged into the cache with remote
  values winning; on failure or timeout the cached value is returned as-is.
- async_create_if_missing(entity_key, doc): seed a document only when no
  device has created it, so a fresh cache never clobbers remote state.
- Remote failures and timeouts are never raised to command callers. The
  failed work is parked in the cache's pending section and replayed on the
  next read of the same key.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import const
from ..remote_store import RemoteUnavailableError
from ..utils import dt_utils
from ..utils.merge_utils import apply_increments, deep_merge, merge_increments

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from homeassistant.core import HomeAssistant

    from ..remote_store import RemoteDocumentClient
    from ..storage_manager import PetQuestStorageManager


@dataclass
class RemoteOperation:
    """One unit of remote work for a single document.

    Attributes:
        patch: Fields to merge (carries its own updated_at), or None
        increments: Dotted-path counter deltas
        stamp: updated_at of the local write that produced this operation
    """

    patch: dict[str, Any] | None = None
    increments: dict[str, int] = field(default_factory=dict)
    stamp: int = 0


class SyncManager:
    """Synchronization layer between the local cache and the remote store."""

    def __init__(
        self,
        hass: HomeAssistant,
        storage_manager: PetQuestStorageManager,
        remote: RemoteDocumentClient,
        user_id: str,
        clock: Callable[[], int] = dt_utils.now_ms,
        read_timeout: float = const.REMOTE_READ_TIMEOUT,
    ) -> None:
        """Initialize the sync manager.

        Args:
            hass: Home Assistant instance (used to schedule remote tasks)
            storage_manager: Local document cache
            remote: Remote document store client
            user_id: Opaque id of the authenticated user owning every document
            clock: Millisecond clock used for updated_at stamps
            read_timeout: Seconds to wait for a remote call before falling back
        """
        self.hass = hass
        self.storage = storage_manager
        self.remote = remote
        self.user_id = user_id
        self._clock = clock
        self._read_timeout = read_timeout

    def remote_path(self, entity_key: str) -> str:
        """Return the remote document path for an entity key."""
        return const.REMOTE_PATH_FMT.format(self.user_id, entity_key)

    # =========================================================================
    # Local (synchronous) API
    # =========================================================================

    def get(self, entity_key: str) -> dict[str, Any] | None:
        """Return the cached document for `entity_key` (a copy)."""
        return self.storage.get_document(entity_key)

    def keys(self, prefix: str = "") -> list[str]:
        """Return cached entity keys under `prefix`."""
        return self.storage.document_keys(prefix)

    def write(self, entity_key: str, patch: dict[str, Any]) -> dict[str, Any]:
        """Merge `patch` into the cached document and propagate it remotely.

        Args:
            entity_key: Document key (e.g. "quests/{pet_id}")
            patch: Fields to set; nested dicts merge

        Returns:
            The merged local document
        """
        current = self.storage.get_document(entity_key) or {}
        stamp = self._next_stamp(current)
        stamped = {**patch, const.DATA_UPDATED_AT: stamp}
        merged = deep_merge(current, stamped)
        self.storage.set_document(entity_key, merged)
        self._schedule_push(entity_key, RemoteOperation(patch=stamped, stamp=stamp))
        return merged

    def increment(
        self,
        entity_key: str,
        increments: dict[str, int],
        patch: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Add to counters in the cached document and remotely, atomically.

        Args:
            entity_key: Document key
            increments: {dotted_path: delta}
            patch: Optional plain fields written alongside the increments

        Returns:
            The updated local document
        """
        current = self.storage.get_document(entity_key) or {}
        stamp = self._next_stamp(current)
        updated = apply_increments(current, increments, const.NON_NEGATIVE_COUNTERS)
        stamped_patch = None
        if patch:
            stamped_patch = {**patch, const.DATA_UPDATED_AT: stamp}
            updated = deep_merge(updated, stamped_patch)
        updated[const.DATA_UPDATED_AT] = stamp
        self.storage.set_document(entity_key, updated)
        self._schedule_push(
            entity_key,
            RemoteOperation(patch=stamped_patch, increments=dict(increments), stamp=stamp),
        )
        return updated

    def _next_stamp(self, current: dict[str, Any]) -> int:
        """Return an updated_at strictly greater than the document's current one."""
        previous = int(current.get(const.DATA_UPDATED_AT, 0) or 0)
        return max(self._clock(), previous + 1)

    # =========================================================================
    # Remote propagation
    # =========================================================================

    def _schedule_push(self, entity_key: str, operation: RemoteOperation) -> None:
        """Fire-and-forget the remote side of a local write."""
        self.hass.async_create_task(
            self._async_push(entity_key, operation),
            f"{const.DOMAIN} sync {entity_key}",
        )

    async def _async_push(self, entity_key: str, operation: RemoteOperation) -> bool:
        """Apply one operation remotely; park it as pending on failure.

        Returns:
            True if the remote store accepted the operation
        """
        try:
            async with asyncio.timeout(self._read_timeout):
                await self.remote.async_run_transaction(
                    self.remote_path(entity_key), self._transaction_for(operation)
                )
        except (RemoteUnavailableError, TimeoutError) as err:
            const.LOGGER.warning(
                "WARNING: SyncManager: Remote write for '%s' failed, keeping it pending: %s",
                entity_key,
                err,
            )
            self._park_pending(entity_key, operation)
            return False

        const.LOGGER.debug("DEBUG: SyncManager: Propagated '%s'", entity_key)
        return True

    @staticmethod
    def _transaction_for(
        operation: RemoteOperation,
    ) -> Callable[[dict[str, Any] | None], dict[str, Any] | None]:
        """Build the transaction function merging one operation remotely."""

        def _apply(current: dict[str, Any] | None) -> dict[str, Any] | None:
            doc = current or {}
            remote_stamp = int(doc.get(const.DATA_UPDATED_AT, 0) or 0)
            result = doc
            if operation.increments:
                result = apply_increments(
                    result, operation.increments, const.NON_NEGATIVE_COUNTERS
                )
                result[const.DATA_UPDATED_AT] = max(remote_stamp, operation.stamp)
            if operation.patch:
                patch_stamp = int(operation.patch.get(const.DATA_UPDATED_AT, 0))
                if patch_stamp < remote_stamp:
                    const.LOGGER.debug(
                        "DEBUG: SyncManager: Dropping stale patch (%s < %s)",
                        patch_stamp,
                        remote_stamp,
                    )
                else:
                    result = deep_merge(result, operation.patch)
            if result is doc and current is not None:
                return None
            return result

        return _apply

    def _park_pending(self, entity_key: str, operation: RemoteOperation) -> None:
        """Fold a failed operation into the key's pending record."""
        pending = self.storage.get_pending(entity_key) or {}
        patch = pending.get(const.DATA_PENDING_PATCH)
        if operation.patch:
            patch = deep_merge(patch or {}, operation.patch)
        increments = merge_increments(
            pending.get(const.DATA_PENDING_INCREMENTS, {}), operation.increments
        )
        self.storage.set_pending(
            entity_key,
            {
                const.DATA_PENDING_PATCH: patch,
                const.DATA_PENDING_INCREMENTS: increments,
                const.DATA_PENDING_STAMP: max(
                    int(pending.get(const.DATA_PENDING_STAMP, 0)), operation.stamp
                ),
            },
        )

    async def async_flush_pending(self, entity_key: str | None = None) -> None:
        """Replay parked remote work for one key, or for every key.

        Stops at the first failure; the failed key is parked again and the
        keys after it stay pending.
        """
        keys = [entity_key] if entity_key else self.storage.pending_keys()
        for key in keys:
            pending = self.storage.get_pending(key)
            if not pending:
                continue
            self.storage.clear_pending(key)
            patch = pending.get(const.DATA_PENDING_PATCH)
            increments = pending.get(const.DATA_PENDING_INCREMENTS, {})
            stamp = int(pending.get(const.DATA_PENDING_STAMP, 0))
            const.LOGGER.debug("DEBUG: SyncManager: Replaying pending work for '%s'", key)
            if not await self._async_push(
                key, RemoteOperation(patch=patch, increments=increments, stamp=stamp)
            ):
                break

    # =========================================================================
    # Reads
    # =========================================================================

    async def async_read(self, entity_key: str) -> dict[str, Any] | None:
        """Return the freshest available document for `entity_key`.

        Tries the remote store first and merges the result into the cache
        (remote wins for fields it carries). Falls back to the cached value on
        failure, timeout, or while local work for the key is still unsent.
        """
        await self.async_flush_pending(entity_key)
        if self.storage.get_pending(entity_key):
            return self.get(entity_key)

        try:
            async with asyncio.timeout(self._read_timeout):
                remote_doc = await self.remote.async_get(self.remote_path(entity_key))
        except (RemoteUnavailableError, TimeoutError) as err:
            const.LOGGER.warning(
                "WARNING: SyncManager: Remote read for '%s' failed, using local cache: %s",
                entity_key,
                err,
            )
            return self.get(entity_key)

        local = self.get(entity_key)
        if remote_doc is None:
            return local
        if local is not None:
            local_stamp = int(local.get(const.DATA_UPDATED_AT, 0) or 0)
            remote_stamp = int(remote_doc.get(const.DATA_UPDATED_AT, 0) or 0)
            if local_stamp > remote_stamp:
                # Local write still in flight.
                return local

        merged = deep_merge(local or {}, remote_doc)
        self.storage.set_document(entity_key, merged)
        return merged

    async def async_refresh(self, entity_keys: Iterable[str]) -> None:
        """Read a batch of keys through async_read."""
        for entity_key in entity_keys:
            await self.async_read(entity_key)

    # =========================================================================
    # Creation and migration
    # =========================================================================

    async def _async_remote_create(self, entity_key: str, doc: dict[str, Any]) -> bool:
        """Create the remote document unless one already exists.

        The existence check and the create happen in one transaction.

        Returns:
            True if the document was created

        Raises:
            RemoteUnavailableError: If the remote store fails or times out
        """
        created: list[bool] = []

        def _create_if_missing(current: dict[str, Any] | None) -> dict[str, Any] | None:
            if current is not None:
                return None
            created.append(True)
            return doc

        try:
            async with asyncio.timeout(self._read_timeout):
                await self.remote.async_run_transaction(
                    self.remote_path(entity_key), _create_if_missing
                )
        except TimeoutError as err:
            raise RemoteUnavailableError(
                f"Timed out creating '{entity_key}' remotely"
            ) from err
        return bool(created)

    async def async_create_if_missing(
        self, entity_key: str, doc: dict[str, Any]
    ) -> dict[str, Any]:
        """Return the document for `entity_key`, creating it if no device has.

        The remote copy is read first. A new document is cached with
        updated_at 0, so a copy written by any other device wins later reads.

        Args:
            entity_key: Document key
            doc: Fields of the new document

        Returns:
            The cached document
        """
        existing = self.get(entity_key) or await self.async_read(entity_key)
        if existing is not None:
            return existing

        created = {**doc, const.DATA_UPDATED_AT: 0}
        self.storage.set_document(entity_key, created)
        try:
            await self._async_remote_create(entity_key, created)
        except RemoteUnavailableError as err:
            const.LOGGER.warning(
                "WARNING: SyncManager: Could not create '%s' remotely yet: %s",
                entity_key,
                err,
            )
        return created

    async def async_migrate_local_only_to_remote(self) -> int:
        """Push local documents that have no remote counterpart.

        Runs once per user. Existing remote documents are never overwritten.

        Returns:
            Number of documents created remotely
        """
        if self.storage.is_user_migrated(self.user_id):
            return 0

        created = 0
        for entity_key in self.storage.document_keys():
            local_doc = self.storage.get_document(entity_key)
            if local_doc is None:
                continue
            try:
                if await self._async_remote_create(entity_key, local_doc):
                    created += 1
            except RemoteUnavailableError as err:
                const.LOGGER.warning(
                    "WARNING: SyncManager: Migration to remote interrupted at '%s': %s",
                    entity_key,
                    err,
                )
                return created

        self.storage.mark_user_migrated(self.user_id)
        const.LOGGER.info(
            "INFO: SyncManager: Migrated %s local-only documents for user %s",
            created,
            self.user_id,
        )
        return created
