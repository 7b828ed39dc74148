"""Test helpers for PetQuest tests.

    from tests.helpers import (
        FakeClock, FlakyDocumentStore, StalledDocumentStore,
        StalledTransactionStore, emitted,
        MONDAY_10AM_MS, TEST_USER_ID, ms_at,
    )
"""

import asyncio
from datetime import UTC, datetime
from typing import Any

from custom_components.petquest.remote_store import (
    InMemoryDocumentStore,
    RemoteUnavailableError,
)

TEST_USER_ID = "test_user"

# Monday 2026-01-05 10:00:00 UTC
MONDAY_10AM_MS = 1767607200000

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


def ms_at(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    """Return epoch milliseconds for a UTC wall clock time."""
    return int(datetime(year, month, day, hour, minute, tzinfo=UTC).timestamp() * 1000)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        """Move the clock forward and return the new reading."""
        self.now += ms
        return self.now


class FlakyDocumentStore(InMemoryDocumentStore):
    """In-memory remote store that fails every call while `fail` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise RemoteUnavailableError("remote offline")

    async def async_get(self, path: str) -> dict[str, Any] | None:
        self._check()
        return await super().async_get(path)

    async def async_set_merge(self, path: str, patch: dict[str, Any]) -> None:
        self._check()
        await super().async_set_merge(path, patch)

    async def async_run_transaction(self, path, fn):
        self._check()
        return await super().async_run_transaction(path, fn)

    def peek(self, path: str) -> dict[str, Any] | None:
        """Return the stored document without going through the async API."""
        return self._documents.get(path)


class StalledDocumentStore(InMemoryDocumentStore):
    """Remote store whose reads never answer."""

    async def async_get(self, path: str) -> dict[str, Any] | None:
        await asyncio.Event().wait()
        return None


class StalledTransactionStore(InMemoryDocumentStore):
    """Remote store that answers reads but never finishes a transaction."""

    async def async_run_transaction(self, path, fn):
        await asyncio.Event().wait()
        return None


def emitted(mock_send: Any, suffix: str) -> list[dict[str, Any]]:
    """Return the payloads of every recorded event with the given suffix."""
    return [
        call.args[2]
        for call in mock_send.call_args_list
        if call.args[1].endswith(f"_{suffix}")
    ]
