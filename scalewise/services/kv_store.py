"""
Key-value store collaborator.

Small pieces of operator state (offer notes, reviewed checkboxes, Slack
digest markers) are kept behind an explicit store with load/save/delete
calls. Services and routers receive the store as a dependency; nothing reads
or writes ambient global state.

Implementations:
- InMemoryKeyValueStore: dict-backed, used in tests and when no database is configured
- PostgresKeyValueStore: asyncpg-backed kv_store table with JSONB values

Usage:
    store = await get_store()
    await store.save("notes:ACA - Banner", {"text": "Paused creatives 3/14"})
    note = await store.load("notes:ACA - Banner")
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import asyncpg
from asyncpg import Pool

from scalewise.core.database import get_db_pool
from scalewise.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async key-value store holding JSON-serializable values."""

    @abstractmethod
    async def load(self, key: str, default: Any = None) -> Any:
        """Return the value for key, or default when absent."""

    @abstractmethod
    async def save(self, key: str, value: Any) -> None:
        """Insert or replace the value for key."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove key. Returns True when something was deleted."""

    async def exists(self, key: str) -> bool:
        sentinel = object()
        return await self.load(key, sentinel) is not sentinel


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store.

    Values are deep-copied in and out so callers cannot mutate stored state
    by accident.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def load(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    async def save(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        del self._data[key]
        return True


class PostgresKeyValueStore(KeyValueStore):
    """
    Store backed by the kv_store table.

    Schema (created by core.database.ensure_schema):
        key TEXT PRIMARY KEY, value JSONB, updated_at TIMESTAMPTZ

    Connection and query failures are raised as StoreUnavailableError.
    """

    def __init__(self, pool: Pool):
        self._pool = pool

    async def load(self, key: str, default: Any = None) -> Any:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow("SELECT value FROM kv_store WHERE key = $1", key)
        except (asyncpg.PostgresError, OSError) as e:
            raise StoreUnavailableError(f"Failed to load {key!r}: {e}") from e

        if row is None:
            return default
        value = row['value']
        return json.loads(value) if isinstance(value, str) else value

    async def save(self, key: str, value: Any) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES ($1, $2::jsonb, now())
                    ON CONFLICT (key)
                    DO UPDATE SET value = EXCLUDED.value, updated_at = now()
                    """,
                    key,
                    json.dumps(value, default=str),
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise StoreUnavailableError(f"Failed to save {key!r}: {e}") from e

    async def delete(self, key: str) -> bool:
        try:
            async with self._pool.acquire() as conn:
                status = await conn.execute("DELETE FROM kv_store WHERE key = $1", key)
        except (asyncpg.PostgresError, OSError) as e:
            raise StoreUnavailableError(f"Failed to delete {key!r}: {e}") from e
        # Status looks like 'DELETE 1'
        return status.split()[-1] != '0'


# Fallback store shared across requests when no database is configured
_memory_store = InMemoryKeyValueStore()


async def get_store() -> KeyValueStore:
    """
    Return the store for the current configuration.

    PostgreSQL when DATABASE_URL is configured, otherwise a process-wide
    in-memory store.

    Raises:
        StoreUnavailableError: If the configured database cannot be reached.
    """
    try:
        pool = await get_db_pool()
    except (asyncpg.PostgresError, OSError) as e:
        raise StoreUnavailableError(f"Failed to connect to key-value store: {e}") from e
    if pool is None:
        return _memory_store
    return PostgresKeyValueStore(pool)


__all__ = [
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'PostgresKeyValueStore',
    'get_store',
]
