"""
Pytest test module for the key-value store collaborator.

Test Classes:
- TestInMemoryKeyValueStore: load/save/delete semantics and copy isolation
- TestPostgresKeyValueStore: SQL round trips against a mocked asyncpg pool
- TestGetStore: backend selection by configuration
"""

import json
from unittest.mock import AsyncMock, patch

import asyncpg
import pytest

from scalewise.core.exceptions import StoreUnavailableError
from scalewise.services.kv_store import (
    InMemoryKeyValueStore,
    PostgresKeyValueStore,
    get_store,
)


# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


# =============================================================================
# Test Class: TestInMemoryKeyValueStore
# =============================================================================

class TestInMemoryKeyValueStore:

    async def test_missing_key_returns_default(self, memory_store) -> None:
        assert await memory_store.load('notes:missing') is None
        assert await memory_store.load('notes:missing', {}) == {}

    async def test_save_then_load(self, memory_store) -> None:
        await memory_store.save('notes:ACA - Banner', {'text': 'Paused creatives'})

        assert await memory_store.load('notes:ACA - Banner') == {'text': 'Paused creatives'}

    async def test_save_replaces(self, memory_store) -> None:
        await memory_store.save('reviewed', [1])
        await memory_store.save('reviewed', [1, 2])

        assert await memory_store.load('reviewed') == [1, 2]

    async def test_stored_value_is_isolated_from_caller(self, memory_store) -> None:
        value = {'items': [1]}
        await memory_store.save('key', value)
        value['items'].append(2)

        loaded = await memory_store.load('key')
        loaded['items'].append(3)

        assert await memory_store.load('key') == {'items': [1]}

    async def test_delete(self, memory_store) -> None:
        await memory_store.save('key', None)

        assert await memory_store.exists('key') is True
        assert await memory_store.delete('key') is True
        assert await memory_store.delete('key') is False
        assert await memory_store.exists('key') is False

    async def test_initial_values(self) -> None:
        store = InMemoryKeyValueStore({'a': 1})

        assert await store.load('a') == 1


# =============================================================================
# Test Class: TestPostgresKeyValueStore
# =============================================================================

class TestPostgresKeyValueStore:

    async def test_load_decodes_json_text(self, mock_db_pool) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.return_value = {'value': '{"text": "hi"}'}

        value = await PostgresKeyValueStore(mock_db_pool).load('notes:a')

        assert value == {'text': 'hi'}
        assert conn.fetchrow.call_args.args[1] == 'notes:a'

    async def test_load_missing_returns_default(self, mock_db_pool) -> None:
        assert await PostgresKeyValueStore(mock_db_pool).load('missing', 'fallback') == 'fallback'

    async def test_save_upserts_json(self, mock_db_pool) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value

        await PostgresKeyValueStore(mock_db_pool).save('notes:a', {'text': 'hi'})

        query, key, payload = conn.execute.call_args.args
        assert 'ON CONFLICT (key)' in query
        assert key == 'notes:a'
        assert json.loads(payload) == {'text': 'hi'}

    @pytest.mark.parametrize('status,expected', [('DELETE 1', True), ('DELETE 0', False)])
    async def test_delete_reports_row_count(self, mock_db_pool, status, expected) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.execute.return_value = status

        assert await PostgresKeyValueStore(mock_db_pool).delete('notes:a') is expected

    async def test_database_errors_become_store_unavailable(self, mock_db_pool) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.fetchrow.side_effect = asyncpg.PostgresError('connection reset')

        with pytest.raises(StoreUnavailableError):
            await PostgresKeyValueStore(mock_db_pool).load('notes:a')

    async def test_network_errors_become_store_unavailable(self, mock_db_pool) -> None:
        conn = mock_db_pool.acquire.return_value.__aenter__.return_value
        conn.execute.side_effect = OSError('host unreachable')

        with pytest.raises(StoreUnavailableError):
            await PostgresKeyValueStore(mock_db_pool).save('notes:a', 1)


# =============================================================================
# Test Class: TestGetStore
# =============================================================================

class TestGetStore:

    async def test_memory_store_without_database(self) -> None:
        with patch('scalewise.services.kv_store.get_db_pool', new=AsyncMock(return_value=None)):
            store = await get_store()

        assert isinstance(store, InMemoryKeyValueStore)

    async def test_postgres_store_with_pool(self, mock_db_pool) -> None:
        with patch('scalewise.services.kv_store.get_db_pool', new=AsyncMock(return_value=mock_db_pool)):
            store = await get_store()

        assert isinstance(store, PostgresKeyValueStore)

    async def test_unreachable_database(self) -> None:
        failing = AsyncMock(side_effect=OSError('connection refused'))

        with patch('scalewise.services.kv_store.get_db_pool', new=failing):
            with pytest.raises(StoreUnavailableError):
                await get_store()
