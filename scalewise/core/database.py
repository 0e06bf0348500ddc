"""
Async PostgreSQL connection pool module.

This module owns the optional asyncpg connection pool used by the persisted
key-value store. The aggregation core never touches the database; only notes,
reviewed-offer markers and Slack digest idempotency markers are stored here.

Key Components:
- Global connection pool singleton (_pool)
- init_db(): Initialize the pool at application startup (no-op without DATABASE_URL)
- get_db_pool(): Get the pool instance, or None when no database is configured
- close_db(): Gracefully close the pool at application shutdown
- ensure_schema(): Create the kv_store table if it does not exist

Connection Pool Configuration:
- min_size: 1
- max_size: 5
- command_timeout: 30 seconds

Usage:
    # At application startup (in FastAPI lifespan)
    await init_db()

    pool = await get_db_pool()
    if pool is not None:
        async with pool.acquire() as conn:
            await conn.fetchrow("SELECT value FROM kv_store WHERE key = $1", key)

    # At application shutdown
    await close_db()
"""

import logging
from typing import Optional

import asyncpg
from asyncpg import Pool

from scalewise.core.config import get_settings

logger = logging.getLogger(__name__)


KV_STORE_DDL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value JSONB NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

# Global pool singleton; stays None when DATABASE_URL is not configured
_pool: Optional[Pool] = None


async def init_db() -> Optional[Pool]:
    """
    Initialize the database connection pool.

    Idempotent: returns the existing pool when already initialized. When
    DATABASE_URL is unset the function returns None and the application
    falls back to the in-memory key-value store.

    Returns:
        Optional[Pool]: The asyncpg connection pool, or None.

    Raises:
        asyncpg.PostgresError: If connection to the database fails.
        OSError: If the database host is unreachable.
    """
    global _pool

    if _pool is None:
        settings = get_settings()
        if not settings.database_url:
            logger.info("DATABASE_URL not set; persisted key-value store disabled")
            return None

        _pool = await asyncpg.create_pool(
            dsn=settings.database_url,
            min_size=1,
            max_size=5,
            command_timeout=30,
        )
        await ensure_schema(_pool)
        logger.info("Database pool initialized")

    return _pool


async def get_db_pool() -> Optional[Pool]:
    """
    Get the database connection pool, initializing if needed.

    Returns:
        Optional[Pool]: The pool, or None when no database is configured.
    """
    if _pool is None:
        return await init_db()
    return _pool


async def close_db() -> None:
    """Close the database connection pool. Safe to call when never opened."""
    global _pool

    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


async def ensure_schema(pool: Pool) -> None:
    """Create the kv_store table on first use."""
    async with pool.acquire() as conn:
        await conn.execute(KV_STORE_DDL)


__all__ = [
    'KV_STORE_DDL',
    'init_db',
    'get_db_pool',
    'close_db',
    'ensure_schema',
]
