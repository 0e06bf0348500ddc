"""
FastAPI dependency injection module for the Scalewise backend.

This module provides reusable FastAPI dependencies for configuration access
and the key-value store, so endpoint handlers never reach for globals and
tests can swap either one through app.dependency_overrides.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_store_dependency: Returns the configured KeyValueStore
- SettingsDep: Type alias for injecting Settings into endpoints
- StoreDep: Type alias for injecting the KeyValueStore into endpoints

Usage Examples:
    @router.get("/notes/{key}")
    async def get_note(key: str, store: StoreDep) -> NoteResponse:
        value = await store.load(key)
        ...

    # In tests
    app.dependency_overrides[get_store_dependency] = lambda: InMemoryKeyValueStore()
"""

from typing import Annotated

from fastapi import Depends

from scalewise.core.config import Settings, get_settings
from scalewise.services.kv_store import KeyValueStore, get_store


# =============================================================================
# Settings Dependency
# =============================================================================


def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Wrapping get_settings() lets tests override configuration per app via
    app.dependency_overrides without clearing the lru_cache.
    """
    return get_settings()


# =============================================================================
# Key-Value Store Dependency
# =============================================================================


async def get_store_dependency() -> KeyValueStore:
    """Return the PostgreSQL store when configured, else the in-memory store."""
    return await get_store()


# =============================================================================
# Type Aliases
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

StoreDep = Annotated[KeyValueStore, Depends(get_store_dependency)]


__all__ = [
    'get_settings_dependency',
    'get_store_dependency',
    'SettingsDep',
    'StoreDep',
]
