"""
Core infrastructure package for the Scalewise backend.

Provides:
- Configuration management via pydantic-settings
- Optional async PostgreSQL connectivity via asyncpg
- Exception hierarchy for infrastructure failures
- FastAPI dependency injection utilities

This module re-exports key components from submodules for convenient importing:

    from scalewise.core import get_settings, SettingsDep, StoreDep

Components Re-exported:
    Settings: Pydantic settings class with all configuration parameters
    get_settings: Function returning the cached Settings singleton
    init_db: Async function to initialize the database connection pool
    close_db: Async function to close the database connection pool
    get_db_pool: Async function to get the pool (None without DATABASE_URL)
    ScalewiseError / StoreUnavailableError: Exception types
    get_settings_dependency / get_store_dependency: FastAPI dependencies
    SettingsDep / StoreDep: Annotated dependency aliases
"""

# =============================================================================
# Re-exports from scalewise.core.config
# =============================================================================
from scalewise.core.config import Settings, get_settings

# =============================================================================
# Re-exports from scalewise.core.database
# =============================================================================
from scalewise.core.database import init_db, close_db, get_db_pool

# =============================================================================
# Re-exports from scalewise.core.exceptions
# =============================================================================
from scalewise.core.exceptions import (
    ScalewiseError,
    StoreError,
    StoreUnavailableError,
)

# =============================================================================
# Re-exports from scalewise.core.dependencies
# =============================================================================
from scalewise.core.dependencies import (
    get_settings_dependency,
    get_store_dependency,
    SettingsDep,
    StoreDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Database pool lifecycle (from database.py)
    'init_db',
    'close_db',
    'get_db_pool',
    # Exceptions (from exceptions.py)
    'ScalewiseError',
    'StoreError',
    'StoreUnavailableError',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_store_dependency',
    'SettingsDep',
    'StoreDep',
]
