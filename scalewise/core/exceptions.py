"""
Exception hierarchy for the Scalewise backend.

The aggregation core never raises on dirty data; malformed amounts and dates
degrade to zero/None. These exceptions cover the infrastructure around the
core, where a failure must be reported to the caller instead of absorbed.
"""


class ScalewiseError(Exception):
    """Base exception for all Scalewise errors."""


class StoreError(ScalewiseError):
    """Base exception for key-value store failures."""


class StoreUnavailableError(StoreError):
    """Raised when the persisted key-value store backend cannot be reached."""


__all__ = [
    'ScalewiseError',
    'StoreError',
    'StoreUnavailableError',
]
