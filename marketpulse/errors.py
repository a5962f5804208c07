"""
Error Types

Provider and cache failures are recovered inside the refresh controller.
Only DataUnavailable and CacheUnavailable ever reach the caller, and only
when there is nothing safe to serve.
"""

from typing import Optional


class MarketPulseError(Exception):
    """Base exception for the metrics pipeline."""


class ProviderUnavailable(MarketPulseError):
    """The search-volume provider could not be reached (network, auth, timeout)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResult(MarketPulseError):
    """The provider responded but returned no usable data."""


class CacheUnavailable(MarketPulseError):
    """The cache storage layer failed."""


class DataUnavailable(MarketPulseError):
    """A refresh failed and no cached value exists to fall back on."""

    def __init__(self, key: str, cause: Optional[BaseException] = None):
        message = f"No data available for '{key}'"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.key = key
        self.cause = cause
