"""Persisted cache and refresh control for provider-backed data."""

from .config import CacheKeys, CacheTTL
from .store import CacheEntry, CacheStore
from .controller import CacheSource, RefreshController, RefreshResult

__all__ = [
    "CacheKeys",
    "CacheTTL",
    "CacheEntry",
    "CacheStore",
    "CacheSource",
    "RefreshController",
    "RefreshResult",
]
