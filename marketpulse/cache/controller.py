"""
Refresh Controller

Serves cached data while it is fresh, refreshes it when it expires and
falls back to the last cached value when a refresh fails.

Flow for get_or_refresh(key, ttl, fetch_fn, force_refresh):
1. Unless forced, a non-expired entry is returned as-is       (source=cache)
2. Otherwise fetch_fn() runs; a usable result is written       (source=fresh)
3. A failed, empty or None fetch serves the last cached value,
   expired or not, with a warning                              (source=stale_cache)
4. Nothing cached at all: DataUnavailable
"""

import inspect
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from marketpulse.errors import CacheUnavailable, DataUnavailable, EmptyResult

from .store import CacheEntry, CacheStore

logger = logging.getLogger(__name__)


FetchFn = Callable[[], Union[Any, Awaitable[Any]]]


class CacheSource(Enum):
    """Where a served value came from."""
    CACHE = "cache"
    FRESH = "fresh"
    STALE_CACHE = "stale_cache"


@dataclass(frozen=True)
class RefreshResult:
    """A served value plus its provenance."""
    data: Any
    source: CacheSource
    cached_at: datetime
    expires_at: datetime
    is_expired: bool = False
    warning: Optional[str] = None

    @property
    def is_stale(self) -> bool:
        return self.source == CacheSource.STALE_CACHE

    def meta(self) -> Dict[str, Any]:
        """Provenance block attached to presentation payloads."""
        meta = {
            "source": self.source.value,
            "cached_at": self.cached_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "is_expired": self.is_expired,
        }
        if self.warning:
            meta["warning"] = self.warning
        return meta


class RefreshController:
    """Cache-or-refresh gate in front of every provider-backed read."""

    def __init__(self, store: CacheStore):
        self.store = store

    async def get_or_refresh(
        self,
        key: str,
        ttl: timedelta,
        fetch_fn: FetchFn,
        force_refresh: bool = False,
    ) -> RefreshResult:
        """
        Get a value from cache or refresh it.

        Args:
            key: Cache key
            ttl: Lifetime of a fresh value
            fetch_fn: Produces a fresh value; may be sync or async
            force_refresh: Skip the freshness check and always fetch

        Returns:
            RefreshResult

        Raises:
            DataUnavailable: Fetch failed and nothing is cached
            CacheUnavailable: Fetch failed and the cache could not be read
        """
        cached, store_error = self._read(key)

        if cached is not None and not force_refresh and not cached.is_expired(self.store.clock()):
            logger.debug(f"Serving cached {key}")
            return self._from_entry(cached, CacheSource.CACHE)

        reason = "forced refresh" if force_refresh else ("expired" if cached else "not cached")
        logger.info(f"Refreshing {key} ({reason})")

        try:
            data = fetch_fn()
            if inspect.isawaitable(data):
                data = await data
            if not data:
                raise EmptyResult(f"Refresh of '{key}' returned no data")
        except Exception as e:
            return self._fallback(key, cached, store_error, e)

        return self._write(key, data, ttl)

    def _read(self, key: str):
        try:
            return self.store.get(key), None
        except CacheUnavailable as e:
            logger.error(f"Cache unavailable while reading {key}: {e}")
            return None, e

    def _write(self, key: str, data: Any, ttl: timedelta) -> RefreshResult:
        try:
            entry = self.store.set(key, data, ttl)
        except CacheUnavailable as e:
            now = self.store.clock()
            logger.error(f"Fresh {key} could not be cached: {e}")
            return RefreshResult(
                data=data,
                source=CacheSource.FRESH,
                cached_at=now,
                expires_at=now + ttl,
                warning=f"Fresh data could not be cached: {e}",
            )

        logger.info(f"Cached fresh {key} until {entry.expires_at.isoformat()}")
        return self._from_entry(entry, CacheSource.FRESH)

    def _fallback(
        self,
        key: str,
        cached: Optional[CacheEntry],
        store_error: Optional[CacheUnavailable],
        error: Exception,
    ) -> RefreshResult:
        if cached is None:
            logger.error(f"Refresh of {key} failed with nothing cached: {error}")
            if store_error is not None:
                raise store_error
            raise DataUnavailable(key, cause=error) from error

        logger.warning(
            f"Refresh of {key} failed, serving cached data from "
            f"{cached.last_refreshed_at.isoformat()}: {error}"
        )
        return self._from_entry(
            cached,
            CacheSource.STALE_CACHE,
            warning=f"Using cached data (refresh failed: {error})",
        )

    def _from_entry(
        self,
        entry: CacheEntry,
        source: CacheSource,
        warning: Optional[str] = None,
    ) -> RefreshResult:
        return RefreshResult(
            data=entry.data,
            source=source,
            cached_at=entry.last_refreshed_at,
            expires_at=entry.expires_at,
            is_expired=entry.is_expired(self.store.clock()),
            warning=warning,
        )
