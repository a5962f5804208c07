"""
PostgreSQL Cache Store

Key/value cache over the api_cache table. Works against any SQLAlchemy
backend; production uses PostgreSQL, tests use in-memory SQLite.

Semantics:
- set() is an upsert: a later write replaces data and both timestamps
  except created_at
- invalidate() never deletes; it moves expires_at one second into the
  past so the value stays available as a stale fallback
- an entry is expired once now >= expires_at

Storage failures raise CacheUnavailable; the caller decides whether that
is fatal.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketpulse.database.models import ApiCacheEntry
from marketpulse.errors import CacheUnavailable
from marketpulse.utils.dates import parse_datetime, utcnow

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cache entry with metadata."""
    key: str
    data: Any
    created_at: datetime
    expires_at: datetime
    last_refreshed_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if entry has expired."""
        return (now or utcnow()) >= self.expires_at

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "key": self.key,
            "data": self.data,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "last_refreshed_at": self.last_refreshed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CacheEntry":
        """Create from dictionary."""
        return cls(
            key=data["key"],
            data=data["data"],
            created_at=parse_datetime(data["created_at"]),
            expires_at=parse_datetime(data["expires_at"]),
            last_refreshed_at=parse_datetime(data["last_refreshed_at"]),
        )

    @classmethod
    def from_record(cls, record: ApiCacheEntry) -> "CacheEntry":
        return cls(
            key=record.cache_key,
            data=record.cache_data,
            created_at=record.created_at,
            expires_at=record.expires_at,
            last_refreshed_at=record.last_refreshed_at,
        )


class CacheStore:
    """
    Database-backed cache using the api_cache table.

    Args:
        db: SQLAlchemy session
        clock: Returns the current naive-UTC time (injectable for tests)
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self._stats = {
            "hits": 0,
            "stale_hits": 0,
            "misses": 0,
            "writes": 0,
        }

    def _record(self, key: str) -> Optional[ApiCacheEntry]:
        return self.db.query(ApiCacheEntry).filter(ApiCacheEntry.cache_key == key).first()

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Get a cache entry regardless of expiry.

        Returns:
            CacheEntry or None if the key was never written
        """
        try:
            record = self._record(key)
        except SQLAlchemyError as e:
            logger.error(f"Cache get error for {key}: {e}")
            self.db.rollback()
            raise CacheUnavailable(f"Cache read failed for '{key}'") from e

        if record is None:
            self._stats["misses"] += 1
            return None

        entry = CacheEntry.from_record(record)
        if entry.is_expired(self.clock()):
            self._stats["stale_hits"] += 1
        else:
            self._stats["hits"] += 1
        return entry

    def set(self, key: str, data: Any, ttl: timedelta) -> CacheEntry:
        """
        Store data under key for ttl.

        Returns:
            The written CacheEntry
        """
        now = self.clock()
        try:
            record = self._record(key)
            if record:
                record.cache_data = data
                record.expires_at = now + ttl
                record.last_refreshed_at = now
            else:
                record = ApiCacheEntry(
                    cache_key=key,
                    cache_data=data,
                    created_at=now,
                    expires_at=now + ttl,
                    last_refreshed_at=now,
                )
                self.db.add(record)

            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Cache set error for {key}: {e}")
            self.db.rollback()
            raise CacheUnavailable(f"Cache write failed for '{key}'") from e

        self._stats["writes"] += 1
        logger.debug(f"Cached {key} until {record.expires_at.isoformat()}")
        return CacheEntry.from_record(record)

    def invalidate(self, key: str) -> bool:
        """
        Force-expire one entry.

        Returns:
            True if the key existed
        """
        return self._expire(ApiCacheEntry.cache_key == key, key) > 0

    def invalidate_all(self) -> int:
        """Force-expire every entry. Returns the number of entries touched."""
        return self._expire(None, "all entries")

    def _expire(self, criterion, label: str) -> int:
        expired_at = self.clock() - timedelta(seconds=1)
        try:
            query = self.db.query(ApiCacheEntry)
            if criterion is not None:
                query = query.filter(criterion)
            count = query.update({"expires_at": expired_at}, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Invalidation error for {label}: {e}")
            self.db.rollback()
            raise CacheUnavailable(f"Cache invalidation failed for {label}") from e

        logger.info(f"Invalidated {count} cache entries ({label})")
        return count

    def get_status(self) -> List[Dict[str, Any]]:
        """Age and expiry of every entry, ordered by key."""
        now = self.clock()
        try:
            records = self.db.query(ApiCacheEntry).order_by(ApiCacheEntry.cache_key).all()
        except SQLAlchemyError as e:
            logger.error(f"Cache status error: {e}")
            self.db.rollback()
            raise CacheUnavailable("Cache status query failed") from e

        return [
            {
                "key": r.cache_key,
                "created_at": r.created_at.isoformat(),
                "expires_at": r.expires_at.isoformat(),
                "last_refreshed_at": r.last_refreshed_at.isoformat(),
                "is_expired": now >= r.expires_at,
                "age_hours": round((now - r.last_refreshed_at).total_seconds() / 3600, 1),
            }
            for r in records
        ]

    def time_until_refresh(self, key: str) -> Optional[Dict[str, int]]:
        """
        Time left before key expires.

        Returns:
            {"hours", "minutes"} (both 0 once expired), or None if key is unknown
        """
        try:
            record = self._record(key)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CacheUnavailable(f"Cache read failed for '{key}'") from e

        if record is None:
            return None

        remaining = max(0, int((record.expires_at - self.clock()).total_seconds()))
        return {"hours": remaining // 3600, "minutes": (remaining % 3600) // 60}

    def get_stats(self) -> Dict:
        """Get cache statistics."""
        hits = self._stats["hits"] + self._stats["stale_hits"]
        total = hits + self._stats["misses"]
        hit_rate = (hits / total * 100) if total > 0 else 0

        return {
            "backend": self.db.get_bind().dialect.name,
            "hits": self._stats["hits"],
            "stale_hits": self._stats["stale_hits"],
            "misses": self._stats["misses"],
            "writes": self._stats["writes"],
            "hit_rate_percent": round(hit_rate, 2),
        }

    def health_check(self) -> Dict:
        """
        Simple health check.

        Just verifies we can query the table.
        """
        try:
            count = self.db.query(ApiCacheEntry).count()
            return {
                "healthy": True,
                "status": "connected",
                "cached_entries": count,
            }
        except SQLAlchemyError as e:
            self.db.rollback()
            return {
                "healthy": False,
                "status": "error",
                "error": str(e),
            }
