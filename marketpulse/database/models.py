"""
SQLAlchemy Models for the MarketPulse pipeline

Two tables:
1. api_cache         - persisted key/value cache gating provider spend
2. market_snapshots  - one row per ISO week (anomaly baselines); a later fetch
                     in the same week replaces the row

JSON payloads use JSONB on PostgreSQL and plain JSON elsewhere.
"""

from sqlalchemy import (
    Column, String, Integer, DateTime, Index, JSON,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

from marketpulse.utils.dates import utcnow

Base = declarative_base()

JSONType = JSON().with_variant(JSONB, "postgresql")


class ApiCacheEntry(Base):
    """
    Cached provider-derived payloads.

    Entries are never deleted by the application; invalidation moves
    expires_at into the past so the value stays available as a stale
    fallback.
    """
    __tablename__ = "api_cache"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cache_key = Column(String(255), nullable=False, unique=True)
    cache_data = Column(JSONType, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    last_refreshed_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_api_cache_expires", "expires_at"),
    )

    def __repr__(self):
        return f"<ApiCacheEntry {self.cache_key} expires={self.expires_at}>"


class MarketSnapshotRecord(Base):
    """One period: per-brand volumes plus the flat keyword volume map."""
    __tablename__ = "market_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    period = Column(String(10), nullable=False, unique=True)  # ISO week, e.g. "2024-W23"
    fetched_at = Column(DateTime, nullable=False)
    brands = Column(JSONType, nullable=False)           # [BrandSnapshot.to_dict()]
    keyword_volumes = Column(JSONType, nullable=False)  # {keyword: volume}
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_market_snapshots_fetched", "fetched_at"),
    )

    def __repr__(self):
        return f"<MarketSnapshotRecord {self.period} fetched_at={self.fetched_at}>"
