"""Persistence: SQLAlchemy models, sessions and the snapshot history."""

from .models import Base, ApiCacheEntry, MarketSnapshotRecord
from .repository import SnapshotRepository, period_key
from .session import (
    get_database_url,
    create_db_engine,
    get_engine,
    get_session_factory,
    get_db_context,
    init_db,
    check_db_connection,
)

__all__ = [
    "Base",
    "ApiCacheEntry",
    "MarketSnapshotRecord",
    "SnapshotRepository",
    "period_key",
    "get_database_url",
    "create_db_engine",
    "get_engine",
    "get_session_factory",
    "get_db_context",
    "init_db",
    "check_db_connection",
]
