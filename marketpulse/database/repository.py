"""
Snapshot History Repository

Persists one MarketSnapshot per period (ISO week of fetched_at). The stored
series is what anomaly detection uses as its baseline, so a period must
never appear twice: a repeat fetch in the same week replaces that week's row.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketpulse.models import BrandSnapshot, MarketSnapshot

from .models import MarketSnapshotRecord

logger = logging.getLogger(__name__)


def period_key(fetched_at: datetime) -> str:
    """ISO week of a fetch, e.g. "2024-W23". Keys sort chronologically."""
    year, week, _ = fetched_at.isocalendar()
    return f"{year}-W{week:02d}"


class SnapshotRepository:
    """Read/write access to the market_snapshots table."""

    def __init__(self, db: Session):
        self.db = db

    def save(self, snapshot: MarketSnapshot) -> int:
        """Store a snapshot, replacing any earlier one for the same period. Returns the row id."""
        period = period_key(snapshot.fetched_at)
        brands = [b.to_dict() for b in snapshot.brands]
        keyword_volumes = dict(snapshot.keyword_volumes)

        try:
            record = (
                self.db.query(MarketSnapshotRecord)
                .filter(MarketSnapshotRecord.period == period)
                .first()
            )
            if record:
                record.fetched_at = snapshot.fetched_at
                record.brands = brands
                record.keyword_volumes = keyword_volumes
            else:
                record = MarketSnapshotRecord(
                    period=period,
                    fetched_at=snapshot.fetched_at,
                    brands=brands,
                    keyword_volumes=keyword_volumes,
                )
                self.db.add(record)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save market snapshot: {e}")
            self.db.rollback()
            raise

        logger.info(f"Saved market snapshot for {period} ({snapshot.fetched_at.isoformat()})")
        return record.id

    def recent(self, limit: int = 12, before: Optional[datetime] = None) -> List[MarketSnapshot]:
        """
        The newest `limit` snapshots, returned oldest first.

        Args:
            limit: Maximum number of snapshots
            before: Only periods strictly earlier than the period of this time
        """
        query = self.db.query(MarketSnapshotRecord)
        if before is not None:
            query = query.filter(MarketSnapshotRecord.period < period_key(before))

        records = (
            query
            .order_by(MarketSnapshotRecord.period.desc())
            .limit(limit)
            .all()
        )
        return [_to_snapshot(r) for r in reversed(records)]

    def latest(self) -> Optional[MarketSnapshot]:
        record = (
            self.db.query(MarketSnapshotRecord)
            .order_by(MarketSnapshotRecord.period.desc())
            .first()
        )
        return _to_snapshot(record) if record else None

    def count(self) -> int:
        return self.db.query(MarketSnapshotRecord).count()

    def prune(self, keep: int) -> int:
        """
        Delete everything but the newest `keep` snapshots.

        Returns:
            Number of deleted rows
        """
        keep_ids = [
            row.id for row in (
                self.db.query(MarketSnapshotRecord.id)
                .order_by(MarketSnapshotRecord.period.desc())
                .limit(max(0, keep))
                .all()
            )
        ]

        try:
            query = self.db.query(MarketSnapshotRecord)
            if keep_ids:
                query = query.filter(MarketSnapshotRecord.id.notin_(keep_ids))
            deleted = query.delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to prune market snapshots: {e}")
            self.db.rollback()
            raise

        if deleted:
            logger.info(f"Pruned {deleted} old market snapshots")
        return deleted


def _to_snapshot(record: MarketSnapshotRecord) -> MarketSnapshot:
    return MarketSnapshot(
        fetched_at=record.fetched_at,
        brands=tuple(BrandSnapshot.from_dict(b) for b in record.brands or []),
        keyword_volumes=record.keyword_volumes or {},
    )
