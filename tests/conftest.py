"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
"""

import pytest
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketpulse.database import init_db
from marketpulse.models import BrandSnapshot, KeywordVolumeSnapshot, MarketSnapshot
from marketpulse.registry import BrandConfig, IntentCategoryConfig, KeywordRegistry


BASE_TIME = datetime(2024, 6, 3, 6, 0, 0)


# ============================================================================
# Registry Fixtures
# ============================================================================

@pytest.fixture
def registry() -> KeywordRegistry:
    """Small registry: own brand plus three competitors, two intent categories."""
    return KeywordRegistry(
        brands=(
            BrandConfig("jacks", "Jacks Casino", "jacks.nl", ("jacks casino", "jacks.nl"), is_own_brand=True),
            BrandConfig("toto", "Toto", "toto.nl", ("toto casino", "toto.nl")),
            BrandConfig("unibet", "Unibet", "unibet.nl", ("unibet casino",)),
            BrandConfig("bet365", "Bet365", "bet365.nl", ("bet365 casino",)),
        ),
        intent_categories=(
            IntentCategoryConfig(
                "problem", "Problems / Complaints",
                ("casino klacht", "casino uitbetaling"),
                increase_is_concerning=True,
            ),
            IntentCategoryConfig("comparison", "Comparison / Shopping", ("beste online casino",)),
        ),
        positive_keywords=("beste online casino", "casino bonus"),
        negative_keywords=("casino klacht", "casino uitbetaling"),
    )


# ============================================================================
# Snapshot Builders
# ============================================================================

@pytest.fixture
def brand_factory():
    """Build a single-keyword BrandSnapshot."""
    def _build(brand_id: str, volume: Optional[int], fetched_at: datetime = BASE_TIME) -> BrandSnapshot:
        return BrandSnapshot.from_keywords(
            brand_id=brand_id,
            brand_name=brand_id.title(),
            keywords=[KeywordVolumeSnapshot(keyword=f"{brand_id} casino", search_volume=volume)],
            fetched_at=fetched_at,
        )
    return _build


@pytest.fixture
def snapshot_factory(brand_factory):
    """Build a MarketSnapshot from {brand_id: volume} plus extra keyword volumes."""
    def _build(
        brand_volumes: Dict[str, int],
        keyword_volumes: Optional[Dict[str, int]] = None,
        fetched_at: datetime = BASE_TIME,
    ) -> MarketSnapshot:
        volumes = {f"{brand_id} casino": v for brand_id, v in brand_volumes.items()}
        volumes.update(keyword_volumes or {})
        return MarketSnapshot(
            fetched_at=fetched_at,
            brands=tuple(brand_factory(b, v, fetched_at) for b, v in brand_volumes.items()),
            keyword_volumes=volumes,
        )
    return _build


# ============================================================================
# Clock
# ============================================================================

class FakeClock:
    """Controllable naive-UTC clock."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def db_engine():
    """In-memory SQLite shared across connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(bind=db_engine, autoflush=False)()
    yield session
    session.close()


# ============================================================================
# Fake Provider
# ============================================================================

class FakeProvider:
    """
    Stand-in for DataForSEOProvider.

    Serves queued snapshots in order (the last one repeats) or raises
    the configured error.
    """

    def __init__(self, snapshots: Optional[List[MarketSnapshot]] = None, error: Optional[Exception] = None):
        self.snapshots = list(snapshots or [])
        self.error = error
        self.volumes: List[KeywordVolumeSnapshot] = []
        self.trends: list = []
        self.snapshot_calls = 0
        self.is_configured = True
        self.closed = False

    async def fetch_market_snapshot(self, registry):
        self.snapshot_calls += 1
        if self.error:
            raise self.error
        if len(self.snapshots) > 1:
            return self.snapshots.pop(0)
        return self.snapshots[0]

    async def fetch_volumes(self, keywords):
        if self.error:
            raise self.error
        return list(self.volumes)

    async def fetch_brand_trends(self, registry, date_from=None, date_to=None):
        if self.error:
            raise self.error
        return list(self.trends)

    async def check_status(self):
        return {"is_configured": True, "balance": 10.0}

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
