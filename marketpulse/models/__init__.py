"""
Data Models

Snapshot types (calculator input) and metric result types (calculator
output). All are frozen dataclasses with to_dict()/from_dict() for JSON
persistence in the cache and snapshot history.
"""

from .snapshots import (
    TrendPoint,
    KeywordVolumeSnapshot,
    BrandSnapshot,
    IntentCategorySnapshot,
    MarketSnapshot,
    TrendDataPoint,
    TrendSeries,
)
from .metrics import (
    Severity,
    SEVERITY_RANK,
    MomentumTrend,
    PressureIntensity,
    SentimentTrend,
    MarketShareMomentum,
    CompetitivePressureIndex,
    EmergingCompetitorAlert,
    IntentShift,
    PlayerSentimentVelocity,
    MetricsResult,
)

__all__ = [
    # Snapshots
    "TrendPoint",
    "KeywordVolumeSnapshot",
    "BrandSnapshot",
    "IntentCategorySnapshot",
    "MarketSnapshot",
    "TrendDataPoint",
    "TrendSeries",
    # Enums
    "Severity",
    "SEVERITY_RANK",
    "MomentumTrend",
    "PressureIntensity",
    "SentimentTrend",
    # Results
    "MarketShareMomentum",
    "CompetitivePressureIndex",
    "EmergingCompetitorAlert",
    "IntentShift",
    "PlayerSentimentVelocity",
    "MetricsResult",
]
