"""
Metrics Result Models

Derived records produced by the metrics calculator. A MetricsResult is
never mutated; every refresh cycle replaces it wholesale.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Tuple

from marketpulse.utils.dates import parse_datetime


# =============================================================================
# ENUMS
# =============================================================================

class Severity(Enum):
    """Alert severity, most severe first."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @property
    def rank(self) -> int:
        """Sort rank: 0 for critical up to 4 for none."""
        return SEVERITY_RANK[self]


SEVERITY_RANK: Dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
    Severity.NONE: 4,
}


class MomentumTrend(Enum):
    GAINING = "gaining"
    LOSING = "losing"
    STABLE = "stable"


class PressureIntensity(Enum):
    EXTREME = "extreme"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SentimentTrend(Enum):
    IMPROVING = "improving"
    DETERIORATING = "deteriorating"
    STABLE = "stable"


# =============================================================================
# RESULT RECORDS
# =============================================================================

@dataclass(frozen=True)
class MarketShareMomentum:
    """Own brand growth relative to the whole tracked market (0-10)."""
    score: float
    your_growth: float
    market_growth: float
    confidence: float
    trend: MomentumTrend
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "your_growth": self.your_growth,
            "market_growth": self.market_growth,
            "confidence": self.confidence,
            "trend": self.trend.value,
            "interpretation": self.interpretation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketShareMomentum":
        return cls(**{**data, "trend": MomentumTrend(data["trend"])})


@dataclass(frozen=True)
class CompetitivePressureIndex:
    """How aggressively competitors grow as a group (0-10)."""
    score: float
    avg_competitor_growth: float
    growth_volatility: float
    intensity: PressureIntensity
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "avg_competitor_growth": self.avg_competitor_growth,
            "growth_volatility": self.growth_volatility,
            "intensity": self.intensity.value,
            "interpretation": self.interpretation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompetitivePressureIndex":
        return cls(**{**data, "intensity": PressureIntensity(data["intensity"])})


@dataclass(frozen=True)
class EmergingCompetitorAlert:
    """Two-sigma anomaly check for one competitor."""
    brand_id: str
    brand_name: str
    current_growth: float
    baseline: float
    threshold: float
    anomaly_score: int  # 0-100
    severity: Severity
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "brand_id": self.brand_id,
            "brand_name": self.brand_name,
            "current_growth": self.current_growth,
            "baseline": self.baseline,
            "threshold": self.threshold,
            "anomaly_score": self.anomaly_score,
            "severity": self.severity.value,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmergingCompetitorAlert":
        return cls(**{**data, "severity": Severity(data["severity"])})


@dataclass(frozen=True)
class IntentShift:
    """Period-over-period volume change of one intent category."""
    category: str
    display_name: str
    current_volume: int
    previous_volume: int
    change_percent: float
    severity: Severity
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "display_name": self.display_name,
            "current_volume": self.current_volume,
            "previous_volume": self.previous_volume,
            "change_percent": self.change_percent,
            "severity": self.severity.value,
            "interpretation": self.interpretation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntentShift":
        return cls(**{**data, "severity": Severity(data["severity"])})


@dataclass(frozen=True)
class PlayerSentimentVelocity:
    """Change in the complaint-to-positive search ratio (-100 to +100)."""
    score: int
    positive_volume: int
    negative_volume: int
    sentiment_ratio: float
    previous_ratio: float
    velocity: float
    trend: SentimentTrend
    interpretation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "positive_volume": self.positive_volume,
            "negative_volume": self.negative_volume,
            "sentiment_ratio": self.sentiment_ratio,
            "previous_ratio": self.previous_ratio,
            "velocity": self.velocity,
            "trend": self.trend.value,
            "interpretation": self.interpretation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerSentimentVelocity":
        return cls(**{**data, "trend": SentimentTrend(data["trend"])})


@dataclass(frozen=True)
class MetricsResult:
    """All five composite scores for one refresh cycle."""
    market_share_momentum: MarketShareMomentum
    competitive_pressure_index: CompetitivePressureIndex
    emerging_competitor_alerts: Tuple[EmergingCompetitorAlert, ...]
    intent_shift_index: Tuple[IntentShift, ...]
    player_sentiment_velocity: PlayerSentimentVelocity
    calculated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market_share_momentum": self.market_share_momentum.to_dict(),
            "competitive_pressure_index": self.competitive_pressure_index.to_dict(),
            "emerging_competitor_alerts": [a.to_dict() for a in self.emerging_competitor_alerts],
            "intent_shift_index": [i.to_dict() for i in self.intent_shift_index],
            "player_sentiment_velocity": self.player_sentiment_velocity.to_dict(),
            "calculated_at": self.calculated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricsResult":
        return cls(
            market_share_momentum=MarketShareMomentum.from_dict(data["market_share_momentum"]),
            competitive_pressure_index=CompetitivePressureIndex.from_dict(
                data["competitive_pressure_index"]
            ),
            emerging_competitor_alerts=tuple(
                EmergingCompetitorAlert.from_dict(a) for a in data["emerging_competitor_alerts"]
            ),
            intent_shift_index=tuple(IntentShift.from_dict(i) for i in data["intent_shift_index"]),
            player_sentiment_velocity=PlayerSentimentVelocity.from_dict(
                data["player_sentiment_velocity"]
            ),
            calculated_at=parse_datetime(data["calculated_at"]),
        )
