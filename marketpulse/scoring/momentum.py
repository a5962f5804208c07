"""
Market Share Momentum Score (0-10)

Measures whether the own brand grows faster or slower than the tracked
market as a whole.

Formula:
    your_growth   = growth(own brand volume)
    market_growth = growth(sum of all brand volumes)

    raw = ((your_growth - market_growth) / |market_growth|) * 5 + 5
          (7.5 / 2.5 / 5 when the market is flat, by sign of your_growth)

    confidence = min(1, own_volume / MIN_VOLUME_THRESHOLD)
    score      = clamp(raw * confidence + 5 * (1 - confidence), 0, 10)

Low-volume brands blend toward the neutral 5 because their growth rates
are noisy.
"""

import logging
from typing import Sequence

from marketpulse.models import BrandSnapshot, MarketShareMomentum, MomentumTrend

from .helpers import (
    MIN_VOLUME_THRESHOLD,
    NEUTRAL_MOMENTUM,
    clamp,
    classify_momentum_trend,
    growth_rate,
)

logger = logging.getLogger(__name__)


def interpret_momentum(score: float) -> str:
    if score >= 8:
        return "Strongly outperforming market. Scale marketing spend."
    if score >= 6:
        return "Gaining ground. Maintain current strategy."
    if score >= 4:
        return "Tracking with market. Look for differentiation."
    if score >= 2:
        return "Losing ground. Review competitive positioning."
    return "Significantly underperforming. Urgent strategy review needed."


def raw_momentum(your_growth: float, market_growth: float) -> float:
    """Momentum before confidence blending (unbounded)."""
    if market_growth != 0:
        return ((your_growth - market_growth) / abs(market_growth)) * 5 + 5
    if your_growth > 0:
        return 7.5
    if your_growth < 0:
        return 2.5
    return NEUTRAL_MOMENTUM


def calculate_market_share_momentum(
    current: Sequence[BrandSnapshot],
    previous: Sequence[BrandSnapshot],
    own_brand_id: str,
    min_volume_threshold: int = MIN_VOLUME_THRESHOLD,
) -> MarketShareMomentum:
    """
    Calculate Market Share Momentum for the own brand.

    Args:
        current: Brand snapshots for the current period
        previous: Brand snapshots for the previous period
        own_brand_id: Registry id of the own brand
        min_volume_threshold: Volume at which confidence reaches 1

    Returns:
        MarketShareMomentum with score in [0, 10]
    """
    your_current = next((b for b in current if b.brand_id == own_brand_id), None)
    your_previous = next((b for b in previous if b.brand_id == own_brand_id), None)

    if your_current is None:
        logger.debug(f"Own brand '{own_brand_id}' missing from current snapshot")
        return MarketShareMomentum(
            score=NEUTRAL_MOMENTUM,
            your_growth=0.0,
            market_growth=0.0,
            confidence=0.0,
            trend=MomentumTrend.STABLE,
            interpretation="No data for own brand in this period.",
        )

    your_growth = growth_rate(
        your_current.total_volume,
        your_previous.total_volume if your_previous else 0,
    )
    market_growth = growth_rate(
        sum(b.total_volume for b in current),
        sum(b.total_volume for b in previous),
    )

    if min_volume_threshold > 0:
        confidence = min(1.0, your_current.total_volume / min_volume_threshold)
    else:
        confidence = 1.0

    if confidence > 0:
        raw = raw_momentum(your_growth, market_growth)
        blended = raw * confidence + NEUTRAL_MOMENTUM * (1 - confidence)
    else:
        blended = NEUTRAL_MOMENTUM
    score = round(clamp(blended, 0, 10), 1)

    your_growth = round(your_growth, 1)
    market_growth = round(market_growth, 1)

    return MarketShareMomentum(
        score=score,
        your_growth=your_growth,
        market_growth=market_growth,
        confidence=round(confidence, 2),
        trend=classify_momentum_trend(your_growth, market_growth),
        interpretation=interpret_momentum(score),
    )
