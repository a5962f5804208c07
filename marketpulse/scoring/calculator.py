"""
Metrics Calculator

Runs all five formulas over one market snapshot and its history.
Pure and deterministic: the same snapshots always give the same result,
including calculated_at, which is taken from the current snapshot.
"""

from typing import Sequence

from marketpulse.models import MarketSnapshot, MetricsResult
from marketpulse.registry import KeywordRegistry

from .anomaly import calculate_emerging_competitor_alerts
from .helpers import MIN_VOLUME_THRESHOLD
from .intent import calculate_intent_shift_index
from .momentum import calculate_market_share_momentum
from .pressure import calculate_competitive_pressure_index
from .sentiment import calculate_player_sentiment_velocity


def calculate_all_metrics(
    current: MarketSnapshot,
    history: Sequence[MarketSnapshot],
    registry: KeywordRegistry,
    min_volume_threshold: int = MIN_VOLUME_THRESHOLD,
) -> MetricsResult:
    """
    Calculate every metric for the current period.

    Args:
        current: Snapshot of the current fetch cycle
        history: Earlier snapshots, oldest first. The last one is the
            previous period. An empty history means every growth is 0 and
            anomaly detection uses its default baseline.
        registry: Brand/keyword registry
        min_volume_threshold: Momentum confidence threshold

    Returns:
        MetricsResult
    """
    previous = history[-1] if history else MarketSnapshot.empty(current.fetched_at)
    own_brand_id = registry.own_brand.id

    return MetricsResult(
        market_share_momentum=calculate_market_share_momentum(
            current.brands,
            previous.brands,
            own_brand_id,
            min_volume_threshold=min_volume_threshold,
        ),
        competitive_pressure_index=calculate_competitive_pressure_index(
            current.brands,
            previous.brands,
            own_brand_id,
        ),
        emerging_competitor_alerts=tuple(calculate_emerging_competitor_alerts(
            current.brands,
            [snapshot.brands for snapshot in history],
            own_brand_id,
        )),
        intent_shift_index=tuple(calculate_intent_shift_index(
            current.keyword_volumes,
            previous.keyword_volumes,
            registry.intent_categories,
        )),
        player_sentiment_velocity=calculate_player_sentiment_velocity(
            current.keyword_volumes,
            previous.keyword_volumes,
            registry.positive_keywords,
            registry.negative_keywords,
        ),
        calculated_at=current.fetched_at,
    )
