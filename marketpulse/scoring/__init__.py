"""
Scoring Module for the MarketPulse Metrics Pipeline

Five composite scores derived from keyword search volumes:

1. **Market Share Momentum** (0-10)
   Own brand growth relative to total tracked market growth,
   blended toward neutral for low-volume brands.

2. **Competitive Pressure Index** (0-10)
   Mean competitor growth plus 1.5x its volatility.

3. **Emerging Competitor Alerts** (0-100 anomaly score)
   Two-sigma breakout detection against each competitor's own history.

4. **Search Intent Shift Index**
   Period-over-period change per intent category with polarity-aware severity.

5. **Player Sentiment Velocity** (-100 to +100)
   Speed of change of the complaint-to-positive search ratio.

All functions are pure: no network, no cache, no randomness.

Example Usage:
    from marketpulse.scoring import calculate_all_metrics
    from marketpulse.registry import get_registry

    metrics = calculate_all_metrics(current_snapshot, history, get_registry())
    print(f"Momentum: {metrics.market_share_momentum.score}")
"""

from .helpers import (
    MIN_VOLUME_THRESHOLD,
    DEFAULT_BASELINE,
    DEFAULT_VARIANCE,
    growth_rate,
    clamp,
    mean,
    sample_stddev,
    classify_momentum_trend,
    classify_pressure_intensity,
    classify_anomaly_severity,
    classify_intent_severity,
    classify_sentiment_trend,
)
from .momentum import calculate_market_share_momentum, interpret_momentum
from .pressure import calculate_competitive_pressure_index, competitor_growth_rates
from .anomaly import (
    GrowthAnomaly,
    detect_growth_anomaly,
    historical_growth_rates,
    calculate_emerging_competitor_alerts,
)
from .intent import calculate_intent_shift_index, interpret_intent_shift
from .sentiment import calculate_player_sentiment_velocity
from .calculator import calculate_all_metrics

__all__ = [
    # Helpers
    "MIN_VOLUME_THRESHOLD",
    "DEFAULT_BASELINE",
    "DEFAULT_VARIANCE",
    "growth_rate",
    "clamp",
    "mean",
    "sample_stddev",
    "classify_momentum_trend",
    "classify_pressure_intensity",
    "classify_anomaly_severity",
    "classify_intent_severity",
    "classify_sentiment_trend",
    # Formulas
    "calculate_market_share_momentum",
    "interpret_momentum",
    "calculate_competitive_pressure_index",
    "competitor_growth_rates",
    "GrowthAnomaly",
    "detect_growth_anomaly",
    "historical_growth_rates",
    "calculate_emerging_competitor_alerts",
    "calculate_intent_shift_index",
    "interpret_intent_shift",
    "calculate_player_sentiment_velocity",
    # Aggregate
    "calculate_all_metrics",
]
