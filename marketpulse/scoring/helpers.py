"""
Scoring Helper Functions and Constants

Growth rates, descriptive statistics, thresholds and label classifiers
shared by all five metric formulas.
"""

import statistics
from typing import Optional, Sequence

from marketpulse.models import MomentumTrend, PressureIntensity, SentimentTrend, Severity


# ============================================================================
# CONSTANTS
# ============================================================================

# Below this own-brand volume the momentum score blends toward neutral
MIN_VOLUME_THRESHOLD = 1000

NEUTRAL_MOMENTUM = 5.0

# Anomaly detection defaults when history is too short
DEFAULT_BASELINE = 5.0    # % growth
DEFAULT_VARIANCE = 25.0   # stddev 5
SIGMA_MULTIPLIER = 2.0    # two-sigma rule

# Competitive pressure: volatility counts 1.5x toward intensity
AGGRESSION_MULTIPLIER = 1.5

MOMENTUM_TREND_BAND = 2.0     # percentage points
SENTIMENT_TREND_BAND = 20.0   # % change of ratio


# ============================================================================
# ARITHMETIC
# ============================================================================

def growth_rate(current: Optional[float], previous: Optional[float]) -> float:
    """
    Period-over-period growth in percent.

    Returns 0.0 when there is no previous value to divide by.
    """
    if not previous:
        return 0.0
    return ((current or 0) - previous) / previous * 100


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return statistics.fmean(values)


def sample_stddev(values: Sequence[float]) -> float:
    """Sample standard deviation (n-1 denominator), 0.0 when n <= 1."""
    if len(values) <= 1:
        return 0.0
    return statistics.stdev(values)


# ============================================================================
# LABEL CLASSIFIERS
# ============================================================================

def classify_momentum_trend(your_growth: float, market_growth: float) -> MomentumTrend:
    if your_growth > market_growth + MOMENTUM_TREND_BAND:
        return MomentumTrend.GAINING
    if your_growth < market_growth - MOMENTUM_TREND_BAND:
        return MomentumTrend.LOSING
    return MomentumTrend.STABLE


def classify_pressure_intensity(score: float) -> PressureIntensity:
    """
    Map a pressure score to its band.

    extreme >= 8, high >= 6, medium >= 4, else low.
    """
    if score >= 8:
        return PressureIntensity.EXTREME
    if score >= 6:
        return PressureIntensity.HIGH
    if score >= 4:
        return PressureIntensity.MEDIUM
    return PressureIntensity.LOW


def classify_anomaly_severity(anomaly_score: float) -> Severity:
    if anomaly_score >= 75:
        return Severity.CRITICAL
    if anomaly_score >= 50:
        return Severity.HIGH
    if anomaly_score >= 25:
        return Severity.MEDIUM
    if anomaly_score > 0:
        return Severity.LOW
    return Severity.NONE


def classify_intent_severity(change_percent: float, increase_is_concerning: bool) -> Severity:
    """
    Severity of an intent category shift.

    Categories where increases are concerning (problem, regulation) only
    escalate on positive change and can reach critical. All other
    categories react to the magnitude of change in either direction.
    """
    if increase_is_concerning:
        if change_percent > 100:
            return Severity.CRITICAL
        if change_percent > 50:
            return Severity.HIGH
        if change_percent > 25:
            return Severity.MEDIUM
        if change_percent > 10:
            return Severity.LOW
        return Severity.NONE

    magnitude = abs(change_percent)
    if magnitude > 50:
        return Severity.HIGH
    if magnitude > 25:
        return Severity.MEDIUM
    if magnitude > 10:
        return Severity.LOW
    return Severity.NONE


def classify_sentiment_trend(velocity: float) -> SentimentTrend:
    if velocity > SENTIMENT_TREND_BAND:
        return SentimentTrend.DETERIORATING
    if velocity < -SENTIMENT_TREND_BAND:
        return SentimentTrend.IMPROVING
    return SentimentTrend.STABLE
