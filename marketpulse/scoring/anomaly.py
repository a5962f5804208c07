"""
Emerging Competitor Alert

Flags competitors whose current growth breaks out of their own history.

Formula:
    baseline   = mean(historical period-over-period growth rates)
    threshold  = baseline + 2 * stddev          (two-sigma rule)
    anomaly    = clamp((current - threshold) / threshold * 100, 0, 100)
                 when current > threshold > 0, else 0

Short histories fall back to baseline 5% and variance 25 instead of
failing.

Thresholds:
    >=75: Critical
    >=50: High
    >=25: Medium
    >0:   Low
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from marketpulse.models import BrandSnapshot, EmergingCompetitorAlert, Severity

from .helpers import (
    DEFAULT_BASELINE,
    DEFAULT_VARIANCE,
    SIGMA_MULTIPLIER,
    clamp,
    classify_anomaly_severity,
    growth_rate,
    mean,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrowthAnomaly:
    """Result of testing one growth figure against its history."""
    baseline: float
    std_dev: float
    threshold: float
    anomaly_score: float
    severity: Severity


def historical_growth_rates(
    brand_id: str,
    history: Sequence[Sequence[BrandSnapshot]],
) -> List[float]:
    """
    Growth rates between consecutive historical periods for one brand.

    Pairs where the brand is missing or had zero volume are skipped.
    """
    rates = []
    for earlier, later in zip(history, history[1:]):
        prev = _find(earlier, brand_id)
        curr = _find(later, brand_id)
        if prev and curr and prev.total_volume > 0:
            rates.append(growth_rate(curr.total_volume, prev.total_volume))
    return rates


def detect_growth_anomaly(current_growth: float, growth_rates: Sequence[float]) -> GrowthAnomaly:
    """
    Test a growth rate against a historical series using the two-sigma rule.

    Args:
        current_growth: Growth (%) this period
        growth_rates: Historical period-over-period growth rates (%)

    Returns:
        GrowthAnomaly with baseline, threshold, score (0-100) and severity
    """
    baseline = mean(growth_rates) if growth_rates else DEFAULT_BASELINE

    if len(growth_rates) > 1:
        variance = sum((g - baseline) ** 2 for g in growth_rates) / (len(growth_rates) - 1)
    else:
        variance = DEFAULT_VARIANCE

    std_dev = math.sqrt(variance)
    threshold = baseline + SIGMA_MULTIPLIER * std_dev

    anomaly_score = 0.0
    if current_growth > threshold and threshold > 0:
        anomaly_score = clamp((current_growth - threshold) / threshold * 100, 0, 100)

    anomaly_score = round(anomaly_score)
    return GrowthAnomaly(
        baseline=baseline,
        std_dev=std_dev,
        threshold=threshold,
        anomaly_score=anomaly_score,
        severity=classify_anomaly_severity(anomaly_score),
    )


def alert_message(brand_name: str, current_growth: float, severity: Severity) -> str:
    growth = round(current_growth)
    if severity == Severity.CRITICAL:
        return f"CRITICAL: {brand_name} growing {growth}% - significantly above normal!"
    if severity == Severity.HIGH:
        return f"HIGH: {brand_name} accelerating at {growth}% growth"
    if severity == Severity.MEDIUM:
        return f"WATCH: {brand_name} showing elevated growth ({growth}%)"
    if severity == Severity.LOW:
        return f"{brand_name}: slightly above normal growth ({growth}%)"
    return f"{brand_name}: Normal growth pattern"


def calculate_emerging_competitor_alerts(
    current: Sequence[BrandSnapshot],
    history: Sequence[Sequence[BrandSnapshot]],
    own_brand_id: str,
) -> List[EmergingCompetitorAlert]:
    """
    Run anomaly detection for every competitor.

    Args:
        current: Brand snapshots for the current period
        history: Past periods, oldest first; history[-1] is the previous period
        own_brand_id: Registry id of the own brand (excluded)

    Returns:
        One alert per competitor, highest anomaly score first
    """
    latest: Dict[str, BrandSnapshot] = {b.brand_id: b for b in history[-1]} if history else {}

    alerts = []
    for competitor in current:
        if competitor.brand_id == own_brand_id:
            continue

        rates = historical_growth_rates(competitor.brand_id, history)

        prior = latest.get(competitor.brand_id)
        current_growth = growth_rate(competitor.total_volume, prior.total_volume if prior else 0)

        anomaly = detect_growth_anomaly(current_growth, rates)
        if anomaly.severity != Severity.NONE:
            logger.info(
                f"Anomaly for {competitor.brand_id}: growth {current_growth:.1f}% "
                f"vs threshold {anomaly.threshold:.1f}% ({anomaly.severity.value})"
            )

        alerts.append(EmergingCompetitorAlert(
            brand_id=competitor.brand_id,
            brand_name=competitor.brand_name,
            current_growth=round(current_growth, 1),
            baseline=round(anomaly.baseline, 1),
            threshold=round(anomaly.threshold, 1),
            anomaly_score=int(anomaly.anomaly_score),
            severity=anomaly.severity,
            message=alert_message(competitor.brand_name, current_growth, anomaly.severity),
        ))

    alerts.sort(key=lambda a: (-a.anomaly_score, a.brand_id))
    return alerts


def _find(period: Sequence[BrandSnapshot], brand_id: str) -> Optional[BrandSnapshot]:
    return next((b for b in period if b.brand_id == brand_id), None)
