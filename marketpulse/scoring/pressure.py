"""
Competitive Pressure Index (0-10)

High average competitor growth combined with high volatility means an
aggressive, expensive market to acquire players in.

Formula:
    rates          = growth of every competitor vs previous period
    raw_intensity  = mean(rates) + stddev(rates) * 1.5
    score          = clamp((raw_intensity + 10) / 4, 0, 10)

The normalisation assumes a typical raw range of -10% to +30%.
"""

from typing import List, Sequence

from marketpulse.models import BrandSnapshot, CompetitivePressureIndex, PressureIntensity

from .helpers import (
    AGGRESSION_MULTIPLIER,
    clamp,
    classify_pressure_intensity,
    growth_rate,
    mean,
    sample_stddev,
)


PRESSURE_INTERPRETATIONS = {
    PressureIntensity.EXTREME: "Hyper-competitive market. CAC rising fast. Consider retention focus.",
    PressureIntensity.HIGH: "High competitive pressure. Monitor CAC sustainability closely.",
    PressureIntensity.MEDIUM: "Normal competitive activity. Balanced acquisition/retention approach.",
    PressureIntensity.LOW: "Low competitive pressure. Good opportunity for market share gains.",
}


def competitor_growth_rates(
    current: Sequence[BrandSnapshot],
    previous: Sequence[BrandSnapshot],
    own_brand_id: str,
) -> List[float]:
    """Growth rate per competitor; 0 when it has no usable previous volume."""
    previous_by_id = {b.brand_id: b for b in previous}
    rates = []
    for competitor in current:
        if competitor.brand_id == own_brand_id:
            continue
        prior = previous_by_id.get(competitor.brand_id)
        rates.append(growth_rate(competitor.total_volume, prior.total_volume if prior else 0))
    return rates


def calculate_competitive_pressure_index(
    current: Sequence[BrandSnapshot],
    previous: Sequence[BrandSnapshot],
    own_brand_id: str,
) -> CompetitivePressureIndex:
    """
    Calculate the Competitive Pressure Index across all competitors.

    Args:
        current: Brand snapshots for the current period
        previous: Brand snapshots for the previous period
        own_brand_id: Registry id of the own brand (excluded)

    Returns:
        CompetitivePressureIndex with score in [0, 10]
    """
    rates = competitor_growth_rates(current, previous, own_brand_id)

    avg_growth = mean(rates)
    volatility = sample_stddev(rates)

    raw_intensity = avg_growth + volatility * AGGRESSION_MULTIPLIER
    score = round(clamp((raw_intensity + 10) / 4, 0, 10), 1)
    intensity = classify_pressure_intensity(score)

    return CompetitivePressureIndex(
        score=score,
        avg_competitor_growth=round(avg_growth, 1),
        growth_volatility=round(volatility, 1),
        intensity=intensity,
        interpretation=PRESSURE_INTERPRETATIONS[intensity],
    )
