"""
Search Intent Shift Index

Tracks how demand moves between intent categories (comparison, problem,
regulation, product, review) from one period to the next.

Severity depends on category polarity: problem and regulation searches
are only alarming when they rise, everything else matters in both
directions.
"""

from typing import List, Mapping, Sequence

from marketpulse.models import IntentShift
from marketpulse.registry import IntentCategoryConfig

from .helpers import classify_intent_severity, growth_rate


def interpret_intent_shift(category: str, change_percent: float) -> str:
    """Fixed interpretation text for a category and its change."""
    if category == "comparison":
        if change_percent > 20:
            return "Increased shopping behavior - good time for acquisition campaigns"
        if change_percent < -20:
            return "Reduced comparison searches - market may be consolidating"
        return "Stable comparison activity"

    if category == "problem":
        if change_percent > 30:
            return "Market stress signal - players experiencing issues"
        if change_percent > 10:
            return "Slight increase in problem searches - monitor closely"
        return "Problem searches at normal levels"

    if category == "regulation":
        if change_percent > 50:
            return "Regulatory attention spike - possible incoming changes"
        if change_percent > 20:
            return "Increased regulatory interest - stay compliant"
        return "Normal regulatory search activity"

    if category == "product":
        if change_percent > 20:
            return "High product interest - opportunity for feature promotion"
        if change_percent < -20:
            return "Declining product interest - review offerings"
        return "Stable product interest"

    if category == "review":
        if change_percent > 20:
            return "Players doing research - ensure positive reviews visible"
        return "Normal review activity"

    if change_percent > 20:
        return "Rising search interest"
    if change_percent < -20:
        return "Falling search interest"
    return "Stable search activity"


def sum_volumes(volumes: Mapping[str, int], keywords: Sequence[str]) -> int:
    """Total volume of a keyword set; unknown keywords count as 0."""
    return sum(volumes.get(keyword.lower(), 0) or 0 for keyword in keywords)


def calculate_intent_shift_index(
    current_volumes: Mapping[str, int],
    previous_volumes: Mapping[str, int],
    categories: Sequence[IntentCategoryConfig],
) -> List[IntentShift]:
    """
    Calculate the shift for every configured intent category.

    Args:
        current_volumes: Lower-cased keyword -> volume, current period
        previous_volumes: Lower-cased keyword -> volume, previous period
        categories: Intent categories from the registry

    Returns:
        One IntentShift per category, in registry order
    """
    shifts = []
    for category in categories:
        current_volume = sum_volumes(current_volumes, category.keywords)
        previous_volume = sum_volumes(previous_volumes, category.keywords)

        change = round(growth_rate(current_volume, previous_volume), 1)

        shifts.append(IntentShift(
            category=category.category,
            display_name=category.display_name,
            current_volume=current_volume,
            previous_volume=previous_volume,
            change_percent=change,
            severity=classify_intent_severity(change, category.increase_is_concerning),
            interpretation=interpret_intent_shift(category.category, change),
        ))

    return shifts
