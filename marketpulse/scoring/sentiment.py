"""
Player Sentiment Velocity (-100 to +100)

Compares complaint searches against positive (bonus, best-of, safety)
searches and scores how fast that ratio moves.

Formula:
    ratio    = negative_volume / positive_volume
    velocity = growth(ratio vs previous ratio)
    score    = clamp(-velocity, -100, 100)

A rising complaint ratio yields a negative (deteriorating) score.
"""

from typing import Mapping, Sequence

from marketpulse.models import PlayerSentimentVelocity, SentimentTrend

from .helpers import clamp, classify_sentiment_trend, growth_rate
from .intent import sum_volumes


SENTIMENT_INTERPRETATIONS = {
    SentimentTrend.DETERIORATING: (
        "Player sentiment declining. Negative searches accelerating. Review player experience."
    ),
    SentimentTrend.IMPROVING: (
        "Player sentiment improving. Positive searches growing relative to complaints."
    ),
    SentimentTrend.STABLE: "Player sentiment stable. Monitor for changes.",
}


def sentiment_ratio(negative_volume: int, positive_volume: int) -> float:
    if positive_volume <= 0:
        return 0.0
    return negative_volume / positive_volume


def calculate_player_sentiment_velocity(
    current_volumes: Mapping[str, int],
    previous_volumes: Mapping[str, int],
    positive_keywords: Sequence[str],
    negative_keywords: Sequence[str],
) -> PlayerSentimentVelocity:
    """
    Calculate Player Sentiment Velocity.

    Args:
        current_volumes: Lower-cased keyword -> volume, current period
        previous_volumes: Lower-cased keyword -> volume, previous period
        positive_keywords: Bonus / best-of / safety-seeking queries
        negative_keywords: Complaint / withdrawal-problem queries

    Returns:
        PlayerSentimentVelocity with score in [-100, 100]
    """
    positive = sum_volumes(current_volumes, positive_keywords)
    negative = sum_volumes(current_volumes, negative_keywords)
    previous_positive = sum_volumes(previous_volumes, positive_keywords)
    previous_negative = sum_volumes(previous_volumes, negative_keywords)

    ratio = sentiment_ratio(negative, positive)
    previous = sentiment_ratio(previous_negative, previous_positive)

    velocity = round(growth_rate(ratio, previous), 1)
    score = int(round(clamp(-velocity, -100, 100)))
    trend = classify_sentiment_trend(velocity)

    return PlayerSentimentVelocity(
        score=score,
        positive_volume=positive,
        negative_volume=negative,
        sentiment_ratio=round(ratio, 3),
        previous_ratio=round(previous, 3),
        velocity=velocity,
        trend=trend,
        interpretation=SENTIMENT_INTERPRETATIONS[trend],
    )
