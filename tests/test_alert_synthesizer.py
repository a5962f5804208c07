"""
Tests for the alert synthesizer.

These tests verify:
- Only severity != none entries become alerts
- Ordering by severity, then magnitude, then id
- Template-derived, deterministic text
- top_alerts() presentation cut
"""

import pytest
from datetime import datetime

from marketpulse.alerts import Alert, AlertType, synthesize_alerts, top_alerts
from marketpulse.models import EmergingCompetitorAlert, IntentShift, MetricsResult, Severity
from marketpulse.scoring import (
    calculate_competitive_pressure_index,
    calculate_market_share_momentum,
    calculate_player_sentiment_velocity,
)


def competitor(brand_id: str, score: int, severity: Severity) -> EmergingCompetitorAlert:
    return EmergingCompetitorAlert(
        brand_id=brand_id,
        brand_name=brand_id.title(),
        current_growth=40.0,
        baseline=5.0,
        threshold=15.0,
        anomaly_score=score,
        severity=severity,
        message="",
    )


def intent(category: str, change: float, severity: Severity) -> IntentShift:
    return IntentShift(
        category=category,
        display_name=category.title(),
        current_volume=8200,
        previous_volume=4000,
        change_percent=change,
        severity=severity,
        interpretation="Market stress signal - players experiencing issues",
    )


@pytest.fixture
def metrics_factory():
    """MetricsResult with neutral scalar metrics and the given lists."""
    def _build(competitors=(), intents=()) -> MetricsResult:
        return MetricsResult(
            market_share_momentum=calculate_market_share_momentum([], [], "jacks"),
            competitive_pressure_index=calculate_competitive_pressure_index([], [], "jacks"),
            emerging_competitor_alerts=tuple(competitors),
            intent_shift_index=tuple(intents),
            player_sentiment_velocity=calculate_player_sentiment_velocity({}, {}, (), ()),
            calculated_at=datetime(2024, 6, 3),
        )
    return _build


# =============================================================================
# SYNTHESIS
# =============================================================================

class TestSynthesizeAlerts:
    """Test merging and ranking."""

    def test_none_severity_filtered(self, metrics_factory):
        metrics = metrics_factory(
            competitors=[competitor("toto", 0, Severity.NONE), competitor("unibet", 30, Severity.MEDIUM)],
            intents=[intent("problem", 3.0, Severity.NONE)],
        )

        alerts = synthesize_alerts(metrics)

        assert [a.id for a in alerts] == ["competitor-unibet"]

    def test_empty_metrics_give_empty_feed(self, metrics_factory):
        assert synthesize_alerts(metrics_factory()) == []

    def test_severity_then_magnitude_then_id(self, metrics_factory):
        metrics = metrics_factory(
            competitors=[
                competitor("toto", 100, Severity.CRITICAL),
                competitor("unibet", 60, Severity.HIGH),
                competitor("bet365", 30, Severity.MEDIUM),
            ],
            intents=[
                intent("problem", 105.0, Severity.CRITICAL),
                intent("comparison", 60.0, Severity.HIGH),
                intent("review", 12.0, Severity.LOW),
            ],
        )

        alerts = synthesize_alerts(metrics)

        assert [a.id for a in alerts] == [
            "intent-problem",        # critical, 105
            "competitor-toto",       # critical, 100
            "competitor-unibet",     # high, 60 (id tie-break)
            "intent-comparison",     # high, 60
            "competitor-bet365",     # medium
            "intent-review",         # low
        ]

    def test_never_truncates(self, metrics_factory):
        competitors = [competitor(f"brand{i:02d}", 50, Severity.HIGH) for i in range(25)]

        alerts = synthesize_alerts(metrics_factory(competitors=competitors))

        assert len(alerts) == 25

    def test_deterministic(self, metrics_factory):
        metrics = metrics_factory(
            competitors=[competitor("toto", 80, Severity.CRITICAL)],
            intents=[intent("problem", 105.0, Severity.CRITICAL)],
        )

        assert synthesize_alerts(metrics) == synthesize_alerts(metrics)


class TestAlertContent:
    """Test template-derived fields."""

    def test_competitor_alert_fields(self, metrics_factory):
        alert = synthesize_alerts(metrics_factory(
            competitors=[competitor("toto", 100, Severity.CRITICAL)],
        ))[0]

        assert alert.type == AlertType.COMPETITOR
        assert alert.subject == "toto"
        assert alert.magnitude == 100.0
        assert alert.title == "Toto Surge Detected"
        assert "Anomaly score 100/100" in alert.message
        assert alert.recommendation.startswith("Investigate Toto")

    def test_intent_alert_fields(self, metrics_factory):
        alert = synthesize_alerts(metrics_factory(
            intents=[intent("problem", 105.0, Severity.CRITICAL)],
        ))[0]

        assert alert.type == AlertType.INTENT
        assert alert.title == "Problem Searches Rising"
        assert "up 105.0%" in alert.message
        assert "(4,000 -> 8,200)" in alert.message
        assert alert.recommendation.startswith("Check your own withdrawal times")

    def test_falling_intent_uses_absolute_magnitude(self, metrics_factory):
        alert = synthesize_alerts(metrics_factory(
            intents=[intent("comparison", -60.0, Severity.HIGH)],
        ))[0]

        assert alert.magnitude == 60.0
        assert alert.title == "Comparison Searches Falling"

    def test_dict_round_trip(self, metrics_factory):
        alert = synthesize_alerts(metrics_factory(
            competitors=[competitor("toto", 55, Severity.HIGH)],
        ))[0]

        data = alert.to_dict()

        assert data["type"] == "competitor"
        assert data["severity"] == "high"
        assert Alert.from_dict(data) == alert


# =============================================================================
# PRESENTATION
# =============================================================================

class TestTopAlerts:
    """Test the top-N helper."""

    def test_limit(self, metrics_factory):
        alerts = synthesize_alerts(metrics_factory(
            competitors=[competitor(f"b{i}", 10 * i, Severity.LOW) for i in range(1, 6)],
        ))

        top = top_alerts(alerts, 2)

        assert [a.id for a in top] == ["competitor-b5", "competitor-b4"]

    def test_no_limit_returns_all(self, metrics_factory):
        alerts = synthesize_alerts(metrics_factory(
            competitors=[competitor("toto", 40, Severity.MEDIUM)],
        ))

        assert top_alerts(alerts) == alerts

    def test_zero_limit(self, metrics_factory):
        alerts = synthesize_alerts(metrics_factory(
            competitors=[competitor("toto", 40, Severity.MEDIUM)],
        ))

        assert top_alerts(alerts, 0) == []
