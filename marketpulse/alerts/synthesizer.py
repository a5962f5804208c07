"""
Alert Synthesizer

Turns a MetricsResult into one severity-ranked alert feed.

- Competitor anomalies and intent shifts with severity != none are merged
- Ordering: severity (critical first), then magnitude descending
  (anomaly score or |change %|), then alert id
- Every text field comes from a fixed template, so identical metrics
  always produce identical alerts
- Nothing is dropped here; cutting to a top-N view is up to the caller
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from marketpulse.models import (
    EmergingCompetitorAlert,
    IntentShift,
    MetricsResult,
    Severity,
)

logger = logging.getLogger(__name__)


class AlertType(Enum):
    """Which metric an alert originates from."""
    COMPETITOR = "competitor"
    INTENT = "intent"


@dataclass(frozen=True)
class Alert:
    """A display-ready alert."""
    id: str
    type: AlertType
    severity: Severity
    subject: str          # brand id or intent category
    title: str
    message: str
    magnitude: float      # anomaly score or |change %|
    recommendation: str

    @property
    def sort_key(self):
        return (self.severity.rank, -self.magnitude, self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "subject": self.subject,
            "title": self.title,
            "message": self.message,
            "magnitude": self.magnitude,
            "recommendation": self.recommendation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Alert":
        return cls(**{
            **data,
            "type": AlertType(data["type"]),
            "severity": Severity(data["severity"]),
        })


# =============================================================================
# TEMPLATES
# =============================================================================

COMPETITOR_TITLES = {
    Severity.CRITICAL: "{name} Surge Detected",
    Severity.HIGH: "{name} Accelerating",
    Severity.MEDIUM: "{name} Growth Elevated",
    Severity.LOW: "{name} Above Baseline",
}

INTENT_RECOMMENDATIONS = {
    "problem": (
        "Check your own withdrawal times and customer complaints. "
        "Consider proactive communication with players."
    ),
    "regulation": (
        "Check KSA announcements and industry news. "
        "Review your compliance status."
    ),
    "comparison": (
        "Review comparison-site positioning and acquisition campaigns."
    ),
    "product": (
        "Align bonus and feature promotion with the shift in product interest."
    ),
    "review": (
        "Make sure positive reviews and ratings are visible where players research."
    ),
}


def competitor_alert(entry: EmergingCompetitorAlert) -> Alert:
    name = entry.brand_name
    if entry.severity in (Severity.CRITICAL, Severity.HIGH):
        recommendation = (
            f"Investigate {name}'s recent marketing activity. Monitor their ad spend "
            f"and positioning changes."
        )
    else:
        recommendation = f"Keep {name} on your watchlist. Review their recent campaigns."

    return Alert(
        id=f"competitor-{entry.brand_id}",
        type=AlertType.COMPETITOR,
        severity=entry.severity,
        subject=entry.brand_id,
        title=COMPETITOR_TITLES[entry.severity].format(name=name),
        message=(
            f"{name} is growing {entry.current_growth:.1f}% against a baseline of "
            f"{entry.baseline:.1f}% (threshold {entry.threshold:.1f}%). "
            f"Anomaly score {entry.anomaly_score}/100."
        ),
        magnitude=float(entry.anomaly_score),
        recommendation=recommendation,
    )


def intent_alert(entry: IntentShift) -> Alert:
    direction = "Rising" if entry.change_percent >= 0 else "Falling"
    movement = "up" if entry.change_percent >= 0 else "down"

    return Alert(
        id=f"intent-{entry.category}",
        type=AlertType.INTENT,
        severity=entry.severity,
        subject=entry.category,
        title=f"{entry.display_name} Searches {direction}",
        message=(
            f"{entry.display_name} searches are {movement} {abs(entry.change_percent):.1f}% "
            f"vs the previous period ({entry.previous_volume:,} -> {entry.current_volume:,}). "
            f"{entry.interpretation}."
        ),
        magnitude=abs(entry.change_percent),
        recommendation=INTENT_RECOMMENDATIONS.get(
            entry.category,
            "Monitor this category for a sustained change.",
        ),
    )


# =============================================================================
# SYNTHESIS
# =============================================================================

def synthesize_alerts(metrics: MetricsResult) -> List[Alert]:
    """
    Build the full ranked alert feed for a metrics result.

    Args:
        metrics: Output of the metrics calculator

    Returns:
        All alerts with severity != none, most severe first
    """
    alerts = [
        competitor_alert(entry)
        for entry in metrics.emerging_competitor_alerts
        if entry.severity != Severity.NONE
    ]
    alerts.extend(
        intent_alert(entry)
        for entry in metrics.intent_shift_index
        if entry.severity != Severity.NONE
    )

    alerts.sort(key=lambda a: a.sort_key)
    logger.debug(f"Synthesized {len(alerts)} alerts")
    return alerts


def top_alerts(alerts: Sequence[Alert], limit: Optional[int] = None) -> List[Alert]:
    """Presentation helper: the first `limit` alerts of an already ranked feed."""
    if limit is None:
        return list(alerts)
    return list(alerts[:max(0, limit)])
