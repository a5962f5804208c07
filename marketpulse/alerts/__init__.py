"""Alert synthesis: unified, severity-ranked alert feed."""

from .synthesizer import (
    Alert,
    AlertType,
    synthesize_alerts,
    top_alerts,
    competitor_alert,
    intent_alert,
)

__all__ = [
    "Alert",
    "AlertType",
    "synthesize_alerts",
    "top_alerts",
    "competitor_alert",
    "intent_alert",
]
