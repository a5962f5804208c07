"""Utility modules for the MarketPulse pipeline."""

from .config import Settings, get_settings
from .dates import utcnow, parse_datetime, parse_date

__all__ = [
    "Settings",
    "get_settings",
    "utcnow",
    "parse_datetime",
    "parse_date",
]
