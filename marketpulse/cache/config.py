"""
Cache Configuration

TTLs and keys for the persisted api_cache table.

Key insight: provider data is paid for per call and search volumes only
move monthly, so the dashboard is refreshed weekly at most. Derived views
(alerts) are cheap to recompute and use a short TTL.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from marketpulse.utils.config import Settings, get_settings


class CacheKeys:
    """Cache keys used by the dashboard service."""
    DASHBOARD = "market_dashboard"
    BRAND_TRENDS = "brand_trends"
    INTENT_KEYWORDS = "intent_keywords"
    ALERTS = "alerts"

    ALL = (DASHBOARD, BRAND_TRENDS, INTENT_KEYWORDS, ALERTS)


@dataclass(frozen=True)
class CacheTTL:
    """
    Cache TTL configuration by data type.

    The class defaults apply when settings do not override them.
    """

    # Provider-backed data (weekly refresh)
    DASHBOARD: timedelta = timedelta(days=7)
    BRAND_TRENDS: timedelta = timedelta(days=7)
    INTENT_KEYWORDS: timedelta = timedelta(days=7)

    # Derived data
    ALERTS: timedelta = timedelta(hours=1)

    # Retry window after a failed refresh
    ERROR_RETRY: timedelta = timedelta(hours=1)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CacheTTL":
        """TTLs with the dashboard and alert windows taken from settings."""
        settings = settings or get_settings()
        return cls(
            DASHBOARD=settings.dashboard_ttl,
            BRAND_TRENDS=settings.dashboard_ttl,
            INTENT_KEYWORDS=settings.dashboard_ttl,
            ALERTS=settings.alerts_ttl,
        )

    def for_key(self, key: str) -> timedelta:
        """Get TTL for a cache key."""
        mapping = {
            CacheKeys.DASHBOARD: self.DASHBOARD,
            CacheKeys.BRAND_TRENDS: self.BRAND_TRENDS,
            CacheKeys.INTENT_KEYWORDS: self.INTENT_KEYWORDS,
            CacheKeys.ALERTS: self.ALERTS,
        }
        return mapping.get(key, self.DASHBOARD)
