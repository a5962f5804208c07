"""
Dashboard Service

The presentation boundary: every read a dashboard or operator makes goes
through here, and every provider-backed read goes through the refresh
controller.

Refresh cycle for the market dashboard:
    fetch snapshot -> load earlier periods -> calculate metrics -> synthesize alerts
    -> save snapshot for its period -> (controller) write cache

Any failure before the cache write leaves the cache untouched, and the
controller serves the last cached dashboard instead.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from marketpulse.alerts import Alert, synthesize_alerts, top_alerts
from marketpulse.cache import CacheKeys, CacheSource, CacheStore, CacheTTL, RefreshController
from marketpulse.collector import DataForSEOProvider
from marketpulse.database import SnapshotRepository
from marketpulse.errors import CacheUnavailable
from marketpulse.models import (
    IntentCategorySnapshot,
    MarketSnapshot,
    MetricsResult,
)
from marketpulse.registry import KeywordRegistry, get_registry
from marketpulse.scoring import calculate_all_metrics, growth_rate
from marketpulse.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Cached access to market metrics, alerts, trends and intent data.

    Args:
        provider: Search-volume provider (DataForSEOProvider or compatible)
        store: Cache store over the api_cache table
        history: Snapshot history repository
        registry: Brand/keyword registry
        settings: Application settings
    """

    def __init__(
        self,
        provider,
        store: CacheStore,
        history: SnapshotRepository,
        registry: Optional[KeywordRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.provider = provider
        self.store = store
        self.history = history
        self.registry = registry or get_registry()
        self.settings = settings or get_settings()
        self.ttl = CacheTTL.from_settings(self.settings)
        self.controller = RefreshController(store)

    @classmethod
    def from_session(
        cls,
        db: Session,
        settings: Optional[Settings] = None,
        registry: Optional[KeywordRegistry] = None,
    ) -> "DashboardService":
        """Wire a service with the DataForSEO provider and database-backed stores."""
        settings = settings or get_settings()
        return cls(
            provider=DataForSEOProvider.from_settings(settings),
            store=CacheStore(db),
            history=SnapshotRepository(db),
            registry=registry,
            settings=settings,
        )

    # =========================================================================
    # MARKET DASHBOARD
    # =========================================================================

    async def get_dashboard_metrics(self, force_refresh: bool = False) -> Dict[str, Any]:
        """
        Full dashboard payload.

        Returns:
            Dict with overview, brand_rankings, intent_categories, alerts,
            metrics, fetched_at and cache_meta

        Raises:
            DataUnavailable: Refresh failed and nothing is cached
        """
        result = await self.controller.get_or_refresh(
            CacheKeys.DASHBOARD,
            self.ttl.DASHBOARD,
            self._refresh_dashboard,
            force_refresh=force_refresh,
        )
        if force_refresh and result.source == CacheSource.FRESH:
            self._expire_alerts()
        return {**result.data, "cache_meta": result.meta()}

    def _expire_alerts(self):
        # Alerts are derived from the dashboard and must not outlive it
        try:
            self.store.invalidate(CacheKeys.ALERTS)
        except CacheUnavailable as e:
            logger.warning(f"Could not expire cached alerts: {e}")

    async def _refresh_dashboard(self) -> Dict[str, Any]:
        current = await self.provider.fetch_market_snapshot(self.registry)
        history = self.history.recent(self.settings.HISTORY_LIMIT, before=current.fetched_at)

        if len(history) < 2:
            logger.info(f"Only {len(history)} stored snapshots; anomaly baselines use defaults")

        metrics = calculate_all_metrics(
            current,
            history,
            self.registry,
            min_volume_threshold=self.settings.MIN_VOLUME_THRESHOLD,
        )
        alerts = synthesize_alerts(metrics)

        payload = build_dashboard_payload(
            current,
            history[-1] if history else None,
            metrics,
            alerts,
            self.registry,
        )

        self.history.save(current)
        self.history.prune(keep=self.settings.HISTORY_LIMIT)
        return payload

    # =========================================================================
    # ALERTS
    # =========================================================================

    async def get_alerts(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Ranked alert feed, recomputed from the dashboard metrics.

        Args:
            limit: Return at most this many alerts (None = all)
        """
        result = await self.controller.get_or_refresh(
            CacheKeys.ALERTS,
            self.ttl.ALERTS,
            self._refresh_alerts,
        )
        alerts = [Alert.from_dict(a) for a in result.data["alerts"]]
        return [a.to_dict() for a in top_alerts(alerts, limit)]

    async def _refresh_alerts(self) -> Dict[str, Any]:
        dashboard = await self.get_dashboard_metrics()
        metrics = MetricsResult.from_dict(dashboard["metrics"])
        return {
            "alerts": [a.to_dict() for a in synthesize_alerts(metrics)],
            "calculated_at": metrics.calculated_at.isoformat(),
        }

    # =========================================================================
    # TRENDS & INTENT
    # =========================================================================

    async def get_brand_trends(self, force_refresh: bool = False) -> Dict[str, Any]:
        """Google Trends comparison of every brand's primary keyword."""
        result = await self.controller.get_or_refresh(
            CacheKeys.BRAND_TRENDS,
            self.ttl.BRAND_TRENDS,
            self._refresh_brand_trends,
            force_refresh=force_refresh,
        )
        return {**result.data, "cache_meta": result.meta()}

    async def _refresh_brand_trends(self) -> Optional[Dict[str, Any]]:
        series = await self.provider.fetch_brand_trends(self.registry)
        if not series:
            return None

        return {
            "brands": [
                {"brand_id": b.id, "keyword": b.primary_keyword, "color": b.color}
                for b in self.registry.brands
            ],
            "series": [s.to_dict() for s in series],
            "fetched_at": self.store.clock().isoformat(),
        }

    async def get_intent_keywords(self, force_refresh: bool = False) -> Dict[str, Any]:
        """Search volume per intent keyword, grouped by category."""
        result = await self.controller.get_or_refresh(
            CacheKeys.INTENT_KEYWORDS,
            self.ttl.INTENT_KEYWORDS,
            self._refresh_intent_keywords,
            force_refresh=force_refresh,
        )
        return {**result.data, "cache_meta": result.meta()}

    async def _refresh_intent_keywords(self) -> Optional[Dict[str, Any]]:
        volumes = await self.provider.fetch_volumes(self.registry.intent_keywords())
        if not any(v.search_volume for v in volumes):
            return None

        by_keyword = {v.keyword.lower(): v.search_volume or 0 for v in volumes}

        categories = []
        for category in self.registry.intent_categories:
            keywords = [
                {"keyword": kw, "search_volume": by_keyword.get(kw.lower(), 0)}
                for kw in category.keywords
            ]
            keywords.sort(key=lambda k: -k["search_volume"])
            categories.append({
                "category": category.category,
                "display_name": category.display_name,
                "total_volume": sum(k["search_volume"] for k in keywords),
                "keywords": keywords,
            })

        return {
            "categories": categories,
            "total_intent_volume": sum(c["total_volume"] for c in categories),
            "fetched_at": self.store.clock().isoformat(),
        }

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def refresh_all(self) -> Dict[str, Any]:
        """
        Expire every cache entry and rebuild the dashboard and alerts.

        Returns:
            {"success": bool, "refreshed": [keys refreshed from the provider]}
        """
        self.store.invalidate_all()

        dashboard = await self.get_dashboard_metrics(force_refresh=True)
        refreshed = []
        if dashboard["cache_meta"]["source"] == CacheSource.FRESH.value:
            refreshed.append(CacheKeys.DASHBOARD)
            await self.get_alerts()
            refreshed.append(CacheKeys.ALERTS)

        logger.info(f"Refreshed {len(refreshed)} cache entries")
        return {"success": CacheKeys.DASHBOARD in refreshed, "refreshed": refreshed}

    def get_cache_status(self) -> Dict[str, Any]:
        """Cache entries, time to next dashboard refresh and store statistics."""
        return {
            "entries": self.store.get_status(),
            "dashboard_refresh_in": self.store.time_until_refresh(CacheKeys.DASHBOARD),
            "stats": self.store.get_stats(),
            "health": self.store.health_check(),
            "provider_configured": self.provider.is_configured,
        }


# =============================================================================
# PAYLOAD BUILDERS
# =============================================================================

def build_brand_rankings(
    current: MarketSnapshot,
    previous: Optional[MarketSnapshot],
    registry: KeywordRegistry,
) -> List[Dict[str, Any]]:
    """Brands by volume (desc) with rank, market share % and growth vs previous cycle."""
    total = current.total_volume
    ordered = sorted(current.brands, key=lambda b: (-b.total_volume, b.brand_id))

    rankings = []
    for rank, brand in enumerate(ordered, start=1):
        prior = previous.brand(brand.brand_id) if previous else None
        config = registry.get_brand(brand.brand_id)
        rankings.append({
            "rank": rank,
            "brand_id": brand.brand_id,
            "brand_name": brand.brand_name,
            "total_volume": brand.total_volume,
            "market_share": round(brand.total_volume / total * 100, 1) if total > 0 else 0.0,
            "growth": round(growth_rate(brand.total_volume, prior.total_volume if prior else 0), 1),
            "is_own_brand": bool(config and config.is_own_brand),
            "color": config.color if config else None,
        })
    return rankings


def build_overview(
    current: MarketSnapshot,
    previous: Optional[MarketSnapshot],
    rankings: Sequence[Dict[str, Any]],
    registry: KeywordRegistry,
) -> Dict[str, Any]:
    own = next((r for r in rankings if r["brand_id"] == registry.own_brand.id), None)
    return {
        "own_brand_id": registry.own_brand.id,
        "own_brand_name": registry.own_brand.display_name,
        "total_market_volume": current.total_volume,
        "market_growth": round(
            growth_rate(current.total_volume, previous.total_volume if previous else 0), 1
        ),
        "own_brand_volume": own["total_volume"] if own else 0,
        "share_of_search": own["market_share"] if own else 0.0,
        "market_rank": own["rank"] if own else None,
        "brand_count": len(rankings),
    }


def build_dashboard_payload(
    current: MarketSnapshot,
    previous: Optional[MarketSnapshot],
    metrics: MetricsResult,
    alerts: Sequence[Alert],
    registry: KeywordRegistry,
) -> Dict[str, Any]:
    """JSON-ready dashboard body (everything except cache_meta)."""
    rankings = build_brand_rankings(current, previous, registry)

    intent_categories = [
        IntentCategorySnapshot(
            category=shift.category,
            display_name=shift.display_name,
            total_volume=shift.current_volume,
            weekly_change=shift.change_percent,
        ).to_dict()
        for shift in metrics.intent_shift_index
    ]

    return {
        "overview": build_overview(current, previous, rankings, registry),
        "brand_rankings": rankings,
        "intent_categories": intent_categories,
        "alerts": [a.to_dict() for a in alerts],
        "metrics": metrics.to_dict(),
        "fetched_at": current.fetched_at.isoformat(),
    }
