"""
DataForSEO Provider Adapter

Fetches search volumes and Google Trends data and adapts the provider JSON
into snapshot types. Nothing outside this module sees DataForSEO payloads.

Endpoints used:
- keywords_data/google_ads/search_volume/live   (monthly absolute volumes, 1000 keywords/call)
- keywords_data/google_trends/explore/live      (relative interest, 5 keywords/call)
- appendix/user_data                            (account balance)

IMPORTANT: include_adult_keywords must be enabled for gambling keywords,
otherwise the provider silently returns no volume for them.
"""

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from marketpulse.errors import EmptyResult, ProviderUnavailable
from marketpulse.models import (
    BrandSnapshot,
    KeywordVolumeSnapshot,
    MarketSnapshot,
    TrendDataPoint,
    TrendPoint,
    TrendSeries,
)
from marketpulse.registry import KeywordRegistry, ProviderOptions
from marketpulse.utils.config import Settings, get_settings
from marketpulse.utils.dates import parse_date, utcnow

from .client import DataForSEOClient, DataForSEOError, task_results

logger = logging.getLogger(__name__)


SEARCH_VOLUME_ENDPOINT = "keywords_data/google_ads/search_volume/live"
TRENDS_ENDPOINT = "keywords_data/google_trends/explore/live"
USER_DATA_ENDPOINT = "appendix/user_data"

MAX_VOLUME_KEYWORDS = 1000
MAX_TREND_KEYWORDS = 5
TREND_LOOKBACK_DAYS = 365


class DataForSEOProvider:
    """
    Search-volume provider backed by DataForSEO.

    Every transport, API and timeout failure surfaces as ProviderUnavailable.
    A provider built without a client (no credentials) raises
    ProviderUnavailable on every fetch.
    """

    def __init__(
        self,
        client: Optional[DataForSEOClient],
        options: Optional[ProviderOptions] = None,
        timeout: float = 30.0,
        trends_call_delay: float = 0.2,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.client = client
        self.options = options or ProviderOptions()
        self.timeout = timeout
        self.trends_call_delay = trends_call_delay
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DataForSEOProvider":
        """Build a provider from environment settings."""
        settings = settings or get_settings()

        client = None
        if settings.has_provider_credentials:
            client = DataForSEOClient(
                login=settings.DATAFORSEO_LOGIN,
                password=settings.DATAFORSEO_PASSWORD,
                timeout=settings.PROVIDER_TIMEOUT,
            )
        else:
            logger.warning("DataForSEO credentials not configured; only cached data can be served")

        return cls(
            client=client,
            options=ProviderOptions(
                location_code=settings.LOCATION_CODE,
                location_name=settings.LOCATION_NAME,
                language_code=settings.LANGUAGE_CODE,
            ),
            timeout=settings.PROVIDER_TIMEOUT,
            trends_call_delay=settings.TRENDS_CALL_DELAY,
        )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def close(self):
        if self.client is not None:
            await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    async def _guarded(self, label: str, request: Callable[[DataForSEOClient], Awaitable[Dict]]) -> Dict:
        if self.client is None:
            raise ProviderUnavailable("DataForSEO credentials not configured")

        try:
            return await asyncio.wait_for(request(self.client), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"DataForSEO {label} timed out after {self.timeout}s")
            raise ProviderUnavailable(f"{label} timed out after {self.timeout}s") from e
        except DataForSEOError as e:
            logger.error(f"DataForSEO {label} failed: {e}")
            raise ProviderUnavailable(f"{label} failed: {e}", status_code=e.status_code) from e

    # =========================================================================
    # SEARCH VOLUME
    # =========================================================================

    async def fetch_volumes(self, keywords: Sequence[str]) -> List[KeywordVolumeSnapshot]:
        """
        Fetch monthly search volumes.

        Args:
            keywords: Keywords to look up; chunked into calls of 1000

        Returns:
            One snapshot per requested keyword, in request order. Keywords the
            provider omits come back with search_volume=None.
        """
        by_keyword: Dict[str, Dict[str, Any]] = {}

        for start in range(0, len(keywords), MAX_VOLUME_KEYWORDS):
            chunk = list(keywords[start:start + MAX_VOLUME_KEYWORDS])
            logger.info(f"Fetching search volumes for {len(chunk)} keywords...")

            payload = [{
                "location_code": self.options.location_code,
                "language_code": self.options.language_code,
                "keywords": chunk,
                "include_adult_keywords": self.options.include_adult_keywords,
                "search_partners": True,
            }]
            response = await self._guarded(
                "search volume",
                lambda client: client.post(SEARCH_VOLUME_ENDPOINT, payload),
            )

            for item in task_results(response):
                if item.get("keyword"):
                    by_keyword[item["keyword"].lower()] = item

        return [_volume_snapshot(keyword, by_keyword.get(keyword.lower())) for keyword in keywords]

    async def fetch_market_snapshot(self, registry: KeywordRegistry) -> MarketSnapshot:
        """
        Fetch volumes for every tracked keyword and aggregate per brand.

        Raises:
            ProviderUnavailable: Provider could not be reached
            EmptyResult: No brand keyword came back with a volume
        """
        keywords = registry.all_keywords()
        volumes = {v.keyword.lower(): v for v in await self.fetch_volumes(keywords)}
        fetched_at = self._clock()

        brands = []
        for brand in registry.brands:
            brands.append(BrandSnapshot.from_keywords(
                brand_id=brand.id,
                brand_name=brand.display_name,
                keywords=(
                    volumes.get(kw.lower()) or KeywordVolumeSnapshot(keyword=kw, search_volume=None)
                    for kw in brand.keywords
                ),
                fetched_at=fetched_at,
            ))

        if not any(k.search_volume for b in brands for k in b.keywords):
            raise EmptyResult(f"No search volume returned for {len(registry.brand_keywords())} brand keywords")

        snapshot = MarketSnapshot(
            fetched_at=fetched_at,
            brands=tuple(brands),
            keyword_volumes={key: v.search_volume or 0 for key, v in volumes.items()},
        )
        logger.info(
            f"Market snapshot: {len(brands)} brands, total volume {snapshot.total_volume:,}"
        )
        return snapshot

    # =========================================================================
    # GOOGLE TRENDS
    # =========================================================================

    async def fetch_trends(
        self,
        keywords: Sequence[str],
        date_from: date,
        date_to: date,
    ) -> Optional[TrendSeries]:
        """
        Fetch relative Google Trends interest (0-100) for up to five keywords.

        Keywords beyond the fifth are ignored. Returns None when the provider
        has no trends graph for the request.
        """
        keywords = list(keywords[:MAX_TREND_KEYWORDS])
        if not keywords:
            return None

        payload = [{
            "location_name": self.options.location_name,
            "language_code": self.options.language_code,
            "keywords": keywords,
            "date_from": date_from.isoformat(),
            "date_to": date_to.isoformat(),
            "type": "web",
        }]
        response = await self._guarded(
            "trends",
            lambda client: client.post(TRENDS_ENDPOINT, payload),
        )

        results = task_results(response)
        if not results:
            return None

        graph = next(
            (i for i in results[0].get("items") or [] if i.get("type") == "google_trends_graph"),
            None,
        )
        if graph is None:
            return None

        return TrendSeries(
            keywords=tuple(results[0].get("keywords") or keywords),
            points=tuple(
                TrendDataPoint(
                    date_from=parse_date(point["date_from"]),
                    date_to=parse_date(point["date_to"]),
                    values=tuple(point.get("values") or ()),
                )
                for point in graph.get("data") or []
            ),
            averages=tuple(graph.get("averages") or ()),
        )

    async def fetch_brand_trends(
        self,
        registry: KeywordRegistry,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[TrendSeries]:
        """
        Trends for every brand's primary keyword, in batches of five.

        Defaults to the last 365 days. Calls run sequentially with
        trends_call_delay seconds between them.
        """
        date_to = date_to or self._clock().date()
        date_from = date_from or date_to - timedelta(days=TREND_LOOKBACK_DAYS)

        keywords = [brand.primary_keyword for brand in registry.brands]
        batches = [
            keywords[i:i + MAX_TREND_KEYWORDS]
            for i in range(0, len(keywords), MAX_TREND_KEYWORDS)
        ]

        series = []
        for index, batch in enumerate(batches):
            if index > 0:
                await asyncio.sleep(self.trends_call_delay)

            result = await self.fetch_trends(batch, date_from, date_to)
            if result is not None:
                series.append(result)
            else:
                logger.warning(f"No trends graph for {batch}")

        return series

    # =========================================================================
    # ACCOUNT
    # =========================================================================

    async def check_status(self) -> Dict[str, Any]:
        """Check credentials and account balance."""
        try:
            response = await self._guarded(
                "user data",
                lambda client: client.get(USER_DATA_ENDPOINT),
            )
        except ProviderUnavailable as e:
            return {"is_configured": False, "error": str(e)}

        results = task_results(response)
        if not results:
            return {"is_configured": False, "error": "Could not fetch user data"}

        return {
            "is_configured": True,
            "balance": (results[0].get("money") or {}).get("balance") or 0,
        }


def _volume_snapshot(keyword: str, item: Optional[Dict[str, Any]]) -> KeywordVolumeSnapshot:
    if item is None:
        return KeywordVolumeSnapshot(keyword=keyword, search_volume=None)

    points = sorted(
        (
            TrendPoint(date=date(m["year"], m["month"], 1), value=m.get("search_volume"))
            for m in item.get("monthly_searches") or []
            if m.get("year") and m.get("month")
        ),
        key=lambda p: p.date,
    )
    return KeywordVolumeSnapshot(
        keyword=keyword,
        search_volume=item.get("search_volume"),
        trend_series=tuple(points),
    )
