"""
Snapshot Models

Immutable readings produced by the provider adapter for one fetch cycle.
These are the only input shapes the metrics calculator accepts; provider
JSON is adapted into them at the collector boundary.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from marketpulse.utils.dates import parse_date, parse_datetime


@dataclass(frozen=True)
class TrendPoint:
    """One point of a keyword's volume history."""
    date: date
    value: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrendPoint":
        return cls(date=parse_date(data["date"]), value=data.get("value"))


@dataclass(frozen=True)
class KeywordVolumeSnapshot:
    """Search volume for a single keyword at one point in time."""
    keyword: str
    search_volume: Optional[int]
    trend_series: Tuple[TrendPoint, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "search_volume": self.search_volume,
            "trend_series": [p.to_dict() for p in self.trend_series],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeywordVolumeSnapshot":
        return cls(
            keyword=data["keyword"],
            search_volume=data.get("search_volume"),
            trend_series=tuple(TrendPoint.from_dict(p) for p in data.get("trend_series", [])),
        )


@dataclass(frozen=True)
class BrandSnapshot:
    """
    Aggregated search volume for one tracked brand.

    total_volume is always the sum of the keyword volumes (missing volumes
    count as 0). Use from_keywords() to build one.
    """
    brand_id: str
    brand_name: str
    total_volume: int
    keywords: Tuple[KeywordVolumeSnapshot, ...]
    fetched_at: datetime

    def __post_init__(self):
        expected = sum(k.search_volume or 0 for k in self.keywords)
        if self.total_volume != expected:
            raise ValueError(
                f"total_volume {self.total_volume} for '{self.brand_id}' "
                f"does not match keyword sum {expected}"
            )

    @classmethod
    def from_keywords(
        cls,
        brand_id: str,
        brand_name: str,
        keywords: Iterable[KeywordVolumeSnapshot],
        fetched_at: datetime,
    ) -> "BrandSnapshot":
        keywords = tuple(keywords)
        return cls(
            brand_id=brand_id,
            brand_name=brand_name,
            total_volume=sum(k.search_volume or 0 for k in keywords),
            keywords=keywords,
            fetched_at=fetched_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "brand_id": self.brand_id,
            "brand_name": self.brand_name,
            "total_volume": self.total_volume,
            "keywords": [k.to_dict() for k in self.keywords],
            "fetched_at": self.fetched_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BrandSnapshot":
        return cls(
            brand_id=data["brand_id"],
            brand_name=data["brand_name"],
            total_volume=data["total_volume"],
            keywords=tuple(KeywordVolumeSnapshot.from_dict(k) for k in data.get("keywords", [])),
            fetched_at=parse_datetime(data["fetched_at"]),
        )


@dataclass(frozen=True)
class IntentCategorySnapshot:
    """Aggregated volume for one intent category."""
    category: str
    display_name: str
    total_volume: int
    weekly_change: float  # percent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "display_name": self.display_name,
            "total_volume": self.total_volume,
            "weekly_change": self.weekly_change,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntentCategorySnapshot":
        return cls(**data)


@dataclass(frozen=True)
class MarketSnapshot:
    """
    Everything collected in one fetch cycle.

    keyword_volumes maps lower-cased keyword -> volume for every tracked
    keyword (brand, intent and sentiment sets).
    """
    fetched_at: datetime
    brands: Tuple[BrandSnapshot, ...] = ()
    keyword_volumes: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "brands", tuple(self.brands))
        object.__setattr__(
            self,
            "keyword_volumes",
            {k.lower(): v for k, v in self.keyword_volumes.items()},
        )

    @classmethod
    def empty(cls, fetched_at: datetime) -> "MarketSnapshot":
        """A period with no data; every growth computed against it is 0."""
        return cls(fetched_at=fetched_at)

    @property
    def total_volume(self) -> int:
        return sum(b.total_volume for b in self.brands)

    @property
    def is_empty(self) -> bool:
        return not self.brands and not self.keyword_volumes

    def brand(self, brand_id: str) -> Optional[BrandSnapshot]:
        return next((b for b in self.brands if b.brand_id == brand_id), None)

    def volume_for(self, keyword: str) -> int:
        return self.keyword_volumes.get(keyword.lower(), 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fetched_at": self.fetched_at.isoformat(),
            "brands": [b.to_dict() for b in self.brands],
            "keyword_volumes": dict(self.keyword_volumes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketSnapshot":
        return cls(
            fetched_at=parse_datetime(data["fetched_at"]),
            brands=tuple(BrandSnapshot.from_dict(b) for b in data.get("brands", [])),
            keyword_volumes=data.get("keyword_volumes", {}),
        )


@dataclass(frozen=True)
class TrendDataPoint:
    """One Google Trends interval with relative interest per keyword (0-100)."""
    date_from: date
    date_to: date
    values: Tuple[Optional[float], ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date_from": self.date_from.isoformat(),
            "date_to": self.date_to.isoformat(),
            "values": list(self.values),
        }


@dataclass(frozen=True)
class TrendSeries:
    """Relative trend comparison for up to five keywords."""
    keywords: Tuple[str, ...]
    points: Tuple[TrendDataPoint, ...]
    averages: Tuple[Optional[float], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keywords": list(self.keywords),
            "data": [p.to_dict() for p in self.points],
            "averages": list(self.averages),
        }
