"""
Brand & Keyword Registry - Dutch iGaming Market

Defines every tracked brand, the intent keyword categories and the
sentiment keyword sets used by the metrics calculator.

Pattern per brand:
- URL (domain)
- brand + casino
- brand + sport
- brand + nl (location abbreviation)
- brand + inloggen (login)

The registry is read-only input for the pipeline. Exactly one brand is
the own brand; every other brand is a competitor.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class BrandConfig:
    """A tracked brand and the keywords that measure its demand."""
    id: str
    display_name: str
    website: str
    keywords: Tuple[str, ...]
    is_own_brand: bool = False
    color: str = "#888888"

    @property
    def primary_keyword(self) -> str:
        """The "brand casino" variant, used for trend comparisons."""
        for keyword in self.keywords:
            if "casino" in keyword and "." not in keyword:
                return keyword
        return self.keywords[0]


@dataclass(frozen=True)
class IntentCategoryConfig:
    """A closed keyword set describing one search intent."""
    category: str
    display_name: str
    keywords: Tuple[str, ...]
    increase_is_concerning: bool = False  # problem/regulation: only rises matter


@dataclass(frozen=True)
class ProviderOptions:
    """DataForSEO request options for this market."""
    location_code: int = 2528
    location_name: str = "Netherlands"
    language_code: str = "nl"
    include_adult_keywords: bool = True  # Required for gambling keywords!


@dataclass(frozen=True)
class KeywordRegistry:
    """Read-only mapping of tracked entities to keyword sets."""
    brands: Tuple[BrandConfig, ...]
    intent_categories: Tuple[IntentCategoryConfig, ...]
    positive_keywords: Tuple[str, ...] = ()
    negative_keywords: Tuple[str, ...] = ()
    provider: ProviderOptions = field(default_factory=ProviderOptions)

    def __post_init__(self):
        own = [b for b in self.brands if b.is_own_brand]
        if len(own) != 1:
            raise ValueError(f"Registry needs exactly one own brand, found {len(own)}")

        ids = [b.id for b in self.brands]
        if len(set(ids)) != len(ids):
            raise ValueError("Brand ids must be unique")

        seen: Dict[str, str] = {}
        for category in self.intent_categories:
            for keyword in category.keywords:
                key = keyword.lower()
                if key in seen and seen[key] != category.category:
                    raise ValueError(
                        f"Keyword '{keyword}' belongs to both "
                        f"'{seen[key]}' and '{category.category}'"
                    )
                seen[key] = category.category

    @property
    def own_brand(self) -> BrandConfig:
        return next(b for b in self.brands if b.is_own_brand)

    @property
    def competitors(self) -> List[BrandConfig]:
        return [b for b in self.brands if not b.is_own_brand]

    def get_brand(self, brand_id: str) -> Optional[BrandConfig]:
        return next((b for b in self.brands if b.id == brand_id), None)

    def brand_keywords(self) -> List[str]:
        return [kw for brand in self.brands for kw in brand.keywords]

    def intent_keywords(self) -> List[str]:
        return [kw for category in self.intent_categories for kw in category.keywords]

    def all_keywords(self) -> List[str]:
        """Every tracked keyword, de-duplicated case-insensitively, in registry order."""
        ordered: Dict[str, str] = {}
        for keyword in (
            self.brand_keywords()
            + self.intent_keywords()
            + list(self.positive_keywords)
            + list(self.negative_keywords)
        ):
            ordered.setdefault(keyword.lower(), keyword)
        return list(ordered.values())

    def keyword_counts(self) -> Dict[str, int]:
        brand_count = len(self.brand_keywords())
        intent_count = len(self.intent_keywords())
        return {
            "brands": brand_count,
            "intent": intent_count,
            "total": brand_count + intent_count,
        }


# =============================================================================
# BRAND CONFIGURATIONS
# =============================================================================

BRANDS: Tuple[BrandConfig, ...] = (
    # YOUR BRAND
    BrandConfig(
        id="jacks",
        display_name="Jacks Casino",
        website="jacks.nl",
        is_own_brand=True,
        color="#1B4D3E",
        keywords=(
            "jacks.nl", "jacks casino", "jacks sport", "jacks nl",
            "jacks inloggen", "jack casino", "jacks online casino", "jacks gokken",
        ),
    ),

    # COMPETITORS
    BrandConfig(
        id="toto", display_name="Toto", website="toto.nl", color="#FF6B00",
        keywords=(
            "toto.nl", "toto casino", "toto sport", "toto nl",
            "toto inloggen", "toto gokken", "toto online",
        ),
    ),
    BrandConfig(
        id="holland-casino", display_name="Holland Casino", website="hollandcasino.nl", color="#C4A000",
        keywords=(
            "hollandcasino.nl", "holland casino", "holland casino sport", "holland casino nl",
            "holland casino inloggen", "holland casino online", "hc online",
        ),
    ),
    BrandConfig(
        id="bet365", display_name="Bet365", website="bet365.nl", color="#027B5B",
        keywords=(
            "bet365.nl", "bet365 casino", "bet365 sport", "bet365 nl",
            "bet365 inloggen", "bet365 nederland", "bet 365",
        ),
    ),
    BrandConfig(
        id="unibet", display_name="Unibet", website="unibet.nl", color="#14805E",
        keywords=(
            "unibet.nl", "unibet casino", "unibet sport", "unibet nl",
            "unibet inloggen", "unibet nederland", "unibet online",
        ),
    ),
    BrandConfig(
        id="betcity", display_name="BetCity", website="betcity.nl", color="#FF4444",
        keywords=(
            "betcity.nl", "betcity casino", "betcity sport", "betcity nl",
            "betcity inloggen", "bet city", "betcity online",
        ),
    ),
    BrandConfig(
        id="kansino", display_name="Kansino", website="kansino.nl", color="#6B5B95",
        keywords=(
            "kansino.nl", "kansino casino", "kansino sport", "kansino nl",
            "kansino inloggen", "kansino online",
        ),
    ),
    BrandConfig(
        id="circus", display_name="Circus", website="circus.nl", color="#E63946",
        keywords=(
            "circus.nl", "circus casino", "circus sport", "circus nl",
            "circus inloggen", "circus online casino", "circus gokken",
        ),
    ),
    BrandConfig(
        id="leovegas", display_name="LeoVegas", website="leovegas.nl", color="#FF6600",
        keywords=(
            "leovegas.nl", "leovegas casino", "leovegas sport", "leovegas nl",
            "leovegas inloggen", "leo vegas", "leovegas nederland",
        ),
    ),
    BrandConfig(
        id="betmgm", display_name="BetMGM", website="betmgm.nl", color="#B8860B",
        keywords=(
            "betmgm.nl", "betmgm casino", "betmgm sport", "betmgm nl",
            "betmgm inloggen", "bet mgm", "betmgm nederland",
        ),
    ),
    BrandConfig(
        id="711", display_name="711", website="711.nl", color="#2E8B57",
        keywords=(
            "711.nl", "711 casino", "711 sport", "711 nl",
            "711 inloggen", "711 online casino", "seven eleven casino",
        ),
    ),
    BrandConfig(
        id="tonybet", display_name="TonyBet", website="tonybet.nl", color="#1E90FF",
        keywords=(
            "tonybet.nl", "tonybet casino", "tonybet sport", "tonybet nl",
            "tonybet inloggen", "tony bet", "tonybet nederland",
        ),
    ),
    BrandConfig(
        id="hardrock", display_name="Hard Rock Casino", website="hardrockcasino.nl", color="#8B0000",
        keywords=(
            "hardrockcasino.nl", "hard rock casino", "hardrock casino sport", "hard rock nl",
            "hard rock inloggen", "hardrock casino nederland", "hard rock casino online",
        ),
    ),
    BrandConfig(
        id="onecasino", display_name="OneCasino", website="nl.onecasino.com", color="#4169E1",
        keywords=(
            "nl.onecasino.com", "onecasino", "one casino", "onecasino sport",
            "onecasino nl", "onecasino inloggen", "one casino nederland",
        ),
    ),
)


# =============================================================================
# INTENT KEYWORD CONFIGURATIONS
# =============================================================================

INTENT_CATEGORIES: Tuple[IntentCategoryConfig, ...] = (
    IntentCategoryConfig(
        category="comparison",
        display_name="Comparison / Shopping",
        keywords=(
            "beste online casino", "beste casino nederland", "casino vergelijken",
            "top online casino", "welk casino is het beste", "betrouwbaar online casino",
            "veilig online casino",
        ),
    ),
    IntentCategoryConfig(
        category="problem",
        display_name="Problems / Complaints",
        increase_is_concerning=True,
        keywords=(
            "casino uitbetaling", "casino klacht", "casino probleem",
            "casino betaalt niet uit", "casino traag", "geld kwijt casino",
            "casino oplichting",
        ),
    ),
    IntentCategoryConfig(
        category="regulation",
        display_name="Regulation / Legal",
        increase_is_concerning=True,
        keywords=(
            "casino vergunning", "legaal casino nederland", "ksa vergunning",
            "kansspelautoriteit", "verantwoord gokken", "cruks register",
            "gokverbod nederland",
        ),
    ),
    IntentCategoryConfig(
        category="product",
        display_name="Product / Features",
        keywords=(
            "casino bonus", "free spins", "welkomstbonus casino",
            "casino zonder storting", "live casino", "casino slots",
            "sportweddenschappen",
        ),
    ),
    IntentCategoryConfig(
        category="review",
        display_name="Reviews / Research",
        keywords=(
            "casino review", "casino ervaring", "casino recensie",
            "casino betrouwbaar", "casino test", "casino beoordeling",
        ),
    ),
)


# =============================================================================
# SENTIMENT KEYWORD SETS
# =============================================================================

# Bonus, best-of and safety-seeking queries
POSITIVE_KEYWORDS: Tuple[str, ...] = (
    "beste online casino",
    "beste casino nederland",
    "top online casino",
    "betrouwbaar online casino",
    "veilig online casino",
    "casino bonus",
    "free spins",
    "welkomstbonus casino",
)

# Complaint and withdrawal-problem queries
NEGATIVE_KEYWORDS: Tuple[str, ...] = (
    "casino uitbetaling",
    "casino klacht",
    "casino probleem",
    "casino betaalt niet uit",
    "casino traag",
    "geld kwijt casino",
    "casino oplichting",
)


DEFAULT_REGISTRY = KeywordRegistry(
    brands=BRANDS,
    intent_categories=INTENT_CATEGORIES,
    positive_keywords=POSITIVE_KEYWORDS,
    negative_keywords=NEGATIVE_KEYWORDS,
)


def get_registry() -> KeywordRegistry:
    """Get the configured registry."""
    return DEFAULT_REGISTRY
