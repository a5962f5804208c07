"""Brand and intent keyword registry (read-only pipeline input)."""

from .brands import (
    BrandConfig,
    IntentCategoryConfig,
    ProviderOptions,
    KeywordRegistry,
    BRANDS,
    INTENT_CATEGORIES,
    POSITIVE_KEYWORDS,
    NEGATIVE_KEYWORDS,
    DEFAULT_REGISTRY,
    get_registry,
)

__all__ = [
    "BrandConfig",
    "IntentCategoryConfig",
    "ProviderOptions",
    "KeywordRegistry",
    "BRANDS",
    "INTENT_CATEGORIES",
    "POSITIVE_KEYWORDS",
    "NEGATIVE_KEYWORDS",
    "DEFAULT_REGISTRY",
    "get_registry",
]
