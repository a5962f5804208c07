"""
Tests for the brand and keyword registry.
"""

import pytest

from marketpulse.registry import (
    BRANDS,
    DEFAULT_REGISTRY,
    BrandConfig,
    IntentCategoryConfig,
    KeywordRegistry,
    get_registry,
)


class TestDefaultRegistry:
    """The shipped Dutch market registry is valid."""

    def test_single_own_brand(self):
        assert DEFAULT_REGISTRY.own_brand.id == "jacks"
        assert len(DEFAULT_REGISTRY.competitors) == len(BRANDS) - 1

    def test_intent_categories(self):
        categories = {c.category: c for c in DEFAULT_REGISTRY.intent_categories}

        assert set(categories) == {"comparison", "problem", "regulation", "product", "review"}
        assert categories["problem"].increase_is_concerning is True
        assert categories["regulation"].increase_is_concerning is True
        assert categories["comparison"].increase_is_concerning is False

    def test_every_brand_has_keywords(self):
        for brand in DEFAULT_REGISTRY.brands:
            assert brand.keywords, brand.id

    def test_get_registry(self):
        assert get_registry() is DEFAULT_REGISTRY


class TestBrandConfig:

    def test_primary_keyword_prefers_casino_variant(self):
        brand = BrandConfig("toto", "Toto", "toto.nl", ("toto.nl", "toto sport", "toto casino"))

        assert brand.primary_keyword == "toto casino"

    def test_primary_keyword_falls_back_to_first(self):
        brand = BrandConfig("711", "711", "711.nl", ("711.nl", "711 inloggen"))

        assert brand.primary_keyword == "711.nl"


class TestRegistryValidation:
    """Invalid registries are rejected at construction."""

    def test_requires_own_brand(self):
        with pytest.raises(ValueError, match="exactly one own brand"):
            KeywordRegistry(
                brands=(BrandConfig("toto", "Toto", "toto.nl", ("toto casino",)),),
                intent_categories=(),
            )

    def test_rejects_two_own_brands(self):
        with pytest.raises(ValueError, match="exactly one own brand"):
            KeywordRegistry(
                brands=(
                    BrandConfig("jacks", "Jacks", "jacks.nl", ("jacks casino",), is_own_brand=True),
                    BrandConfig("toto", "Toto", "toto.nl", ("toto casino",), is_own_brand=True),
                ),
                intent_categories=(),
            )

    def test_rejects_duplicate_ids(self):
        with pytest.raises(ValueError, match="unique"):
            KeywordRegistry(
                brands=(
                    BrandConfig("jacks", "Jacks", "jacks.nl", ("jacks casino",), is_own_brand=True),
                    BrandConfig("jacks", "Jacks 2", "jacks2.nl", ("jacks2 casino",)),
                ),
                intent_categories=(),
            )

    def test_rejects_keyword_in_two_categories(self):
        with pytest.raises(ValueError, match="belongs to both"):
            KeywordRegistry(
                brands=(BrandConfig("jacks", "Jacks", "jacks.nl", ("jacks casino",), is_own_brand=True),),
                intent_categories=(
                    IntentCategoryConfig("problem", "Problems", ("casino klacht",)),
                    IntentCategoryConfig("review", "Reviews", ("Casino Klacht",)),
                ),
            )


class TestKeywordSets:

    def test_all_keywords_deduplicated_in_order(self, registry):
        keywords = registry.all_keywords()

        assert keywords[:6] == [
            "jacks casino", "jacks.nl", "toto casino", "toto.nl", "unibet casino", "bet365 casino",
        ]
        assert keywords.count("beste online casino") == 1
        assert keywords.count("casino klacht") == 1
        assert "casino bonus" in keywords
        assert len(keywords) == 10

    def test_keyword_counts(self, registry):
        assert registry.keyword_counts() == {"brands": 6, "intent": 3, "total": 9}

    def test_get_brand(self, registry):
        assert registry.get_brand("toto").display_name == "Toto"
        assert registry.get_brand("missing") is None
