"""Tests for the open taxonomy registry and codec."""

import pytest

from trade_analytics.core.errors import TaxonomyError
from trade_analytics.core.taxonomy import (
    AssetClass,
    Category,
    CategoryCodec,
    EntryPsychology,
    ExitPsychology,
    Taxonomy,
    TaxonomyRegistry,
    TradeBehaviorPattern,
    codec_for,
)


@pytest.fixture
def registry():
    return TaxonomyRegistry()


class TestCategory:

    def test_known_carries_description(self):
        cat = Category.known(EntryPsychology.FEAR_OF_MISSING_OUT)
        assert cat.taxonomy == Taxonomy.ENTRY_PSYCHOLOGY
        assert cat.code == "FEAR_OF_MISSING_OUT"
        assert "missing out" in cat.description
        assert not cat.custom

    def test_equality_ignores_description(self):
        a = Category(Taxonomy.BEHAVIOR_PATTERN, "X", "one")
        b = Category(Taxonomy.BEHAVIOR_PATTERN, "X", "two", custom=True)
        assert a == b
        assert hash(a) == hash(b)

    def test_same_code_different_taxonomy(self):
        entry = Category.known(EntryPsychology.REVENGE_TRADING)
        pattern = Category.known(TradeBehaviorPattern.REVENGE_TRADING)
        assert entry != pattern

    def test_matches(self):
        cat = Category.known(ExitPsychology.PANIC)
        assert cat.matches(ExitPsychology.PANIC)
        assert not cat.matches(ExitPsychology.FEAR)
        assert not cat.matches(EntryPsychology.OVERCONFIDENCE)

    def test_unknown(self):
        cat = Category.unknown(Taxonomy.ASSET_CLASS)
        assert cat.is_unknown
        assert str(cat) == "UNKNOWN"


class TestTaxonomyRegistry:

    def test_seeded_in_declaration_order(self, registry):
        codes = [c.code for c in registry.values(Taxonomy.ASSET_CLASS)]
        assert codes == [m.value for m in AssetClass]

    def test_lookup_case_insensitive(self, registry):
        assert registry.lookup(Taxonomy.ASSET_CLASS, " crypto ").matches(AssetClass.CRYPTO)

    def test_lookup_missing(self, registry):
        assert registry.lookup(Taxonomy.ASSET_CLASS, "SPAC") is None

    def test_resolve_blank_is_unknown(self, registry):
        assert registry.resolve(Taxonomy.BEHAVIOR_PATTERN, "  ").is_unknown
        assert registry.resolve(Taxonomy.BEHAVIOR_PATTERN, None).is_unknown

    def test_resolve_creates_custom_once(self, registry):
        first = registry.resolve(Taxonomy.BEHAVIOR_PATTERN, "NEWS_FADE", "Fading news spikes")
        second = registry.resolve(Taxonomy.BEHAVIOR_PATTERN, "NEWS_FADE")
        assert first.custom
        assert first.description == "Fading news spikes"
        assert second is first
        assert registry.values(Taxonomy.BEHAVIOR_PATTERN)[-1] is first

    def test_custom_codes_match_any_case(self, registry):
        lower = registry.resolve(Taxonomy.BEHAVIOR_PATTERN, "news_fade")
        upper = registry.resolve(Taxonomy.BEHAVIOR_PATTERN, "NEWS_FADE")
        assert upper is lower
        assert lower.code == "NEWS_FADE"
        assert lower.description == "news_fade"
        assert registry.lookup(Taxonomy.BEHAVIOR_PATTERN, "News_Fade") is lower

    def test_register_custom_rejects_predefined_in_any_case(self, registry):
        with pytest.raises(TaxonomyError, match="predefined"):
            registry.register_custom(Taxonomy.ASSET_CLASS, "stock")

    def test_custom_disabled_maps_to_unknown(self):
        registry = TaxonomyRegistry(allow_custom=False)
        assert registry.resolve(Taxonomy.BEHAVIOR_PATTERN, "NEWS_FADE").is_unknown
        assert registry.lookup(Taxonomy.BEHAVIOR_PATTERN, "NEWS_FADE") is None

    def test_register_custom_rejects_predefined(self, registry):
        with pytest.raises(TaxonomyError, match="predefined"):
            registry.register_custom(Taxonomy.EXIT_PSYCHOLOGY, "PANIC")

    def test_register_custom_rejects_blank(self, registry):
        with pytest.raises(TaxonomyError):
            registry.register_custom(Taxonomy.EXIT_PSYCHOLOGY, "   ")

    def test_registries_are_independent(self, registry):
        registry.resolve(Taxonomy.BEHAVIOR_PATTERN, "NEWS_FADE")
        other = TaxonomyRegistry()
        assert other.lookup(Taxonomy.BEHAVIOR_PATTERN, "NEWS_FADE") is None


class TestCategoryCodec:

    def test_encode(self, registry):
        codec = codec_for(Taxonomy.EXIT_PSYCHOLOGY, registry)
        encoded = codec.encode(Category.known(ExitPsychology.DISCIPLINE))
        assert encoded == {
            "code": "DISCIPLINE",
            "description": "Exiting according to predefined plan",
            "custom": False,
        }

    def test_encode_wrong_taxonomy(self, registry):
        codec = CategoryCodec(Taxonomy.EXIT_PSYCHOLOGY, registry)
        with pytest.raises(TaxonomyError):
            codec.encode(Category.known(AssetClass.BOND))

    def test_decode_string_and_mapping(self, registry):
        codec = codec_for(Taxonomy.ENTRY_PSYCHOLOGY, registry)
        assert codec.decode("intuition").matches(EntryPsychology.INTUITION)
        custom = codec.decode({"code": "GUT_CHECK", "description": "Second opinion"})
        assert custom.custom
        assert custom.description == "Second opinion"

    def test_decode_none_is_unknown(self, registry):
        assert codec_for(Taxonomy.ASSET_CLASS, registry).decode(None).is_unknown

    def test_decode_many(self, registry):
        codec = codec_for(Taxonomy.BEHAVIOR_PATTERN, registry)
        assert codec.decode_many(None) == ()
        decoded = codec.decode_many(["OVERTRADING", "", "NEW_ONE"])
        assert [c.code for c in decoded] == ["OVERTRADING", "UNKNOWN", "NEW_ONE"]
