"""Tests for section categorization of dynamic field keys."""

import pytest

from catalog_admin.categorize import (
    CORE_KEYWORDS,
    TECHNICAL_KEYWORDS,
    categorize_key,
    parse_section,
    resolve_section,
)
from catalog_admin.fields import Section


class TestCategorizeKey:
    """Keyword heuristic."""

    @pytest.mark.parametrize("key", ["max_fan_size", "model_series", "brand", "launch_year", "warranty"])
    def test_core_identity(self, key):
        assert categorize_key(key) == Section.CORE_IDENTITY

    @pytest.mark.parametrize("key", ["l3_cache_mb", "max_memory_gb", "pcie_lanes", "boost_clock", "fan_rpm"])
    def test_technical(self, key):
        assert categorize_key(key) == Section.TECHNICAL_SPECS

    def test_wattage_is_technical(self):
        assert categorize_key("wattage") == Section.TECHNICAL_SPECS

    def test_brand_color_is_core(self):
        assert categorize_key("brand_color") == Section.CORE_IDENTITY

    def test_both_match_falls_back_to_core(self):
        # "size" is core, "fan" is technical
        assert categorize_key("max_fan_size") == Section.CORE_IDENTITY

    def test_neither_match_is_core(self):
        assert categorize_key("warranty") == Section.CORE_IDENTITY

    def test_matching_is_case_insensitive(self):
        assert categorize_key("L3_CACHE_MB") == Section.TECHNICAL_SPECS

    def test_substring_matching(self):
        # "core" is a substring of "score"
        assert categorize_key("score") == Section.TECHNICAL_SPECS

    def test_deterministic(self):
        keys = ["socket_type", "thermal_pad", "product_url", "xyz"]
        first = [categorize_key(k) for k in keys]
        second = [categorize_key(k) for k in keys]
        assert first == second

    def test_keyword_lists(self):
        assert "socket" in TECHNICAL_KEYWORDS
        assert "interface" in TECHNICAL_KEYWORDS
        assert "edition" in CORE_KEYWORDS
        assert not set(CORE_KEYWORDS) & set(TECHNICAL_KEYWORDS)


class TestResolveSection:
    """Explicit tag wins over the heuristic."""

    def test_explicit_tag_overrides_keyword_match(self):
        assert resolve_section("socket", "core_identity") == Section.CORE_IDENTITY
        assert resolve_section("brand", Section.TECHNICAL_SPECS) == Section.TECHNICAL_SPECS

    @pytest.mark.parametrize("tag", [None, "", "tech", "CORE_IDENTITY", 3])
    def test_invalid_tag_uses_heuristic(self, tag):
        assert resolve_section("l3_cache_mb", tag) == Section.TECHNICAL_SPECS

    def test_parse_section(self):
        assert parse_section("technical_specs") == Section.TECHNICAL_SPECS
        assert parse_section("bogus") is None
        assert parse_section(None) is None
