"""
Tests for aso_scorer/relevance/oracle.py.

What we test
------------
static_relevance():
  - Tier 0 for generic adjectives and numbers, 2 for domain nouns,
    3 for core verbs and languages, 1 otherwise.

RelevanceOracle:
  - Overrides win over the static tables and are clamped to 0–3.
  - source() reports the scope that supplied an override (BASE otherwise).
  - Lookups are case-insensitive.
  - Results are memoized in the injected cache (hits / misses counted).
  - A cache shared by two configurations never returns the other's override.
  - average() of an empty sequence is 0.0.

oracle_for():
  - Binds overrides, scope key and per-token ancestry from a MergedRuleSet.
"""

from __future__ import annotations

import pytest

from aso_scorer.models.ruleset import InheritanceChain, MergedRuleSet
from aso_scorer.relevance.oracle import (
    RelevanceCache,
    RelevanceOracle,
    oracle_for,
    static_relevance,
)
from aso_scorer.taxonomy.metadata_taxonomy import Scope


class TestStaticRelevance:
    @pytest.mark.parametrize("token", ["best", "free", "30", "2024", "three"])
    def test_tier_zero(self, token):
        assert static_relevance(token) == 0

    @pytest.mark.parametrize("token", ["lessons", "grammar", "vocabulary", "course"])
    def test_tier_two(self, token):
        assert static_relevance(token) == 2

    @pytest.mark.parametrize("token", ["learn", "speak", "spanish", "japanese"])
    def test_tier_three(self, token):
        assert static_relevance(token) == 3

    def test_default_tier_one(self):
        assert static_relevance("widget") == 1


class TestRelevanceOracle:
    def test_override_wins(self):
        oracle = RelevanceOracle(overrides={"lingo": 3, "learn": 0})
        assert oracle.relevance("lingo") == 3
        assert oracle.relevance("learn") == 0

    def test_override_clamped(self):
        oracle = RelevanceOracle(overrides={"hype": 7, "meh": -2})
        assert oracle.relevance("hype") == 3
        assert oracle.relevance("meh") == 0

    def test_case_insensitive(self):
        oracle = RelevanceOracle()
        assert oracle.relevance("LEARN") == 3

    def test_source_scope(self):
        oracle = RelevanceOracle(overrides={"lingo": 3}, ancestry={"lingo": Scope.CLIENT})
        assert oracle.source("lingo") == Scope.CLIENT
        assert oracle.source("spanish") == Scope.BASE

    def test_cache_hits_and_misses(self):
        cache = RelevanceCache()
        oracle = RelevanceOracle(cache=cache)
        oracle.relevance("learn")
        oracle.relevance("learn")
        assert cache.misses == 1
        assert cache.hits == 1
        assert len(cache) == 1

    def test_shared_cache_keeps_scopes_apart(self):
        cache = RelevanceCache()
        tenant_a = RelevanceOracle(overrides={"learn": 0}, scope_key="a", cache=cache)
        tenant_b = RelevanceOracle(scope_key="b", cache=cache)
        assert tenant_a.relevance("learn") == 0
        assert tenant_b.relevance("learn") == 3
        assert len(cache) == 2

    def test_clear_resets_counters(self):
        cache = RelevanceCache()
        RelevanceOracle(cache=cache).relevance("learn")
        cache.clear()
        assert len(cache) == 0
        assert cache.misses == 0

    def test_average(self):
        oracle = RelevanceOracle()
        assert oracle.average([]) == 0.0
        assert oracle.average(["learn", "widget"]) == pytest.approx(2.0)


class TestOracleFor:
    def test_binds_ruleset(self):
        ruleset = MergedRuleSet(
            token_relevance_overrides={"lingo": 3},
            ancestry={"token_relevance_overrides.lingo": Scope.MARKET},
            inheritance_chain=InheritanceChain(market="market:uk"),
        )
        oracle = oracle_for(ruleset)
        assert oracle.relevance("lingo") == 3
        assert oracle.source("lingo") == Scope.MARKET
        assert oracle.scope_key == ruleset.scope_key

    def test_uses_given_cache(self):
        cache = RelevanceCache()
        oracle = oracle_for(MergedRuleSet(), cache)
        oracle.relevance("speak")
        assert len(cache) == 1
