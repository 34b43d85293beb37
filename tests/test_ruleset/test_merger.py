"""
Tests for aso_scorer/ruleset/merger.py.

What we test
------------
merge_layers():
  - Scalar / list fields: the most specific layer that sets them wins.
  - Map fields: shallow merge per key; ancestry records "field.key" → scope.
  - Stopwords: union across layers, never removed.
  - Multiplier maps are clamped to [0.5, 2.0].
  - kpi_override_trail lists every layer that set a KPI multiplier.
  - Inheritance chain names the layers that took part.
  - Deterministic: same layers -> equal result.

combine_layers():
  - Org then app layer collapse into one client layer (app wins).
"""

from __future__ import annotations

import pytest

from aso_scorer.models.intent import IntentPattern
from aso_scorer.models.ruleset import RuleOverride, RuleSetLayer
from aso_scorer.ruleset.merger import combine_layers, merge_layers
from aso_scorer.ruleset.resolver import BASE_LAYER
from aso_scorer.taxonomy.metadata_taxonomy import IntentType, Scope


def _layer(scope: Scope, layer_id: str | None = None, **fields) -> RuleSetLayer:
    return RuleSetLayer(id=layer_id or f"{scope.value}:test", scope=scope, **fields)


class TestMapMerge:
    def test_most_specific_key_wins(self):
        merged = merge_layers(
            BASE_LAYER,
            vertical=_layer(Scope.VERTICAL, token_relevance_overrides={"learn": 0, "grammar": 3}),
            market=_layer(Scope.MARKET, token_relevance_overrides={"learn": 1}),
            client=_layer(Scope.CLIENT, token_relevance_overrides={"learn": 2}),
        )
        assert merged.token_relevance_overrides == {"learn": 2, "grammar": 3}
        assert merged.origin("token_relevance_overrides", "learn") == Scope.CLIENT
        assert merged.origin("token_relevance_overrides", "grammar") == Scope.VERTICAL

    def test_unset_key_defaults_to_base(self):
        merged = merge_layers(BASE_LAYER)
        assert merged.origin("token_relevance_overrides", "learn") == Scope.BASE

    def test_rule_overrides_replace_per_rule(self):
        merged = merge_layers(
            BASE_LAYER,
            vertical=_layer(Scope.VERTICAL, rule_overrides={
                "title_character_usage": RuleOverride(weight=0.4),
            }),
            client=_layer(Scope.CLIENT, rule_overrides={
                "title_character_usage": RuleOverride(thresholds={"target_min": 60}),
            }),
        )
        override = merged.rule_overrides["title_character_usage"]
        assert override.weight is None
        assert override.thresholds == {"target_min": 60}


class TestListAndUnion:
    def test_stopwords_union(self):
        merged = merge_layers(
            BASE_LAYER,
            vertical=_layer(Scope.VERTICAL, stopwords=["lingo"]),
            market=_layer(Scope.MARKET, stopwords=["whilst", "lingo"]),
        )
        assert merged.stopwords == ["lingo", "whilst"]

    def test_intent_patterns_replaced(self):
        vertical_patterns = [IntentPattern(pattern="learn", intent_type=IntentType.INFORMATIONAL)]
        client_patterns = [IntentPattern(pattern="buy", intent_type=IntentType.TRANSACTIONAL)]
        merged = merge_layers(
            BASE_LAYER,
            vertical=_layer(Scope.VERTICAL, intent_patterns=vertical_patterns),
            client=_layer(Scope.CLIENT, intent_patterns=client_patterns),
        )
        assert [p.pattern for p in merged.intent_patterns] == ["buy"]
        assert merged.origin("intent_patterns") == Scope.CLIENT


class TestMultipliers:
    def test_clamped(self):
        merged = merge_layers(
            BASE_LAYER,
            vertical=_layer(Scope.VERTICAL, kpi_overrides={"urgency_signal": 5.0},
                            hook_overrides={"trust_safety": 0.1}),
        )
        assert merged.kpi_overrides["urgency_signal"] == pytest.approx(2.0)
        assert merged.hook_overrides["trust_safety"] == pytest.approx(0.5)

    def test_kpi_override_trail(self):
        merged = merge_layers(
            BASE_LAYER,
            vertical=_layer(Scope.VERTICAL, "vertical:finance", kpi_overrides={"urgency_signal": 0.6}),
            client=_layer(Scope.CLIENT, "client:acme", kpi_overrides={"urgency_signal": 3.0}),
        )
        trail = merged.kpi_override_trail["urgency_signal"]
        assert [e.scope for e in trail] == [Scope.VERTICAL, Scope.CLIENT]
        assert [e.source_id for e in trail] == ["vertical:finance", "client:acme"]
        assert trail[1].multiplier == pytest.approx(2.0)
        assert merged.kpi_overrides["urgency_signal"] == pytest.approx(2.0)


class TestChainAndDeterminism:
    def test_inheritance_chain(self):
        merged = merge_layers(
            BASE_LAYER,
            market=_layer(Scope.MARKET, "market:uk"),
        )
        assert merged.inheritance_chain.base == "base"
        assert merged.inheritance_chain.vertical is None
        assert merged.inheritance_chain.market == "market:uk"

    def test_deterministic(self):
        vertical = _layer(Scope.VERTICAL, token_relevance_overrides={"a": 1, "b": 2})
        assert merge_layers(BASE_LAYER, vertical=vertical) == merge_layers(BASE_LAYER, vertical=vertical)

    def test_default_discovery_thresholds(self):
        merged = merge_layers(BASE_LAYER)
        assert merged.discovery_thresholds == {"excellent": 5, "good": 3, "moderate": 1}


class TestCombineLayers:
    def test_empty_and_single(self):
        assert combine_layers([], "client", Scope.CLIENT) is None
        only = _layer(Scope.CLIENT, "client:acme")
        assert combine_layers([only], "client", Scope.CLIENT) is only

    def test_app_layer_wins_over_org(self):
        org = _layer(Scope.CLIENT, "client:acme", kpi_overrides={"urgency_signal": 0.8},
                     stopwords=["acme"])
        app = _layer(Scope.CLIENT, "client:acme-ios", kpi_overrides={"urgency_signal": 1.5})
        combined = combine_layers([org, app], "client:acme+client:acme-ios", Scope.CLIENT)
        assert combined.id == "client:acme+client:acme-ios"
        assert combined.kpi_overrides == {"urgency_signal": 1.5}
        assert combined.stopwords == ["acme"]
