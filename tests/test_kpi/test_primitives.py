"""
Tests for aso_scorer/kpi/primitives.py.

What we test
------------
  - count_language_verb_pairs(): adjacent language + action verb pairs.
  - count_repeated_tokens(): distinct tokens occurring more than once.
  - compute_primitives(): structure, keyword, vocabulary and brand counts
    for a known title / subtitle; platform limits; empty input.
"""

from __future__ import annotations

from aso_scorer.combos.generator import generate_combo_coverage
from aso_scorer.kpi.primitives import (
    KpiPrimitives,
    compute_primitives,
    count_language_verb_pairs,
    count_repeated_tokens,
)
from aso_scorer.models.app import BrandInfo
from aso_scorer.relevance.oracle import RelevanceOracle
from aso_scorer.taxonomy.metadata_taxonomy import Platform
from aso_scorer.text.tokenizer import analyze_text


def _primitives(title: str, subtitle: str = "", **kwargs) -> KpiPrimitives:
    oracle = RelevanceOracle()
    ta, sa = analyze_text(title), analyze_text(subtitle)
    combos = generate_combo_coverage(ta, sa, oracle)
    return compute_primitives(title, subtitle, ta, sa, oracle, combos, **kwargs)


class TestCounters:
    def test_language_verb_pairs(self):
        assert count_language_verb_pairs(["learn", "spanish", "fast"]) == 1
        assert count_language_verb_pairs(["speak", "french", "learn"]) == 2
        assert count_language_verb_pairs(["spanish", "french"]) == 0

    def test_repeated_tokens(self):
        assert count_repeated_tokens(["a", "b", "a", "b", "c", "a"]) == 2
        assert count_repeated_tokens([]) == 0


class TestComputePrimitives:
    def test_known_listing(self):
        p = _primitives("Learn Spanish Fast", "Speak Spanish today")

        assert p.title_char_count == 18
        assert p.title_char_limit == 30
        assert p.title_word_count == 3
        assert p.title_meaningful_count == 3
        assert p.title_high_value_count == 2
        assert p.subtitle_high_value_incremental_count == 1
        assert p.title_action_verbs == 1
        assert p.subtitle_action_verbs == 1
        assert p.title_benefit_words == 1
        assert p.urgency_count == 2
        assert p.repeated_token_count == 1
        assert p.title_language_verb_pairs == 1
        assert p.unique_meaningful_count == 5

    def test_ratios_derived(self):
        p = _primitives("Learn Spanish Fast", "Speak Spanish today")
        assert p.total_meaningful_count == 6
        assert p.action_verb_count == 2
        assert 0.0 <= p.brand_ratio <= 1.0
        assert p.brand_ratio + p.generic_ratio == 1.0

    def test_android_limits(self):
        p = _primitives("Learn Spanish", platform=Platform.ANDROID)
        assert p.title_char_limit == 50
        assert p.subtitle_char_limit == 80

    def test_brand_presence(self):
        brand = BrandInfo(canonical_brand="lingo", aliases=["lingo"])
        p = _primitives("Lingo Spanish", "Learn Spanish daily", brand_info=brand)
        assert p.brand_presence_title == 1
        assert p.brand_presence_subtitle == 0

    def test_no_brand_info(self):
        p = _primitives("Lingo Spanish")
        assert p.brand_presence_title == 0

    def test_empty_input(self):
        p = _primitives("", "")
        assert p.title_token_count == 0
        assert p.total_combo_count == 0
        assert p.brand_ratio == 0.0
        assert p.intent_distribution.total == 0
