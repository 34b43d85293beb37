"""
Tests for aso_scorer/intent/coverage.py.

What we test
------------
classify_token():
  - Word-boundary patterns need an exact token match; others match substrings.
  - The highest pattern score wins; inactive patterns are skipped.

compute_intent_coverage() / compute_combined_intent_coverage():
  - score = classified / total tokens (rounded), 0 for no tokens.
  - Combined score weights title 0.6 and subtitle 0.4 by default.
  - Dominant intent breaks ties in declaration order.
  - Assessment bands.

classify_combo_intent():
  - Single type, majority type, mixed (no type > 50%), unknown.
"""

from __future__ import annotations

from aso_scorer.intent.coverage import (
    classify_combo_intent,
    classify_token,
    compute_combined_intent_coverage,
    compute_intent_coverage,
    coverage_assessment,
)
from aso_scorer.intent.patterns import FALLBACK_PATTERNS
from aso_scorer.models.intent import IntentPattern
from aso_scorer.taxonomy.metadata_taxonomy import ComboIntent, IntentType


def _pattern(text: str, intent: IntentType, weight: float = 1.0, priority: int = 100, **kw) -> IntentPattern:
    return IntentPattern(pattern=text, intent_type=intent, weight=weight, priority=priority, **kw)


class TestClassifyToken:
    def test_exact_match_required(self):
        assert classify_token("learning", FALLBACK_PATTERNS) is None
        match = classify_token("learn", FALLBACK_PATTERNS)
        assert match is not None
        assert match.intent_type == IntentType.INFORMATIONAL

    def test_substring_pattern(self):
        patterns = [_pattern("learn", IntentType.INFORMATIONAL, word_boundary=False)]
        match = classify_token("learning", patterns)
        assert match is not None
        assert match.matched_pattern == "learn"

    def test_highest_score_wins(self):
        patterns = [
            _pattern("pay", IntentType.COMMERCIAL, weight=1.0, word_boundary=False),
            _pattern("pay", IntentType.TRANSACTIONAL, weight=2.0, word_boundary=False),
        ]
        assert classify_token("paypal", patterns).intent_type == IntentType.TRANSACTIONAL

    def test_inactive_skipped(self):
        patterns = [_pattern("learn", IntentType.INFORMATIONAL, active=False)]
        assert classify_token("learn", patterns) is None


class TestIntentCoverage:
    def test_field_score(self):
        coverage = compute_intent_coverage(["learn", "spanish", "free"], FALLBACK_PATTERNS)
        assert coverage.score == 67
        assert coverage.classified_tokens == 2
        assert coverage.unclassified_tokens_list == ["spanish"]
        assert coverage.distribution.transactional == 1

    def test_empty_tokens(self):
        coverage = compute_intent_coverage([], FALLBACK_PATTERNS)
        assert coverage.score == 0
        assert coverage.total_tokens == 0

    def test_combined_weights(self):
        combined = compute_combined_intent_coverage(
            ["learn", "free"], ["spanish", "lessons"], FALLBACK_PATTERNS
        )
        assert combined.title.score == 100
        assert combined.subtitle.score == 0
        assert combined.overall_score == 60
        assert combined.assessment == "GOOD"
        assert combined.combined_distribution.unclassified == 2

    def test_dominant_tie_uses_declaration_order(self):
        combined = compute_combined_intent_coverage(["learn", "free"], [], FALLBACK_PATTERNS)
        assert combined.dominant_intent == IntentType.INFORMATIONAL

    def test_custom_weights(self):
        combined = compute_combined_intent_coverage(
            ["learn"], ["spanish"], FALLBACK_PATTERNS, title_weight=0.5, subtitle_weight=0.5
        )
        assert combined.overall_score == 50

    def test_fallback_flag_propagates(self):
        combined = compute_combined_intent_coverage(["learn"], [], FALLBACK_PATTERNS, fallback_mode=True)
        assert combined.fallback_mode
        assert combined.title.fallback_mode

    def test_assessment_bands(self):
        assert coverage_assessment(85) == "EXCELLENT"
        assert coverage_assessment(40) == "MODERATE"
        assert coverage_assessment(5) == "VERY LOW"


class TestComboIntent:
    def test_single_type(self):
        assert classify_combo_intent("learn spanish", FALLBACK_PATTERNS) == ComboIntent.INFORMATIONAL

    def test_majority_type(self):
        assert classify_combo_intent("best free", FALLBACK_PATTERNS) == ComboIntent.TRANSACTIONAL

    def test_mixed(self):
        patterns = [
            _pattern("learn", IntentType.INFORMATIONAL),
            _pattern("buy", IntentType.TRANSACTIONAL),
        ]
        assert classify_combo_intent("learn buy", patterns) == ComboIntent.MIXED

    def test_unknown(self):
        assert classify_combo_intent("spanish lessons", FALLBACK_PATTERNS) == ComboIntent.UNKNOWN

    def test_word_boundary_in_text(self):
        assert classify_combo_intent("learning spanish", FALLBACK_PATTERNS) == ComboIntent.UNKNOWN
