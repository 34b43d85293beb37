"""
Tests for aso_scorer/ruleset/leaks.py.

What we test
------------
detect_leaks():
  - Learning tokens at tier 3 outside Education -> pattern_leak (low).
  - Learning / reward / finance hook keys or intent patterns outside their
    home categories -> intent_leak (medium).
  - Templates with language-learning examples outside Education ->
    recommendation_leak (high).
  - Vertical not expected for the category -> vertical_mismatch (medium).
  - A matching configuration yields no warnings.

leak_summary():
  - Counts by severity and by type.
"""

from __future__ import annotations

from aso_scorer.models.intent import IntentPattern
from aso_scorer.models.ruleset import MergedRuleSet
from aso_scorer.ruleset.leaks import detect_leaks, leak_summary
from aso_scorer.taxonomy.metadata_taxonomy import IntentType, LeakSeverity, LeakType


def _types(warnings) -> set[LeakType]:
    return {w.type for w in warnings}


class TestDetectLeaks:
    def test_clean_education_ruleset(self):
        merged = MergedRuleSet(
            vertical_id="language_learning",
            token_relevance_overrides={"learn": 3},
            hook_overrides={"learning_educational": 1.3},
            recommendation_templates={"x": "Try 'Learn Spanish' in the title."},
        )
        assert detect_leaks(merged, "Education") == []

    def test_pattern_leak(self):
        merged = MergedRuleSet(token_relevance_overrides={"fluency": 3})
        warnings = detect_leaks(merged, "finance")
        leak = next(w for w in warnings if w.type == LeakType.PATTERN_LEAK)
        assert leak.severity == LeakSeverity.LOW
        assert leak.source == "token_relevance_overrides.fluency"

    def test_intent_leak_from_hook_key(self):
        merged = MergedRuleSet(hook_overrides={"learning_educational": 1.5})
        warnings = detect_leaks(merged, "finance")
        leak = next(w for w in warnings if w.type == LeakType.INTENT_LEAK)
        assert leak.severity == LeakSeverity.MEDIUM
        assert leak.source == "learning_educational"

    def test_intent_leak_from_pattern(self):
        merged = MergedRuleSet(intent_patterns=[
            IntentPattern(pattern="trading", intent_type=IntentType.COMMERCIAL),
        ])
        assert LeakType.INTENT_LEAK in _types(detect_leaks(merged, "education"))
        assert detect_leaks(merged, "finance") == []

    def test_recommendation_leak(self):
        merged = MergedRuleSet(recommendation_templates={
            "title_low_high_value_keywords": "Add terms like 'learn Spanish'.",
        })
        warnings = detect_leaks(merged, "Productivity")
        leak = next(w for w in warnings if w.type == LeakType.RECOMMENDATION_LEAK)
        assert leak.severity == LeakSeverity.HIGH
        assert leak.source == "recommendation_templates.title_low_high_value_keywords"

    def test_vertical_mismatch(self):
        merged = MergedRuleSet(vertical_id="dating")
        assert _types(detect_leaks(merged, "finance")) == {LeakType.VERTICAL_MISMATCH}

    def test_unknown_category_only_allows_base(self):
        assert detect_leaks(MergedRuleSet(), "weather") == []
        assert _types(detect_leaks(MergedRuleSet(vertical_id="finance"), "weather")) == {
            LeakType.VERTICAL_MISMATCH
        }


class TestLeakSummary:
    def test_counts(self):
        merged = MergedRuleSet(
            vertical_id="dating",
            token_relevance_overrides={"learn": 3},
        )
        summary = leak_summary(detect_leaks(merged, "finance"))
        assert summary["by_type"] == {"pattern_leak": 1, "vertical_mismatch": 1}
        assert summary["by_severity"] == {"low": 1, "medium": 1}
