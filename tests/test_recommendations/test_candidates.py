"""
Tests for aso_scorer/recommendations/engine.py.

What we test
------------
ranking_keyword_recommendations():
  - Critical when the title has <= 1 high-value keyword, moderate at 2.
  - Critical when the subtitle adds nothing, strong when it adds one.

ranking_structure_recommendations():
  - Noise above 40% flags title (strong) and subtitle (moderate).
  - Empty subtitle is critical; underused fields report their usage.

brand_alignment_recommendations():
  - Brand-intelligence branch vs combo-type branch.
  - Low-value dominance and overbranding.

conversion_recommendations():
  - Weak hook severity, no/few features, readability, CTA.
  - Feature count is the number of mentions, not distinct feature words.

Templates:
  - A ruleset template replaces the message; unusable or malformed templates
    (unknown names, subscripts, attribute access) fall back.

collect_signals():
  - Built from a real context: counts and the overbranding KPI flag.
"""

from __future__ import annotations

import pytest

from aso_scorer.models.scoring import ElementMetadata, ElementScoringResult, RuleEvaluationResult
from aso_scorer.models.ruleset import MergedRuleSet
from aso_scorer.recommendations.engine import (
    RecommendationSignals,
    brand_alignment_recommendations,
    collect_signals,
    conversion_recommendations,
    generate_candidates,
    ranking_keyword_recommendations,
    ranking_structure_recommendations,
    render_message,
)
from aso_scorer.rules.evaluator import evaluate_element
from aso_scorer.taxonomy.metadata_taxonomy import (
    MetadataElement,
    RecommendationCategory,
    RecommendationSeverity,
)

_T = MetadataElement.TITLE
_S = MetadataElement.SUBTITLE
_D = MetadataElement.DESCRIPTION


def _element(
    element: MetadataElement,
    rules: dict[str, tuple[float, bool]] | None = None,
    used: int = 0,
    limit: int = 30,
    evidence: dict[str, list[str]] | None = None,
    counts: dict[str, int] | None = None,
) -> ElementScoringResult:
    evidence = evidence or {}
    counts = counts or {}
    results = [
        RuleEvaluationResult(
            rule_id=rule_id, passed=passed, score=score, weight=0.25, message="m",
            evidence=evidence.get(rule_id, []), count=counts.get(rule_id),
        )
        for rule_id, (score, passed) in (rules or {}).items()
    ]
    return ElementScoringResult(
        element=element,
        score=50,
        rule_results=results,
        metadata=ElementMetadata(characters_used=used, max_characters=limit),
    )


def _signals(**kwargs) -> RecommendationSignals:
    defaults = dict(
        title=_element(_T, {"title_character_usage": (100, True)}, used=28),
        subtitle=_element(_S, {"subtitle_character_usage": (100, True)}, used=28),
        description=_element(_D, {
            "description_hook_strength": (90, True),
            "description_feature_mentions": (75, True),
            "description_cta_strength": (75, True),
            "description_readability": (70, True),
        }),
        title_high_value_count=3,
        subtitle_incremental_count=3,
        generic_combos=5,
    )
    defaults.update(kwargs)
    return RecommendationSignals(**defaults)


def _ids(recs) -> list[str]:
    return [r.id for r in recs]


class TestHealthyListing:
    def test_no_candidates(self):
        assert generate_candidates(_signals()) == []


class TestRankingKeywords:
    def test_title_low(self):
        recs = ranking_keyword_recommendations(_signals(title_high_value_count=1))
        assert _ids(recs) == ["title_low_high_value_keywords"]
        assert recs[0].severity == RecommendationSeverity.CRITICAL
        assert recs[0].impact_score == 90
        assert "(1)" in recs[0].message

    def test_title_moderate(self):
        recs = ranking_keyword_recommendations(_signals(title_high_value_count=2))
        assert _ids(recs) == ["title_moderate_high_value_keywords"]
        assert recs[0].impact_score == 40

    def test_subtitle_none(self):
        recs = ranking_keyword_recommendations(_signals(subtitle_incremental_count=0))
        assert _ids(recs) == ["subtitle_no_incremental_keywords"]
        assert recs[0].element == _S

    def test_subtitle_one(self):
        recs = ranking_keyword_recommendations(_signals(subtitle_incremental_count=1))
        assert recs[0].id == "subtitle_low_incremental_keywords"
        assert recs[0].severity == RecommendationSeverity.STRONG


class TestRankingStructure:
    def test_noise(self):
        recs = ranking_structure_recommendations(
            _signals(title_noise_ratio=0.5, subtitle_noise_ratio=0.45)
        )
        assert _ids(recs) == ["title_high_noise_ratio", "subtitle_high_noise_ratio"]
        assert "50%" in recs[0].message

    def test_noise_at_threshold_not_flagged(self):
        assert ranking_structure_recommendations(_signals(title_noise_ratio=0.4)) == []

    def test_empty_subtitle(self):
        subtitle = _element(_S, {"subtitle_character_usage": (0, False)}, used=0)
        recs = ranking_structure_recommendations(_signals(subtitle=subtitle))
        assert _ids(recs) == ["subtitle_empty"]
        assert recs[0].severity == RecommendationSeverity.CRITICAL

    def test_underused_title(self):
        title = _element(_T, {"title_character_usage": (40, False)}, used=12)
        recs = ranking_structure_recommendations(_signals(title=title))
        assert _ids(recs) == ["title_underutilized_characters"]
        assert "12/30 characters (40%)" in recs[0].message

    def test_underused_subtitle(self):
        subtitle = _element(_S, {"subtitle_character_usage": (60, False)}, used=18)
        recs = ranking_structure_recommendations(_signals(subtitle=subtitle))
        assert _ids(recs) == ["subtitle_underutilized_characters"]

    def test_over_limit_is_not_underused(self):
        title = _element(_T, {"title_character_usage": (0, False)}, used=36)
        assert ranking_structure_recommendations(_signals(title=title)) == []


class TestBrandAlignment:
    def test_combo_branch_brand_focused(self):
        recs = brand_alignment_recommendations(_signals(branded_combos=5, generic_combos=1))
        assert "combo_too_brand_focused" in _ids(recs)
        assert "combo_low_generic_coverage" in _ids(recs)

    def test_low_value_dominance(self):
        recs = brand_alignment_recommendations(_signals(low_value_combos=4, generic_combos=4))
        assert _ids(recs) == ["combo_low_value_dominance"]

    def test_brand_intelligence_branch(self):
        recs = brand_alignment_recommendations(_signals(
            brand_intelligence=True, brand_classified=4, generic_classified=1,
            branded_combos=5, generic_combos=1,
        ))
        assert _ids(recs) == ["brand_intelligence_too_brand_focused"]

    def test_brand_intelligence_missing_brand(self):
        recs = brand_alignment_recommendations(_signals(
            brand_intelligence=True, brand_classified=0, generic_classified=5,
        ))
        assert _ids(recs) == ["brand_intelligence_missing_brand"]

    def test_good_balance(self):
        recs = brand_alignment_recommendations(_signals(
            brand_intelligence=True, brand_classified=2, generic_classified=4,
        ))
        assert _ids(recs) == ["brand_intelligence_good_balance"]
        assert recs[0].impact_score == 15

    def test_overbranded(self):
        recs = brand_alignment_recommendations(_signals(overbranded=True))
        assert _ids(recs) == ["title_overbranded"]
        assert recs[0].element == _T


class TestConversion:
    def _desc(self, hook=90.0, features=75.0, feature_count=None, cta=75.0, readability=70.0):
        return _element(
            _D,
            {
                "description_hook_strength": (hook, hook >= 70),
                "description_feature_mentions": (features, features >= 45),
                "description_cta_strength": (cta, cta >= 50),
                "description_readability": (readability, readability >= 60),
            },
            counts={"description_feature_mentions": feature_count} if feature_count else None,
        )

    def test_weak_hook_severity(self):
        strong = conversion_recommendations(_signals(description=self._desc(hook=0)))
        moderate = conversion_recommendations(_signals(description=self._desc(hook=60)))
        assert strong[0].severity == RecommendationSeverity.STRONG
        assert moderate[0].severity == RecommendationSeverity.MODERATE
        assert "[CONVERSION][moderate]" in moderate[0].message

    def test_no_features(self):
        recs = conversion_recommendations(_signals(description=self._desc(features=0)))
        assert _ids(recs) == ["description_no_features"]

    def test_few_features(self):
        recs = conversion_recommendations(
            _signals(description=self._desc(features=15, feature_count=1))
        )
        assert _ids(recs) == ["description_few_features"]
        assert "only 1 feature." in recs[0].message

    def test_repeated_feature_word_counts_every_mention(self, make_context):
        ctx = make_context(description="One feature. Another feature. A third feature here.")
        description = evaluate_element(_D, ctx)
        recs = conversion_recommendations(_signals(description=description))
        few = [r for r in recs if r.id == "description_few_features"]
        assert len(few) == 1
        assert "only 3 features." in few[0].message

    def test_readability_and_cta(self):
        recs = conversion_recommendations(
            _signals(description=self._desc(readability=35, cta=25))
        )
        assert _ids(recs) == ["description_low_readability", "description_weak_cta"]
        assert "35/100" in recs[0].message
        assert all(r.category == RecommendationCategory.CONVERSION for r in recs)

    def test_missing_description_rules_treated_as_zero(self):
        recs = conversion_recommendations(_signals(description=_element(_D)))
        assert _ids(recs) == [
            "description_weak_hook",
            "description_no_features",
            "description_low_readability",
            "description_weak_cta",
        ]


class TestTemplates:
    def test_template_replaces_message(self):
        signals = _signals(
            title_high_value_count=0,
            templates={"title_low_high_value_keywords": "Only {count} strong words in the title."},
        )
        recs = ranking_keyword_recommendations(signals)
        assert recs[0].message == "Only 0 strong words in the title."

    def test_unusable_template_falls_back(self):
        message = render_message("x", "default", {"x": "Needs {missing}"}, {"count": 1})
        assert message == "default"

    @pytest.mark.parametrize("template", ["Only {count[0]} keywords", "{count.x}", "{0}", "{"])
    def test_malformed_template_falls_back(self, template):
        assert render_message("x", "default", {"x": template}, {"count": 1}) == "default"

    def test_no_template(self):
        assert render_message("x", "default", {}, {}) == "default"


class TestCollectSignals:
    def test_from_context(self, make_context):
        ctx = make_context(
            title="Language Learning Master",
            subtitle="Spanish French German Tutor",
            description="Download now and start today.",
            ruleset=MergedRuleSet(recommendation_templates={"subtitle_empty": "x"}),
        )
        elements = {el: evaluate_element(el, ctx) for el in (_T, _S, _D)}
        signals = collect_signals(ctx, elements)
        assert signals.title_high_value_count == 3
        assert signals.subtitle_incremental_count == 3
        assert signals.title_noise_ratio == 0.0
        assert not signals.brand_intelligence
        assert not signals.overbranded
        assert signals.templates == {"subtitle_empty": "x"}
        assert signals.branded_combos + signals.generic_combos + signals.low_value_combos == (
            ctx.combos.total
        )
