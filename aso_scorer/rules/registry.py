"""
Rule registry: the scoring rules of each metadata element.

This module is the single source of truth for which rules run on which
field, in what order, with what default weight and thresholds. Rulesets
may override a rule's weight (weights are re-normalized per element) and
any of its thresholds, but cannot add or remove rules.

Integrity (checked at import by ``validate_rule_registry``)
-----------------------------------------------------------
  - every element has at least one rule;
  - rule ids are unique across elements;
  - each rule's weight is in [0, 1] and per-element weights sum to 1;
  - every ``RuleConfig.element`` matches the registry key it is filed under.

A violation raises ``RegistryIntegrityError`` when the package is imported.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Mapping

from aso_scorer.errors import RegistryIntegrityError
from aso_scorer.rules import description, subtitle, title
from aso_scorer.rules.context import EvaluationContext, RuleOutcome
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement

RuleEvaluator = Callable[[EvaluationContext, Mapping[str, float]], RuleOutcome]

_CHAR_USAGE_BANDS: dict[str, float] = {"low": 50, "target_min": 70, "good": 90, "target_max": 100}


@dataclass(frozen=True)
class RuleConfig:
    """Specification for one scoring rule.

    Attributes:
        id:          Stable identifier (used by overrides and results).
        element:     Field the rule scores.
        name:        Short human-readable name.
        weight:      Default weight within the element (0–1).
        evaluator:   ``(ctx, thresholds) -> RuleOutcome``.
        thresholds:  Default threshold values; overrides merge over these.
        description: What the rule measures.
    """

    id: str
    element: MetadataElement
    name: str
    weight: float
    evaluator: RuleEvaluator = field(repr=False)
    thresholds: Mapping[str, float] = field(default_factory=dict)
    description: str = ""


# ── Registry ──────────────────────────────────────────────────────────────────
# Order here is the order of ``rule_results`` in every ElementScoringResult.

RULE_REGISTRY: dict[MetadataElement, tuple[RuleConfig, ...]] = {
    MetadataElement.TITLE: (
        RuleConfig("title_character_usage", MetadataElement.TITLE, "Character Usage Efficiency",
                   0.25, title.title_character_usage, dict(_CHAR_USAGE_BANDS),
                   "How well the title uses the available character space."),
        RuleConfig("title_unique_keywords", MetadataElement.TITLE, "Unique Keyword Density",
                   0.30, title.title_unique_keywords, {"min_keywords": 2},
                   "Meaningful keyword coverage weighted by relevance."),
        RuleConfig("title_combo_coverage", MetadataElement.TITLE, "Keyword Combination Coverage",
                   0.30, title.title_combo_coverage, {"min_combos": 2},
                   "Valuable 2–4 word combinations inside the title."),
        RuleConfig("title_filler_penalty", MetadataElement.TITLE, "Filler Token Penalty",
                   0.15, title.title_filler_penalty, {"high_noise": 0.5, "moderate_noise": 0.3},
                   "Penalty for stopwords and generic filler."),
    ),
    MetadataElement.SUBTITLE: (
        RuleConfig("subtitle_character_usage", MetadataElement.SUBTITLE, "Character Usage Efficiency",
                   0.20, subtitle.subtitle_character_usage, dict(_CHAR_USAGE_BANDS),
                   "How well the subtitle uses the available character space."),
        RuleConfig("subtitle_incremental_value", MetadataElement.SUBTITLE, "Incremental Value",
                   0.40, subtitle.subtitle_incremental_value, {"min_keywords": 2},
                   "New high-value keywords the subtitle adds to the title."),
        RuleConfig("subtitle_combo_coverage", MetadataElement.SUBTITLE, "New Combination Coverage",
                   0.25, subtitle.subtitle_combo_coverage, {"min_combos": 2},
                   "Valuable combinations that exist only because of the subtitle."),
        RuleConfig("subtitle_complementarity", MetadataElement.SUBTITLE, "Title Complementarity",
                   0.15, subtitle.subtitle_complementarity, {"max_overlap": 0.4},
                   "Subtitle complements rather than repeats the title."),
    ),
    MetadataElement.DESCRIPTION: (
        RuleConfig("description_hook_strength", MetadataElement.DESCRIPTION, "Opening Hook Strength",
                   0.30, description.description_hook_strength, {"pass_score": 70},
                   "Hook categories covered by the opening paragraph."),
        RuleConfig("description_feature_mentions", MetadataElement.DESCRIPTION, "Feature Mentions",
                   0.25, description.description_feature_mentions, {"min_mentions": 3},
                   "Explicit feature and benefit mentions."),
        RuleConfig("description_cta_strength", MetadataElement.DESCRIPTION, "Call-to-Action Strength",
                   0.20, description.description_cta_strength, {"min_ctas": 2},
                   "Conversion-focused calls to action."),
        RuleConfig("description_readability", MetadataElement.DESCRIPTION, "Readability Score",
                   0.25, description.description_readability, {"pass_score": 60},
                   "Flesch reading ease (0–100, higher is easier)."),
    ),
}


def validate_rule_registry(
    registry: Mapping[MetadataElement, tuple[RuleConfig, ...]] = RULE_REGISTRY,
) -> None:
    """Check the registry contract.

    Raises:
        RegistryIntegrityError: On the first violation found.
    """
    seen: set[str] = set()
    for element in MetadataElement:
        rules = registry.get(element, ())
        if not rules:
            raise RegistryIntegrityError(f"No rules registered for element '{element}'.")
        for rule in rules:
            if rule.id in seen:
                raise RegistryIntegrityError(f"Duplicate rule id '{rule.id}'.")
            seen.add(rule.id)
            if rule.element != element:
                raise RegistryIntegrityError(
                    f"Rule '{rule.id}' declares element '{rule.element}' "
                    f"but is registered under '{element}'."
                )
            if not 0.0 <= rule.weight <= 1.0:
                raise RegistryIntegrityError(
                    f"Rule '{rule.id}' weight {rule.weight} outside [0, 1]."
                )
        total = sum(r.weight for r in rules)
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise RegistryIntegrityError(
                f"Rule weights for '{element}' sum to {total:.4f}, expected 1.0."
            )


def rules_for(element: MetadataElement) -> tuple[RuleConfig, ...]:
    return RULE_REGISTRY[element]


def get_rule(rule_id: str) -> RuleConfig:
    """Look up a rule by id.

    Raises:
        KeyError: If ``rule_id`` is not registered.
    """
    for rules in RULE_REGISTRY.values():
        for rule in rules:
            if rule.id == rule_id:
                return rule
    available = sorted(r.id for rules in RULE_REGISTRY.values() for r in rules)
    raise KeyError(f"Rule '{rule_id}' not found in RULE_REGISTRY. Available: {available}")


validate_rule_registry()
