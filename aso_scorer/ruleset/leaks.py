"""
Cross-vertical leak detection.

A "leak" is resolved configuration that was written for one kind of app and
ended up applied to another: language-learning token tiers on a finance app,
a reward hook multiplier on a dating app, a recommendation template that
talks about Spanish lessons in a game. Leaks are reported, never blocked.

Checks
------
pattern_leak (low)          learning tokens (learn, study, lesson, course,
                            fluency) overridden to tier 3 outside Education.
intent_leak (medium)        hook override keys or intent patterns about
                            learning / earning, redemption / investing,
                            trading outside their home categories.
recommendation_leak (high)  templates containing language-learning examples
                            outside Education.
vertical_mismatch (medium)  resolved vertical not expected for the category.
"""

from __future__ import annotations

import logging
import re
from collections import Counter

from aso_scorer.models.ruleset import LeakWarning, MergedRuleSet
from aso_scorer.taxonomy.metadata_taxonomy import (
    CATEGORY_EXPECTED_VERTICALS,
    LeakSeverity,
    LeakType,
    Vertical,
)

logger = logging.getLogger(__name__)

_LEARNING_TOKENS: tuple[str, ...] = ("learn", "study", "lesson", "course", "fluency")
_LEARNING_EXAMPLES: tuple[str, ...] = ("learn spanish", "language lessons", "fluency")
_KEY_SPLIT = re.compile(r"[_\s-]+")

# (key fragments, home categories, label)
_INTENT_FAMILIES: tuple[tuple[tuple[str, ...], frozenset[str], str], ...] = (
    (("learning",), frozenset({"education"}), "Language-learning"),
    (("earning", "redemption"), frozenset({"entertainment", "lifestyle"}), "Reward"),
    (("investing", "trading"), frozenset({"finance", "business"}), "Finance"),
)


def _token_leaks(merged: MergedRuleSet, category: str) -> list[LeakWarning]:
    if category == "education":
        return []
    hits = [t for t in _LEARNING_TOKENS if merged.token_relevance_overrides.get(t) == 3]
    if not hits:
        return []
    return [LeakWarning(
        type=LeakType.PATTERN_LEAK,
        severity=LeakSeverity.LOW,
        message="Language-learning token patterns detected in non-Education app",
        source=f"token_relevance_overrides.{hits[0]}",
    )]


def _intent_keys(merged: MergedRuleSet) -> list[str]:
    keys = list(merged.hook_overrides)
    keys.extend(p.pattern for p in merged.intent_patterns or [])
    return keys


def _key_words(key: str) -> set[str]:
    return {w for w in _KEY_SPLIT.split(key.lower()) if w}


def _intent_leaks(merged: MergedRuleSet, category: str) -> list[LeakWarning]:
    warnings: list[LeakWarning] = []
    keys = _intent_keys(merged)
    for fragments, home, label in _INTENT_FAMILIES:
        if category in home:
            continue
        matched = next((k for k in keys if _key_words(k) & set(fragments)), None)
        if matched is not None:
            warnings.append(LeakWarning(
                type=LeakType.INTENT_LEAK,
                severity=LeakSeverity.MEDIUM,
                message=f"{label} intent patterns detected in a '{category or 'unknown'}' app",
                source=matched,
            ))
    return warnings


def _recommendation_leaks(merged: MergedRuleSet, category: str) -> list[LeakWarning]:
    if category == "education":
        return []
    warnings: list[LeakWarning] = []
    for rec_id, template in merged.recommendation_templates.items():
        lowered = template.lower()
        if any(example in lowered for example in _LEARNING_EXAMPLES):
            warnings.append(LeakWarning(
                type=LeakType.RECOMMENDATION_LEAK,
                severity=LeakSeverity.HIGH,
                message="Hard-coded language-learning examples in non-Education app recommendations",
                source=f"recommendation_templates.{rec_id}",
            ))
    return warnings


def _vertical_mismatch(merged: MergedRuleSet, category: str) -> list[LeakWarning]:
    if not category:
        return []
    expected = CATEGORY_EXPECTED_VERTICALS.get(category, (Vertical.BASE,))
    if merged.vertical_id in {v.value for v in expected}:
        return []
    return [LeakWarning(
        type=LeakType.VERTICAL_MISMATCH,
        severity=LeakSeverity.MEDIUM,
        message=(
            f"Rule set vertical '{merged.vertical_id}' may not match "
            f"app category '{category}'"
        ),
        source="vertical_id",
    )]


def detect_leaks(merged: MergedRuleSet, category: str) -> list[LeakWarning]:
    """All leak warnings for ``merged`` applied to an app in ``category``."""
    cat = category.strip().lower()
    warnings = (
        _token_leaks(merged, cat)
        + _intent_leaks(merged, cat)
        + _recommendation_leaks(merged, cat)
        + _vertical_mismatch(merged, cat)
    )
    for w in warnings:
        logger.warning("Ruleset leak [%s/%s]: %s", w.type, w.severity, w.message)
    return warnings


def leak_summary(warnings: list[LeakWarning]) -> dict[str, dict[str, int]]:
    """Counts of warnings by severity and by type, for reporting."""
    return {
        "by_severity": {s.value: n for s, n in Counter(w.severity for w in warnings).items()},
        "by_type": {t.value: n for t, n in Counter(w.type for w in warnings).items()},
    }
