"""
Description rules (conversion quality; no ranking weight).

hook_strength      Opening paragraph against the vertical's hook phrases.
feature_mentions   "feature / tool / function / capability / benefit" count.
cta_strength       Distinct call-to-action verbs present.
readability        Flesch reading ease of the whole description.

An empty description short-circuits every rule to score 0, failed.
"""

from __future__ import annotations

import re
from typing import Mapping

from aso_scorer.rules.context import EvaluationContext, RuleOutcome
from aso_scorer.rules.hooks import hook_patterns_for, match_hook_categories
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement
from aso_scorer.utils.numeric import clamp, round_int

_DESCRIPTION = MetadataElement.DESCRIPTION

NO_DESCRIPTION = "No description provided"

HOOK_BASE_SCORE = 60
HOOK_CATEGORY_POINTS = 15
HOOK_CATEGORY_CAP = 30
HOOK_OPENING_BONUS = 10
HOOK_OPENING_MIN_CHARS = 50
HOOK_OPENING_MAX_CHARS = 150

_FEATURE_WORDS = re.compile(r"\b(feature|tool|function|capability|benefit)s?\b", re.IGNORECASE)
CTA_VERBS: tuple[str, ...] = ("download", "try", "start", "get", "join", "subscribe")

_SENTENCE_END = re.compile(r"[.!?]+")
_NON_LETTERS = re.compile(r"[^a-z]")
_VOWEL_GROUPS = re.compile(r"[aeiouy]+")


def _no_description() -> RuleOutcome:
    return RuleOutcome(passed=False, score=0, message=NO_DESCRIPTION)


def opening_paragraph(text: str) -> str:
    return text.strip().split("\n")[0]


def opening_sentence(text: str) -> str:
    return opening_paragraph(text).split(".")[0].strip()


def description_hook_strength(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    """Base 60, +15 × multiplier per matched hook category (max +30),
    +10 for a 50–150 character opening sentence, capped at 100."""
    text = ctx.text(_DESCRIPTION)
    if not text:
        return _no_description()

    paragraph = opening_paragraph(text)
    matches = match_hook_categories(paragraph, hook_patterns_for(ctx.ruleset.vertical_id))

    category_points = sum(
        HOOK_CATEGORY_POINTS * ctx.ruleset.hook_overrides.get(category.value, 1.0)
        for category in matches
    )
    score = HOOK_BASE_SCORE + min(float(HOOK_CATEGORY_CAP), category_points)
    sentence_len = len(opening_sentence(text))
    if HOOK_OPENING_MIN_CHARS <= sentence_len <= HOOK_OPENING_MAX_CHARS:
        score += HOOK_OPENING_BONUS
    score = min(100.0, score)

    if matches:
        names = ", ".join(c.value for c in matches)
        message = f"Opening hook covers {len(matches)} categories ({names})"
    else:
        message = "Consider adding compelling hook words in first sentence"
    evidence = tuple(phrase for hits in matches.values() for phrase in hits)
    return RuleOutcome(passed=score >= th["pass_score"], score=score, message=message, evidence=evidence)


def description_feature_mentions(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    text = ctx.text(_DESCRIPTION)
    if not text:
        return _no_description()
    found = [m.group(0).lower() for m in _FEATURE_WORDS.finditer(text)]
    n = len(found)
    return RuleOutcome(
        passed=n >= th["min_mentions"],
        score=min(100, n * 15),
        message=f"{n} feature mention{'s' if n != 1 else ''}",
        evidence=tuple(dict.fromkeys(found)),
        count=n,
    )


def description_cta_strength(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    text = ctx.text(_DESCRIPTION)
    if not text:
        return _no_description()
    lowered = text.lower()
    found = [v for v in CTA_VERBS if re.search(rf"\b{v}\b", lowered)]
    n = len(found)
    return RuleOutcome(
        passed=n >= th["min_ctas"],
        score=min(100, n * 25),
        message=f"{n} CTA{'s' if n != 1 else ''} detected",
        evidence=tuple(found),
        count=n,
    )


def count_syllables(word: str) -> int:
    """Vowel-group syllable estimate; short words and a trailing silent e count once."""
    w = _NON_LETTERS.sub("", word.lower())
    if not w:
        return 0
    if len(w) <= 3:
        return 1
    count = len(_VOWEL_GROUPS.findall(w))
    if w.endswith("e") and count > 1:
        count -= 1
    return max(1, count)


def reading_ease(text: str) -> float | None:
    """Flesch reading ease, or None when there are no sentences or words."""
    sentences = [s for s in _SENTENCE_END.split(text) if s.strip()]
    words = text.split()
    if not sentences or not words:
        return None
    syllables = sum(count_syllables(w) for w in words)
    wps = len(words) / len(sentences)
    spw = syllables / len(words)
    return 206.835 - 1.015 * wps - 84.6 * spw


def readability_level(score: float) -> str:
    if score >= 80:
        return "Very easy"
    if score >= 60:
        return "Easy"
    if score >= 40:
        return "Moderate"
    return "Difficult"


def description_readability(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    text = ctx.text(_DESCRIPTION)
    if not text:
        return _no_description()
    ease = reading_ease(text)
    if ease is None:
        return RuleOutcome(
            passed=False, score=0, message="Insufficient content for readability analysis",
        )
    score = round_int(clamp(ease, 0.0, 100.0))
    return RuleOutcome(
        passed=score >= th["pass_score"],
        score=score,
        message=f"Flesch reading ease: {score}/100 ({readability_level(score)})",
    )
