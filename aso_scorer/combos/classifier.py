"""
Combo classification: branded / generic / low_value.

Rules (applied in order, first match wins)
------------------------------------------
1. low_value  — average token relevance is 0, or the combo text matches a
                numeric / time-bound / version screen. Relevance 0.
2. branded    — contains one of the brand-position tokens (the title's two
                highest-relevance keywords with relevance >= 2). Relevance 3.
3. generic    — everything else. Relevance ``min(2, round(avg))``.

The rules form a total function: every combo receives exactly one type.
"""

from __future__ import annotations

import re
from typing import Iterable

from aso_scorer.models.combo import ClassifiedCombo
from aso_scorer.relevance.oracle import RelevanceOracle
from aso_scorer.taxonomy.metadata_taxonomy import ComboSource, ComboType
from aso_scorer.utils.numeric import round_int

LOW_VALUE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b\d+\b"),
    re.compile(
        r"\b(day|days|week|weeks|month|months|year|years|trial|limited|offer|sale|deal)\b"
    ),
    re.compile(r"\b(new|latest|updated|version)\b"),
)

BRAND_TOKEN_COUNT = 2
BRAND_MIN_RELEVANCE = 2


def canonical_key(tokens: Iterable[str]) -> str:
    """Order-independent key: lowercase tokens sorted and space-joined."""
    return " ".join(sorted(t.lower() for t in tokens))


def brand_tokens_for(title_keywords: list[str], oracle: RelevanceOracle) -> list[str]:
    """The title's top-relevance keywords that mark a combo as branded.

    Ranks unique title keywords by relevance (desc), breaking ties by
    position, and keeps the first two with relevance >= 2.
    """
    seen: dict[str, int] = {}
    for pos, token in enumerate(title_keywords):
        seen.setdefault(token, pos)
    ranked = sorted(seen, key=lambda t: (-oracle.relevance(t), seen[t]))
    strong = [t for t in ranked if oracle.relevance(t) >= BRAND_MIN_RELEVANCE]
    return strong[:BRAND_TOKEN_COUNT]


def is_low_value_text(text: str) -> bool:
    return any(p.search(text) for p in LOW_VALUE_PATTERNS)


def classify_combo(
    tokens: tuple[str, ...],
    source: ComboSource,
    brand_tokens: Iterable[str],
    oracle: RelevanceOracle,
) -> ClassifiedCombo:
    """Classify one combo (tokens in text order).

    Args:
        tokens:       2–4 tokens in first-seen order.
        source:       Field(s) the combo came from.
        brand_tokens: Output of ``brand_tokens_for``.
        oracle:       Relevance oracle for the active configuration.

    Returns:
        A frozen ``ClassifiedCombo`` with no enrichment annotations.
    """
    text = " ".join(tokens)
    avg = oracle.average(tokens)
    brand_set = set(brand_tokens)

    if avg == 0 or is_low_value_text(text):
        combo_type, relevance = ComboType.LOW_VALUE, 0
    elif brand_set.intersection(tokens):
        combo_type, relevance = ComboType.BRANDED, 3
    else:
        combo_type, relevance = ComboType.GENERIC, min(2, round_int(avg))

    return ClassifiedCombo(
        text=text,
        key=canonical_key(tokens),
        tokens=tokens,
        source=source,
        type=combo_type,
        relevance_score=relevance,
    )
