"""
Combo generation: title, subtitle and cross-element n-grams.

Windows
-------
Combos are contiguous windows of 2–4 tokens over a field's *keyword*
sequence (stopwords and short tokens removed). Two keywords that were
separated only by stopwords in the original text are therefore adjacent,
which yields the stopword-bridged combos ("learn *to* speak" → "learn speak").
Windows with a repeated token, and windows where every token has relevance
0 (pure noise), are not emitted.

Sources
-------
title     windows over title keywords
subtitle  windows over subtitle keywords
cross     windows over ``title_keywords + subtitle_keywords`` that straddle
          the boundary: at least one title token and one subtitle token

Derived views (on valuable combos only)
---------------------------------------
title_only            key appears in the title set
subtitle_incremental  key not in the title set (subtitle or cross origin);
                      these exist only because of subtitle content
fully_cross           key appears in neither the title nor the subtitle set

Deduplication is by canonical key (sorted tokens), keeping the first combo in
title → subtitle → cross order, then by window start position. Output order is
fully determined by the input token order.
"""

from __future__ import annotations

import logging

from aso_scorer.combos.classifier import brand_tokens_for, classify_combo
from aso_scorer.models.combo import ClassifiedCombo, ComboCoverage
from aso_scorer.models.tokens import TokenizationResult
from aso_scorer.relevance.oracle import RelevanceOracle
from aso_scorer.taxonomy.metadata_taxonomy import ComboSource, ComboType

logger = logging.getLogger(__name__)

MIN_COMBO_LENGTH = 2
MAX_COMBO_LENGTH = 4


def _is_emittable(window: tuple[str, ...], oracle: RelevanceOracle) -> bool:
    if len(set(window)) != len(window):
        return False
    return any(oracle.relevance(t) > 0 for t in window)


def keyword_windows(
    keywords: list[str],
    oracle: RelevanceOracle,
    min_n: int = MIN_COMBO_LENGTH,
    max_n: int = MAX_COMBO_LENGTH,
) -> list[tuple[str, ...]]:
    """All emittable windows, ordered by start position then length."""
    windows: list[tuple[str, ...]] = []
    for start in range(len(keywords)):
        for n in range(min_n, max_n + 1):
            if start + n > len(keywords):
                break
            window = tuple(keywords[start:start + n])
            if _is_emittable(window, oracle):
                windows.append(window)
    return windows


def cross_windows(
    title_keywords: list[str],
    subtitle_keywords: list[str],
    oracle: RelevanceOracle,
    min_n: int = MIN_COMBO_LENGTH,
    max_n: int = MAX_COMBO_LENGTH,
) -> list[tuple[str, ...]]:
    """Windows over the concatenation that straddle the title/subtitle boundary."""
    if not title_keywords or not subtitle_keywords:
        return []
    joined = title_keywords + subtitle_keywords
    boundary = len(title_keywords)
    windows: list[tuple[str, ...]] = []
    for start in range(boundary):
        for n in range(min_n, max_n + 1):
            end = start + n
            if end > len(joined):
                break
            if end <= boundary:
                continue
            window = tuple(joined[start:end])
            if _is_emittable(window, oracle):
                windows.append(window)
    return windows


def _dedupe(combos: list[ClassifiedCombo]) -> list[ClassifiedCombo]:
    seen: dict[str, ClassifiedCombo] = {}
    for combo in combos:
        seen.setdefault(combo.key, combo)
    return list(seen.values())


def generate_combo_coverage(
    title: TokenizationResult,
    subtitle: TokenizationResult,
    oracle: RelevanceOracle,
) -> ComboCoverage:
    """Generate, classify and partition combos for title + subtitle.

    Args:
        title:    Tokenized title.
        subtitle: Tokenized subtitle.
        oracle:   Relevance oracle for the active configuration.

    Returns:
        ``ComboCoverage`` with per-source lists and derived views.
    """
    brand_tokens = brand_tokens_for(title.keywords, oracle)

    def _classify(windows: list[tuple[str, ...]], source: ComboSource) -> list[ClassifiedCombo]:
        return _dedupe([classify_combo(w, source, brand_tokens, oracle) for w in windows])

    title_combos = _classify(keyword_windows(title.keywords, oracle), ComboSource.TITLE)
    subtitle_combos = _classify(keyword_windows(subtitle.keywords, oracle), ComboSource.SUBTITLE)
    cross_combos = _classify(
        cross_windows(title.keywords, subtitle.keywords, oracle), ComboSource.CROSS
    )

    all_combos = _dedupe(title_combos + subtitle_combos + cross_combos)
    title_keys = {c.key for c in title_combos}
    subtitle_keys = {c.key for c in subtitle_combos}

    valuable = [c for c in all_combos if c.type != ComboType.LOW_VALUE]
    low_value = [c for c in all_combos if c.type == ComboType.LOW_VALUE]

    coverage = ComboCoverage(
        title=title_combos,
        subtitle=subtitle_combos,
        cross=cross_combos,
        all_combos=all_combos,
        valuable=valuable,
        low_value=low_value,
        title_only=[c for c in valuable if c.key in title_keys],
        subtitle_incremental=[c for c in valuable if c.key not in title_keys],
        fully_cross=[
            c for c in valuable
            if c.key not in title_keys and c.key not in subtitle_keys
        ],
        brand_tokens=brand_tokens,
    )
    logger.debug(
        "Combos: %d total (%d valuable, %d low-value, %d subtitle-incremental)",
        coverage.total, len(valuable), len(low_value), len(coverage.subtitle_incremental),
    )
    return coverage
