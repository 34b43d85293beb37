"""
Additive combo enrichment: brand classification and intent class.

Both passes return a new ``ComboCoverage`` whose combos are copies carrying
the extra annotation. ``type`` and ``relevance_score`` are never touched;
``_rebuild`` checks that and raises if an enrichment ever changes them.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from aso_scorer.brand import BrandIntelligence
from aso_scorer.intent.coverage import classify_combo_intent
from aso_scorer.models.app import BrandInfo
from aso_scorer.models.combo import ClassifiedCombo, ComboCoverage
from aso_scorer.models.intent import IntentPattern

logger = logging.getLogger(__name__)

_LIST_FIELDS = (
    "title", "subtitle", "cross", "all_combos", "valuable", "low_value",
    "title_only", "subtitle_incremental", "fully_cross",
)


def _rebuild(
    coverage: ComboCoverage,
    annotate: Callable[[ClassifiedCombo], ClassifiedCombo],
) -> ComboCoverage:
    """Apply ``annotate`` once per key and rebuild every list view."""
    by_key: dict[str, ClassifiedCombo] = {}
    for combo in coverage.all_combos:
        enriched = annotate(combo)
        if enriched.type != combo.type or enriched.relevance_score != combo.relevance_score:
            raise ValueError(f"Enrichment altered classification of '{combo.text}'.")
        by_key[combo.key] = enriched

    def _swap(combo: ClassifiedCombo) -> ClassifiedCombo:
        replacement = by_key.get(combo.key)
        if replacement is None:
            return combo
        # Per-source lists keep their own ``source`` value.
        return replacement.model_copy(update={"source": combo.source})

    update = {name: [_swap(c) for c in getattr(coverage, name)] for name in _LIST_FIELDS}
    return coverage.model_copy(update=update)


def enrich_with_intent(
    coverage: ComboCoverage,
    patterns: Sequence[IntentPattern],
) -> ComboCoverage:
    """Annotate every combo with its intent class."""
    return _rebuild(
        coverage,
        lambda c: c.model_copy(update={"intent_class": classify_combo_intent(c.text, patterns)}),
    )


async def enrich_with_brand(
    coverage: ComboCoverage,
    brand_service: Optional[BrandIntelligence],
    brand_info: Optional[BrandInfo],
) -> ComboCoverage:
    """Annotate every combo with the brand collaborator's classification.

    Without a service or brand info, or if the service fails, the coverage is
    returned unchanged.
    """
    if brand_service is None or brand_info is None or not coverage.all_combos:
        return coverage

    texts = [c.text for c in coverage.all_combos]
    try:
        verdicts = await brand_service.classify_combos(texts, brand_info)
    except Exception as exc:
        logger.warning("Brand classification failed; combos left unannotated: %s", exc)
        return coverage

    if len(verdicts) != len(texts):
        logger.warning(
            "Brand service returned %d verdicts for %d combos; ignoring",
            len(verdicts), len(texts),
        )
        return coverage

    by_key = {c.key: v for c, v in zip(coverage.all_combos, verdicts)}
    return _rebuild(
        coverage,
        lambda c: c.model_copy(update={
            "brand_classification": by_key[c.key].classification,
            "matched_brand_alias": by_key[c.key].matched_brand_alias,
            "matched_competitor": by_key[c.key].matched_competitor,
        }),
    )
