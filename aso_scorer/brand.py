"""
Brand intelligence collaborator.

The engine does not extract brands itself; it consumes a service that knows
an app's canonical brand, its aliases and its competitors. This module holds
the protocol plus ``StaticBrandIntelligence``, which answers from alias lists
supplied with the request (``AppMetadata.brand_aliases`` /
``competitor_aliases``) and performs no guessing.
"""

from __future__ import annotations

import re
from typing import Optional, Protocol, Sequence

from aso_scorer.models.app import AppMetadata, BrandComboClassification, BrandInfo
from aso_scorer.taxonomy.metadata_taxonomy import BrandClassification
from aso_scorer.text.tokenizer import tokenize


class BrandIntelligence(Protocol):
    async def extract_canonical_brand(self, app: AppMetadata) -> Optional[BrandInfo]:
        ...

    async def classify_combos(
        self,
        combo_texts: Sequence[str],
        brand_info: BrandInfo,
    ) -> list[BrandComboClassification]:
        ...


def _normalize_alias(alias: str) -> str:
    return " ".join(tokenize(alias))


def _contains_phrase(text: str, phrase: str) -> bool:
    if not phrase:
        return False
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


def find_alias(text: str, aliases: Sequence[str]) -> Optional[str]:
    """First alias that appears in ``text`` as a whole-word phrase."""
    normalized = " ".join(tokenize(text))
    for alias in aliases:
        if _contains_phrase(normalized, alias):
            return alias
    return None


class StaticBrandIntelligence:
    """Brand answers from explicit alias lists; no extraction heuristics."""

    async def extract_canonical_brand(self, app: AppMetadata) -> Optional[BrandInfo]:
        aliases = [a for a in (_normalize_alias(x) for x in app.brand_aliases) if a]
        if not aliases:
            return None
        competitors = [c for c in (_normalize_alias(x) for x in app.competitor_aliases) if c]
        return BrandInfo(
            canonical_brand=aliases[0],
            aliases=list(dict.fromkeys(aliases)),
            competitors=list(dict.fromkeys(competitors)),
        )

    async def classify_combos(
        self,
        combo_texts: Sequence[str],
        brand_info: BrandInfo,
    ) -> list[BrandComboClassification]:
        results: list[BrandComboClassification] = []
        for text in combo_texts:
            brand = find_alias(text, brand_info.aliases)
            if brand is not None:
                results.append(BrandComboClassification(
                    classification=BrandClassification.BRAND, matched_brand_alias=brand,
                ))
                continue
            competitor = find_alias(text, brand_info.competitors)
            if competitor is not None:
                results.append(BrandComboClassification(
                    classification=BrandClassification.COMPETITOR, matched_competitor=competitor,
                ))
                continue
            results.append(BrandComboClassification(classification=BrandClassification.GENERIC))
        return results


def brand_presence(tokens: Sequence[str], brand_info: Optional[BrandInfo]) -> int:
    """1 if any brand alias appears in the token sequence, else 0."""
    if brand_info is None or not tokens:
        return 0
    return 1 if find_alias(" ".join(tokens), brand_info.aliases) else 0
