"""
Pydantic v2 models for keyword combos.

A combo is a 2–4 token n-gram used as a proxy for a multi-word search
query. ``ClassifiedCombo`` instances are frozen: enrichment passes (brand,
intent) return copies via ``model_copy(update=...)`` and may only fill the
optional annotation fields, never ``type`` or ``relevance_score``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from aso_scorer.taxonomy.metadata_taxonomy import (
    BrandClassification,
    ComboIntent,
    ComboSource,
    ComboType,
)


class ClassifiedCombo(BaseModel):
    """One deduplicated, classified combo.

    Attributes:
        text:            Tokens in first-seen word order, space-joined.
        key:             Canonical form: tokens sorted, space-joined.
        tokens:          Tokens in first-seen word order.
        source:          Field(s) the combo was first generated from.
        type:            branded / generic / low_value.
        relevance_score: 0–3 (0 for low_value, 3 for branded).
        brand_classification: Optional annotation from brand intelligence.
        matched_brand_alias:  Brand alias that triggered ``brand``.
        matched_competitor:   Competitor alias that triggered ``competitor``.
        intent_class:    Optional annotation from intent patterns.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    key: str
    tokens: tuple[str, ...]
    source: ComboSource
    type: ComboType
    relevance_score: int

    brand_classification: Optional[BrandClassification] = None
    matched_brand_alias:  Optional[str] = None
    matched_competitor:   Optional[str] = None
    intent_class:         Optional[ComboIntent] = None

    @field_validator("relevance_score")
    @classmethod
    def relevance_in_range(cls, v: int) -> int:
        if not 0 <= v <= 3:
            raise ValueError(f"relevance_score must be in [0, 3], got {v}.")
        return v

    @model_validator(mode="after")
    def length_in_range(self) -> "ClassifiedCombo":
        if not 2 <= len(self.tokens) <= 4:
            raise ValueError(
                f"Combo must have 2-4 tokens, got {len(self.tokens)} ('{self.text}')."
            )
        return self

    @property
    def length(self) -> int:
        return len(self.tokens)


class ComboCoverage(BaseModel):
    """All combo sets derived for one evaluation.

    ``title``, ``subtitle`` and ``cross`` hold each source's deduplicated
    combos. ``all_combos`` is their union by key (first source wins, in
    title → subtitle → cross order). The derived views below are lists of
    the same objects, filtered:

    Attributes:
        valuable:             ``all_combos`` that are branded or generic.
        low_value:            ``all_combos`` classified low_value.
        title_only:           Valuable combos whose key is in the title set.
        subtitle_incremental: Valuable subtitle/cross combos whose key is not
                              in the title set.
        fully_cross:          Valuable cross combos whose key appears in
                              neither the title nor the subtitle set.
        brand_tokens:         Tokens used for the branded classification.
    """

    model_config = ConfigDict(frozen=True)

    title:    list[ClassifiedCombo] = []
    subtitle: list[ClassifiedCombo] = []
    cross:    list[ClassifiedCombo] = []

    all_combos:           list[ClassifiedCombo] = []
    valuable:             list[ClassifiedCombo] = []
    low_value:            list[ClassifiedCombo] = []
    title_only:           list[ClassifiedCombo] = []
    subtitle_incremental: list[ClassifiedCombo] = []
    fully_cross:          list[ClassifiedCombo] = []

    brand_tokens: list[str] = []

    @property
    def total(self) -> int:
        return len(self.all_combos)

    def count_by_type(self, combos: list[ClassifiedCombo], combo_type: ComboType) -> int:
        return sum(1 for c in combos if c.type == combo_type)
