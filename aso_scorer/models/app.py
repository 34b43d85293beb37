"""
Input model and collaborator payloads.

``AppMetadata`` is what a caller hands to the evaluator: pre-fetched listing
text plus the identifiers used to resolve configuration. The brand and
benchmark payloads are what the external collaborators return.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from aso_scorer.taxonomy.metadata_taxonomy import (
    BrandClassification,
    MetadataElement,
    Platform,
)


class AppMetadata(BaseModel):
    """Listing text and scope identifiers for one evaluation.

    Attributes:
        title / subtitle / description: Raw listing text ("" when absent).
        category:        Store category name (e.g. "Education").
        locale:          Locale or market code (e.g. "en-US", "uk").
        app_id:          Store app identifier; selects an app-level client layer.
        organization_id: Owning organization; selects an org-level client layer.
        platform:        Overrides the configured default platform.
        brand_aliases:   Known brand names/aliases for the brand collaborator.
        competitor_aliases: Known competitor names for the brand collaborator.
    """

    model_config = ConfigDict(frozen=True)

    title:       str = ""
    subtitle:    str = ""
    description: str = ""
    category:    str = ""
    locale:      str = "us"
    app_id:          Optional[str] = None
    organization_id: Optional[str] = None
    platform:        Optional[Platform] = None
    brand_aliases:      list[str] = []
    competitor_aliases: list[str] = []

    @field_validator("title", "subtitle", "description", "category", "locale", mode="before")
    @classmethod
    def none_to_empty(cls, v: Optional[str]) -> str:
        return (v or "").strip()


class BrandInfo(BaseModel):
    """Canonical brand name and its aliases (lowercase)."""

    model_config = ConfigDict(frozen=True)

    canonical_brand: str
    aliases: list[str] = []
    competitors: list[str] = []


class BrandComboClassification(BaseModel):
    """Brand-intelligence verdict for one combo text."""

    model_config = ConfigDict(frozen=True)

    classification:      BrandClassification
    matched_brand_alias: Optional[str] = None
    matched_competitor:  Optional[str] = None


class BenchmarkComparison(BaseModel):
    """Advisory comparison of an element score against its category."""

    model_config = ConfigDict(frozen=True)

    element:    MetadataElement
    category:   str
    score:      float
    percentile: float
    category_median: Optional[float] = None
    label:      str = ""
