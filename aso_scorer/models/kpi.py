"""
Pydantic v2 models for KPI engine output.

The static ``KpiDefinition`` lives in ``aso_scorer.kpi.registry`` as a frozen
dataclass; these models are the per-evaluation results.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from aso_scorer.taxonomy.metadata_taxonomy import KpiFamily, Scope


class KpiOverrideEntry(BaseModel):
    """One step in a KPI weight override's provenance."""

    model_config = ConfigDict(frozen=True)

    scope:      Scope
    multiplier: float
    source_id:  Optional[str] = None


class KpiResult(BaseModel):
    """One computed KPI.

    Attributes:
        value:               Raw formula output (before clamping).
        normalized:          0–100 after direction-aware normalization.
        effective_weight:    Registry weight × override multiplier.
        override_multiplier: Clamped multiplier from the resolved ruleset.
        provenance:          Base entry plus one entry per overriding scope.
    """

    model_config = ConfigDict(frozen=True)

    id:                  str
    family_id:           KpiFamily
    label:               str
    value:               float
    normalized:          float
    effective_weight:    float
    override_multiplier: float = 1.0
    provenance:          list[KpiOverrideEntry] = []

    @field_validator("normalized")
    @classmethod
    def normalized_in_range(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"Normalized KPI must be in [0, 100], got {v}.")
        return v


class KpiFamilyResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id:      KpiFamily
    label:   str
    score:   float
    weight:  float
    kpi_ids: list[str] = []


class KpiEngineResult(BaseModel):
    """Full KPI output.

    ``vector`` holds normalized values in registry order. Its length and order
    are a contract with downstream consumers for a given ``version``.
    """

    model_config = ConfigDict(frozen=True)

    version:       str
    vector:        list[float]
    kpis:          dict[str, KpiResult]
    families:      dict[KpiFamily, KpiFamilyResult]
    overall_score: float
    intent_fallback_mode: bool = False
