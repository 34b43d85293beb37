"""
Pydantic v2 models for layered scoring configuration ("rulesets").

Model hierarchy
---------------
  RuleSetLayer       — one partial configuration (base / vertical / market / client)
    ├── RuleOverride — weight and threshold override for one scoring rule
    └── IntentPattern list (optional; see models.intent)
  MergedRuleSet      — effective configuration after the four-level merge
    ├── InheritanceChain — ids of the layers that took part
    └── LeakWarning      — override that does not fit the app's category

Every field of ``RuleSetLayer`` is optional (``None`` / empty means "not
set at this layer"). Layers are loaded from TOML files or an HTTP config
store and are immutable (frozen=True).
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from aso_scorer.models.intent import IntentPattern
from aso_scorer.models.kpi import KpiOverrideEntry
from aso_scorer.taxonomy.metadata_taxonomy import LeakSeverity, LeakType, Scope

DEFAULT_DISCOVERY_THRESHOLDS: dict[str, int] = {"excellent": 5, "good": 3, "moderate": 1}


class RuleOverride(BaseModel):
    """Override for one rule: a weight and/or threshold values.

    Attributes:
        weight:     Replacement weight; element weights are re-normalized.
        thresholds: Threshold name → value, merged over the rule defaults
                    (e.g. ``{"target_min": 60, "target_max": 95}``).
    """

    model_config = ConfigDict(frozen=True)

    weight: Optional[float] = None
    thresholds: dict[str, float] = {}

    @field_validator("weight")
    @classmethod
    def weight_in_unit_interval(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 1.0:
            raise ValueError(f"Rule weight override must be in [0, 1], got {v}.")
        return v


class RuleSetLayer(BaseModel):
    """One partial configuration layer.

    Attributes:
        id:    Layer identifier (e.g. "vertical:language_learning").
        scope: Which slot of the hierarchy this layer fills.
        token_relevance_overrides: token → tier 0–3.
        hook_overrides:            hook category → multiplier.
        stopwords:                 Extra stopwords (unioned across layers).
        kpi_overrides:             KPI id → weight multiplier.
        family_weight_overrides:   KPI family id → weight multiplier.
        rule_overrides:            rule id → RuleOverride.
        recommendation_templates:  recommendation id → message template.
        discovery_thresholds:      Named combo-count thresholds.
        intent_patterns:           Replacement intent pattern list.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    scope: Scope
    token_relevance_overrides: dict[str, int] = {}
    hook_overrides:            dict[str, float] = {}
    stopwords:                 list[str] = []
    kpi_overrides:             dict[str, float] = {}
    family_weight_overrides:   dict[str, float] = {}
    rule_overrides:            dict[str, RuleOverride] = {}
    recommendation_templates:  dict[str, str] = {}
    discovery_thresholds:      dict[str, int] = {}
    intent_patterns:           Optional[list[IntentPattern]] = None

    @field_validator("token_relevance_overrides")
    @classmethod
    def tiers_in_range(cls, v: dict[str, int]) -> dict[str, int]:
        bad = {tok: tier for tok, tier in v.items() if not 0 <= tier <= 3}
        if bad:
            raise ValueError(f"Token relevance overrides must be 0-3, got {bad}.")
        return {tok.lower(): tier for tok, tier in v.items()}

    @field_validator("stopwords")
    @classmethod
    def lowercase_stopwords(cls, v: list[str]) -> list[str]:
        return [w.lower() for w in v]


class InheritanceChain(BaseModel):
    """Layer ids that took part in a merge; ``None`` means absent."""

    model_config = ConfigDict(frozen=True)

    base:     str = "base"
    vertical: Optional[str] = None
    market:   Optional[str] = None
    client:   Optional[str] = None

    def layer_id(self, scope: Scope) -> Optional[str]:
        return getattr(self, scope.value)


class LeakWarning(BaseModel):
    """Configuration that does not fit the app's category."""

    model_config = ConfigDict(frozen=True)

    type:     LeakType
    severity: LeakSeverity
    message:  str
    source:   Optional[str] = None


class MergedRuleSet(BaseModel):
    """Effective configuration for one evaluation.

    ``ancestry`` maps every overridden scalar field name, and every key of a
    map field as ``"<field>.<key>"``, to the scope that supplied its final
    value. Fields absent from ``ancestry`` fall back to code defaults.

    ``kpi_override_trail`` lists, per KPI id, every layer that set a weight
    multiplier for it, least specific first.
    """

    model_config = ConfigDict(frozen=True)

    vertical_id:     str = "base"
    market_id:       Optional[str] = None
    organization_id: Optional[str] = None
    app_id:          Optional[str] = None

    token_relevance_overrides: dict[str, int] = {}
    hook_overrides:            dict[str, float] = {}
    stopwords:                 list[str] = []
    kpi_overrides:             dict[str, float] = {}
    family_weight_overrides:   dict[str, float] = {}
    rule_overrides:            dict[str, RuleOverride] = {}
    recommendation_templates:  dict[str, str] = {}
    discovery_thresholds:      dict[str, int] = dict(DEFAULT_DISCOVERY_THRESHOLDS)
    intent_patterns:           Optional[list[IntentPattern]] = None

    inheritance_chain: InheritanceChain = InheritanceChain()
    ancestry:          dict[str, Scope] = {}
    kpi_override_trail: dict[str, list[KpiOverrideEntry]] = {}
    leak_warnings:     list[LeakWarning] = []
    fallback_notes:    list[str] = []
    fallback_mode:     bool = False
    source:            Literal["code", "hybrid"] = "code"

    @property
    def scope_key(self) -> str:
        """Cache key identifying this configuration's override tables."""
        chain = self.inheritance_chain
        return "|".join(
            part or "-"
            for part in (chain.base, chain.vertical, chain.market, chain.client)
        )

    def origin(self, field: str, key: Optional[str] = None) -> Scope:
        """Scope that supplied ``field`` (or ``field[key]``); BASE if none."""
        name = f"{field}.{key}" if key is not None else field
        return self.ancestry.get(name, Scope.BASE)
