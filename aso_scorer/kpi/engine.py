"""
KPI engine: primitives → normalized KPI vector → family and overall scores.

Aggregation
-----------
  KPI weight     = registry weight × kpi_overrides[id]   (multiplier 0.5–2.0)
  family score   = Σ normalized × weight / Σ weight      over the family's KPIs
  family weight  = registry weight × family_weight_overrides[id], re-normalized
  overall score  = Σ family score × family weight / Σ family weight

A zero weight sum yields a score of 0. Family and overall scores are
rounded to two decimals.

Intent fallback
---------------
When intent coverage ran on the fallback pattern set, normalized intent KPIs
are floored at ``INTENT_FALLBACK_FLOOR``.
"""

from __future__ import annotations

import logging
from typing import Optional

from aso_scorer.kpi.formulas import compute_raw
from aso_scorer.kpi.normalize import normalize
from aso_scorer.kpi.primitives import KpiPrimitives
from aso_scorer.kpi.registry import (
    FAMILY_REGISTRY,
    INTENT_KPI_IDS,
    KPI_ENGINE_VERSION,
    KPI_REGISTRY,
    KpiDefinition,
)
from aso_scorer.models.kpi import (
    KpiEngineResult,
    KpiFamilyResult,
    KpiOverrideEntry,
    KpiResult,
)
from aso_scorer.models.ruleset import MergedRuleSet
from aso_scorer.taxonomy.metadata_taxonomy import KpiFamily, Scope
from aso_scorer.utils.numeric import clamp, round_half_up

logger = logging.getLogger(__name__)

INTENT_FALLBACK_FLOOR = 50.0


def override_provenance(
    kpi_id: str,
    ruleset: Optional[MergedRuleSet],
) -> tuple[float, list[KpiOverrideEntry]]:
    """Effective multiplier for ``kpi_id`` and the scopes that set it.

    The first provenance entry is always the base (multiplier 1); each layer
    that set a multiplier follows, least specific first.
    """
    if ruleset is None:
        return 1.0, [KpiOverrideEntry(scope=Scope.BASE, multiplier=1.0, source_id="base")]

    provenance = [
        KpiOverrideEntry(
            scope=Scope.BASE, multiplier=1.0, source_id=ruleset.inheritance_chain.base,
        )
    ]
    provenance.extend(ruleset.kpi_override_trail.get(kpi_id, []))
    multiplier = ruleset.kpi_overrides.get(kpi_id, 1.0)
    if multiplier != 1.0 and len(provenance) == 1:
        # Overrides built without a trail still name their final scope.
        scope = ruleset.origin("kpi_overrides", kpi_id)
        provenance.append(KpiOverrideEntry(
            scope=scope, multiplier=multiplier, source_id=ruleset.inheritance_chain.layer_id(scope),
        ))
    return multiplier, provenance


def _weighted_mean(pairs: list[tuple[float, float]]) -> float:
    total_weight = sum(w for _, w in pairs)
    if total_weight <= 0:
        return 0.0
    return sum(v * w for v, w in pairs) / total_weight


def _kpi_result(
    kpi: KpiDefinition,
    primitives: KpiPrimitives,
    ruleset: Optional[MergedRuleSet],
) -> KpiResult:
    raw = compute_raw(kpi.id, primitives)
    normalized = normalize(raw, kpi)
    if primitives.intent_fallback_mode and kpi.id in INTENT_KPI_IDS:
        normalized = max(normalized, INTENT_FALLBACK_FLOOR)

    multiplier, provenance = override_provenance(kpi.id, ruleset)
    if multiplier != 1.0:
        logger.debug(
            "KPI '%s' weight %.3f → %.3f (×%.2f, scope=%s)",
            kpi.id, kpi.weight, kpi.weight * multiplier, multiplier, provenance[-1].scope,
        )
    return KpiResult(
        id=kpi.id,
        family_id=kpi.family_id,
        label=kpi.label,
        value=raw,
        normalized=round_half_up(clamp(normalized, 0.0, 100.0), 2),
        effective_weight=kpi.weight * multiplier,
        override_multiplier=multiplier,
        provenance=provenance,
    )


def compute_kpis(
    primitives: KpiPrimitives,
    ruleset: Optional[MergedRuleSet] = None,
) -> KpiEngineResult:
    """Evaluate every registered KPI and fold them into family scores.

    Args:
        primitives: Output of ``compute_primitives``.
        ruleset:    Resolved configuration supplying KPI and family weight
                    multipliers; registry weights are used when omitted.

    Returns:
        ``KpiEngineResult`` whose ``vector`` follows ``KPI_REGISTRY`` order.
    """
    kpis = {kpi.id: _kpi_result(kpi, primitives, ruleset) for kpi in KPI_REGISTRY}

    family_weights: dict[KpiFamily, float] = {}
    for family in FAMILY_REGISTRY:
        multiplier = 1.0
        if ruleset is not None:
            multiplier = ruleset.family_weight_overrides.get(family.id.value, 1.0)
            if multiplier != 1.0:
                logger.debug("Family '%s' weight ×%.2f", family.id, multiplier)
        family_weights[family.id] = family.weight * multiplier
    weight_total = sum(family_weights.values())

    families: dict[KpiFamily, KpiFamilyResult] = {}
    for family in FAMILY_REGISTRY:
        members = [kpis[k.id] for k in KPI_REGISTRY if k.family_id == family.id]
        score = _weighted_mean([(r.normalized, r.effective_weight) for r in members])
        families[family.id] = KpiFamilyResult(
            id=family.id,
            label=family.label,
            score=round_half_up(score, 2),
            weight=family_weights[family.id] / weight_total if weight_total > 0 else 0.0,
            kpi_ids=[r.id for r in members],
        )

    overall = _weighted_mean([(f.score, f.weight) for f in families.values()])
    return KpiEngineResult(
        version=KPI_ENGINE_VERSION,
        vector=[kpis[k.id].normalized for k in KPI_REGISTRY],
        kpis=kpis,
        families=families,
        overall_score=round_half_up(overall, 2),
        intent_fallback_mode=primitives.intent_fallback_mode,
    )
