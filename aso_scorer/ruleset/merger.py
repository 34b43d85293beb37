"""
Four-level configuration merge: base → vertical → market → client.

One policy applies to every field of ``RuleSetLayer`` (identity fields
``id`` and ``scope`` excluded), decided by the value's shape:

  scalar  — replaces the inherited value when the layer sets it
  map     — shallow merge; each key present in the layer replaces the
            inherited entry for that key
  list    — replaces the inherited list when the layer sets it
  stopwords (list) — union, never removes

Every scalar/list field and every map key that a layer supplies is recorded
in ``ancestry`` (``"token_relevance_overrides.learn" → client``), so that
rule results and KPI provenance can name the scope behind a value.

After the merge, multiplier maps are clamped to [0.5, 2.0].
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from aso_scorer.models.kpi import KpiOverrideEntry
from aso_scorer.models.ruleset import (
    DEFAULT_DISCOVERY_THRESHOLDS,
    InheritanceChain,
    MergedRuleSet,
    RuleSetLayer,
)
from aso_scorer.taxonomy.metadata_taxonomy import SCOPE_ORDER, Scope
from aso_scorer.utils.numeric import clamp

logger = logging.getLogger(__name__)

MULTIPLIER_MIN = 0.5
MULTIPLIER_MAX = 2.0

_IDENTITY_FIELDS = frozenset({"id", "scope"})
_UNION_FIELDS = frozenset({"stopwords"})
_MULTIPLIER_FIELDS = ("hook_overrides", "kpi_overrides", "family_weight_overrides")

MERGEABLE_FIELDS: tuple[str, ...] = tuple(
    name for name in RuleSetLayer.model_fields if name not in _IDENTITY_FIELDS
)


def _overlay(
    state: dict[str, Any],
    ancestry: dict[str, Scope],
    layer: RuleSetLayer,
    scope: Scope,
) -> None:
    """Apply one layer onto the running merge state in place."""
    for name in MERGEABLE_FIELDS:
        value = getattr(layer, name)
        if value is None:
            continue

        if name in _UNION_FIELDS:
            if value:
                current = list(state.get(name) or [])
                current.extend(v for v in value if v not in current)
                state[name] = current
                ancestry[name] = scope
        elif isinstance(value, dict):
            if value:
                merged = dict(state.get(name) or {})
                for key, item in value.items():
                    merged[key] = item
                    ancestry[f"{name}.{key}"] = scope
                state[name] = merged
        elif isinstance(value, list):
            if name in layer.model_fields_set:
                state[name] = list(value)
                ancestry[name] = scope
        else:
            state[name] = value
            ancestry[name] = scope


def _clamp_multipliers(state: dict[str, Any]) -> None:
    for name in _MULTIPLIER_FIELDS:
        table = state.get(name)
        if not table:
            continue
        clamped = {k: clamp(float(v), MULTIPLIER_MIN, MULTIPLIER_MAX) for k, v in table.items()}
        changed = sorted(k for k in table if clamped[k] != table[k])
        if changed:
            logger.debug("Clamped %s multipliers to [%.1f, %.1f]: %s",
                         name, MULTIPLIER_MIN, MULTIPLIER_MAX, changed)
        state[name] = clamped


def combine_layers(
    layers: Sequence[RuleSetLayer],
    layer_id: str,
    scope: Scope,
) -> Optional[RuleSetLayer]:
    """Collapse several layers of one slot (e.g. org then app) into one.

    Later layers win, with the same policy as ``merge_layers``. Returns
    None when ``layers`` is empty and the single layer unchanged when there
    is exactly one.
    """
    if not layers:
        return None
    if len(layers) == 1:
        return layers[0]
    state: dict[str, Any] = {}
    for layer in layers:
        _overlay(state, {}, layer, scope)
    return RuleSetLayer(id=layer_id, scope=scope, **state)


def merge_layers(
    base: RuleSetLayer,
    vertical: Optional[RuleSetLayer] = None,
    market: Optional[RuleSetLayer] = None,
    client: Optional[RuleSetLayer] = None,
    *,
    vertical_id: str = "base",
    market_id: Optional[str] = None,
    organization_id: Optional[str] = None,
    app_id: Optional[str] = None,
) -> MergedRuleSet:
    """Merge up to four layers into the effective configuration.

    Absent layers (None) are skipped. The merge is deterministic: the same
    layers always yield an equal ``MergedRuleSet``.

    Args:
        base:     Code-default layer; always present.
        vertical: Vertical layer, if one was loaded.
        market:   Market layer, if one was loaded.
        client:   Client layer (org and app already combined), if any.

    Returns:
        MergedRuleSet with ancestry and inheritance chain filled in. Leak
        warnings and fallback notes are left empty for the resolver.
    """
    state: dict[str, Any] = {"discovery_thresholds": dict(DEFAULT_DISCOVERY_THRESHOLDS)}
    ancestry: dict[str, Scope] = {}
    slots = dict(zip(SCOPE_ORDER, (base, vertical, market, client)))

    for scope in SCOPE_ORDER:
        layer = slots[scope]
        if layer is not None:
            _overlay(state, ancestry, layer, scope)

    _clamp_multipliers(state)

    trail: dict[str, list[KpiOverrideEntry]] = {}
    for scope in SCOPE_ORDER:
        layer = slots[scope]
        if layer is None:
            continue
        for kpi_id, multiplier in layer.kpi_overrides.items():
            trail.setdefault(kpi_id, []).append(KpiOverrideEntry(
                scope=scope,
                multiplier=clamp(float(multiplier), MULTIPLIER_MIN, MULTIPLIER_MAX),
                source_id=layer.id,
            ))

    chain = InheritanceChain(
        base=base.id,
        vertical=vertical.id if vertical is not None else None,
        market=market.id if market is not None else None,
        client=client.id if client is not None else None,
    )
    return MergedRuleSet(
        vertical_id=vertical_id,
        market_id=market_id,
        organization_id=organization_id,
        app_id=app_id,
        inheritance_chain=chain,
        ancestry=ancestry,
        kpi_override_trail=trail,
        **state,
    )
