"""
Ruleset resolution: scope identifiers → ``MergedRuleSet``.

Steps
-----
1. Detect the vertical (category + listing text) and market (locale).
2. Load the vertical, market, organization and app layers concurrently.
   Each load is isolated: an exception drops only that layer, adds a
   fallback note and logs a WARNING.
3. Combine org → app into the client slot. Org and app layers live under
   separate client keys (``org/<id>``, ``app/<id>``).
4. ``merge_layers(base, vertical, market, client)``.
5. Attach leak warnings, fallback notes and the source tag
   ("code" when only the base layer took part, else "hybrid").

``resolve`` never raises for store problems.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from aso_scorer.errors import LayerLoadError
from aso_scorer.models.app import AppMetadata
from aso_scorer.models.ruleset import MergedRuleSet, RuleSetLayer
from aso_scorer.ruleset.detection import detect_market, detect_vertical
from aso_scorer.ruleset.leaks import detect_leaks
from aso_scorer.ruleset.merger import combine_layers, merge_layers
from aso_scorer.ruleset.store import ConfigStore, LayerCache, app_layer_key, org_layer_key
from aso_scorer.taxonomy.metadata_taxonomy import Market, Scope, Vertical

logger = logging.getLogger(__name__)

BASE_LAYER = RuleSetLayer(id="base", scope=Scope.BASE)


class RulesetResolver:
    """Resolves the effective configuration for one app.

    Attributes:
        store: Where vertical/market/client layers come from.
        cache: Optional ``LayerCache`` shared across resolutions.
        base:  Code-default layer, always present.
    """

    def __init__(
        self,
        store: ConfigStore,
        cache: Optional[LayerCache] = None,
        base: RuleSetLayer = BASE_LAYER,
    ) -> None:
        self.store = store
        self.cache = cache
        self.base = base

    async def _load(self, scope: Scope, key: Optional[str]) -> tuple[Optional[RuleSetLayer], Optional[str]]:
        """Load one layer; returns ``(layer, fallback_note)``."""
        if not key:
            return None, None
        if self.cache is not None:
            hit, cached = self.cache.lookup(scope, key)
            if hit:
                return cached, None

        try:
            layer = await self.store.load_layer(scope, key)
        except Exception as exc:
            reason = exc.reason if isinstance(exc, LayerLoadError) else (str(exc) or type(exc).__name__)
            note = str(LayerLoadError(scope.value, key, reason))
            logger.warning("Falling back: %s", note)
            return None, note

        if self.cache is not None:
            self.cache.store(scope, key, layer)
        return layer, None

    async def resolve_scopes(
        self,
        vertical: Vertical = Vertical.BASE,
        market: Optional[Market] = None,
        organization_id: Optional[str] = None,
        app_id: Optional[str] = None,
        category: str = "",
    ) -> MergedRuleSet:
        """Resolve for explicit scope identifiers (no detection)."""
        vertical_key = vertical.value if vertical != Vertical.BASE else None
        market_key = market.value if market is not None else None

        loaded = await asyncio.gather(
            self._load(Scope.VERTICAL, vertical_key),
            self._load(Scope.MARKET, market_key),
            self._load(Scope.CLIENT, org_layer_key(organization_id)),
            self._load(Scope.CLIENT, app_layer_key(app_id)),
        )
        (vertical_layer, _), (market_layer, _), (org_layer, _), (app_layer, _) = loaded
        notes = [note for _, note in loaded if note]

        client_parts = [layer for layer in (org_layer, app_layer) if layer is not None]
        client_id = "+".join(layer.id for layer in client_parts) or "client"
        client_layer = combine_layers(client_parts, client_id, Scope.CLIENT)

        merged = merge_layers(
            self.base,
            vertical_layer,
            market_layer,
            client_layer,
            vertical_id=vertical.value,
            market_id=market_key,
            organization_id=organization_id,
            app_id=app_id,
        )

        any_store_layer = any(
            layer is not None for layer in (vertical_layer, market_layer, client_layer)
        )
        merged = merged.model_copy(update={
            "fallback_notes": notes,
            "fallback_mode": bool(notes),
            "source": "hybrid" if any_store_layer else "code",
        })
        leaks = detect_leaks(merged, category)
        if leaks:
            merged = merged.model_copy(update={"leak_warnings": leaks})

        logger.debug(
            "Resolved ruleset %s (source=%s, fallback=%s, leaks=%d)",
            merged.scope_key, merged.source, merged.fallback_mode, len(leaks),
        )
        return merged

    async def resolve(self, app: AppMetadata) -> MergedRuleSet:
        """Detect vertical and market for ``app`` and resolve its ruleset."""
        vertical = detect_vertical(app.category, app.title, app.subtitle, app.description)
        market = detect_market(app.locale)
        return await self.resolve_scopes(
            vertical=vertical,
            market=market,
            organization_id=app.organization_id,
            app_id=app.app_id,
            category=app.category,
        )
