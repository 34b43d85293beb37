"""
Tests for aso_scorer/ruleset/resolver.py.

What we test
------------
RulesetResolver.resolve_scopes():
  - Override precedence client > market > vertical > base, and falling back
    one scope at a time as layers are removed.
  - A layer that fails to load is skipped with a fallback note; the merge
    still uses the remaining layers (never raises).
  - source is "code" with no store layers and "hybrid" otherwise.
  - Org and app client layers are combined (app wins) and live under
    separate keys, so an app id never loads an organization layer.
  - Leak warnings are attached for the app's category.
  - LayerCache is consulted before the store.

RulesetResolver.resolve():
  - Detects vertical from category and market from locale.
"""

from __future__ import annotations

import asyncio

from aso_scorer.models.app import AppMetadata
from aso_scorer.models.ruleset import RuleSetLayer
from aso_scorer.relevance.oracle import oracle_for
from aso_scorer.ruleset.resolver import RulesetResolver
from aso_scorer.ruleset.store import InMemoryConfigStore, LayerCache, TomlConfigStore
from aso_scorer.taxonomy.metadata_taxonomy import LeakType, Market, Scope, Vertical


def _store() -> InMemoryConfigStore:
    store = InMemoryConfigStore()
    store.add("language_learning", RuleSetLayer(
        id="vertical:language_learning", scope=Scope.VERTICAL,
        token_relevance_overrides={"learn": 0},
    ))
    store.add("uk", RuleSetLayer(
        id="market:uk", scope=Scope.MARKET, token_relevance_overrides={"learn": 1},
    ))
    store.add("org/acme", RuleSetLayer(
        id="client:acme", scope=Scope.CLIENT, token_relevance_overrides={"learn": 2},
    ))
    return store


def _resolve(resolver: RulesetResolver, **kw):
    params = dict(
        vertical=Vertical.LANGUAGE_LEARNING, market=Market.UK, organization_id="acme",
        category="education",
    )
    params.update(kw)
    return asyncio.run(resolver.resolve_scopes(**params))


class _FlakyStore(InMemoryConfigStore):
    """Raises for one scope, serves the rest."""

    def __init__(self, failing: Scope) -> None:
        super().__init__()
        self.failing = failing
        self.calls = 0

    async def load_layer(self, scope, key):
        self.calls += 1
        if scope == self.failing:
            raise TimeoutError("config store timed out")
        return await super().load_layer(scope, key)


class TestOverridePrecedence:
    def test_client_then_market_then_vertical_then_base(self):
        store = _store()
        resolver = RulesetResolver(store)

        merged = _resolve(resolver)
        assert oracle_for(merged).relevance("learn") == 2
        assert merged.origin("token_relevance_overrides", "learn") == Scope.CLIENT

        store.remove(Scope.CLIENT, "org/acme")
        assert oracle_for(_resolve(resolver)).relevance("learn") == 1

        store.remove(Scope.MARKET, "uk")
        assert oracle_for(_resolve(resolver)).relevance("learn") == 0

        store.remove(Scope.VERTICAL, "language_learning")
        merged = _resolve(resolver)
        assert oracle_for(merged).relevance("learn") == 3
        assert merged.source == "code"

    def test_hybrid_source(self):
        merged = _resolve(RulesetResolver(_store()))
        assert merged.source == "hybrid"
        assert merged.inheritance_chain.client == "client:acme"


class TestFallback:
    def test_failed_layer_is_skipped(self):
        store = _FlakyStore(failing=Scope.MARKET)
        store.add("language_learning", RuleSetLayer(
            id="vertical:language_learning", scope=Scope.VERTICAL,
            token_relevance_overrides={"learn": 0},
        ))
        store.add("org/acme", RuleSetLayer(
            id="client:acme", scope=Scope.CLIENT, token_relevance_overrides={"learn": 2},
        ))
        merged = _resolve(RulesetResolver(store))

        assert merged.fallback_mode
        assert len(merged.fallback_notes) == 1
        assert "market layer 'uk' unavailable" in merged.fallback_notes[0]
        assert merged.inheritance_chain.market is None
        assert oracle_for(merged).relevance("learn") == 2

    def test_failed_layer_not_cached(self):
        store = _FlakyStore(failing=Scope.MARKET)
        cache = LayerCache(ttl_s=60)
        resolver = RulesetResolver(store, cache=cache)
        _resolve(resolver)
        _resolve(resolver)
        # vertical + client cached after the first call; market retried
        assert store.calls == 4

    def test_invalid_key_is_a_fallback(self, tmp_path):
        resolver = RulesetResolver(TomlConfigStore(tmp_path))
        merged = _resolve(resolver, organization_id="../etc")
        assert any("invalid layer key" in note for note in merged.fallback_notes)


class TestClientLayers:
    def test_org_and_app_combined(self):
        store = _store()
        store.add("app/acme-ios", RuleSetLayer(
            id="client:acme-ios", scope=Scope.CLIENT, token_relevance_overrides={"learn": 3},
        ))
        merged = _resolve(RulesetResolver(store), app_id="acme-ios")
        assert merged.inheritance_chain.client == "client:acme+client:acme-ios"
        assert merged.token_relevance_overrides["learn"] == 3

    def test_app_id_never_selects_an_org_layer(self):
        store = InMemoryConfigStore()
        store.add("org/globex", RuleSetLayer(
            id="client:globex", scope=Scope.CLIENT, token_relevance_overrides={"learn": 0},
        ))
        merged = asyncio.run(RulesetResolver(store).resolve_scopes(app_id="globex"))
        assert merged.inheritance_chain.client is None
        assert "learn" not in merged.token_relevance_overrides
        assert merged.source == "code"

    def test_org_layer_from_toml_directory(self, tmp_path):
        (tmp_path / "client" / "org").mkdir(parents=True)
        (tmp_path / "client" / "org" / "acme.toml").write_text(
            'id = "client:acme"\n\n[token_relevance_overrides]\nlearn = 2\n', encoding="utf-8",
        )
        resolver = RulesetResolver(TomlConfigStore(tmp_path))
        by_org = asyncio.run(resolver.resolve_scopes(organization_id="acme"))
        by_app = asyncio.run(resolver.resolve_scopes(app_id="acme"))
        assert by_org.inheritance_chain.client == "client:acme"
        assert by_app.inheritance_chain.client is None


class TestLeaks:
    def test_vertical_mismatch_reported(self):
        merged = _resolve(RulesetResolver(_store()), category="finance")
        types = {w.type for w in merged.leak_warnings}
        assert LeakType.VERTICAL_MISMATCH in types


class TestResolve:
    def test_detects_scopes(self):
        store = _store()
        app = AppMetadata(
            title="Learn Spanish", category="education", locale="en-GB", organization_id="acme",
        )
        merged = asyncio.run(RulesetResolver(store).resolve(app))
        assert merged.vertical_id == "language_learning"
        assert merged.market_id == "uk"
        assert merged.organization_id == "acme"
        assert merged.leak_warnings == []
