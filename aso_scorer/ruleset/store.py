"""
Configuration stores for ruleset layers.

A store answers ``load_layer(scope, key)`` with a ``RuleSetLayer``, or None
when no layer exists for that key. Any exception means the layer could not
be loaded; the resolver treats that layer as absent and records a fallback
note.

Stores
------
InMemoryConfigStore  Layers held in a dict; tests and embedding callers.
TomlConfigStore      ``<root>/<scope>/<key>.toml``; files are read in a
                     worker thread so the event loop is never blocked.
HttpConfigStore      ``GET {base_url}/rulesets/{scope}/{key}`` returning the
                     layer as JSON; 404 → None; no retries.

Client-scope keys are namespaced: ``org/<organization_id>`` and
``app/<app_id>``, so an app id never selects an organization's layer
(TOML: ``client/org/<id>.toml`` and ``client/app/<id>.toml``).

Layer document format (TOML or JSON), all keys optional::

    id = "vertical:language_learning"
    stopwords = ["lingo"]

    [token_relevance_overrides]
    fluency = 3

    [rule_overrides.title_character_usage]
    weight = 0.3
    thresholds = { target_min = 60 }

``LayerCache`` memoizes successful loads (including "no layer") per
``(scope, key)`` for a TTL.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Protocol

from aso_scorer.errors import LayerLoadError
from aso_scorer.models.ruleset import RuleSetLayer
from aso_scorer.taxonomy.metadata_taxonomy import Scope

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^(?:(?:org|app)/)?[A-Za-z0-9][A-Za-z0-9_.\-]*$")


def org_layer_key(organization_id: Optional[str]) -> Optional[str]:
    """Client-scope key of an organization layer: ``org/<id>``."""
    return f"org/{organization_id}" if organization_id else None


def app_layer_key(app_id: Optional[str]) -> Optional[str]:
    """Client-scope key of an app layer: ``app/<id>``."""
    return f"app/{app_id}" if app_id else None



class ConfigStore(Protocol):
    async def load_layer(self, scope: Scope, key: str) -> Optional[RuleSetLayer]:
        ...


def layer_from_mapping(scope: Scope, key: str, raw: Mapping[str, Any]) -> RuleSetLayer:
    """Build a validated layer from a parsed TOML/JSON document.

    Raises:
        pydantic.ValidationError: If any field fails validation.
    """
    data = dict(raw)
    data.setdefault("id", f"{scope.value}:{key}")
    data["scope"] = scope
    return RuleSetLayer(**data)


# ── In-memory ────────────────────────────────────────────────────────────────

class InMemoryConfigStore:
    """Layers keyed by ``(scope, key)``."""

    def __init__(self, layers: Optional[Mapping[tuple[Scope, str], RuleSetLayer]] = None) -> None:
        self._layers: dict[tuple[Scope, str], RuleSetLayer] = dict(layers or {})

    def add(self, key: str, layer: RuleSetLayer) -> None:
        self._layers[(layer.scope, key)] = layer

    def remove(self, scope: Scope, key: str) -> None:
        self._layers.pop((scope, key), None)

    async def load_layer(self, scope: Scope, key: str) -> Optional[RuleSetLayer]:
        return self._layers.get((scope, key))


# ── TOML files ───────────────────────────────────────────────────────────────

def _read_toml(path: Path) -> Optional[dict]:
    if not path.exists():
        return None
    with open(path, "rb") as f:
        return tomllib.load(f)


class TomlConfigStore:
    """Layers stored as ``<root>/<scope>/<key>.toml``.

    Attributes:
        root: Directory containing one sub-directory per scope.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def path_for(self, scope: Scope, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise LayerLoadError(scope.value, key, "invalid layer key")
        return self.root / scope.value / f"{key}.toml"

    async def load_layer(self, scope: Scope, key: str) -> Optional[RuleSetLayer]:
        path = self.path_for(scope, key)
        raw = await asyncio.to_thread(_read_toml, path)
        if raw is None:
            return None
        logger.debug("Loaded %s layer '%s' from %s", scope, key, path)
        return layer_from_mapping(scope, key, raw)


# ── HTTP ─────────────────────────────────────────────────────────────────────

class HttpConfigStore:
    """Layers served by a remote configuration service.

    Usage::

        store = HttpConfigStore("https://config.internal", timeout_s=5.0)
        layer = await store.load_layer(Scope.MARKET, "uk")

    A caller-owned ``httpx.AsyncClient`` may be passed in (connection reuse,
    test transports); otherwise a client is opened per request.
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 5.0,
        client: Optional["httpx.AsyncClient"] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._client = client

    def url_for(self, scope: Scope, key: str) -> str:
        return f"{self.base_url}/rulesets/{scope.value}/{key}"

    async def _get(self, url: str) -> "httpx.Response":
        import httpx

        if self._client is not None:
            return await self._client.get(url, timeout=self.timeout_s)
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            return await client.get(url)

    async def load_layer(self, scope: Scope, key: str) -> Optional[RuleSetLayer]:
        """Fetch one layer.

        Raises:
            httpx.HTTPStatusError: On a non-2xx status other than 404.
            httpx.TransportError: On connection failure or timeout.
        """
        resp = await self._get(self.url_for(scope, key))
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return layer_from_mapping(scope, key, resp.json())


# ── Cache ────────────────────────────────────────────────────────────────────

class LayerCache:
    """TTL cache of loaded layers keyed by ``(scope, key)``.

    "No layer" (None) results are cached like layers; load failures are
    never stored, so a failing layer is retried on the next resolution.
    """

    def __init__(self, ttl_s: float = 300.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: dict[tuple[Scope, str], tuple[float, Optional[RuleSetLayer]]] = {}

    def lookup(self, scope: Scope, key: str) -> tuple[bool, Optional[RuleSetLayer]]:
        """Return ``(hit, layer)``; expired entries count as misses."""
        entry = self._entries.get((scope, key))
        if entry is None:
            return False, None
        stored_at, layer = entry
        if self._clock() - stored_at > self.ttl_s:
            del self._entries[(scope, key)]
            return False, None
        return True, layer

    def store(self, scope: Scope, key: str, layer: Optional[RuleSetLayer]) -> None:
        self._entries[(scope, key)] = (self._clock(), layer)

    def invalidate(self, scope: Optional[Scope] = None, key: Optional[str] = None) -> int:
        """Drop matching entries (all when both are None); returns the count."""
        doomed = [
            k for k in self._entries
            if (scope is None or k[0] == scope) and (key is None or k[1] == key)
        ]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    def __len__(self) -> int:
        return len(self._entries)
