"""
Token relevance oracle: token → discovery tier 0–3.

Tiers
-----
3   Core intent verbs and domain proper nouns (learn, speak, spanish).
2   Strong domain nouns (lessons, grammar, vocabulary, course).
1   Neutral valid word (the default).
0   Numeric, time-bound or generic-adjective noise (best, new, 30).

Resolution order
----------------
1. An override for the exact lowercase token in the resolved ruleset wins,
   and its scope (vertical / market / client) is reported by ``source()``.
2. Static tier tables, checked 0 → 2 → 3; first match wins; else tier 1.

Caching
-------
The oracle is called for every keyword and every combo token, so results are
memoized in a ``RelevanceCache`` keyed by ``(token, scope_key)``. The cache is
created per evaluation and passed in; it is never module-global, because
override tables differ between organizations and a shared cache would leak
one tenant's overrides into another's lookups.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Mapping, Optional

from aso_scorer.taxonomy.metadata_taxonomy import Scope

if TYPE_CHECKING:
    from aso_scorer.models.ruleset import MergedRuleSet

# ── Static tier tables ───────────────────────────────────────────────────────

_TIER_0 = re.compile(
    r"^(best|top|great|good|new|latest|free|premium|pro|plus|lite|\d+|one|two|three)$"
)

_TIER_2_DOMAIN_NOUNS: frozenset[str] = frozenset({
    "lesson", "lessons", "course", "courses", "class", "classes", "grammar",
    "vocabulary", "pronunciation", "conversation", "fluency", "language",
    "languages", "learning", "app", "application", "tutorial", "training",
    "education", "skill", "skills", "method", "techniques", "guide",
})

LANGUAGES: frozenset[str] = frozenset({
    "english", "spanish", "french", "german", "italian", "chinese", "japanese",
    "korean", "portuguese", "russian", "arabic", "hindi", "mandarin",
})

_TIER_3_VERBS: frozenset[str] = frozenset({
    "learn", "speak", "study", "master", "practice", "improve", "understand",
    "read", "write", "listen", "teach",
})


def static_relevance(token: str) -> int:
    """Tier from the static tables only (no overrides, no cache)."""
    t = token.lower()
    if _TIER_0.match(t):
        return 0
    if t in _TIER_2_DOMAIN_NOUNS:
        return 2
    if t in LANGUAGES or t in _TIER_3_VERBS:
        return 3
    return 1


# ── Cache ────────────────────────────────────────────────────────────────────


class RelevanceCache:
    """Memo of ``(token, scope_key) → (tier, source scope)``.

    One instance per evaluation. Keying by scope as well as token means a
    cache accidentally reused across configurations still cannot return
    another configuration's override.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], tuple[int, Scope]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, token: str, scope_key: str) -> Optional[tuple[int, Scope]]:
        entry = self._entries.get((token, scope_key))
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def put(self, token: str, scope_key: str, tier: int, source: Scope) -> None:
        self._entries[(token, scope_key)] = (tier, source)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)


# ── Oracle ───────────────────────────────────────────────────────────────────


class RelevanceOracle:
    """Relevance lookups bound to one resolved configuration.

    Args:
        overrides: Lowercase token → tier from the merged ruleset.
        scope_key: Identifies the configuration the overrides came from.
        cache:     Per-evaluation cache; a fresh one is created if omitted.
        ancestry:  Token → scope that supplied its override.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, int]] = None,
        scope_key: str = "base",
        cache: Optional[RelevanceCache] = None,
        ancestry: Optional[Mapping[str, Scope]] = None,
    ) -> None:
        self._overrides = dict(overrides or {})
        self._ancestry = dict(ancestry or {})
        self.scope_key = scope_key
        self.cache = cache if cache is not None else RelevanceCache()

    def _resolve(self, token: str) -> tuple[int, Scope]:
        t = token.lower()
        cached = self.cache.get(t, self.scope_key)
        if cached is not None:
            return cached

        if t in self._overrides:
            tier = max(0, min(3, int(self._overrides[t])))
            source = self._ancestry.get(t, Scope.BASE)
        else:
            tier = static_relevance(t)
            source = Scope.BASE

        self.cache.put(t, self.scope_key, tier, source)
        return tier, source

    def relevance(self, token: str) -> int:
        """Tier 0–3 for ``token``."""
        return self._resolve(token)[0]

    def source(self, token: str) -> Scope:
        """Scope that decided ``token``'s tier (BASE for static tables)."""
        return self._resolve(token)[1]

    def average(self, tokens: tuple[str, ...] | list[str]) -> float:
        """Mean tier over ``tokens`` (0.0 for an empty sequence)."""
        if not tokens:
            return 0.0
        return sum(self.relevance(t) for t in tokens) / len(tokens)


def oracle_for(ruleset: "MergedRuleSet", cache: Optional[RelevanceCache] = None) -> RelevanceOracle:
    """Build an oracle from a ``MergedRuleSet``."""
    ancestry = {
        token: ruleset.origin("token_relevance_overrides", token)
        for token in ruleset.token_relevance_overrides
    }
    return RelevanceOracle(
        overrides=ruleset.token_relevance_overrides,
        scope_key=ruleset.scope_key,
        cache=cache,
        ancestry=ancestry,
    )
