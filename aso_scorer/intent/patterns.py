"""
Intent pattern sources.

Provider contract
-----------------
``IntentPatternProvider.load_patterns(vertical, market, org, app)`` is
awaited once per evaluation. It may return an empty list (nothing
configured) or raise; in both cases ``resolve_patterns`` substitutes the
minimal ``FALLBACK_PATTERNS`` set and reports ``fallback_mode=True`` so
callers can tell the difference.

TOML format for ``StaticIntentPatternProvider.from_toml``::

    [[patterns]]
    pattern       = "learn"
    intent_type   = "informational"
    weight        = 1.2
    priority      = 100
    word_boundary = true

    # optional scoping; omitted keys match everything
    vertical = "language_learning"
    market   = "us"
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from aso_scorer.models.intent import IntentPattern
from aso_scorer.taxonomy.metadata_taxonomy import IntentType

logger = logging.getLogger(__name__)


def _p(pattern: str, intent: IntentType, weight: float, priority: int, word_boundary: bool = True) -> IntentPattern:
    return IntentPattern(
        pattern=pattern,
        intent_type=intent,
        weight=weight,
        priority=priority,
        word_boundary=word_boundary,
    )


FALLBACK_PATTERNS: tuple[IntentPattern, ...] = (
    _p("learn",    IntentType.INFORMATIONAL, 1.2, 100),
    _p("how to",   IntentType.INFORMATIONAL, 1.3, 110, word_boundary=False),
    _p("guide",    IntentType.INFORMATIONAL, 1.1, 90),
    _p("tutorial", IntentType.INFORMATIONAL, 1.1, 90),
    _p("best",     IntentType.COMMERCIAL,    1.5, 120),
    _p("top",      IntentType.COMMERCIAL,    1.4, 115),
    _p("compare",  IntentType.COMMERCIAL,    1.3, 110),
    _p("download", IntentType.TRANSACTIONAL, 2.0, 150),
    _p("free",     IntentType.TRANSACTIONAL, 1.8, 140),
    _p("get",      IntentType.TRANSACTIONAL, 1.5, 130),
    _p("app",      IntentType.NAVIGATIONAL,  1.0, 50),
    _p("official", IntentType.NAVIGATIONAL,  1.2, 60),
)


@dataclass(frozen=True)
class ResolvedPatterns:
    """Active patterns for one evaluation, sorted by priority (desc)."""

    patterns: tuple[IntentPattern, ...]
    fallback_mode: bool


class IntentPatternProvider(Protocol):
    async def load_patterns(
        self,
        vertical: str,
        market: Optional[str],
        org: Optional[str] = None,
        app: Optional[str] = None,
    ) -> list[IntentPattern]:
        ...


@dataclass(frozen=True)
class _ScopedPattern:
    pattern: IntentPattern
    vertical: Optional[str] = None
    market: Optional[str] = None


class StaticIntentPatternProvider:
    """Provider backed by an in-memory list (optionally scoped per vertical/market)."""

    def __init__(self, patterns: Optional[list[IntentPattern]] = None) -> None:
        self._patterns = [_ScopedPattern(p) for p in (patterns or [])]

    @classmethod
    def from_toml(cls, path: Path | str) -> "StaticIntentPatternProvider":
        """Load patterns from a TOML file.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            pydantic.ValidationError: If a pattern entry is invalid.
        """
        path = Path(path)
        with open(path, "rb") as f:
            raw = tomllib.load(f)

        provider = cls()
        for entry in raw.get("patterns", []):
            entry = dict(entry)
            vertical = entry.pop("vertical", None)
            market = entry.pop("market", None)
            provider._patterns.append(
                _ScopedPattern(IntentPattern(**entry), vertical=vertical, market=market)
            )
        logger.debug("Loaded %d intent patterns from %s", len(provider._patterns), path)
        return provider

    async def load_patterns(
        self,
        vertical: str,
        market: Optional[str],
        org: Optional[str] = None,
        app: Optional[str] = None,
    ) -> list[IntentPattern]:
        return [
            sp.pattern
            for sp in self._patterns
            if (sp.vertical is None or sp.vertical == vertical)
            and (sp.market is None or sp.market == market)
        ]


def _ordered(patterns: list[IntentPattern] | tuple[IntentPattern, ...]) -> tuple[IntentPattern, ...]:
    active = [p for p in patterns if p.active]
    return tuple(sorted(active, key=lambda p: (-p.priority, p.pattern)))


async def resolve_patterns(
    provider: Optional[IntentPatternProvider],
    vertical: str,
    market: Optional[str],
    org: Optional[str] = None,
    app: Optional[str] = None,
    override: Optional[list[IntentPattern]] = None,
) -> ResolvedPatterns:
    """Load patterns, substituting ``FALLBACK_PATTERNS`` on failure or emptiness.

    Args:
        provider: Pattern provider, or None to use the fallback set directly.
        override: Pattern list from the resolved ruleset; takes precedence
                  over the provider when non-empty.

    Returns:
        ``ResolvedPatterns``; never raises.
    """
    if override:
        return ResolvedPatterns(patterns=_ordered(override), fallback_mode=False)

    patterns: list[IntentPattern] = []
    if provider is not None:
        try:
            patterns = await provider.load_patterns(vertical, market, org, app)
        except Exception as exc:
            logger.warning("Intent pattern provider failed, using fallback set: %s", exc)
            patterns = []

    ordered = _ordered(patterns)
    if not ordered:
        logger.info(
            "No intent patterns for vertical=%s market=%s; using %d fallback patterns",
            vertical, market, len(FALLBACK_PATTERNS),
        )
        return ResolvedPatterns(patterns=_ordered(FALLBACK_PATTERNS), fallback_mode=True)
    return ResolvedPatterns(patterns=ordered, fallback_mode=False)
