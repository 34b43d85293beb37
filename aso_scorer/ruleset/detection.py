"""
Vertical and market detection.

Vertical
--------
The store category narrows the candidates (``CATEGORY_EXPECTED_VERTICALS``).
A single candidate wins outright. With several, listing text is scored
against each candidate's signature keywords and the unique best scorer with
at least one hit wins. Ties, no hits, or an unknown category give ``base``.

Market
------
The region part of a locale (``en-US`` → ``us``, ``de_DE`` → ``de``), or the
whole code when it has no region. ``gb`` is an alias for ``uk``. Unsupported
regions give None (no market layer).
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from aso_scorer.taxonomy.metadata_taxonomy import CATEGORY_EXPECTED_VERTICALS, Market, Vertical
from aso_scorer.text.tokenizer import tokenize

logger = logging.getLogger(__name__)

VERTICAL_SIGNATURES: dict[Vertical, frozenset[str]] = {
    Vertical.LANGUAGE_LEARNING: frozenset({
        "language", "languages", "learn", "learning", "lessons", "fluency",
        "vocabulary", "grammar", "spanish", "french", "german", "english",
        "italian", "japanese", "speak", "tutor",
    }),
    Vertical.REWARDS: frozenset({
        "rewards", "reward", "earn", "cash", "cashback", "points", "gift",
        "cards", "redeem", "prizes", "coupons",
    }),
    Vertical.FINANCE: frozenset({
        "budget", "budgeting", "invest", "investing", "bank", "banking", "money",
        "stocks", "trading", "crypto", "credit", "savings", "expenses",
    }),
    Vertical.DATING: frozenset({
        "dating", "date", "dates", "singles", "match", "matches", "love",
        "relationship", "meet", "chat", "flirt",
    }),
    Vertical.PRODUCTIVITY: frozenset({
        "tasks", "todo", "notes", "calendar", "planner", "focus", "organize",
        "reminders", "projects", "habits", "schedule",
    }),
    Vertical.HEALTH: frozenset({
        "fitness", "workout", "workouts", "health", "meditation", "sleep",
        "diet", "yoga", "steps", "calories", "wellness", "mindfulness",
    }),
    Vertical.ENTERTAINMENT: frozenset({
        "games", "game", "movies", "music", "stream", "streaming", "video",
        "videos", "shows", "puzzle", "play",
    }),
}

_MARKET_ALIASES: dict[str, str] = {"gb": "uk"}
_LOCALE_SPLIT = re.compile(r"[-_]")


def _signature_hits(vertical: Vertical, tokens: list[str]) -> int:
    signature = VERTICAL_SIGNATURES.get(vertical, frozenset())
    return sum(1 for t in tokens if t in signature)


def detect_vertical(
    category: str,
    title: str = "",
    subtitle: str = "",
    description: str = "",
) -> Vertical:
    """Pick the vertical ruleset for an app (``Vertical.BASE`` if unsure)."""
    expected = CATEGORY_EXPECTED_VERTICALS.get(category.strip().lower(), ())
    candidates = [v for v in expected if v != Vertical.BASE]
    if not candidates:
        return Vertical.BASE
    if len(candidates) == 1:
        return candidates[0]

    tokens = tokenize(" ".join((title, subtitle, description)))
    scores = {v: _signature_hits(v, tokens) for v in candidates}
    best = max(scores.values())
    winners = [v for v, s in scores.items() if s == best]
    if best < 1 or len(winners) > 1:
        logger.debug("Vertical detection inconclusive for category '%s': %s", category, scores)
        return Vertical.BASE
    return winners[0]


def detect_market(locale: Optional[str]) -> Optional[Market]:
    """Market for a locale code, or None when unsupported."""
    if not locale:
        return None
    parts = [p for p in _LOCALE_SPLIT.split(locale.strip().lower()) if p]
    if not parts:
        return None
    region = parts[-1]
    region = _MARKET_ALIASES.get(region, region)
    try:
        return Market(region)
    except ValueError:
        return None
