"""
Tokenizer and noise filter for listing text.

Normalization steps (in order)
------------------------------
1. Lowercase.
2. Visual separators (``|``, en dash, em dash) become spaces.
3. Apostrophes are deleted, not treated as word boundaries:
   ``don't`` → ``dont``, ``today's`` → ``todays``.
4. Every other punctuation or symbol character becomes a space
   (``&``, ``,``, ``!``, ``#``, ``-`` ...).
5. Split on whitespace, drop empty tokens.

``analyze_text`` then partitions tokens into keywords (not a stopword and
longer than 2 characters) and ignored tokens, and computes the noise ratio.
Both functions are pure; empty input yields an empty result.
"""

from __future__ import annotations

import re
from typing import Iterable

from aso_scorer.models.tokens import TokenizationResult
from aso_scorer.text.stopwords import build_stopwords

_SEPARATORS = re.compile(r"[|–—]")
_APOSTROPHES = re.compile(r"['’‘`]")
# ``\w`` keeps digits and non-ASCII letters (German market text); underscore
# is the only non-letter it lets through, so strip it explicitly.
_PUNCTUATION = re.compile(r"[^\w\s]|_")

MIN_KEYWORD_LENGTH = 3


def tokenize(text: str | None) -> list[str]:
    """Normalize ``text`` and split it into tokens (duplicates kept)."""
    if not text:
        return []
    normalized = text.lower()
    normalized = _SEPARATORS.sub(" ", normalized)
    normalized = _APOSTROPHES.sub("", normalized)
    normalized = _PUNCTUATION.sub(" ", normalized)
    return normalized.split()


def is_keyword(token: str, stopwords: frozenset[str]) -> bool:
    """True if ``token`` is long enough and not a stopword."""
    return len(token) >= MIN_KEYWORD_LENGTH and token not in stopwords


def analyze_text(
    text: str | None,
    extra_stopwords: Iterable[str] = (),
) -> TokenizationResult:
    """Tokenize ``text`` and split tokens into keywords and noise.

    Args:
        text:            Raw field text.
        extra_stopwords: Additional stopwords from the resolved ruleset.

    Returns:
        ``TokenizationResult`` with ``noise_ratio = ignored / all`` (0 if empty).
    """
    stopwords = build_stopwords(tuple(extra_stopwords))
    tokens = tokenize(text)

    keywords: list[str] = []
    ignored: list[str] = []
    for token in tokens:
        if is_keyword(token, stopwords):
            keywords.append(token)
        else:
            ignored.append(token)

    noise_ratio = len(ignored) / len(tokens) if tokens else 0.0
    return TokenizationResult(
        all_tokens=tokens,
        keywords=keywords,
        ignored=ignored,
        noise_ratio=noise_ratio,
    )
