"""
Stopword set for keyword extraction.

Two groups: common English function words, and store-specific low-value
terms (generic superlatives, pricing words, platform names) that carry no
discovery signal on their own.

Resolved configuration may ADD stopwords for a vertical or market; nothing
can remove an entry from this base set.
"""

from __future__ import annotations

_FUNCTION_WORDS: frozenset[str] = frozenset({
    "a", "about", "above", "after", "again", "against", "all", "am", "an", "and",
    "any", "are", "as", "at", "be", "because", "been", "before", "being", "below",
    "between", "both", "but", "by", "can", "could", "did", "do", "does", "doing",
    "down", "during", "each", "even", "ever", "every", "few", "for", "from",
    "further", "had", "has", "have", "having", "he", "her", "here", "hers",
    "herself", "him", "himself", "his", "how", "i", "if", "in", "into", "is",
    "it", "its", "itself", "just", "me", "more", "most", "much", "my", "myself",
    "no", "nor", "not", "now", "of", "off", "on", "once", "only", "or", "other",
    "our", "ours", "ourselves", "out", "over", "own", "same", "she", "should",
    "so", "some", "such", "than", "that", "the", "their", "theirs", "them",
    "themselves", "then", "there", "these", "they", "this", "those", "through",
    "to", "too", "under", "until", "up", "very", "was", "we", "were", "what",
    "when", "where", "which", "while", "who", "whom", "why", "will", "with",
    "would", "you", "your", "yours", "yourself", "yourselves", "get", "got",
    "also", "via", "way", "ways", "let", "lets", "make", "makes", "like",
    "one", "many", "may", "might", "must", "need", "thing", "things",
})

_STORE_NOISE: frozenset[str] = frozenset({
    # generic superlatives and hype
    "best", "top", "great", "good", "better", "amazing", "awesome", "ultimate",
    "super", "cool", "new", "latest", "newest",
    # pricing
    "free", "paid", "premium", "pro", "plus", "lite",
    # platform and store words
    "app", "apps", "application", "iphone", "ipad", "ios", "android", "mobile",
    "phone", "tablet", "version", "edition",
})

STOPWORDS: frozenset[str] = _FUNCTION_WORDS | _STORE_NOISE


def build_stopwords(extra: tuple[str, ...] | list[str] = ()) -> frozenset[str]:
    """Return the base set unioned with ``extra`` (lowercased)."""
    if not extra:
        return STOPWORDS
    return STOPWORDS | frozenset(w.lower() for w in extra)
