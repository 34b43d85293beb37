"""
KPI primitives: the raw counts and ratios every KPI formula reads.

``compute_primitives`` walks the title and subtitle once and collects
everything the 34 formulas need, so each formula is a one-liner over a
``KpiPrimitives`` instance and never re-tokenizes text.

Token sets
----------
all tokens        ``TokenizationResult.all_tokens`` (stopwords included).
meaningful tokens All tokens longer than two characters (stopwords kept).
high-value        Meaningful tokens with relevance tier >= 2.

The description is not part of the KPI vector; it is scored by the
conversion rules only.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

from aso_scorer.brand import brand_presence
from aso_scorer.models.app import BrandInfo
from aso_scorer.models.combo import ComboCoverage
from aso_scorer.models.intent import CombinedIntentCoverage, IntentDistribution
from aso_scorer.models.tokens import TokenizationResult
from aso_scorer.relevance.oracle import RelevanceOracle
from aso_scorer.rules.context import HIGH_VALUE_RELEVANCE
from aso_scorer.rules.limits import max_characters
from aso_scorer.taxonomy.metadata_taxonomy import ComboType, MetadataElement, Platform
from aso_scorer.utils.numeric import safe_ratio

# ── Vocabulary ────────────────────────────────────────────────────────────────

ACTION_VERBS: frozenset[str] = frozenset({
    "learn", "master", "speak", "practice", "improve", "discover",
    "unlock", "transform", "achieve", "build", "create", "track",
    "save", "boost", "gain", "reach", "grow", "start", "get",
})

BENEFIT_WORDS: frozenset[str] = frozenset({
    "free", "easy", "fast", "simple", "powerful", "advanced",
    "professional", "complete", "ultimate", "perfect", "quick",
    "effective", "proven", "guaranteed", "unlimited", "premium",
})

URGENCY_WORDS: frozenset[str] = frozenset({
    "now", "today", "instant", "instantly", "immediate", "immediately",
    "quick", "quickly", "fast", "rapid", "rapidly",
})

SOCIAL_PROOF_WORDS: frozenset[str] = frozenset({
    "million", "millions", "thousand", "thousands", "top", "best",
    "trusted", "popular", "leading", "rated", "award",
})

PAIR_LANGUAGES: frozenset[str] = frozenset({
    "english", "spanish", "french", "german", "italian", "chinese",
    "japanese", "korean", "portuguese", "russian", "arabic", "hindi",
})

MEANINGFUL_MIN_LENGTH = 3


@dataclass(frozen=True)
class KpiPrimitives:
    """Raw inputs of the KPI formulas.

    Attributes are grouped the way the families use them; all counts are
    non-negative and all ratios are in [0, 1].
    """

    # Structure
    title_char_count: int = 0
    subtitle_char_count: int = 0
    title_char_limit: int = 0
    subtitle_char_limit: int = 0
    title_word_count: int = 0
    subtitle_word_count: int = 0
    title_token_count: int = 0
    subtitle_token_count: int = 0
    title_meaningful_count: int = 0
    subtitle_meaningful_count: int = 0

    # Keyword architecture
    title_high_value_count: int = 0
    subtitle_high_value_incremental_count: int = 0
    title_noise_ratio: float = 0.0
    subtitle_noise_ratio: float = 0.0
    title_generic_combo_count: int = 0
    title_branded_combo_count: int = 0
    subtitle_incremental_generic_combo_count: int = 0
    low_value_combo_count: int = 0
    total_combo_count: int = 0
    title_language_verb_pairs: int = 0
    unique_meaningful_count: int = 0

    # Hook strength and psychology
    title_action_verbs: int = 0
    subtitle_action_verbs: int = 0
    title_benefit_words: int = 0
    subtitle_benefit_words: int = 0
    urgency_count: int = 0
    social_proof_count: int = 0
    repeated_token_count: int = 0

    # Brand
    brand_presence_title: int = 0
    brand_presence_subtitle: int = 0
    valuable_title_branded: int = 0
    valuable_title_generic: int = 0

    # Intent
    intent_distribution: IntentDistribution = field(default_factory=IntentDistribution)
    intent_fallback_mode: bool = False

    @property
    def total_meaningful_count(self) -> int:
        return self.title_meaningful_count + self.subtitle_meaningful_count

    @property
    def action_verb_count(self) -> int:
        return self.title_action_verbs + self.subtitle_action_verbs

    @property
    def benefit_word_count(self) -> int:
        return self.title_benefit_words + self.subtitle_benefit_words

    @property
    def brand_ratio(self) -> float:
        return safe_ratio(
            self.valuable_title_branded,
            self.valuable_title_branded + self.valuable_title_generic,
        )

    @property
    def generic_ratio(self) -> float:
        return safe_ratio(
            self.valuable_title_generic,
            self.valuable_title_branded + self.valuable_title_generic,
        )


def _meaningful(tokens: Sequence[str]) -> list[str]:
    return [t for t in tokens if len(t) >= MEANINGFUL_MIN_LENGTH]


def _count_in(tokens: Sequence[str], vocabulary: frozenset[str]) -> int:
    return sum(1 for t in tokens if t in vocabulary)


def count_language_verb_pairs(tokens: Sequence[str]) -> int:
    """Adjacent token pairs holding a language name and an action verb."""
    count = 0
    for first, second in zip(tokens, tokens[1:]):
        has_language = first in PAIR_LANGUAGES or second in PAIR_LANGUAGES
        has_verb = first in ACTION_VERBS or second in ACTION_VERBS
        if has_language and has_verb:
            count += 1
    return count


def count_repeated_tokens(tokens: Sequence[str]) -> int:
    """Number of distinct tokens that occur more than once."""
    return sum(1 for n in Counter(tokens).values() if n > 1)


def compute_primitives(
    title: str,
    subtitle: str,
    title_analysis: TokenizationResult,
    subtitle_analysis: TokenizationResult,
    oracle: RelevanceOracle,
    combos: ComboCoverage,
    intent: Optional[CombinedIntentCoverage] = None,
    brand_info: Optional[BrandInfo] = None,
    platform: Platform = Platform.IOS,
) -> KpiPrimitives:
    """Collect every raw KPI input for one title + subtitle pair.

    Args:
        title / subtitle:   Raw field text.
        title_analysis:     Tokenized title (ruleset stopwords applied).
        subtitle_analysis:  Tokenized subtitle.
        oracle:             Relevance oracle of the resolved configuration.
        combos:             Enriched combo coverage.
        intent:             Combined intent coverage; zeros when omitted.
        brand_info:         Canonical brand and aliases, if known.
        platform:           Decides the character limits.
    """
    title_tokens = title_analysis.all_tokens
    subtitle_tokens = subtitle_analysis.all_tokens
    title_meaningful = _meaningful(title_tokens)
    subtitle_meaningful = _meaningful(subtitle_tokens)

    title_high_value = [t for t in title_meaningful if oracle.relevance(t) >= HIGH_VALUE_RELEVANCE]
    title_high_value_set = set(title_high_value)
    subtitle_incremental = [
        t for t in subtitle_meaningful
        if oracle.relevance(t) >= HIGH_VALUE_RELEVANCE and t not in title_high_value_set
    ]

    valuable_title = [c for c in combos.title if c.type != ComboType.LOW_VALUE]
    both = title_tokens + subtitle_tokens

    return KpiPrimitives(
        title_char_count=len(title),
        subtitle_char_count=len(subtitle),
        title_char_limit=max_characters(platform, MetadataElement.TITLE),
        subtitle_char_limit=max_characters(platform, MetadataElement.SUBTITLE),
        title_word_count=len(title.split()),
        subtitle_word_count=len(subtitle.split()),
        title_token_count=len(title_tokens),
        subtitle_token_count=len(subtitle_tokens),
        title_meaningful_count=len(title_meaningful),
        subtitle_meaningful_count=len(subtitle_meaningful),
        title_high_value_count=len(title_high_value),
        subtitle_high_value_incremental_count=len(subtitle_incremental),
        title_noise_ratio=title_analysis.noise_ratio,
        subtitle_noise_ratio=subtitle_analysis.noise_ratio,
        title_generic_combo_count=combos.count_by_type(combos.title, ComboType.GENERIC),
        title_branded_combo_count=combos.count_by_type(combos.title, ComboType.BRANDED),
        subtitle_incremental_generic_combo_count=combos.count_by_type(
            combos.subtitle_incremental, ComboType.GENERIC
        ),
        low_value_combo_count=len(combos.low_value),
        total_combo_count=combos.total,
        title_language_verb_pairs=count_language_verb_pairs(title_tokens),
        unique_meaningful_count=len(set(title_meaningful) | set(subtitle_meaningful)),
        title_action_verbs=_count_in(title_tokens, ACTION_VERBS),
        subtitle_action_verbs=_count_in(subtitle_tokens, ACTION_VERBS),
        title_benefit_words=_count_in(title_tokens, BENEFIT_WORDS),
        subtitle_benefit_words=_count_in(subtitle_tokens, BENEFIT_WORDS),
        urgency_count=_count_in(both, URGENCY_WORDS),
        social_proof_count=_count_in(both, SOCIAL_PROOF_WORDS),
        repeated_token_count=count_repeated_tokens(both),
        brand_presence_title=brand_presence(title_tokens, brand_info),
        brand_presence_subtitle=brand_presence(subtitle_tokens, brand_info),
        valuable_title_branded=combos.count_by_type(valuable_title, ComboType.BRANDED),
        valuable_title_generic=combos.count_by_type(valuable_title, ComboType.GENERIC),
        intent_distribution=intent.combined_distribution if intent else IntentDistribution(),
        intent_fallback_mode=intent.fallback_mode if intent else False,
    )
