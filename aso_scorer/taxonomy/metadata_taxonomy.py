"""
Closed vocabularies used across the scoring engine.

Every enum here is a ``StrEnum`` so values serialize as plain strings in
JSON results and TOML ruleset files.

Integrity contracts (verified in tests/test_taxonomy):
  - ``SCOPE_ORDER`` lists every ``Scope`` exactly once, least specific first.
  - ``SEVERITY_IMPACT`` has an entry for every ``RecommendationSeverity``.
  - ``CATEGORY_EXPECTED_VERTICALS`` only names known ``Vertical`` members.

This module has NO imports from any other ``aso_scorer`` package.
"""

from enum import StrEnum


class Platform(StrEnum):
    """Store platform; determines character limits."""

    IOS = "ios"
    ANDROID = "android"


class MetadataElement(StrEnum):
    """Scored text field of a store listing."""

    TITLE = "title"
    SUBTITLE = "subtitle"
    DESCRIPTION = "description"


class ComboSource(StrEnum):
    """Which field(s) a combo was generated from."""

    TITLE = "title"
    SUBTITLE = "subtitle"
    CROSS = "cross"
    """Spans the title/subtitle boundary: at least one token from each."""


class ComboType(StrEnum):
    """Discovery value class assigned to every combo."""

    BRANDED = "branded"
    """Contains one of the title's top-relevance (brand-position) tokens."""

    GENERIC = "generic"
    """Meaningful, non-branded: the main discovery surface."""

    LOW_VALUE = "low_value"
    """Numeric, time-bound, version-like or zero-relevance sequence."""


class BrandClassification(StrEnum):
    """Annotation added by the brand-intelligence collaborator."""

    BRAND = "brand"
    GENERIC = "generic"
    COMPETITOR = "competitor"


class IntentType(StrEnum):
    """Search intent of a token or pattern."""

    INFORMATIONAL = "informational"
    COMMERCIAL = "commercial"
    TRANSACTIONAL = "transactional"
    NAVIGATIONAL = "navigational"


class ComboIntent(StrEnum):
    """Intent annotation for a multi-token combo."""

    INFORMATIONAL = "informational"
    COMMERCIAL = "commercial"
    TRANSACTIONAL = "transactional"
    NAVIGATIONAL = "navigational"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class Scope(StrEnum):
    """Configuration layer, least to most specific."""

    BASE = "base"
    VERTICAL = "vertical"
    MARKET = "market"
    CLIENT = "client"


SCOPE_ORDER: tuple[Scope, ...] = (Scope.BASE, Scope.VERTICAL, Scope.MARKET, Scope.CLIENT)


class Vertical(StrEnum):
    """App verticals with their own ruleset layer."""

    BASE = "base"
    LANGUAGE_LEARNING = "language_learning"
    REWARDS = "rewards"
    FINANCE = "finance"
    DATING = "dating"
    PRODUCTIVITY = "productivity"
    HEALTH = "health"
    ENTERTAINMENT = "entertainment"


class Market(StrEnum):
    """Locale markets with their own ruleset layer."""

    US = "us"
    UK = "uk"
    CA = "ca"
    AU = "au"
    DE = "de"


class KpiDirection(StrEnum):
    """How a raw KPI value maps onto the 0–100 normalized scale."""

    HIGHER_IS_BETTER = "higher_is_better"
    LOWER_IS_BETTER = "lower_is_better"
    TARGET_RANGE = "target_range"


class KpiFamily(StrEnum):
    """KPI family; one sub-score each."""

    CLARITY_STRUCTURE = "clarity_structure"
    KEYWORD_ARCHITECTURE = "keyword_architecture"
    HOOK_STRENGTH = "hook_strength"
    BRAND_VS_GENERIC = "brand_vs_generic"
    PSYCHOLOGY_ALIGNMENT = "psychology_alignment"
    INTENT_ALIGNMENT = "intent_alignment"


class HookCategory(StrEnum):
    """Description opening hook categories; each has a tunable multiplier."""

    LEARNING_EDUCATIONAL = "learning_educational"
    OUTCOME_BENEFIT = "outcome_benefit"
    STATUS_AUTHORITY = "status_authority"
    EASE_OF_USE = "ease_of_use"
    TIME_TO_RESULT = "time_to_result"
    TRUST_SAFETY = "trust_safety"


class RecommendationCategory(StrEnum):
    RANKING_KEYWORD = "ranking_keyword"
    RANKING_STRUCTURE = "ranking_structure"
    CONVERSION = "conversion"
    BRAND_ALIGNMENT = "brand_alignment"


class RecommendationSeverity(StrEnum):
    CRITICAL = "critical"
    STRONG = "strong"
    MODERATE = "moderate"
    OPTIONAL = "optional"


SEVERITY_IMPACT: dict[RecommendationSeverity, int] = {
    RecommendationSeverity.CRITICAL: 90,
    RecommendationSeverity.STRONG:   70,
    RecommendationSeverity.MODERATE: 40,
    RecommendationSeverity.OPTIONAL: 20,
}


class LeakType(StrEnum):
    """Kind of cross-vertical configuration leak."""

    PATTERN_LEAK = "pattern_leak"
    INTENT_LEAK = "intent_leak"
    RECOMMENDATION_LEAK = "recommendation_leak"
    VERTICAL_MISMATCH = "vertical_mismatch"


class LeakSeverity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Store category (lowercase) → verticals whose rulesets make sense for it.
CATEGORY_EXPECTED_VERTICALS: dict[str, tuple[Vertical, ...]] = {
    "education":         (Vertical.LANGUAGE_LEARNING, Vertical.BASE),
    "finance":           (Vertical.FINANCE, Vertical.BASE),
    "business":          (Vertical.FINANCE, Vertical.PRODUCTIVITY, Vertical.BASE),
    "entertainment":     (Vertical.ENTERTAINMENT, Vertical.REWARDS, Vertical.BASE),
    "lifestyle":         (Vertical.REWARDS, Vertical.HEALTH, Vertical.DATING, Vertical.BASE),
    "health & fitness":  (Vertical.HEALTH, Vertical.BASE),
    "medical":           (Vertical.HEALTH, Vertical.BASE),
    "productivity":      (Vertical.PRODUCTIVITY, Vertical.BASE),
    "social networking": (Vertical.DATING, Vertical.BASE),
}
