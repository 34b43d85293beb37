"""
Description hook phrases by vertical and hook category.

A description's opening paragraph is matched (lowercase substring) against
the phrase lists of the app's vertical; every category with at least one
hit counts once. Verticals without their own table use ``BASE``.

Per-category multipliers come from ``MergedRuleSet.hook_overrides`` (already
clamped to [0.5, 2.0] by the merge).
"""

from __future__ import annotations

from typing import Mapping

from aso_scorer.taxonomy.metadata_taxonomy import HookCategory, Vertical

HookPatternMap = Mapping[HookCategory, tuple[str, ...]]

_H = HookCategory

HOOK_PATTERNS: dict[Vertical, HookPatternMap] = {
    Vertical.BASE: {
        _H.LEARNING_EDUCATIONAL: ("discover", "explore", "learn", "master"),
        _H.OUTCOME_BENEFIT: ("transform", "achieve", "unlock", "improve", "save time"),
        _H.STATUS_AUTHORITY: ("#1", "award winning", "trusted by", "millions of"),
        _H.EASE_OF_USE: ("easy", "simple", "intuitive", "effortless"),
        _H.TIME_TO_RESULT: ("instantly", "in minutes", "fast results", "right away"),
        _H.TRUST_SAFETY: ("secure", "private", "safe", "verified"),
    },
    Vertical.LANGUAGE_LEARNING: {
        _H.LEARNING_EDUCATIONAL: (
            "learn", "master", "study", "practice", "improve", "develop",
            "build skills", "understand", "discover", "explore", "lessons",
            "course", "tutorial", "education",
        ),
        _H.OUTCOME_BENEFIT: (
            "speak fluently", "become fluent", "talk like native", "travel confidently",
            "ace exams", "get certified", "career boost", "expand vocabulary",
            "perfect pronunciation", "sound natural",
        ),
        _H.STATUS_AUTHORITY: (
            "#1 language app", "expert approved", "certified course", "award winning",
            "trusted by schools", "used by millions", "recommended by teachers",
            "proven method",
        ),
        _H.EASE_OF_USE: (
            "easy to learn", "simple", "beginner friendly", "no experience needed",
            "step by step", "guided", "intuitive", "just 5 minutes", "bite-sized lessons",
        ),
        _H.TIME_TO_RESULT: (
            "in 30 days", "fast results", "quick progress", "rapid learning",
            "immediate improvement", "within weeks", "daily practice", "see results fast",
        ),
        _H.TRUST_SAFETY: (
            "trusted", "safe learning", "privacy protected", "secure", "verified",
            "authentic content", "quality guaranteed",
        ),
    },
    Vertical.REWARDS: {
        _H.LEARNING_EDUCATIONAL: (
            "how to earn", "maximize rewards", "learn earning strategies",
            "discover offers", "find deals",
        ),
        _H.OUTCOME_BENEFIT: (
            "earn cash", "get paid", "free money", "extra income", "passive income",
            "rewards", "cashback", "gift cards", "save money", "get discounts",
        ),
        _H.STATUS_AUTHORITY: (
            "#1 rewards app", "top earning app", "most trusted", "highest rated",
            "millions earned", "verified payouts", "proven legitimate",
        ),
        _H.EASE_OF_USE: (
            "easy to earn", "simple rewards", "no hassle", "automatic", "instant",
            "tap to earn", "play and earn", "effortless",
        ),
        _H.TIME_TO_RESULT: (
            "instant payout", "fast cash out", "same day", "quick rewards", "earn today",
            "immediate", "within 24 hours", "start earning now",
        ),
        _H.TRUST_SAFETY: (
            "legitimate", "real money", "guaranteed payout", "secure", "trusted",
            "verified", "safe", "no scam", "proven",
        ),
    },
    Vertical.FINANCE: {
        _H.LEARNING_EDUCATIONAL: (
            "learn investing", "financial education", "understand markets",
            "budget better", "track spending", "analyze finances",
        ),
        _H.OUTCOME_BENEFIT: (
            "save money", "grow wealth", "build portfolio", "earn interest",
            "maximize returns", "reduce fees", "increase savings", "achieve goals",
            "financial freedom",
        ),
        _H.STATUS_AUTHORITY: (
            "bank grade", "fdic insured", "regulated", "licensed", "trusted by millions",
            "award winning", "industry leader", "certified",
        ),
        _H.EASE_OF_USE: (
            "easy banking", "simple investing", "intuitive", "user friendly", "seamless",
            "hassle free", "quick setup", "automated",
        ),
        _H.TIME_TO_RESULT: (
            "instant transfer", "same day", "immediate access", "quick deposit",
            "fast approval", "real time", "within minutes",
        ),
        _H.TRUST_SAFETY: (
            "secure", "encrypted", "protected", "safe", "trusted", "insured", "verified",
            "compliant", "bank level security", "fraud protection",
        ),
    },
    Vertical.DATING: {
        _H.LEARNING_EDUCATIONAL: (
            "discover matches", "explore profiles", "find compatible", "learn about",
        ),
        _H.OUTCOME_BENEFIT: (
            "find love", "meet singles", "make connections", "real relationships",
            "meaningful matches", "find your match", "soulmate", "perfect partner",
            "lasting relationship",
        ),
        _H.STATUS_AUTHORITY: (
            "#1 dating app", "most popular", "trusted", "millions of users",
            "success stories", "proven results", "award winning",
        ),
        _H.EASE_OF_USE: (
            "easy matching", "simple swipe", "quick setup", "effortless", "intuitive",
            "user friendly", "straightforward",
        ),
        _H.TIME_TO_RESULT: (
            "match today", "instant matches", "quick connections", "start chatting now",
            "meet tonight", "fast matching",
        ),
        _H.TRUST_SAFETY: (
            "verified profiles", "safe dating", "secure", "authentic", "real people",
            "screened", "protected", "privacy first", "moderated",
        ),
    },
    Vertical.PRODUCTIVITY: {
        _H.LEARNING_EDUCATIONAL: (
            "learn to organize", "master productivity", "understand workflow",
            "discover techniques",
        ),
        _H.OUTCOME_BENEFIT: (
            "get organized", "boost productivity", "save time", "stay focused",
            "achieve goals", "complete tasks", "manage better", "work smarter",
            "increase efficiency",
        ),
        _H.STATUS_AUTHORITY: (
            "#1 productivity app", "trusted by professionals", "used by fortune 500",
            "award winning", "industry standard", "recommended",
        ),
        _H.EASE_OF_USE: (
            "easy to use", "simple", "intuitive", "streamlined", "effortless",
            "quick setup", "user friendly", "no learning curve",
        ),
        _H.TIME_TO_RESULT: (
            "instant organization", "immediate results", "get started now", "quick sync",
            "fast setup", "right away",
        ),
        _H.TRUST_SAFETY: (
            "secure", "encrypted", "private", "trusted", "reliable", "backed up",
            "protected", "safe",
        ),
    },
    Vertical.HEALTH: {
        _H.LEARNING_EDUCATIONAL: (
            "learn fitness", "understand nutrition", "track progress", "monitor health",
            "analyze data",
        ),
        _H.OUTCOME_BENEFIT: (
            "lose weight", "get fit", "build muscle", "improve health", "feel better",
            "live healthier", "reach goals", "transform body", "boost energy",
            "sleep better",
        ),
        _H.STATUS_AUTHORITY: (
            "doctor recommended", "scientifically proven", "certified trainers",
            "expert designed", "award winning", "trusted by athletes", "medical grade",
        ),
        _H.EASE_OF_USE: (
            "easy tracking", "simple workouts", "user friendly", "intuitive", "guided",
            "step by step", "beginner friendly",
        ),
        _H.TIME_TO_RESULT: (
            "see results fast", "quick progress", "in 30 days", "immediate feedback",
            "rapid improvement", "within weeks", "start today",
        ),
        _H.TRUST_SAFETY: (
            "secure", "private", "confidential", "hipaa compliant", "trusted", "verified",
            "safe", "protected data",
        ),
    },
    Vertical.ENTERTAINMENT: {
        _H.LEARNING_EDUCATIONAL: (
            "discover content", "explore shows", "find favorites", "browse library",
        ),
        _H.OUTCOME_BENEFIT: (
            "unlimited entertainment", "endless content", "binge watch", "enjoy shows",
            "relax", "have fun", "ad-free", "premium quality", "exclusive content",
        ),
        _H.STATUS_AUTHORITY: (
            "#1 streaming app", "award winning shows", "original content", "exclusive",
            "most popular", "trusted", "industry leader",
        ),
        _H.EASE_OF_USE: (
            "easy streaming", "simple interface", "user friendly", "intuitive",
            "seamless", "one click", "quick access",
        ),
        _H.TIME_TO_RESULT: (
            "watch now", "instant streaming", "immediate access", "start watching",
            "play instantly", "no wait",
        ),
        _H.TRUST_SAFETY: (
            "secure", "safe", "family friendly", "parental controls", "trusted",
            "verified", "protected",
        ),
    },
}


def hook_patterns_for(vertical_id: str) -> HookPatternMap:
    """Phrase table for a vertical id; unknown ids get the base table."""
    try:
        return HOOK_PATTERNS[Vertical(vertical_id)]
    except ValueError:
        return HOOK_PATTERNS[Vertical.BASE]


def match_hook_categories(text: str, patterns: HookPatternMap) -> dict[HookCategory, list[str]]:
    """Hook categories with at least one phrase in ``text``, in enum order."""
    lowered = text.lower()
    matches: dict[HookCategory, list[str]] = {}
    for category in HookCategory:
        hits = [p for p in patterns.get(category, ()) if p in lowered]
        if hits:
            matches[category] = hits
    return matches
