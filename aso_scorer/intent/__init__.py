"""
Search intent: pattern sources and coverage analysis.

Modules
-------
patterns : IntentPatternProvider protocol, StaticIntentPatternProvider,
           FALLBACK_PATTERNS and resolve_patterns() (fallback detection).
coverage : Token/combo intent classification and per-field / combined
           intent coverage.
"""
