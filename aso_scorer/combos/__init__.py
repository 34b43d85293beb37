"""
Keyword combos: n-gram generation, classification and enrichment.

Modules
-------
generator  : Title / subtitle / cross-element windows, dedupe, derived views.
classifier : branded / generic / low_value classification + canonical keys.
enrichment : Additive brand and intent annotations.
"""
