"""
Severity-ranked recommendations.

Modules
-------
engine : RecommendationSignals, the four candidate generators, templates.
ranker : deduplicate / sort / split into ranking and conversion lists.
"""
