"""
Evaluation pipeline.

Modules
-------
evaluate : MetadataEvaluator: ruleset → combos → rules → KPIs → recommendations.
"""
