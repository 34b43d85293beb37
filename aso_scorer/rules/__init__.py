"""
Weighted rule evaluation per metadata field.

Modules
-------
limits      : character limits and element weights.
context     : EvaluationContext shared by every rule evaluator.
hooks       : description hook phrases per vertical and category.
title       : title rule evaluators.
subtitle    : subtitle rule evaluators.
description : description (conversion) rule evaluators.
registry    : RULE_REGISTRY: RuleConfig per element, validated at import.
evaluator   : evaluate_element() and score roll-ups.
"""
