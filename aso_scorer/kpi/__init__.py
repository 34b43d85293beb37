"""
Normalized KPI vector with family and overall scores.

Modules
-------
registry   : KPI_REGISTRY / FAMILY_REGISTRY: definitions, validated at import.
primitives : compute_primitives(): raw counts and ratios from title + subtitle.
formulas   : KPI_FORMULAS: one registered function per KPI id.
normalize  : raw value → 0–100 by direction.
engine     : compute_kpis(): overrides, provenance, family aggregation.
"""
