"""
KPI registry: the single source of truth for the KPI vector.

Every KPI the engine emits is declared here, with its family, default weight
inside the family, raw value range and normalization direction. The order of
``KPI_REGISTRY`` is the order of ``KpiEngineResult.vector``; downstream
consumers rely on it, so reordering or inserting a KPI means bumping
``KPI_ENGINE_VERSION``.

Families
--------
clarity_structure     Character usage, word counts and token density.
keyword_architecture  High-value keywords, noise and combo counts.
hook_strength         Action verbs, benefit words, specificity, redundancy.
brand_vs_generic      Brand presence and branded/generic combo balance.
psychology_alignment  Urgency, social proof, benefit and action vocabulary.
intent_alignment      Search intent coverage of title + subtitle tokens.

Integrity (checked at import by ``validate_kpi_registry``)
----------------------------------------------------------
  - the vector has ``EXPECTED_VECTOR_LENGTH`` entries with unique ids;
  - every KPI belongs to a registered family;
  - family weights sum to 1, and KPI weights sum to 1 within each family;
  - ``min_value < max_value`` and target-range KPIs carry a target value
    inside the range plus a non-negative tolerance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from aso_scorer.errors import RegistryIntegrityError
from aso_scorer.taxonomy.metadata_taxonomy import KpiDirection, KpiFamily

KPI_ENGINE_VERSION = "v1"
EXPECTED_VECTOR_LENGTH = 34

_HIGHER = KpiDirection.HIGHER_IS_BETTER
_LOWER = KpiDirection.LOWER_IS_BETTER
_TARGET = KpiDirection.TARGET_RANGE


@dataclass(frozen=True)
class KpiDefinition:
    """Static specification for one KPI.

    Attributes:
        id:               Stable identifier; also the ``kpi_overrides`` key.
        family_id:        Family the KPI contributes to.
        label:            Short human-readable name.
        weight:           Default weight inside the family (0–1).
        min_value:        Raw value mapped to the bottom of the scale.
        max_value:        Raw value mapped to the top of the scale.
        direction:        How the clamped raw value becomes 0–100.
        target_value:     Ideal raw value (``target_range`` only).
        target_tolerance: Distance from the target still scored 100.
        description:      What the raw value measures.
    """

    id: str
    family_id: KpiFamily
    label: str
    weight: float
    min_value: float
    max_value: float
    direction: KpiDirection = _HIGHER
    target_value: Optional[float] = None
    target_tolerance: Optional[float] = None
    description: str = field(default="", compare=False)


@dataclass(frozen=True)
class KpiFamilyDefinition:
    """One KPI family and its default share of the overall score."""

    id: KpiFamily
    label: str
    weight: float
    description: str = field(default="", compare=False)


# ── Families ──────────────────────────────────────────────────────────────────

FAMILY_REGISTRY: tuple[KpiFamilyDefinition, ...] = (
    KpiFamilyDefinition(KpiFamily.CLARITY_STRUCTURE,    "Clarity & Structure",   0.15,
                        "How cleanly the title and subtitle use their space."),
    KpiFamilyDefinition(KpiFamily.KEYWORD_ARCHITECTURE, "Keyword Architecture",  0.25,
                        "Discovery value of keywords and combinations."),
    KpiFamilyDefinition(KpiFamily.HOOK_STRENGTH,        "Hook Strength",         0.20,
                        "Action and benefit language, specificity, repetition."),
    KpiFamilyDefinition(KpiFamily.BRAND_VS_GENERIC,     "Brand vs Generic",      0.10,
                        "Balance between brand and generic discovery terms."),
    KpiFamilyDefinition(KpiFamily.PSYCHOLOGY_ALIGNMENT, "Psychology Alignment",  0.10,
                        "Urgency, social proof and benefit vocabulary."),
    KpiFamilyDefinition(KpiFamily.INTENT_ALIGNMENT,     "Intent Alignment",      0.20,
                        "Coverage of informational, commercial and transactional search intent."),
)


# ── Registry ──────────────────────────────────────────────────────────────────
# Order here is the order of ``KpiEngineResult.vector``.

_CS = KpiFamily.CLARITY_STRUCTURE
_KA = KpiFamily.KEYWORD_ARCHITECTURE
_HS = KpiFamily.HOOK_STRENGTH
_BG = KpiFamily.BRAND_VS_GENERIC
_PA = KpiFamily.PSYCHOLOGY_ALIGNMENT
_IA = KpiFamily.INTENT_ALIGNMENT

KPI_REGISTRY: tuple[KpiDefinition, ...] = (

    # ── Clarity & structure ────────────────────────────────────────────────
    KpiDefinition("title_char_usage",        _CS, "Title Character Usage",    0.25, 0, 100, _TARGET, 85, 15,
                  "Title characters used as a percentage of the platform limit."),
    KpiDefinition("subtitle_char_usage",     _CS, "Subtitle Character Usage", 0.20, 0, 100, _TARGET, 85, 15,
                  "Subtitle characters used as a percentage of the platform limit."),
    KpiDefinition("title_word_count",        _CS, "Title Word Count",         0.15, 0, 8, _TARGET, 4, 1),
    KpiDefinition("subtitle_word_count",     _CS, "Subtitle Word Count",      0.10, 0, 8, _TARGET, 4, 1),
    KpiDefinition("title_token_density",     _CS, "Title Token Density",      0.15, 0, 1,
                  description="Share of title tokens longer than two characters."),
    KpiDefinition("subtitle_token_density",  _CS, "Subtitle Token Density",   0.15, 0, 1),

    # ── Keyword architecture ───────────────────────────────────────────────
    KpiDefinition("title_high_value_keyword_count",           _KA, "Title High-Value Keywords",        0.15, 0, 5,
                  description="Title keywords with relevance tier >= 2."),
    KpiDefinition("subtitle_high_value_incremental_keywords", _KA, "Subtitle Incremental Keywords",    0.15, 0, 5,
                  description="Subtitle tier >= 2 keywords the title does not carry."),
    KpiDefinition("title_noise_ratio",                        _KA, "Title Signal Quality",             0.10, 0, 100,
                  description="100 minus the title noise percentage and severity penalty."),
    KpiDefinition("subtitle_noise_ratio",                     _KA, "Subtitle Signal Quality",          0.05, 0, 100),
    KpiDefinition("title_combo_count_generic",                _KA, "Title Generic Combos",             0.10, 0, 10),
    KpiDefinition("title_combo_count_branded",                _KA, "Title Branded Combos",             0.05, 0, 5),
    KpiDefinition("subtitle_combo_incremental_generic",       _KA, "Subtitle Incremental Generic Combos", 0.10, 0, 10),
    KpiDefinition("subtitle_low_value_combo_ratio",           _KA, "Low-Value Combo Ratio",            0.10, 0, 1, _LOWER,
                  description="Low-value combos as a share of all combos."),
    KpiDefinition("title_language_verb_pairs",                _KA, "Title Language-Verb Pairs",        0.05, 0, 3,
                  description="Adjacent language + action verb pairs such as 'learn spanish'."),
    KpiDefinition("total_unique_keyword_coverage",            _KA, "Unique Keyword Coverage",          0.15, 0, 12),

    # ── Hook strength ──────────────────────────────────────────────────────
    KpiDefinition("hook_strength_title",     _HS, "Title Hook Strength",      0.30, 0, 100),
    KpiDefinition("hook_strength_subtitle",  _HS, "Subtitle Hook Strength",   0.20, 0, 100),
    KpiDefinition("specificity_score",       _HS, "Specificity",              0.20, 0, 100),
    KpiDefinition("benefit_density",         _HS, "Benefit Density",          0.15, 0, 0.5),
    KpiDefinition("redundancy_penalty",      _HS, "Redundancy",               0.15, 0, 50, _LOWER,
                  description="Ten points per distinct token repeated across title and subtitle."),

    # ── Brand vs generic ───────────────────────────────────────────────────
    KpiDefinition("brand_presence_title",           _BG, "Brand in Title",           0.25, 0, 1),
    KpiDefinition("brand_presence_subtitle",        _BG, "Brand in Subtitle",        0.15, 0, 1, _LOWER),
    KpiDefinition("brand_combo_ratio",              _BG, "Branded Combo Ratio",      0.20, 0, 1, _TARGET, 0.3, 0.2),
    KpiDefinition("generic_discovery_combo_ratio",  _BG, "Generic Combo Ratio",      0.25, 0, 1),
    KpiDefinition("overbranding_indicator",         _BG, "Overbranding",             0.15, 0, 1, _LOWER,
                  description="1 when more than 70% of valuable title combos are branded."),

    # ── Psychology alignment ───────────────────────────────────────────────
    KpiDefinition("urgency_signal",          _PA, "Urgency Signal",           0.20, 0, 100),
    KpiDefinition("social_proof_signal",     _PA, "Social Proof Signal",      0.20, 0, 100),
    KpiDefinition("benefit_keyword_count",   _PA, "Benefit Keywords",         0.30, 0, 4),
    KpiDefinition("action_verb_density",     _PA, "Action Verb Density",      0.30, 0, 0.5),

    # ── Intent alignment ───────────────────────────────────────────────────
    KpiDefinition("informational_intent_coverage_score", _IA, "Informational Intent",  0.30, 0, 100),
    KpiDefinition("commercial_intent_coverage_score",    _IA, "Commercial Intent",     0.25, 0, 100),
    KpiDefinition("transactional_intent_coverage_score", _IA, "Transactional Intent",  0.20, 0, 100),
    KpiDefinition("navigational_noise_ratio",            _IA, "Navigational Noise",    0.25, 0, 100, _LOWER,
                  description="Navigational plus unclassified tokens as a percentage of all tokens."),
)

INTENT_KPI_IDS: frozenset[str] = frozenset(
    k.id for k in KPI_REGISTRY if k.family_id == KpiFamily.INTENT_ALIGNMENT
)


def validate_kpi_registry(
    kpis: tuple[KpiDefinition, ...] = KPI_REGISTRY,
    families: tuple[KpiFamilyDefinition, ...] = FAMILY_REGISTRY,
    expected_length: int = EXPECTED_VECTOR_LENGTH,
) -> None:
    """Check the registry contract.

    Raises:
        RegistryIntegrityError: On the first violation found.
    """
    if len(kpis) != expected_length:
        raise RegistryIntegrityError(
            f"KPI vector has {len(kpis)} entries, expected {expected_length} "
            f"for engine {KPI_ENGINE_VERSION}."
        )

    family_ids = [f.id for f in families]
    if len(set(family_ids)) != len(family_ids):
        raise RegistryIntegrityError(f"Duplicate KPI family ids: {family_ids}.")
    family_total = sum(f.weight for f in families)
    if not math.isclose(family_total, 1.0, abs_tol=1e-9):
        raise RegistryIntegrityError(
            f"Family weights sum to {family_total:.4f}, expected 1.0."
        )

    seen: set[str] = set()
    per_family: dict[KpiFamily, float] = {f: 0.0 for f in family_ids}
    for kpi in kpis:
        if kpi.id in seen:
            raise RegistryIntegrityError(f"Duplicate KPI id '{kpi.id}'.")
        seen.add(kpi.id)
        if kpi.family_id not in per_family:
            raise RegistryIntegrityError(
                f"KPI '{kpi.id}' belongs to unknown family '{kpi.family_id}'."
            )
        if not 0.0 <= kpi.weight <= 1.0:
            raise RegistryIntegrityError(f"KPI '{kpi.id}' weight {kpi.weight} outside [0, 1].")
        if not kpi.min_value < kpi.max_value:
            raise RegistryIntegrityError(
                f"KPI '{kpi.id}' range [{kpi.min_value}, {kpi.max_value}] is empty."
            )
        if kpi.direction == KpiDirection.TARGET_RANGE:
            if kpi.target_value is None or kpi.target_tolerance is None:
                raise RegistryIntegrityError(
                    f"Target-range KPI '{kpi.id}' needs target_value and target_tolerance."
                )
            if not kpi.min_value <= kpi.target_value <= kpi.max_value or kpi.target_tolerance < 0:
                raise RegistryIntegrityError(
                    f"KPI '{kpi.id}' target {kpi.target_value}±{kpi.target_tolerance} "
                    "does not fit its range."
                )
        per_family[kpi.family_id] += kpi.weight

    for family_id, total in per_family.items():
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise RegistryIntegrityError(
                f"KPI weights for family '{family_id}' sum to {total:.4f}, expected 1.0."
            )


def kpi_ids(family: Optional[KpiFamily] = None) -> list[str]:
    """KPI ids in vector order, optionally limited to one family."""
    return [k.id for k in KPI_REGISTRY if family is None or k.family_id == family]


def get_kpi(kpi_id: str) -> KpiDefinition:
    """Look up a KPI definition by id.

    Raises:
        KeyError: If ``kpi_id`` is not registered.
    """
    for kpi in KPI_REGISTRY:
        if kpi.id == kpi_id:
            return kpi
    raise KeyError(f"KPI '{kpi_id}' not found in KPI_REGISTRY. Available: {kpi_ids()}")


def get_family(family_id: str) -> KpiFamilyDefinition:
    """Look up a family definition by id.

    Raises:
        KeyError: If ``family_id`` is not registered.
    """
    for family in FAMILY_REGISTRY:
        if family.id == family_id:
            return family
    available = [f.id.value for f in FAMILY_REGISTRY]
    raise KeyError(f"KPI family '{family_id}' not found. Available: {available}")


validate_kpi_registry()
