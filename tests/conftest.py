"""
Shared pytest fixtures for the aso-scorer test suite.

Provides:
  - ``base_ruleset``: A code-default ``MergedRuleSet`` (no store layers).
  - ``make_context``: Factory building an ``EvaluationContext`` from raw
    title / subtitle / description text, the way the evaluator does.
  - ``sample_app``: A realistic language-learning listing.
  - ``in_memory_store``: An empty ``InMemoryConfigStore``.
"""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from aso_scorer.combos.generator import generate_combo_coverage
from aso_scorer.models.app import AppMetadata
from aso_scorer.models.ruleset import MergedRuleSet
from aso_scorer.relevance.oracle import RelevanceCache, oracle_for
from aso_scorer.rules.context import EvaluationContext
from aso_scorer.ruleset.store import InMemoryConfigStore
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement, Platform
from aso_scorer.text.tokenizer import analyze_text


# ── Configuration fixtures ────────────────────────────────────────────────────

@pytest.fixture
def base_ruleset() -> MergedRuleSet:
    """Resolved configuration with nothing but code defaults."""
    return MergedRuleSet()


@pytest.fixture
def in_memory_store() -> InMemoryConfigStore:
    return InMemoryConfigStore()


# ── Evaluation context factory ────────────────────────────────────────────────

def build_context(
    title: str = "",
    subtitle: str = "",
    description: str = "",
    ruleset: Optional[MergedRuleSet] = None,
    platform: Platform = Platform.IOS,
) -> EvaluationContext:
    """Tokenize, build the oracle and combos, and wrap them in a context."""
    ruleset = ruleset or MergedRuleSet()
    texts = {
        MetadataElement.TITLE: title,
        MetadataElement.SUBTITLE: subtitle,
        MetadataElement.DESCRIPTION: description,
    }
    analyses = {el: analyze_text(text, ruleset.stopwords) for el, text in texts.items()}
    oracle = oracle_for(ruleset, RelevanceCache())
    combos = generate_combo_coverage(
        analyses[MetadataElement.TITLE], analyses[MetadataElement.SUBTITLE], oracle
    )
    return EvaluationContext(
        platform=platform,
        texts=texts,
        analyses=analyses,
        oracle=oracle,
        combos=combos,
        ruleset=ruleset,
    )


@pytest.fixture
def make_context() -> Callable[..., EvaluationContext]:
    """Return ``build_context`` so tests can build several contexts."""
    return build_context


# ── Sample domain objects ─────────────────────────────────────────────────────

@pytest.fixture
def sample_app() -> AppMetadata:
    """A complete language-learning listing on the US store."""
    return AppMetadata(
        title="Lingo: Learn Spanish & French",
        subtitle="Speak fluently with daily lessons",
        description=(
            "Discover the easy way to learn a new language. Speak fluently in "
            "weeks with bite-sized lessons.\n\n"
            "Features:\n"
            "- Interactive lessons for vocabulary and grammar\n"
            "- Speech recognition to perfect pronunciation\n"
            "- Offline mode for learning on the go\n\n"
            "Download now and start your free trial today!"
        ),
        category="education",
        locale="us",
        app_id="lingo-ios",
        organization_id="lingo-inc",
        brand_aliases=["Lingo"],
    )
