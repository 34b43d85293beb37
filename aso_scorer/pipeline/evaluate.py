"""
End-to-end evaluation of one app listing.

The ``MetadataEvaluator`` runs every stage in a fixed sequence:

  Step 1 — Ruleset:     Detect vertical + market, merge base/vertical/market/client.
  Step 2 — Collaborators: Intent patterns and brand info, fetched concurrently.
  Step 3 — Tokenize:    Title, subtitle, description with ruleset stopwords.
  Step 4 — Combos:      Generate, classify, enrich with intent and brand.
  Step 5 — Rules:       Three element evaluations, gathered concurrently.
  Step 6 — Intent:      Combined title + subtitle intent coverage.
  Step 7 — KPIs:        Primitives → vector → family and overall scores.
  Step 8 — Recommendations: Candidates → deduplicate → ranking / conversion.
  Step 9 — Benchmarks:  Optional advisory category comparisons.

Failure isolation
-----------------
- Config layer failure:      Resolver degrades to the next layer, notes it.
- Intent provider failure:   Fallback pattern set, ``intent_fallback_mode``.
- Brand service failure:     No brand info; combos stay unannotated.
- Rule failure:              Zero-score rule result; the element still scores.
- Benchmark failure:         Comparison omitted.

Each call creates its own ``RelevanceCache`` so no relevance tier leaks
between apps or organizations.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from aso_scorer.benchmark import BenchmarkService, TableBenchmarkService
from aso_scorer.brand import BrandIntelligence, StaticBrandIntelligence
from aso_scorer.combos.enrichment import enrich_with_brand, enrich_with_intent
from aso_scorer.combos.generator import generate_combo_coverage
from aso_scorer.config import AppConfig
from aso_scorer.intent.coverage import compute_combined_intent_coverage
from aso_scorer.intent.patterns import (
    IntentPatternProvider,
    StaticIntentPatternProvider,
    resolve_patterns,
)
from aso_scorer.kpi.engine import compute_kpis
from aso_scorer.kpi.primitives import compute_primitives
from aso_scorer.models.app import AppMetadata, BenchmarkComparison, BrandInfo
from aso_scorer.models.evaluation import EvaluationResult, ProvenanceBlock
from aso_scorer.models.scoring import ElementScoringResult
from aso_scorer.recommendations.engine import collect_signals, generate_candidates
from aso_scorer.recommendations.ranker import rank_recommendations
from aso_scorer.relevance.oracle import RelevanceCache, oracle_for
from aso_scorer.rules.context import EvaluationContext
from aso_scorer.rules.evaluator import (
    conversion_score,
    evaluate_element,
    keyword_coverage,
    ranking_score,
)
from aso_scorer.ruleset.resolver import RulesetResolver
from aso_scorer.ruleset.store import ConfigStore, HttpConfigStore, LayerCache, TomlConfigStore
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement
from aso_scorer.text.tokenizer import analyze_text
from aso_scorer.utils.logging import evaluation_extra

logger = logging.getLogger(__name__)

_ELEMENTS: tuple[MetadataElement, ...] = (
    MetadataElement.TITLE,
    MetadataElement.SUBTITLE,
    MetadataElement.DESCRIPTION,
)


def build_store(config: AppConfig) -> ConfigStore:
    """HTTP store when ``rulesets.store_url`` is set, TOML files otherwise."""
    if config.rulesets.store_url:
        return HttpConfigStore(
            config.rulesets.store_url,
            timeout_s=config.rulesets.request_timeout_s,
        )
    return TomlConfigStore(config.rulesets.rulesets_dir)


class MetadataEvaluator:
    """Scores app listings against the resolved configuration.

    Attributes:
        config:             Application configuration.
        resolver:           Ruleset resolver (built from ``store`` when omitted).
        pattern_provider:   Intent pattern source; None → fallback patterns.
        brand_intelligence: Brand collaborator; None → no brand info.
        benchmark_service:  Category benchmarks; None → no comparisons.
    """

    def __init__(
        self,
        config: AppConfig,
        store: Optional[ConfigStore] = None,
        pattern_provider: Optional[IntentPatternProvider] = None,
        brand_intelligence: Optional[BrandIntelligence] = None,
        benchmark_service: Optional[BenchmarkService] = None,
        resolver: Optional[RulesetResolver] = None,
    ) -> None:
        self.config = config
        if resolver is None:
            cache = LayerCache(config.rulesets.layer_cache_ttl_s)
            resolver = RulesetResolver(store or build_store(config), cache=cache)
        self.resolver = resolver
        self.pattern_provider = pattern_provider
        self.brand_intelligence = brand_intelligence
        self.benchmark_service = benchmark_service

    @classmethod
    def from_config(cls, config: AppConfig) -> "MetadataEvaluator":
        """Wire the default collaborators named by ``config``."""
        provider: Optional[IntentPatternProvider] = None
        if config.intent.patterns_file:
            provider = StaticIntentPatternProvider.from_toml(config.intent.patterns_file)

        benchmarks: Optional[BenchmarkService] = None
        if config.scoring.benchmarks_file:
            benchmarks = TableBenchmarkService.from_toml(config.scoring.benchmarks_file)

        return cls(
            config,
            pattern_provider=provider,
            brand_intelligence=StaticBrandIntelligence(),
            benchmark_service=benchmarks,
        )

    async def _brand_info(self, app: AppMetadata) -> Optional[BrandInfo]:
        if self.brand_intelligence is None:
            return None
        try:
            return await self.brand_intelligence.extract_canonical_brand(app)
        except Exception as exc:
            logger.warning(
                "Brand extraction failed for app=%s: %s", app.app_id, exc,
                extra=evaluation_extra(app.app_id, app.organization_id),
            )
            return None

    async def _benchmark(
        self,
        category: str,
        result: ElementScoringResult,
        log_extra: dict[str, str],
    ) -> Optional[BenchmarkComparison]:
        try:
            return await self.benchmark_service.compare_to_category(
                category, result.element, float(result.score)
            )
        except Exception as exc:
            logger.warning(
                "Benchmark comparison failed for %s/%s: %s",
                category, result.element.value, exc,
                extra=log_extra,
            )
            return None

    async def _benchmarks(
        self,
        category: str,
        elements: dict[MetadataElement, ElementScoringResult],
        log_extra: dict[str, str],
    ) -> list[BenchmarkComparison]:
        if self.benchmark_service is None or not category:
            return []
        found = await asyncio.gather(
            *(self._benchmark(category, elements[el], log_extra) for el in _ELEMENTS)
        )
        return [c for c in found if c is not None]

    async def evaluate(self, app: AppMetadata) -> EvaluationResult:
        """Score one listing.

        Never raises for request-scoped problems; every degradation is
        reported in ``EvaluationResult.provenance``.
        """
        platform = app.platform or self.config.scoring.platform
        ruleset = await self.resolver.resolve(app)
        log_extra = evaluation_extra(
            app.app_id, app.organization_id, ruleset.vertical_id, ruleset.market_id
        )

        resolved, brand_info = await asyncio.gather(
            resolve_patterns(
                self.pattern_provider,
                ruleset.vertical_id,
                ruleset.market_id,
                app.organization_id,
                app.app_id,
                override=ruleset.intent_patterns,
            ),
            self._brand_info(app),
        )

        texts = {
            MetadataElement.TITLE: app.title,
            MetadataElement.SUBTITLE: app.subtitle,
            MetadataElement.DESCRIPTION: app.description,
        }
        analyses = {el: analyze_text(text, ruleset.stopwords) for el, text in texts.items()}
        title_analysis = analyses[MetadataElement.TITLE]
        subtitle_analysis = analyses[MetadataElement.SUBTITLE]

        oracle = oracle_for(ruleset, RelevanceCache())

        combos = generate_combo_coverage(title_analysis, subtitle_analysis, oracle)
        combos = enrich_with_intent(combos, resolved.patterns)
        combos = await enrich_with_brand(combos, self.brand_intelligence, brand_info)

        ctx = EvaluationContext(
            platform=platform,
            texts=texts,
            analyses=analyses,
            oracle=oracle,
            combos=combos,
            ruleset=ruleset,
        )

        async def _score(element: MetadataElement) -> ElementScoringResult:
            return evaluate_element(element, ctx)

        scored = await asyncio.gather(*(_score(el) for el in _ELEMENTS))
        elements = dict(zip(_ELEMENTS, scored))

        intent = compute_combined_intent_coverage(
            title_analysis.all_tokens,
            subtitle_analysis.all_tokens,
            resolved.patterns,
            fallback_mode=resolved.fallback_mode,
            title_weight=self.config.scoring.intent_title_weight,
            subtitle_weight=self.config.scoring.intent_subtitle_weight,
        )

        primitives = compute_primitives(
            app.title,
            app.subtitle,
            title_analysis,
            subtitle_analysis,
            oracle,
            combos,
            intent=intent,
            brand_info=brand_info,
            platform=platform,
        )
        kpi = compute_kpis(primitives, ruleset)

        signals = collect_signals(ctx, elements, kpi)
        recommendations = rank_recommendations(generate_candidates(signals))

        benchmarks = await self._benchmarks(app.category, elements, log_extra)

        provenance = ProvenanceBlock(
            vertical_id=ruleset.vertical_id,
            market_id=ruleset.market_id,
            inheritance_chain=ruleset.inheritance_chain,
            ancestry=ruleset.ancestry,
            leak_warnings=ruleset.leak_warnings,
            fallback_notes=ruleset.fallback_notes,
            ruleset_source=ruleset.source,
            intent_fallback_mode=resolved.fallback_mode,
            brand_available=brand_info is not None,
        )

        overall = ranking_score(elements)
        conversion = conversion_score(elements)
        logger.info(
            "Evaluated app=%s vertical=%s market=%s overall=%d conversion=%d kpi=%.2f recs=%d",
            app.app_id, ruleset.vertical_id, ruleset.market_id,
            overall, conversion, kpi.overall_score,
            len(recommendations.ranking) + len(recommendations.conversion),
            extra=log_extra,
        )

        return EvaluationResult(
            platform=platform,
            overall_score=overall,
            conversion_score=conversion,
            elements=elements,
            keyword_coverage=keyword_coverage(
                ctx, self.config.scoring.max_description_keywords
            ),
            combo_coverage=combos,
            kpi=kpi,
            intent=intent,
            recommendations=recommendations,
            benchmarks=benchmarks,
            provenance=provenance,
        )


def evaluate_sync(evaluator: MetadataEvaluator, app: AppMetadata) -> EvaluationResult:
    """Run ``evaluator.evaluate(app)`` on a fresh event loop (CLI use)."""
    return asyncio.run(evaluator.evaluate(app))
