"""
aso-scorer — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (evaluation, registry listing, config check).
  5. Report result to stdout.

Install and run::

    pip install -e .
    aso-scorer --help
    aso-scorer validate-config
    aso-scorer list-kpis --family hook_strength
    aso-scorer list-rules
    aso-scorer evaluate --title "Lingo: Learn Spanish" \\
        --subtitle "Speak fluently with daily lessons" --category education
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="aso-scorer",
    help="App-store metadata scoring and KPI engine.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from aso_scorer.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from aso_scorer.utils.logging import configure_logging
    configure_logging(config.logging)


def _print_summary(result) -> None:
    typer.echo(f"Overall (ranking) score: {result.overall_score}")
    typer.echo(f"Conversion score:        {result.conversion_score}")
    typer.echo(f"KPI overall score:       {result.kpi.overall_score:.2f}")
    typer.echo(
        f"Intent coverage:         {result.intent.overall_score} ({result.intent.assessment})"
    )
    typer.echo("")

    for element, scored in result.elements.items():
        typer.echo(
            f"  {element.value:<12} {scored.score:>3}  "
            f"({scored.metadata.characters_used}/{scored.metadata.max_characters} chars)"
        )
    typer.echo("")

    typer.echo("KPI families:")
    for family in result.kpi.families.values():
        typer.echo(f"  {family.label:<28} {family.score:>6.2f}  (w={family.weight:.2f})")
    typer.echo("")

    for title, recs in (
        ("Ranking recommendations", result.recommendations.ranking),
        ("Conversion recommendations", result.recommendations.conversion),
    ):
        typer.echo(f"{title}:")
        if not recs:
            typer.echo("  (none)")
        for rec in recs:
            typer.echo(f"  [{rec.severity.value}] {rec.message}")
        typer.echo("")

    for bench in result.benchmarks:
        typer.echo(
            f"Benchmark {bench.element.value}: p{bench.percentile:.0f} ({bench.label})"
        )

    prov = result.provenance
    typer.echo(
        f"Ruleset: vertical={prov.vertical_id} market={prov.market_id or '-'} "
        f"source={prov.ruleset_source}"
    )
    for note in prov.fallback_notes:
        typer.echo(f"  [FALLBACK] {note}")
    for leak in prov.leak_warnings:
        typer.echo(f"  [LEAK:{leak.severity.value}] {leak.message}")
    if prov.intent_fallback_mode:
        typer.echo("  [FALLBACK] Intent coverage used the fallback pattern set.")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("evaluate")
def evaluate(
    title: str = typer.Option("", "--title", help="App title."),
    subtitle: str = typer.Option("", "--subtitle", help="App subtitle / short description."),
    description: str = typer.Option("", "--description", help="Long description."),
    description_file: Optional[str] = typer.Option(
        None,
        "--description-file",
        help="Read the long description from a UTF-8 text file.",
    ),
    category: str = typer.Option("", "--category", help="Store category (e.g. education)."),
    locale: str = typer.Option("us", "--locale", help="Storefront locale (e.g. us, uk, de)."),
    app_id: Optional[str] = typer.Option(None, "--app-id", help="App identifier."),
    org_id: Optional[str] = typer.Option(None, "--org-id", help="Organization identifier."),
    platform: Optional[str] = typer.Option(
        None,
        "--platform",
        help="ios or android (default: [scoring] platform from config).",
    ),
    brand_alias: Optional[list[str]] = typer.Option(
        None,
        "--brand-alias",
        help="Brand alias; repeat for several. The first is the canonical brand.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Score one app listing and print scores, KPIs and recommendations."""
    from pydantic import ValidationError

    from aso_scorer.models.app import AppMetadata
    from aso_scorer.pipeline.evaluate import MetadataEvaluator, evaluate_sync

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if description_file:
        path = Path(description_file)
        if not path.exists():
            typer.echo(f"[ERROR] Description file not found: {path}", err=True)
            raise typer.Exit(code=1)
        description = path.read_text(encoding="utf-8")

    if not (title or subtitle or description):
        typer.echo("[ERROR] Provide at least one of --title, --subtitle, --description.", err=True)
        raise typer.Exit(code=1)

    try:
        metadata = AppMetadata(
            title=title,
            subtitle=subtitle,
            description=description,
            category=category,
            locale=locale,
            app_id=app_id,
            organization_id=org_id,
            platform=platform.lower() if platform else None,
            brand_aliases=brand_alias or [],
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid input: {exc}", err=True)
        raise typer.Exit(code=1)

    try:
        evaluator = MetadataEvaluator.from_config(config)
    except Exception as exc:
        typer.echo(f"[ERROR] Could not load scoring data: {exc}", err=True)
        raise typer.Exit(code=1)

    result = evaluate_sync(evaluator, metadata)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return
    _print_summary(result)


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Platform:          {config.scoring.platform.value}")
    typer.echo(
        f"  Intent weights:    title={config.scoring.intent_title_weight} "
        f"subtitle={config.scoring.intent_subtitle_weight}"
    )
    typer.echo(f"  Rulesets dir:      {config.rulesets.rulesets_dir}")
    typer.echo(f"  Ruleset store URL: {config.rulesets.store_url or '-'}")
    typer.echo(f"  Intent patterns:   {config.intent.patterns_file or '(fallback set)'}")
    typer.echo(f"  Benchmarks:        {config.scoring.benchmarks_file or '-'}")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("list-kpis")
def list_kpis(
    family: Optional[str] = typer.Option(
        None,
        "--family",
        help="Only list KPIs of this family (e.g. hook_strength).",
    ),
) -> None:
    """Print the KPI registry in vector order."""
    from aso_scorer.kpi.registry import FAMILY_REGISTRY, KPI_ENGINE_VERSION, KPI_REGISTRY
    from aso_scorer.taxonomy.metadata_taxonomy import KpiFamily

    selected: Optional[KpiFamily] = None
    if family:
        try:
            selected = KpiFamily(family)
        except ValueError:
            valid = ", ".join(f.value for f in KpiFamily)
            typer.echo(f"[ERROR] Unknown family '{family}'. Valid: {valid}", err=True)
            raise typer.Exit(code=1)

    typer.echo(f"KPI engine {KPI_ENGINE_VERSION}: {len(KPI_REGISTRY)} KPIs")
    for fam in FAMILY_REGISTRY:
        if selected is not None and fam.id != selected:
            continue
        typer.echo("")
        typer.echo(f"{fam.label} ({fam.id.value}, w={fam.weight:.2f})")
        for index, kpi in enumerate(KPI_REGISTRY):
            if kpi.family_id != fam.id:
                continue
            typer.echo(
                f"  [{index:>2}] {kpi.id:<40} w={kpi.weight:.2f}  {kpi.direction.value}"
            )


@app.command("list-rules")
def list_rules() -> None:
    """Print the scoring rules per element with their weights."""
    from aso_scorer.rules.registry import RULE_REGISTRY

    for element, rules in RULE_REGISTRY.items():
        typer.echo(f"{element.value}:")
        for rule in rules:
            typer.echo(f"  {rule.id:<36} w={rule.weight:.2f}  {rule.name}")
        typer.echo("")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
