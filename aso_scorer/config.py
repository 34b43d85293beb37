"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``.env``                 — local secrets and env overrides (gitignored)
  2. ``config/default.toml``  — committed static defaults
  3. ``config/local.toml``    — optional local overrides (gitignored)
  4. Environment variables    — ``ASO_SCORER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The evaluator, the ruleset stores and the CLI receive an ``AppConfig``
instance, never raw dicts or individual env var lookups.

Note that this is *application* configuration (where rulesets live, which
platform limits apply, how to log). Scoring overrides per vertical, market
and client are *ruleset layers* and are resolved per request by
``aso_scorer.ruleset.resolver``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from aso_scorer.taxonomy.metadata_taxonomy import Platform

# ── Sub-config models ─────────────────────────────────────────────────────────


class ScoringConfig(BaseModel):
    """Scoring defaults applied when a request does not specify them."""

    model_config = ConfigDict(frozen=True)

    platform: Platform = Platform.IOS
    intent_title_weight: float = 0.6
    intent_subtitle_weight: float = 0.4
    max_description_keywords: int = 20
    benchmarks_file: Optional[str] = None

    @field_validator("platform", mode="before")
    @classmethod
    def normalize_platform(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @field_validator("max_description_keywords")
    @classmethod
    def positive_keyword_cap(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_description_keywords must be >= 1, got {v}.")
        return v

    @model_validator(mode="after")
    def intent_weights_sum_to_one(self) -> "ScoringConfig":
        total = self.intent_title_weight + self.intent_subtitle_weight
        if abs(total - 1.0) > 1e-6:
            raise ValueError(
                "intent_title_weight + intent_subtitle_weight must equal 1.0, "
                f"got {total:.4f}."
            )
        return self


class RulesetConfig(BaseModel):
    """Where ruleset layers (vertical / market / client) are loaded from.

    When ``store_url`` is set the HTTP store is used; otherwise layers are
    read from TOML files under ``rulesets_dir``.
    """

    model_config = ConfigDict(frozen=True)

    rulesets_dir: str = "config/rulesets"
    store_url: Optional[str] = None
    request_timeout_s: float = 5.0
    layer_cache_ttl_s: float = 300.0

    @field_validator("request_timeout_s", "layer_cache_ttl_s")
    @classmethod
    def non_negative(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Timeout/TTL values must be >= 0, got {v}.")
        return v


class IntentConfig(BaseModel):
    """Intent pattern source. Empty ``patterns_file`` means fallback patterns."""

    model_config = ConfigDict(frozen=True)

    patterns_file: Optional[str] = None


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: Optional[str] = None
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration, the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    scoring: ScoringConfig = ScoringConfig()
    rulesets: RulesetConfig = RulesetConfig()
    intent: IntentConfig = IntentConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    config = _build_app_config(raw)
    return _resolve_paths(config, root)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply ASO_SCORER_* env vars to the raw config dict.

    Supported overrides:
      ASO_SCORER_LOG_LEVEL     → raw["logging"]["level"]
      ASO_SCORER_PLATFORM      → raw["scoring"]["platform"]
      ASO_SCORER_RULESETS_DIR  → raw["rulesets"]["rulesets_dir"]
      ASO_SCORER_STORE_URL     → raw["rulesets"]["store_url"]
      ASO_SCORER_DEBUG         → raw["debug"]
    """
    if log_level := os.environ.get("ASO_SCORER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if platform := os.environ.get("ASO_SCORER_PLATFORM"):
        raw.setdefault("scoring", {})["platform"] = platform

    if rulesets_dir := os.environ.get("ASO_SCORER_RULESETS_DIR"):
        raw.setdefault("rulesets", {})["rulesets_dir"] = rulesets_dir

    if store_url := os.environ.get("ASO_SCORER_STORE_URL"):
        raw.setdefault("rulesets", {})["store_url"] = store_url

    if debug := os.environ.get("ASO_SCORER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        scoring=ScoringConfig(**raw.get("scoring", {})),
        rulesets=RulesetConfig(**raw.get("rulesets", {})),
        intent=IntentConfig(**raw.get("intent", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )


def _resolve_paths(config: AppConfig, root: Path) -> AppConfig:
    """Anchor relative data paths at the project root."""
    rulesets_dir = Path(config.rulesets.rulesets_dir)
    if not rulesets_dir.is_absolute():
        rulesets_dir = root / rulesets_dir

    patterns_file = config.intent.patterns_file
    if patterns_file and not Path(patterns_file).is_absolute():
        patterns_file = str(root / patterns_file)

    benchmarks_file = config.scoring.benchmarks_file
    if benchmarks_file and not Path(benchmarks_file).is_absolute():
        benchmarks_file = str(root / benchmarks_file)

    return config.model_copy(
        update={
            "rulesets": config.rulesets.model_copy(
                update={"rulesets_dir": str(rulesets_dir)}
            ),
            "scoring": config.scoring.model_copy(
                update={"benchmarks_file": benchmarks_file}
            ),
            "intent": config.intent.model_copy(update={"patterns_file": patterns_file}),
        }
    )
