"""
Structured logging setup for the metadata scoring engine.

Call ``configure_logging(config)`` once at CLI entry (before any evaluation)
to set up the root logger with the configured level and optional file handler.

All internal modules use ``logging.getLogger(__name__)``; library code never
calls ``configure_logging`` or ``basicConfig`` itself.

JSON format (set ``json_format = true`` in config/default.toml [logging]):
  Emits one JSON object per line, suitable for log aggregation tools::

    {"ts": "2026-10-16T09:00:00Z", "level": "INFO", "logger": "...", "msg": "...",
     "app_id": "com.acme.zap", "vertical": "games", "market": "us"}

Evaluation context:
  The pipeline tags its records with ``extra=evaluation_extra(...)``. JSON
  lines carry those fields at the top level; the text format appends them as
  a trailing ``[app_id=... vertical=...]`` block so a shared log can be
  filtered per listing.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from aso_scorer.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came in via ``extra=``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}

# Fields attached to records emitted while scoring one listing, in display order.
EVALUATION_FIELDS = ("app_id", "organization_id", "vertical", "market")


def evaluation_extra(
    app_id: Optional[str],
    organization_id: Optional[str] = None,
    vertical: Optional[str] = None,
    market: Optional[str] = None,
) -> dict[str, str]:
    """Build the ``extra=`` mapping for a log call made during one evaluation.

    Unset values are dropped so records only carry what is known.
    """
    values = dict(zip(EVALUATION_FIELDS, (app_id, organization_id, vertical, market)))
    return {k: v for k, v in values.items() if v}


class _ContextTextFormatter(logging.Formatter):
    """Plain-text format with any evaluation context appended."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        ctx = " ".join(
            f"{key}={getattr(record, key)}"
            for key in EVALUATION_FIELDS
            if getattr(record, key, None)
        )
        return f"{line} [{ctx}]" if ctx else line


class _JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line.

    Fields: ``ts``, ``level``, ``logger``, ``msg``.
    Extra fields from ``extra=`` kwargs (the evaluation context among them)
    are included at the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key, val in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                payload[key] = val
        return json.dumps(payload, default=str)


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from a ``LoggingConfig`` instance.

    Sets up:
      - StreamHandler (stdout) at the configured level.
      - Optional FileHandler if ``config.log_file`` is set.
      - JSON line format if ``config.json_format`` is ``True``.

    Args:
        config: Logging configuration section from ``AppConfig``.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    formatter: logging.Formatter
    if config.json_format:
        formatter = _JsonFormatter()
    else:
        formatter = _ContextTextFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers.append(console)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # The HTTP config store logs every request at INFO otherwise.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
