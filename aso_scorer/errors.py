"""
Domain exceptions for the metadata scoring engine.

Only programming errors in the static registries propagate out of the
engine. Everything request-scoped (a broken rule, an unreachable config
layer, a missing intent pattern set) degrades in place and is reported
through the result object instead.
"""

from __future__ import annotations


class AsoScorerError(Exception):
    """Base class for all errors raised by ``aso_scorer``."""


class RegistryIntegrityError(AsoScorerError):
    """A static registry (rules, KPIs, families) violates its contract.

    Raised at import time so a bad registry edit fails fast at startup,
    never during a request.
    """


class LayerLoadError(AsoScorerError):
    """A configuration layer could not be loaded from its store.

    The ruleset resolver catches this (and any other store error) and
    degrades to the next less specific layer.
    """

    def __init__(self, scope: str, key: str, reason: str) -> None:
        self.scope = scope
        self.key = key
        self.reason = reason
        super().__init__(f"{scope} layer '{key}' unavailable: {reason}")
