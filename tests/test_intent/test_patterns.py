"""
Tests for aso_scorer/intent/patterns.py.

What we test
------------
resolve_patterns():
  - A non-empty ruleset override wins over the provider.
  - No provider, an empty result or a failing provider -> FALLBACK_PATTERNS
    with fallback_mode=True (never raises).
  - Provider patterns are filtered to active ones and sorted by priority.

StaticIntentPatternProvider:
  - from_toml() loads patterns; vertical / market keys scope them.
  - Missing file -> FileNotFoundError.
"""

from __future__ import annotations

import asyncio

import pytest

from aso_scorer.intent.patterns import (
    FALLBACK_PATTERNS,
    StaticIntentPatternProvider,
    resolve_patterns,
)
from aso_scorer.models.intent import IntentPattern
from aso_scorer.taxonomy.metadata_taxonomy import IntentType


def _pattern(text: str, priority: int = 100, active: bool = True) -> IntentPattern:
    return IntentPattern(
        pattern=text, intent_type=IntentType.INFORMATIONAL, priority=priority, active=active
    )


class _FailingProvider:
    async def load_patterns(self, vertical, market, org=None, app=None):
        raise ConnectionError("pattern service down")


class TestResolvePatterns:
    def test_override_wins(self):
        provider = StaticIntentPatternProvider([_pattern("study")])
        resolved = asyncio.run(
            resolve_patterns(provider, "base", None, override=[_pattern("practice")])
        )
        assert [p.pattern for p in resolved.patterns] == ["practice"]
        assert not resolved.fallback_mode

    def test_no_provider_uses_fallback(self):
        resolved = asyncio.run(resolve_patterns(None, "base", None))
        assert resolved.fallback_mode
        assert len(resolved.patterns) == len(FALLBACK_PATTERNS)

    def test_empty_provider_uses_fallback(self):
        resolved = asyncio.run(resolve_patterns(StaticIntentPatternProvider(), "base", "us"))
        assert resolved.fallback_mode

    def test_failing_provider_uses_fallback(self):
        resolved = asyncio.run(resolve_patterns(_FailingProvider(), "base", None))
        assert resolved.fallback_mode
        assert resolved.patterns

    def test_sorted_and_active_only(self):
        provider = StaticIntentPatternProvider([
            _pattern("low", priority=10),
            _pattern("high", priority=200),
            _pattern("off", priority=300, active=False),
        ])
        resolved = asyncio.run(resolve_patterns(provider, "base", None))
        assert [p.pattern for p in resolved.patterns] == ["high", "low"]
        assert not resolved.fallback_mode

    def test_fallback_sorted_by_priority(self):
        resolved = asyncio.run(resolve_patterns(None, "base", None))
        priorities = [p.priority for p in resolved.patterns]
        assert priorities == sorted(priorities, reverse=True)


class TestStaticProviderFromToml:
    def _write(self, tmp_path):
        path = tmp_path / "patterns.toml"
        path.write_text(
            '[[patterns]]\npattern = "learn"\nintent_type = "informational"\n\n'
            '[[patterns]]\npattern = "lessons"\nintent_type = "informational"\n'
            'vertical = "language_learning"\n\n'
            '[[patterns]]\npattern = "colour"\nintent_type = "commercial"\nmarket = "uk"\n',
            encoding="utf-8",
        )
        return path

    def test_unscoped_everywhere(self, tmp_path):
        provider = StaticIntentPatternProvider.from_toml(self._write(tmp_path))
        patterns = asyncio.run(provider.load_patterns("finance", "us"))
        assert [p.pattern for p in patterns] == ["learn"]

    def test_scoped_patterns(self, tmp_path):
        provider = StaticIntentPatternProvider.from_toml(self._write(tmp_path))
        patterns = asyncio.run(provider.load_patterns("language_learning", "uk"))
        assert sorted(p.pattern for p in patterns) == ["colour", "learn", "lessons"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            StaticIntentPatternProvider.from_toml(tmp_path / "missing.toml")
