"""
Tests for aso_scorer/ruleset/detection.py.

What we test
------------
detect_vertical():
  - A category with one candidate vertical picks it outright.
  - Several candidates: the unique best signature match wins.
  - Ties, no hits or unknown categories -> base.

detect_market():
  - Region part of the locale; "gb" aliases to "uk"; unsupported -> None.
"""

from __future__ import annotations

import pytest

from aso_scorer.ruleset.detection import detect_market, detect_vertical
from aso_scorer.taxonomy.metadata_taxonomy import Market, Vertical


class TestDetectVertical:
    def test_single_candidate(self):
        assert detect_vertical("Education") == Vertical.LANGUAGE_LEARNING

    def test_signature_picks_among_candidates(self):
        vertical = detect_vertical("Lifestyle", "Cash Rewards", "Earn points and redeem gift cards")
        assert vertical == Vertical.REWARDS

    def test_no_hits_is_base(self):
        assert detect_vertical("Lifestyle", "Weather Widget") == Vertical.BASE

    def test_tie_is_base(self):
        assert detect_vertical("Business", "Budget Planner") == Vertical.BASE

    def test_unknown_category(self):
        assert detect_vertical("Weather", "Learn Spanish") == Vertical.BASE


class TestDetectMarket:
    @pytest.mark.parametrize(
        "locale, expected",
        [
            ("en-US", Market.US),
            ("de_DE", Market.DE),
            ("en-GB", Market.UK),
            ("uk", Market.UK),
            ("AU", Market.AU),
        ],
    )
    def test_supported(self, locale, expected):
        assert detect_market(locale) == expected

    @pytest.mark.parametrize("locale", ["fr-FR", "", None, "-"])
    def test_unsupported(self, locale):
        assert detect_market(locale) is None
