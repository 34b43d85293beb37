"""
Tests for aso_scorer/utils/numeric.py.

What we test
------------
- clamp() bounds values on both sides.
- round_half_up() rounds .5 up (unlike built-in round) and honors ndigits.
- round_int() returns an int.
- safe_ratio() returns 0.0 for a zero denominator.
"""

from __future__ import annotations

import pytest

from aso_scorer.utils.numeric import clamp, round_half_up, round_int, safe_ratio


class TestClamp:
    def test_inside(self):
        assert clamp(5.0, 0.0, 10.0) == 5.0

    def test_below_and_above(self):
        assert clamp(-1.0, 0.0, 10.0) == 0.0
        assert clamp(11.0, 0.0, 10.0) == 10.0


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3.0
        assert round(2.5) == 2

    def test_ndigits(self):
        assert round_half_up(0.125, 2) == pytest.approx(0.13)
        assert round_half_up(66.666, 2) == pytest.approx(66.67)

    def test_round_int_type(self):
        value = round_int(74.5)
        assert value == 75
        assert isinstance(value, int)


class TestSafeRatio:
    def test_zero_denominator(self):
        assert safe_ratio(3, 0) == 0.0

    def test_regular(self):
        assert safe_ratio(1, 4) == pytest.approx(0.25)
