"""Tests for rate helpers."""

import doctest

import pytest

import headcount.utils.rates as rates
from headcount.utils.rates import growth_rate, mean, safe_rate, shortage_rate, turnover_rate


def test_doctests():
    result = doctest.testmod(rates)
    assert result.failed == 0


class TestZeroDenominators:
    """Undefined rates are None, never NaN and never an exception."""

    def test_safe_rate(self):
        assert safe_rate(1, 0) is None
        assert safe_rate(0, 0) is None

    def test_shortage_rate_with_no_staff_and_no_gap(self):
        assert shortage_rate(0, 0) is None

    def test_shortage_rate_with_gap_only(self):
        assert shortage_rate(5, 0) == 1.0

    def test_turnover(self):
        assert turnover_rate(3, 0) is None

    def test_growth(self):
        assert growth_rate(10, 0) is None

    def test_mean_of_nothing(self):
        assert mean(iter([])) is None


def test_rates_are_not_rounded():
    assert shortage_rate(10, 300) == pytest.approx(10 / 310)
    assert shortage_rate(10, 300) != 0.0323
