"""
Tests for currency conversion and guarded division (currency.py).
"""
import math

import pytest

from restock_planner.domain.currency import CurrencyConverter, safe_divide


class TestSafeDivide:
    """Division never produces NaN/inf and never raises."""

    def test_regular_division(self):
        assert safe_divide(10, 4) == 2.5

    def test_zero_denominator_returns_default(self):
        assert safe_divide(10, 0) == 0.0
        assert safe_divide(10, 0, default=None) is None

    def test_non_finite_operands(self):
        assert safe_divide(float("nan"), 2) == 0.0
        assert safe_divide(5, float("inf")) == 0.0
        assert safe_divide(float("inf"), 5, default=-1) == -1

    def test_overflowing_quotient(self):
        """1e308 / 1e-308 overflows to inf and must fall back."""
        assert safe_divide(1e308, 1e-308) == 0.0


class TestCurrencyConverter:
    """CNY/USD conversion at a fixed rate."""

    def test_product_cost_conversion(self):
        """64 CNY at 7.3 is about 8.77 USD."""
        fx = CurrencyConverter(7.3)
        assert fx.cny_to_usd(64) == pytest.approx(8.77, abs=0.01)

    def test_usd_to_cny(self):
        assert CurrencyConverter(7.3).usd_to_cny(10) == pytest.approx(73.0)

    @pytest.mark.parametrize("rate", [0, -7.3, float("nan")])
    def test_unusable_rate_yields_zero(self, rate):
        fx = CurrencyConverter(rate)
        assert fx.cny_to_usd(100) == 0.0
        assert fx.usd_to_cny(100) == 0.0

    def test_results_are_finite(self):
        fx = CurrencyConverter(7.3)
        assert math.isfinite(fx.cny_to_usd(float("inf")))
        assert math.isfinite(fx.usd_to_cny(1e308))
