"""
Tests for stock health classification (stock_health.py).
"""
import pytest

from restock_planner.domain.models import StockStatus, StockThresholds
from restock_planner.domain.stock_health import classify_stock, needs_projection


class TestClassifyStock:
    """Default thresholds 15 / 45 / 90 days."""

    @pytest.mark.parametrize("days,expected", [
        (0, StockStatus.CRITICAL),
        (14.9, StockStatus.CRITICAL),
        (15, StockStatus.LOW),
        (44.9, StockStatus.LOW),
        (45, StockStatus.HEALTHY),
        (89.9, StockStatus.HEALTHY),
        (90, StockStatus.OVERSTOCK),
        (365, StockStatus.OVERSTOCK),
    ])
    def test_boundaries(self, days, expected):
        assert classify_stock(days) == expected

    @pytest.mark.parametrize("days", [None, float("nan"), float("inf"), -1])
    def test_unknown(self, days):
        assert classify_stock(days) == StockStatus.UNKNOWN

    def test_custom_thresholds(self):
        thresholds = StockThresholds(critical_days=7, low_days=21, overstock_days=60)
        assert classify_stock(10, thresholds) == StockStatus.LOW
        assert classify_stock(30, thresholds) == StockStatus.HEALTHY
        assert classify_stock(60, thresholds) == StockStatus.OVERSTOCK


class TestNeedsProjection:
    def test_below_low_cutoff(self):
        assert needs_projection(30) is True

    def test_at_low_cutoff(self):
        assert needs_projection(45) is False

    def test_unknown_runway(self):
        assert needs_projection(None) is False
