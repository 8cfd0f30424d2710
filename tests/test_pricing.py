"""
Tests for tiered freight rate resolution (pricing.py).
"""
import pytest

from restock_planner.domain.models import FreightRateSource, LogisticsTier, ShippingMethod
from restock_planner.domain.pricing import resolve_freight_quote, resolve_freight_rate


class TestTierMatching:
    """Rates from weight brackets."""

    def test_heavy_shipment_uses_top_bracket(self, air_tiers):
        """150 kg falls in [100, 9999) -> 40 CNY/kg."""
        assert resolve_freight_rate(150, ShippingMethod.AIR, 0, air_tiers) == 40

    def test_light_shipment(self, air_tiers):
        quote = resolve_freight_quote(10, ShippingMethod.AIR, 0, air_tiers)
        assert quote.rate_cny_per_kg == 65
        assert quote.source == FreightRateSource.TIER
        assert quote.tier == air_tiers[0]

    def test_upper_bound_is_exclusive(self, air_tiers):
        assert resolve_freight_rate(21, ShippingMethod.AIR, 0, air_tiers) == 50
        assert resolve_freight_rate(100, ShippingMethod.AIR, 0, air_tiers) == 40

    def test_tier_order_does_not_matter(self, air_tiers):
        shuffled = [air_tiers[2], air_tiers[0], air_tiers[1]]
        assert resolve_freight_rate(50, ShippingMethod.AIR, 0, shuffled) == 50

    def test_overlap_first_listed_wins(self):
        tiers = [LogisticsTier(0, 30, 65), LogisticsTier(0, 20, 55)]
        assert resolve_freight_rate(10, ShippingMethod.AIR, 0, tiers) == 65


class TestFallbacks:
    """Weights outside every bracket and missing configuration."""

    def test_above_all_brackets_uses_ceiling(self, air_tiers):
        quote = resolve_freight_quote(10000, ShippingMethod.AIR, 0, air_tiers)
        assert quote.rate_cny_per_kg == 40
        assert quote.source == FreightRateSource.CEILING

    def test_gap_uses_nearest_bracket_below(self):
        tiers = [LogisticsTier(0, 10, 60), LogisticsTier(20, 50, 40)]
        assert resolve_freight_rate(15, ShippingMethod.SEA, 0, tiers) == 60

    def test_below_all_brackets_uses_lowest(self):
        tiers = [LogisticsTier(5, 10, 60), LogisticsTier(10, 50, 40)]
        assert resolve_freight_rate(2, ShippingMethod.SEA, 0, tiers) == 60

    def test_invalid_weight_treated_as_zero(self, air_tiers):
        assert resolve_freight_rate(float("nan"), ShippingMethod.AIR, 0, air_tiers) == 65
        assert resolve_freight_rate(-3, ShippingMethod.AIR, 0, air_tiers) == 65

    def test_no_tiers_is_unpriced(self, caplog):
        quote = resolve_freight_quote(50, ShippingMethod.SEA, 0, [])
        assert quote.rate_cny_per_kg == 0.0
        assert quote.source == FreightRateSource.UNPRICED
        assert "unpriced" in caplog.text


class TestManualRate:
    """Manual rate on the record takes precedence over tiers."""

    def test_manual_rate_wins(self, air_tiers):
        quote = resolve_freight_quote(150, ShippingMethod.AIR, 62, air_tiers)
        assert quote.rate_cny_per_kg == 62.0
        assert quote.source == FreightRateSource.MANUAL

    def test_manual_rate_without_tiers(self):
        assert resolve_freight_rate(150, ShippingMethod.AIR, 62, []) == 62.0

    @pytest.mark.parametrize("manual", [0, -5, float("nan")])
    def test_unset_manual_rate_falls_through(self, air_tiers, manual):
        assert resolve_freight_rate(150, ShippingMethod.AIR, manual, air_tiers) == 40
