"""Shared fixtures for the restock_planner test suite."""
import pytest

from restock_planner.domain.models import (
    AppSettings,
    LogisticsTier,
    ReplenishmentRecord,
    ShippingMethod,
)


@pytest.fixture
def air_tiers():
    """Standard air freight brackets (CNY/kg)."""
    return [
        LogisticsTier(0, 21, 65),
        LogisticsTier(21, 100, 50),
        LogisticsTier(100, 9999, 40),
    ]


@pytest.fixture
def sea_tiers():
    return [
        LogisticsTier(0, 100, 12),
        LogisticsTier(100, 9999, 9),
    ]


@pytest.fixture
def settings(air_tiers, sea_tiers):
    return AppSettings(exchange_rate=7.3, air_tiers=air_tiers, sea_tiers=sea_tiers)


@pytest.fixture
def make_record():
    """Factory for a fully populated record; keyword overrides win."""
    def _make(**overrides):
        values = dict(
            id="rec-1",
            sku="SKU-A",
            product_name="Folding Lamp",
            quantity=200,
            daily_sales=10.0,
            unit_price_cny=64.0,
            unit_weight_kg=0.5,
            box_length_cm=50.0,
            box_width_cm=40.0,
            box_height_cm=35.0,
            items_per_box=50,
            shipping_method=ShippingMethod.AIR,
            customs_fee_cny=100.0,
            sales_price_usd=30.0,
            last_mile_cost_usd=5.0,
            ad_cost_usd=2.0,
            platform_fee_rate=15.0,
            return_rate=5.0,
        )
        values.update(overrides)
        return ReplenishmentRecord(**values)
    return _make
