"""
Tests for domain models (models.py): construction invariants and
dict serialization.
"""
from datetime import datetime, timezone

import pytest

from restock_planner.domain.models import (
    AppSettings,
    InventoryLog,
    LifecycleStatus,
    LogisticsTier,
    RecordStatus,
    ReplenishmentRecord,
    ShippingMethod,
    StockThresholds,
    TransactionType,
    WarehouseType,
)


class TestLogisticsTier:
    def test_valid_tier(self):
        tier = LogisticsTier(0, 21, 65)
        assert tier.covers(0)
        assert tier.covers(20.99)
        assert not tier.covers(21)

    @pytest.mark.parametrize("args", [(10, 10, 5), (10, 5, 5), (-1, 5, 5), (0, 5, -1), (0, float("inf"), 5)])
    def test_invalid_tier(self, args):
        with pytest.raises(ValueError):
            LogisticsTier(*args)


class TestStockThresholds:
    def test_defaults(self):
        t = StockThresholds()
        assert (t.critical_days, t.low_days, t.overstock_days) == (15.0, 45.0, 90.0)

    def test_must_be_ascending(self):
        with pytest.raises(ValueError):
            StockThresholds(critical_days=50, low_days=45, overstock_days=90)


class TestAppSettings:
    def test_defaults(self):
        s = AppSettings()
        assert s.exchange_rate == 7.3
        assert s.allow_negative_balance is True
        assert s.default_warehouse == WarehouseType.US_WEST

    @pytest.mark.parametrize("rate", [0, -1, float("nan")])
    def test_rate_must_be_positive(self, rate):
        with pytest.raises(ValueError):
            AppSettings(exchange_rate=rate)

    def test_lists_stored_as_tuples(self, air_tiers):
        s = AppSettings(air_tiers=air_tiers)
        assert isinstance(s.air_tiers, tuple)
        assert s.tiers_for(ShippingMethod.AIR) == tuple(air_tiers)
        assert s.tiers_for(ShippingMethod.SEA) == ()

    def test_dict_round_trip(self, settings):
        assert AppSettings.from_dict(settings.to_dict()) == settings


class TestReplenishmentRecord:
    def test_defaults(self):
        r = ReplenishmentRecord(id="1", sku="SKU-A")
        assert r.lifecycle == LifecycleStatus.NEW
        assert r.status == RecordStatus.PLANNING
        assert r.lead_time_days == 30
        assert r.safety_stock_days == 15
        assert r.is_deleted is False

    def test_empty_sku_rejected(self):
        with pytest.raises(ValueError, match="SKU"):
            ReplenishmentRecord(id="1", sku="  ")

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError, match="daily_sales"):
            ReplenishmentRecord(id="1", sku="SKU-A", daily_sales=float("nan"))

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValueError):
            ReplenishmentRecord(id="1", sku="SKU-A", quantity=-1)

    @pytest.mark.parametrize("field", ["quantity", "items_per_box", "total_cartons", "lead_time_days"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), 2.5, "10", True])
    def test_integer_fields_must_be_int(self, field, value):
        with pytest.raises(ValueError, match=field):
            ReplenishmentRecord(id="1", sku="SKU-A", **{field: value})

    def test_integer_beyond_float_range_rejected(self):
        with pytest.raises(ValueError, match="quantity"):
            ReplenishmentRecord(id="1", sku="SKU-A", quantity=10 ** 400)

    def test_float_field_beyond_float_range_rejected(self):
        with pytest.raises(ValueError, match="sales_price_usd"):
            ReplenishmentRecord(id="1", sku="SKU-A", sales_price_usd=10 ** 400)

    def test_with_quantity(self, make_record):
        r = make_record()
        assert r.with_quantity(75).quantity == 75
        assert r.with_quantity(-10).quantity == 0
        assert r.quantity == 200

    def test_dict_round_trip(self, make_record):
        r = make_record(shipping_method=ShippingMethod.SEA, status=RecordStatus.SHIPPED)
        data = r.to_dict()
        assert data["shipping_method"] == "Sea"
        assert data["status"] == "Shipped"
        assert ReplenishmentRecord.from_dict(data) == r

    def test_from_dict_ignores_unknown_keys(self):
        r = ReplenishmentRecord.from_dict({"id": "1", "sku": "SKU-A", "legacyField": 3})
        assert r.sku == "SKU-A"


class TestInventoryLog:
    def test_integer_change_required(self):
        with pytest.raises(ValueError):
            InventoryLog(
                id="1", date=datetime(2026, 1, 1), sku="SKU-A",
                warehouse=WarehouseType.US_WEST, type=TransactionType.INBOUND, quantity_change=1.5,
            )

    def test_warehouse_must_be_enum(self):
        with pytest.raises(ValueError):
            InventoryLog(
                id="1", date=datetime(2026, 1, 1), sku="SKU-A",
                warehouse="Mars", type=TransactionType.INBOUND, quantity_change=1,
            )

    def test_from_front_end_dict(self):
        """ISO timestamps with a Z suffix parse as UTC."""
        log = InventoryLog.from_dict({
            "id": "LOG-1",
            "date": "2026-03-01T08:30:00Z",
            "sku": "SKU-A",
            "warehouse": "FBA_US",
            "type": "Transfer",
            "quantity_change": 20,
            "reference_id": "TR-1",
        })
        assert log.date == datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)
        assert log.warehouse == WarehouseType.FBA_US
        assert log.type == TransactionType.TRANSFER
        assert log.note == ""

    def test_dict_round_trip(self):
        log = InventoryLog(
            id="1", date=datetime(2026, 1, 1, 12), sku="SKU-A",
            warehouse=WarehouseType.TRANSIT, type=TransactionType.TRANSFER,
            quantity_change=-5, reference_id="TR-2", note="On the water",
        )
        assert InventoryLog.from_dict(log.to_dict()) == log
