"""
Tests for the restock planning workflow (workflows/restock.py).
"""
from datetime import datetime

import pytest

from restock_planner.domain.models import InventoryLog, TransactionType, WarehouseType
from restock_planner.workflows import build_restock_plan, plan_totals


class TestBuildRestockPlan:
    """Days-based reorder suggestions."""

    def test_urgent_sku_suggested(self, make_record, settings):
        """20 days of supply < 30 + 15 -> reorder up to 90 days (900 units)."""
        plan = build_restock_plan([make_record()], settings)
        assert len(plan) == 1
        suggestion = plan[0]
        assert suggestion.sku == "SKU-A"
        assert suggestion.is_urgent is True
        assert suggestion.reorder_threshold_days == 45
        assert suggestion.suggested_qty == 700
        assert suggestion.estimated_cost_cny == pytest.approx(700 * 64.0)

    def test_healthy_sku_skipped(self, make_record, settings):
        assert build_restock_plan([make_record(daily_sales=1.0)], settings) == []

    def test_no_velocity_skipped(self, make_record, settings):
        assert build_restock_plan([make_record(daily_sales=0.0)], settings) == []

    def test_deleted_skipped(self, make_record, settings):
        assert build_restock_plan([make_record(is_deleted=True)], settings) == []

    def test_record_timing(self, make_record, settings):
        """Lead 10 + safety 5 = 15 days: 20 days of supply is enough."""
        record = make_record(lead_time_days=10, safety_stock_days=5)
        assert build_restock_plan([record], settings) == []

    def test_zero_timing_uses_defaults(self, make_record, settings):
        record = make_record(lead_time_days=0, safety_stock_days=0)
        plan = build_restock_plan([record], settings)
        assert plan[0].lead_time_days == 30
        assert plan[0].safety_stock_days == 15

    def test_fractional_velocity_rounds_up(self, make_record, settings):
        plan = build_restock_plan([make_record(quantity=10, daily_sales=2.5)], settings)
        assert plan[0].suggested_qty == 215

    def test_target_days(self, make_record, settings):
        assert build_restock_plan([make_record()], settings, target_stock_days=30)[0].suggested_qty == 100
        assert build_restock_plan([make_record()], settings, target_stock_days=10) == []

    def test_invalid_target(self, make_record, settings):
        with pytest.raises(ValueError):
            build_restock_plan([make_record()], settings, target_stock_days=-1)

    def test_input_order_kept(self, make_record, settings):
        records = [make_record(id="x", sku="SKU-X"), make_record(id="y", sku="SKU-Y", quantity=50)]
        assert [s.sku for s in build_restock_plan(records, settings)] == ["SKU-X", "SKU-Y"]

    def test_out_of_range_velocity_skipped(self, make_record, settings, caplog):
        """Coverage goal times a huge daily rate overflows: the SKU is left out, not raised."""
        records = [make_record(id="x", sku="SKU-X", daily_sales=1e307), make_record(id="y", sku="SKU-Y")]
        plan = build_restock_plan(records, settings)
        assert [s.sku for s in plan] == ["SKU-Y"]
        assert "out of range" in caplog.text


class TestLedgerAwarePlan:
    """Live ledger stock replaces the planned quantity."""

    def _inbound(self, qty):
        return InventoryLog(
            id=f"IN-{qty}", date=datetime(2026, 2, 1), sku="SKU-A",
            warehouse=WarehouseType.FBA_US, type=TransactionType.INBOUND, quantity_change=qty,
        )

    def test_ledger_stock_covers_demand(self, make_record, settings):
        assert build_restock_plan([make_record()], settings, logs=[self._inbound(800)]) == []

    def test_ledger_stock_short(self, make_record, settings):
        plan = build_restock_plan([make_record()], settings, logs=[self._inbound(100)])
        assert plan[0].record.quantity == 100
        assert plan[0].suggested_qty == 800


class TestPlanTotals:
    def test_totals(self, make_record, settings):
        records = [make_record(id="x", sku="SKU-X"), make_record(id="y", sku="SKU-Y", quantity=50, unit_price_cny=10.0)]
        totals = plan_totals(build_restock_plan(records, settings))
        assert totals.sku_count == 2
        assert totals.total_units == 700 + 850
        assert totals.total_cost_cny == pytest.approx(700 * 64.0 + 850 * 10.0)

    def test_empty(self):
        totals = plan_totals([])
        assert (totals.sku_count, totals.total_units, totals.total_cost_cny) == (0, 0, 0)
