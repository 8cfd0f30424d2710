"""
Unit-economics engine: landed cost, profit, margin, ROI and stock health
for one replenishment record.

Pipeline:
    VolumetricCalculator.calculate()
        → resolve_freight_quote()        (manual rate or weight tiers)
            → first-leg cost (CNY → USD) and per-unit head haul
                → fee cascade on sales price (platform, affiliate, returns)
                    → total cost → profit → margin / ROI
                        → days of supply → classify_stock()

compute_metrics() is total: for any constructed record and settings it
returns finite numbers, never NaN/inf, and never raises.
"""
import logging
import math
from typing import Iterable, Optional

from .currency import CurrencyConverter, safe_divide
from .ledger import BalanceCalculator
from .models import AppSettings, CalculatedMetrics, InventoryLog, ReplenishmentRecord
from .pricing import resolve_freight_quote
from .stock_health import classify_stock
from .volumetric import VolumetricCalculator

logger = logging.getLogger(__name__)


def _finite(value: float) -> float:
    """Overflowed products and sums collapse to 0, like safe_divide quotients."""
    return value if math.isfinite(value) else 0.0


def _percent_of(amount: float, rate_percent: float) -> float:
    return _finite(amount * safe_divide(rate_percent, 100.0))


def compute_metrics(record: ReplenishmentRecord, settings: AppSettings) -> CalculatedMetrics:
    """
    Compute the full per-unit cost/profit breakdown for a record.

    Args:
        record: Normalized replenishment record
        settings: Exchange rate, freight tiers and stock thresholds

    Returns:
        CalculatedMetrics (fresh on every call, never cached)
    """
    fx = CurrencyConverter(settings.exchange_rate)

    geometry = VolumetricCalculator.calculate(
        box_length_cm=record.box_length_cm,
        box_width_cm=record.box_width_cm,
        box_height_cm=record.box_height_cm,
        items_per_box=record.items_per_box,
        quantity=record.quantity,
        unit_weight_kg=record.unit_weight_kg,
        manual_cartons=record.total_cartons,
    )

    # Forwarder-billed weight, when entered, replaces actual weight for freight
    billable_weight_kg = (
        record.manual_total_weight_kg if record.manual_total_weight_kg > 0 else geometry.total_weight_kg
    )

    quote = resolve_freight_quote(
        billable_weight_kg,
        record.shipping_method,
        record.shipping_unit_price_cny,
        settings.tiers_for(record.shipping_method),
    )

    first_leg_cost_cny = _finite(
        _finite(billable_weight_kg * quote.rate_cny_per_kg)
        + record.material_cost_cny
        + record.customs_fee_cny
        + record.port_fee_cny
    )
    first_leg_cost_usd = fx.cny_to_usd(first_leg_cost_cny)
    single_head_haul_cost_usd = safe_divide(first_leg_cost_usd, record.quantity)
    product_cost_usd = fx.cny_to_usd(record.unit_price_cny)

    # Independent percentages of the sales price (not compounded)
    platform_fee_usd = _percent_of(record.sales_price_usd, record.platform_fee_rate)
    affiliate_commission_usd = _percent_of(record.sales_price_usd, record.affiliate_commission_rate)
    return_loss_provision_usd = _percent_of(record.sales_price_usd, record.return_rate)

    total_cost_per_unit_usd = _finite(
        product_cost_usd
        + single_head_haul_cost_usd
        + record.last_mile_cost_usd
        + record.ad_cost_usd
        + platform_fee_usd
        + affiliate_commission_usd
        + return_loss_provision_usd
        + record.additional_fixed_fee_usd
    )
    estimated_profit_usd = _finite(record.sales_price_usd - total_cost_per_unit_usd)

    margin_rate = _finite(safe_divide(estimated_profit_usd, record.sales_price_usd) * 100)
    # ROI only for a positive cost base
    roi = 0.0
    if total_cost_per_unit_usd > 0:
        roi = _finite(safe_divide(estimated_profit_usd, total_cost_per_unit_usd) * 100)

    days_of_supply: Optional[float] = None
    if record.daily_sales > 0:
        days_of_supply = safe_divide(record.quantity, record.daily_sales, default=None)

    stock_status = classify_stock(days_of_supply, settings.stock_thresholds)

    logger.debug(
        "Metrics %s: rate=%.2f (%s) cost/unit=%.2f profit=%.2f status=%s",
        record.sku, quote.rate_cny_per_kg, quote.source.value,
        total_cost_per_unit_usd, estimated_profit_usd, stock_status.value,
    )

    return CalculatedMetrics(
        total_weight_kg=geometry.total_weight_kg,
        billable_weight_kg=billable_weight_kg,
        total_volume_cbm=geometry.total_volume_cbm,
        total_cartons=geometry.total_cartons,
        single_box_weight_kg=geometry.single_box_weight_kg,
        freight_rate_cny_per_kg=quote.rate_cny_per_kg,
        freight_rate_source=quote.source,
        first_leg_cost_cny=first_leg_cost_cny,
        first_leg_cost_usd=first_leg_cost_usd,
        single_head_haul_cost_usd=single_head_haul_cost_usd,
        product_cost_usd=product_cost_usd,
        platform_fee_usd=platform_fee_usd,
        affiliate_commission_usd=affiliate_commission_usd,
        return_loss_provision_usd=return_loss_provision_usd,
        total_cost_per_unit_usd=total_cost_per_unit_usd,
        estimated_profit_usd=estimated_profit_usd,
        margin_rate=margin_rate,
        roi=roi,
        days_of_supply=days_of_supply,
        stock_status=stock_status,
    )


def live_record(
    record: ReplenishmentRecord,
    logs: Iterable[InventoryLog],
    settings: AppSettings,
) -> ReplenishmentRecord:
    """
    Record with quantity replaced by the ledger total for its SKU.

    Negative ledger totals (backorders) are floored at zero for planning.
    Legacy records without any log keep their own quantity.
    """
    total = BalanceCalculator.total(record.sku, logs, record.quantity, settings.default_warehouse)
    return record.with_quantity(total)


def compute_metrics_for_ledger(
    record: ReplenishmentRecord,
    settings: AppSettings,
    logs: Iterable[InventoryLog],
) -> CalculatedMetrics:
    """compute_metrics() using live ledger stock instead of the record's quantity."""
    return compute_metrics(live_record(record, logs, settings), settings)
