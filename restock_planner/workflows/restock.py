"""
Restock planning workflow: which SKUs to reorder, how many, and the capital
required.

Reorder rule (days-based):
    threshold_days = lead_time_days + safety_stock_days
    urgent         = days_of_supply < threshold_days
    suggested_qty  = ceil(max(0, target_stock_days × daily_sales − quantity))

SKUs without sales velocity are never suggested (days of supply unknown).
"""
from dataclasses import dataclass
import logging
import math
from typing import Iterable, List, Optional

from ..config import DEFAULT_LEAD_TIME_DAYS, DEFAULT_SAFETY_STOCK_DAYS, DEFAULT_TARGET_STOCK_DAYS
from ..domain.economics import compute_metrics, live_record
from ..domain.models import AppSettings, CalculatedMetrics, InventoryLog, ReplenishmentRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestockSuggestion:
    """Reorder proposal for one SKU."""
    record: ReplenishmentRecord      # Record as planned (live quantity when a ledger was given)
    metrics: CalculatedMetrics
    lead_time_days: int
    safety_stock_days: int
    reorder_threshold_days: int
    is_urgent: bool
    suggested_qty: int
    estimated_cost_cny: float

    @property
    def sku(self) -> str:
        return self.record.sku


@dataclass(frozen=True)
class PlanTotals:
    sku_count: int
    total_units: int
    total_cost_cny: float


def build_restock_plan(
    records: Iterable[ReplenishmentRecord],
    settings: AppSettings,
    target_stock_days: float = DEFAULT_TARGET_STOCK_DAYS,
    logs: Optional[Iterable[InventoryLog]] = None,
) -> List[RestockSuggestion]:
    """
    Build reorder suggestions for active records.

    Args:
        records: Planning records
        settings: Pricing/threshold settings
        target_stock_days: Coverage goal after reordering
        logs: Ledger logs; when given, stock is the live ledger total

    Returns:
        Suggestions with suggested_qty > 0, urgent first (input order kept otherwise)
    """
    if not math.isfinite(target_stock_days) or target_stock_days < 0:
        raise ValueError(f"target_stock_days must be >= 0, got {target_stock_days}")

    log_list = list(logs) if logs is not None else None
    plan: List[RestockSuggestion] = []

    for record in records:
        if record.is_deleted:
            continue
        if log_list is not None:
            record = live_record(record, log_list, settings)

        metrics = compute_metrics(record, settings)
        lead_time = record.lead_time_days or DEFAULT_LEAD_TIME_DAYS
        safety = record.safety_stock_days or DEFAULT_SAFETY_STOCK_DAYS
        threshold = lead_time + safety

        is_urgent = metrics.days_of_supply is not None and metrics.days_of_supply < threshold

        suggested_qty = 0
        if is_urgent and record.daily_sales > 0:
            target_qty = target_stock_days * record.daily_sales
            if not math.isfinite(target_qty):
                logger.warning("Skipping %s: reorder quantity out of range", record.sku)
                continue
            suggested_qty = math.ceil(max(0.0, target_qty - record.quantity))

        if suggested_qty <= 0:
            continue

        estimated_cost_cny = suggested_qty * record.unit_price_cny
        if not math.isfinite(estimated_cost_cny):
            logger.warning("Skipping %s: reorder cost out of range", record.sku)
            continue

        plan.append(RestockSuggestion(
            record=record,
            metrics=metrics,
            lead_time_days=lead_time,
            safety_stock_days=safety,
            reorder_threshold_days=threshold,
            is_urgent=is_urgent,
            suggested_qty=suggested_qty,
            estimated_cost_cny=estimated_cost_cny,
        ))

    plan.sort(key=lambda s: not s.is_urgent)
    logger.info("Restock plan: %d SKU(s) to reorder", len(plan))
    return plan


def plan_totals(plan: Iterable[RestockSuggestion]) -> PlanTotals:
    """Totals for a restock plan (SKUs, units, purchase capital in CNY)."""
    items = list(plan)
    return PlanTotals(
        sku_count=len(items),
        total_units=sum(s.suggested_qty for s in items),
        total_cost_cny=sum(s.estimated_cost_cny for s in items),
    )
