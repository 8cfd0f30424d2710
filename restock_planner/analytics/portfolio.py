"""
Portfolio-level financial summary across replenishment records.

Aggregates per-unit economics into capital invested, revenue, cost, profit,
overall ROI, freight spend split by shipping mode and status counts. Totals
are computed with numpy over one metrics pass.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

import numpy as np

from ..domain.economics import compute_metrics
from ..domain.models import AppSettings, RecordStatus, ReplenishmentRecord, ShippingMethod, StockStatus


@dataclass(frozen=True)
class ProductProfit:
    """Ranking entry: total expected profit of a SKU's planned quantity."""
    sku: str
    product_name: str
    profit_usd: float
    roi: float


@dataclass
class PortfolioSummary:
    """Aggregated planning figures."""
    record_count: int = 0
    total_invest_cny: float = 0.0        # Purchase + first leg
    total_revenue_usd: float = 0.0
    total_cost_usd: float = 0.0
    total_profit_usd: float = 0.0
    overall_roi: float = 0.0             # Percent
    total_weight_kg: float = 0.0
    air_cost_cny: float = 0.0
    sea_cost_cny: float = 0.0
    air_share: float = 0.0               # Percent of first-leg spend
    sea_share: float = 0.0
    status_counts: Dict[RecordStatus, int] = field(default_factory=dict)
    stock_status_counts: Dict[StockStatus, int] = field(default_factory=dict)
    top_products: List[ProductProfit] = field(default_factory=list)


def _share(part: float, total: float) -> float:
    return float(part / total * 100) if total > 0 else 0.0


def summarize_portfolio(
    records: Iterable[ReplenishmentRecord],
    settings: AppSettings,
    top_n: int = 4,
) -> PortfolioSummary:
    """
    Summarize active (non-deleted) records.

    Args:
        records: Planning records
        settings: Pricing settings passed through to compute_metrics()
        top_n: Number of SKUs kept in the profit ranking

    Returns:
        PortfolioSummary (all zeros for an empty portfolio)
    """
    active = [r for r in records if not r.is_deleted]
    summary = PortfolioSummary(
        record_count=len(active),
        status_counts={s: 0 for s in RecordStatus},
        stock_status_counts={s: 0 for s in StockStatus},
    )
    if not active:
        return summary

    metrics = [compute_metrics(r, settings) for r in active]

    qty = np.array([r.quantity for r in active], dtype=float)
    unit_price_cny = np.array([r.unit_price_cny for r in active], dtype=float)
    sales_price = np.array([r.sales_price_usd for r in active], dtype=float)
    first_leg_cny = np.array([m.first_leg_cost_cny for m in metrics], dtype=float)
    unit_cost = np.array([m.total_cost_per_unit_usd for m in metrics], dtype=float)
    unit_profit = np.array([m.estimated_profit_usd for m in metrics], dtype=float)
    weight = np.array([m.total_weight_kg for m in metrics], dtype=float)
    is_air = np.array([r.shipping_method == ShippingMethod.AIR for r in active], dtype=bool)

    item_profit = unit_profit * qty

    summary.total_invest_cny = float(np.sum(qty * unit_price_cny + first_leg_cny))
    summary.total_revenue_usd = float(np.sum(sales_price * qty))
    summary.total_cost_usd = float(np.sum(unit_cost * qty))
    summary.total_profit_usd = float(np.sum(item_profit))
    summary.overall_roi = _share(summary.total_profit_usd, summary.total_cost_usd)
    summary.total_weight_kg = float(np.sum(weight))

    summary.air_cost_cny = float(np.sum(first_leg_cny[is_air]))
    summary.sea_cost_cny = float(np.sum(first_leg_cny[~is_air]))
    freight_total = summary.air_cost_cny + summary.sea_cost_cny
    summary.air_share = _share(summary.air_cost_cny, freight_total)
    summary.sea_share = _share(summary.sea_cost_cny, freight_total)

    for record, m in zip(active, metrics):
        summary.status_counts[record.status] += 1
        summary.stock_status_counts[m.stock_status] += 1

    # Stable sort keeps input order among equal profits
    order = np.argsort(-item_profit, kind="stable")[:max(0, top_n)]
    summary.top_products = [
        ProductProfit(
            sku=active[i].sku,
            product_name=active[i].product_name,
            profit_usd=float(item_profit[i]),
            roi=metrics[i].roi,
        )
        for i in order
    ]
    return summary
