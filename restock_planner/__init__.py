"""
restock_planner - replenishment planning core for cross-border e-commerce.

Unit economics (landed cost, profit, ROI), tiered first-leg freight pricing,
shipment geometry, stock health and an event-sourced multi-warehouse
inventory ledger. Settings are passed explicitly into every call.
"""
from .config import load_settings, normalize_settings, save_settings
from .domain.currency import CurrencyConverter, safe_divide
from .domain.economics import compute_metrics, compute_metrics_for_ledger, live_record
from .domain.ledger import (
    BalanceCalculator,
    InsufficientStockError,
    InventoryLedger,
    get_all_skus_balances,
    get_balance,
    get_balances,
    get_total_balance,
)
from .domain.models import (
    AppSettings,
    CalculatedMetrics,
    FreightRateSource,
    InventoryLog,
    LifecycleStatus,
    LogisticsTier,
    RecordStatus,
    ReplenishmentRecord,
    ShippingMethod,
    StockStatus,
    StockThresholds,
    TransactionType,
    WarehouseType,
)
from .domain.pricing import FreightQuote, resolve_freight_quote, resolve_freight_rate
from .domain.stock_health import classify_stock
from .domain.validation import normalize_record
from .domain.volumetric import VolumetricCalculator, Volumetrics, estimate_freight
from .analytics import PortfolioSummary, summarize_portfolio
from .workflows import RestockSuggestion, build_restock_plan, plan_totals

__version__ = "0.1.0"

__all__ = [
    "AppSettings",
    "BalanceCalculator",
    "CalculatedMetrics",
    "CurrencyConverter",
    "FreightQuote",
    "FreightRateSource",
    "InsufficientStockError",
    "InventoryLedger",
    "InventoryLog",
    "LifecycleStatus",
    "LogisticsTier",
    "PortfolioSummary",
    "RecordStatus",
    "ReplenishmentRecord",
    "RestockSuggestion",
    "ShippingMethod",
    "StockStatus",
    "StockThresholds",
    "TransactionType",
    "VolumetricCalculator",
    "Volumetrics",
    "WarehouseType",
    "build_restock_plan",
    "classify_stock",
    "compute_metrics",
    "compute_metrics_for_ledger",
    "estimate_freight",
    "get_all_skus_balances",
    "get_balance",
    "get_balances",
    "get_total_balance",
    "live_record",
    "load_settings",
    "normalize_record",
    "normalize_settings",
    "plan_totals",
    "resolve_freight_quote",
    "resolve_freight_rate",
    "safe_divide",
    "save_settings",
    "summarize_portfolio",
]
