"""
Domain models for restock_planner.

Pure data classes + value objects. No I/O, no side effects.
Enum values are the wire strings used by the planner front-end, so records
exported from it deserialize without a mapping table.
"""
from dataclasses import dataclass, field, fields, asdict, replace
from datetime import datetime
from enum import Enum
import math
from typing import Any, Dict, Optional, Tuple

from dateutil import parser as dateparser


class ShippingMethod(str, Enum):
    """First-leg shipping mode."""
    AIR = "Air"
    SEA = "Sea"


class WarehouseType(str, Enum):
    """Distribution nodes tracked by the inventory ledger."""
    CN_LOCAL = "CN_Local"    # Domestic consolidation warehouse
    US_WEST = "US_West"      # Los Angeles
    US_EAST = "US_East"      # New York
    FBA_US = "FBA_US"        # Amazon FBA
    TRANSIT = "Transit"      # Goods on the water / in the air


class TransactionType(str, Enum):
    """Event types that impact the inventory ledger."""
    INBOUND = "Inbound"          # Receipt into a warehouse: +qty
    OUTBOUND = "Outbound"        # Removal not tied to a sale: -qty
    TRANSFER = "Transfer"        # One half of a warehouse-to-warehouse move
    ADJUSTMENT = "Adjustment"    # Manual correction (signed delta, not absolute)
    SALES = "Sales"              # Order fulfillment: -qty


class StockStatus(str, Enum):
    """Stock health derived from days of supply."""
    CRITICAL = "Critical"
    LOW = "Low"
    HEALTHY = "Healthy"
    OVERSTOCK = "Overstock"
    UNKNOWN = "Unknown"          # No consumption data


class LifecycleStatus(str, Enum):
    """Product lifecycle stage."""
    NEW = "New"
    GROWTH = "Growth"
    STABLE = "Stable"
    CLEARANCE = "Clearance"


class RecordStatus(str, Enum):
    """Shipment progress of a replenishment record."""
    PLANNING = "Planning"
    SHIPPED = "Shipped"
    ARRIVED = "Arrived"


class FreightRateSource(str, Enum):
    """How a per-kg freight rate was resolved."""
    MANUAL = "manual"        # Record carries an explicit rate
    TIER = "tier"            # Matched (or nearest) weight bracket
    CEILING = "ceiling"      # Weight above every bracket: top tier price
    UNPRICED = "unpriced"    # No tiers and no manual rate


def _require_finite(obj: Any, names: Tuple[str, ...]) -> None:
    for name in names:
        value = getattr(obj, name)
        try:
            finite = math.isfinite(value)
        except (TypeError, OverflowError):
            finite = False
        if not finite:
            raise ValueError(f"{name} must be a finite number, got {value!r}")


def _require_whole(obj: Any, names: Tuple[str, ...]) -> None:
    """Integer fields: plain non-negative ints small enough to take part in float math."""
    for name in names:
        value = getattr(obj, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {value!r}")
        if value < 0:
            raise ValueError(f"{name} cannot be negative")
    _require_finite(obj, names)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return dateparser.isoparse(str(value))


@dataclass(frozen=True)
class LogisticsTier:
    """Weight bracket [min_weight, max_weight) with its CNY per-kg price."""
    min_weight: float
    max_weight: float
    price: float

    def __post_init__(self):
        _require_finite(self, ("min_weight", "max_weight", "price"))
        if self.min_weight < 0:
            raise ValueError("Tier min_weight cannot be negative")
        if self.max_weight <= self.min_weight:
            raise ValueError("Tier max_weight must be greater than min_weight")
        if self.price < 0:
            raise ValueError("Tier price cannot be negative")

    def covers(self, weight_kg: float) -> bool:
        """True if weight_kg falls inside this bracket (upper bound exclusive)."""
        return self.min_weight <= weight_kg < self.max_weight

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogisticsTier":
        return cls(
            min_weight=float(data["min_weight"]),
            max_weight=float(data["max_weight"]),
            price=float(data["price"]),
        )


@dataclass(frozen=True)
class StockThresholds:
    """Days-of-supply breakpoints for stock health classification."""
    critical_days: float = 15.0   # Below this: Critical
    low_days: float = 45.0        # Below this: Low (also the projection/alert cutoff)
    overstock_days: float = 90.0  # At or above this: Overstock

    def __post_init__(self):
        _require_finite(self, ("critical_days", "low_days", "overstock_days"))
        if self.critical_days < 0:
            raise ValueError("critical_days cannot be negative")
        if not (self.critical_days <= self.low_days <= self.overstock_days):
            raise ValueError("Thresholds must satisfy critical_days <= low_days <= overstock_days")

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StockThresholds":
        return cls(**{f.name: float(data[f.name]) for f in fields(cls) if f.name in data})


@dataclass(frozen=True)
class AppSettings:
    """
    Planner configuration, passed explicitly into every computation.

    Build from raw/untrusted data with config.normalize_settings(); the
    constructor itself rejects invalid values.
    """
    exchange_rate: float = 7.3                  # CNY per 1 USD
    air_tiers: Tuple[LogisticsTier, ...] = ()
    sea_tiers: Tuple[LogisticsTier, ...] = ()
    stock_thresholds: StockThresholds = field(default_factory=StockThresholds)
    allow_negative_balance: bool = True         # Ledger may go below zero (backorders)
    default_warehouse: WarehouseType = WarehouseType.US_WEST       # Legacy stock location
    fulfillment_warehouse: WarehouseType = WarehouseType.US_WEST   # Sales are shipped from here

    def __post_init__(self):
        if not math.isfinite(self.exchange_rate) or self.exchange_rate <= 0:
            raise ValueError("exchange_rate must be > 0")
        # Accept lists for convenience; store tuples so settings stay hashable/immutable
        object.__setattr__(self, "air_tiers", tuple(self.air_tiers))
        object.__setattr__(self, "sea_tiers", tuple(self.sea_tiers))

    def tiers_for(self, method: ShippingMethod) -> Tuple[LogisticsTier, ...]:
        """Tier table for a shipping method."""
        if ShippingMethod(method) == ShippingMethod.SEA:
            return self.sea_tiers
        return self.air_tiers

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exchange_rate": self.exchange_rate,
            "air_tiers": [t.to_dict() for t in self.air_tiers],
            "sea_tiers": [t.to_dict() for t in self.sea_tiers],
            "stock_thresholds": self.stock_thresholds.to_dict(),
            "allow_negative_balance": self.allow_negative_balance,
            "default_warehouse": self.default_warehouse.value,
            "fulfillment_warehouse": self.fulfillment_warehouse.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        defaults = cls()
        return cls(
            exchange_rate=float(data.get("exchange_rate", defaults.exchange_rate)),
            air_tiers=tuple(LogisticsTier.from_dict(t) for t in data.get("air_tiers", [])),
            sea_tiers=tuple(LogisticsTier.from_dict(t) for t in data.get("sea_tiers", [])),
            stock_thresholds=StockThresholds.from_dict(data.get("stock_thresholds", {})),
            allow_negative_balance=bool(data.get("allow_negative_balance", defaults.allow_negative_balance)),
            default_warehouse=WarehouseType(data.get("default_warehouse", defaults.default_warehouse.value)),
            fulfillment_warehouse=WarehouseType(data.get("fulfillment_warehouse", defaults.fulfillment_warehouse.value)),
        )


# Numeric fields of ReplenishmentRecord, split by type for normalization
RECORD_INT_FIELDS = ("quantity", "items_per_box", "total_cartons", "lead_time_days", "safety_stock_days")
RECORD_FLOAT_FIELDS = (
    "daily_sales", "unit_price_cny", "unit_weight_kg",
    "box_length_cm", "box_width_cm", "box_height_cm",
    "shipping_unit_price_cny", "manual_total_weight_kg",
    "material_cost_cny", "customs_fee_cny", "port_fee_cny",
    "sales_price_usd", "last_mile_cost_usd", "ad_cost_usd",
    "platform_fee_rate", "affiliate_commission_rate", "return_rate",
    "additional_fixed_fee_usd",
)


@dataclass(frozen=True)
class ReplenishmentRecord:
    """One SKU's replenishment planning record - immutable, fully populated."""
    id: str
    sku: str
    product_name: str = ""
    date: str = ""                   # Planning date (YYYY-MM-DD)
    lifecycle: LifecycleStatus = LifecycleStatus.NEW
    status: RecordStatus = RecordStatus.PLANNING
    warehouse_label: str = ""        # Free-text destination shown to users

    # Base product data
    quantity: int = 0                # Units planned/held
    daily_sales: float = 0.0         # Unit velocity
    unit_price_cny: float = 0.0      # Purchase price
    unit_weight_kg: float = 0.0

    # Packing
    box_length_cm: float = 0.0
    box_width_cm: float = 0.0
    box_height_cm: float = 0.0
    items_per_box: int = 0
    total_cartons: int = 0           # Manual carton count (0 = derive from items_per_box)

    # First leg
    shipping_method: ShippingMethod = ShippingMethod.AIR
    shipping_unit_price_cny: float = 0.0   # Manual per-kg rate (0 = use tiers)
    manual_total_weight_kg: float = 0.0    # Billable weight from the forwarder (0 = actual weight)
    material_cost_cny: float = 0.0
    customs_fee_cny: float = 0.0
    port_fee_cny: float = 0.0

    # Last mile & sales (USD)
    sales_price_usd: float = 0.0
    last_mile_cost_usd: float = 0.0
    ad_cost_usd: float = 0.0
    platform_fee_rate: float = 0.0          # Percent, e.g. 2.0 for 2%
    affiliate_commission_rate: float = 0.0  # Percent
    return_rate: float = 0.0                # Percent
    additional_fixed_fee_usd: float = 0.0

    # Supply chain timing
    lead_time_days: int = 30
    safety_stock_days: int = 15

    is_deleted: bool = False

    def __post_init__(self):
        if not self.sku or not self.sku.strip():
            raise ValueError("SKU cannot be empty")
        _require_finite(self, RECORD_FLOAT_FIELDS)
        _require_whole(self, RECORD_INT_FIELDS)
        if self.unit_price_cny < 0:
            raise ValueError("unit_price_cny cannot be negative")
        if self.unit_weight_kg < 0:
            raise ValueError("unit_weight_kg cannot be negative")
        if self.sales_price_usd < 0:
            raise ValueError("sales_price_usd cannot be negative")

    def with_quantity(self, quantity: int) -> "ReplenishmentRecord":
        """Copy of this record with a different quantity (e.g. live ledger stock)."""
        return replace(self, quantity=max(0, int(quantity)))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["lifecycle"] = self.lifecycle.value
        data["status"] = self.status.value
        data["shipping_method"] = self.shipping_method.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReplenishmentRecord":
        """Strict deserialization of to_dict() output. Use normalize_record() for raw input."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "lifecycle" in kwargs:
            kwargs["lifecycle"] = LifecycleStatus(kwargs["lifecycle"])
        if "status" in kwargs:
            kwargs["status"] = RecordStatus(kwargs["status"])
        if "shipping_method" in kwargs:
            kwargs["shipping_method"] = ShippingMethod(kwargs["shipping_method"])
        return cls(**kwargs)


@dataclass(frozen=True)
class CalculatedMetrics:
    """Per-unit economics of a record. Derived on every read, never stored."""
    total_weight_kg: float
    billable_weight_kg: float
    total_volume_cbm: float
    total_cartons: int
    single_box_weight_kg: float

    freight_rate_cny_per_kg: float
    freight_rate_source: FreightRateSource
    first_leg_cost_cny: float
    first_leg_cost_usd: float
    single_head_haul_cost_usd: float
    product_cost_usd: float

    platform_fee_usd: float
    affiliate_commission_usd: float
    return_loss_provision_usd: float

    total_cost_per_unit_usd: float
    estimated_profit_usd: float
    margin_rate: float               # Profit / sales price, percent
    roi: float                       # Profit / total cost, percent

    days_of_supply: Optional[float]  # None = no consumption data
    stock_status: StockStatus

    @property
    def is_priced(self) -> bool:
        """False when no freight rate could be resolved."""
        return self.freight_rate_source != FreightRateSource.UNPRICED

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["freight_rate_source"] = self.freight_rate_source.value
        data["stock_status"] = self.stock_status.value
        return data


@dataclass(frozen=True)
class InventoryLog:
    """Ledger entry - immutable. Corrections are new compensating entries."""
    id: str
    date: datetime
    sku: str
    warehouse: WarehouseType
    type: TransactionType
    quantity_change: int             # Signed
    reference_id: str = ""           # Shared by both halves of a transfer
    note: str = ""

    def __post_init__(self):
        if not self.sku or not self.sku.strip():
            raise ValueError("SKU cannot be empty")
        if not isinstance(self.warehouse, WarehouseType):
            raise ValueError(f"Unknown warehouse: {self.warehouse!r}")
        if not isinstance(self.type, TransactionType):
            raise ValueError(f"Unknown transaction type: {self.type!r}")
        if isinstance(self.quantity_change, bool) or not isinstance(self.quantity_change, int):
            raise ValueError("quantity_change must be an integer")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "sku": self.sku,
            "warehouse": self.warehouse.value,
            "type": self.type.value,
            "quantity_change": self.quantity_change,
            "reference_id": self.reference_id,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryLog":
        return cls(
            id=str(data["id"]),
            date=_parse_datetime(data["date"]),
            sku=str(data["sku"]),
            warehouse=WarehouseType(data["warehouse"]),
            type=TransactionType(data["type"]),
            quantity_change=int(data["quantity_change"]),
            reference_id=str(data.get("reference_id") or ""),
            note=str(data.get("note") or ""),
        )
