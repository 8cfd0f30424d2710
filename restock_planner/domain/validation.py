"""
Ingestion-boundary validation and normalization for planning records.

Raw records (forms, CSV imports, ERP payloads, JSON exported by the web
front-end) go through normalize_record() before reaching the pricing
engine. Bad numbers become 0 and unknown enum values fall back to defaults;
nothing here raises for bad data.
"""
from enum import Enum
import logging
import math
import re
from typing import Any, Dict, Mapping, Tuple, Type

from .models import (
    LifecycleStatus,
    RECORD_FLOAT_FIELDS,
    RECORD_INT_FIELDS,
    RecordStatus,
    ReplenishmentRecord,
    ShippingMethod,
)

logger = logging.getLogger(__name__)

SKU_MAX_LENGTH = 64

# Front-end field names that do not map 1:1 onto snake_case
_FIELD_ALIASES = {
    "warehouse": "warehouse_label",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _snake_case(key: str) -> str:
    """productName → product_name, unitPriceCNY → unit_price_cny."""
    snake = _CAMEL_BOUNDARY.sub("_", key)
    snake = re.sub(r"([A-Z]+)", lambda m: m.group(1).lower(), snake)
    return _FIELD_ALIASES.get(snake, snake)


def validate_sku_code(sku: Any) -> Tuple[bool, str]:
    """
    Validate SKU code format.

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(sku, str) or not sku.strip():
        return False, "SKU cannot be empty"

    if len(sku) > SKU_MAX_LENGTH:
        return False, f"SKU cannot exceed {SKU_MAX_LENGTH} characters"

    if not all(c.isalnum() or c in "_-." for c in sku):
        return False, "SKU may only contain letters, digits, '_', '-' and '.'"

    return True, ""


def coerce_non_negative(value: Any, field_name: str = "value") -> float:
    """
    Coerce to a finite, non-negative float; anything else becomes 0.

    Examples:
        >>> coerce_non_negative("12.5")
        12.5
        >>> coerce_non_negative(float("nan"))
        0.0
        >>> coerce_non_negative(-3)
        0.0
    """
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Non-numeric %s %r normalized to 0", field_name, value)
        return 0.0
    if not math.isfinite(number) or number < 0:
        logger.warning("Invalid %s %r normalized to 0", field_name, value)
        return 0.0
    return number


def _coerce_enum(enum_cls: Type[Enum], value: Any, default: Enum) -> Enum:
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Unknown %s %r, using %s", enum_cls.__name__, value, default.value)
        return default


def coerce_bool(value: Any) -> bool:
    """Form/CSV booleans: "true", "yes", "1" (any case) are True; "false", "0", "" are False."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def normalize_record(raw: Mapping[str, Any]) -> ReplenishmentRecord:
    """
    Build a fully-populated ReplenishmentRecord from raw input.

    - Keys may be snake_case or camelCase (front-end exports)
    - Missing numbers default to 0 (lead/safety days default to 30/15)
    - Negative, NaN, infinite or unparseable numbers become 0
    - Integer fields are rounded up (fractional units/cartons cannot ship)
    - Unknown enum strings fall back to the defaults
    - Malformed SKUs (see validate_sku_code) are logged and kept as keys

    Args:
        raw: Raw record mapping

    Returns:
        ReplenishmentRecord

    Raises:
        ValueError: Only when no usable SKU is present (the record cannot be keyed)
    """
    data: Dict[str, Any] = {_snake_case(str(k)): v for k, v in raw.items()}
    defaults = ReplenishmentRecord(id="_", sku="_")

    sku = str(data.get("sku") or "").strip()
    if not sku:
        raise ValueError("Record has no SKU")

    sku_ok, sku_error = validate_sku_code(sku)
    if not sku_ok:
        logger.warning("Record %r has a malformed SKU: %s", sku, sku_error)

    values: Dict[str, Any] = {
        "id": str(data.get("id") or sku),
        "sku": sku,
        "product_name": str(data.get("product_name") or "").strip(),
        "date": str(data.get("date") or "").strip(),
        "warehouse_label": str(data.get("warehouse_label") or "").strip(),
        "lifecycle": _coerce_enum(LifecycleStatus, data.get("lifecycle"), defaults.lifecycle),
        "status": _coerce_enum(RecordStatus, data.get("status"), defaults.status),
        "shipping_method": _coerce_enum(ShippingMethod, data.get("shipping_method"), defaults.shipping_method),
        "is_deleted": coerce_bool(data.get("is_deleted", False)),
    }

    for name in RECORD_FLOAT_FIELDS:
        if name in data:
            values[name] = coerce_non_negative(data[name], name)

    for name in RECORD_INT_FIELDS:
        if name not in data:
            continue
        number = coerce_non_negative(data[name], name)
        if name in ("lead_time_days", "safety_stock_days") and number == 0:
            # 0 / blank means "not filled in" for timing fields
            continue
        values[name] = int(math.ceil(number))

    return ReplenishmentRecord(**values)
