"""
Stock health classification from days of supply.
"""
import math
from typing import Optional

from .models import StockStatus, StockThresholds


DEFAULT_THRESHOLDS = StockThresholds()


def _known_days(days_of_supply: Optional[float]) -> bool:
    return days_of_supply is not None and math.isfinite(days_of_supply) and days_of_supply >= 0


def classify_stock(
    days_of_supply: Optional[float],
    thresholds: StockThresholds = DEFAULT_THRESHOLDS,
) -> StockStatus:
    """
    Map days of supply to a stock status.

    None (no sales velocity), NaN, infinity and negative values are Unknown.

    Examples:
        >>> classify_stock(10).value
        'Critical'
        >>> classify_stock(45).value
        'Healthy'
        >>> classify_stock(None).value
        'Unknown'
    """
    if not _known_days(days_of_supply):
        return StockStatus.UNKNOWN
    if days_of_supply < thresholds.critical_days:
        return StockStatus.CRITICAL
    if days_of_supply < thresholds.low_days:
        return StockStatus.LOW
    if days_of_supply < thresholds.overstock_days:
        return StockStatus.HEALTHY
    return StockStatus.OVERSTOCK


def needs_projection(
    days_of_supply: Optional[float],
    thresholds: StockThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """True if runway is known and below the low-stock cutoff (alerting/projection candidates)."""
    return _known_days(days_of_supply) and days_of_supply < thresholds.low_days
