"""
Tiered freight pricing: resolve a CNY per-kg first-leg rate from weight
brackets, or from a manual rate entered on the record.

Resolution order:
    1. manual rate > 0           → used verbatim
    2. first covering bracket    → min_weight <= w < max_weight, ascending min_weight
    3. w above every bracket     → price of the highest bracket (ceiling)
    4. w inside a gap / below    → nearest bracket below w, else the lowest bracket
    5. no brackets, no manual    → 0, "unpriced"
"""
from dataclasses import dataclass
import logging
import math
from typing import Optional, Sequence

from .models import FreightRateSource, LogisticsTier, ShippingMethod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FreightQuote:
    """Resolved per-kg rate and where it came from."""
    rate_cny_per_kg: float
    source: FreightRateSource
    tier: Optional[LogisticsTier] = None


def _sorted_tiers(tiers: Sequence[LogisticsTier]) -> list:
    # sorted() is stable: overlapping brackets with equal minima keep list order
    return sorted(tiers, key=lambda t: t.min_weight)


def resolve_freight_quote(
    total_weight_kg: float,
    method: ShippingMethod,
    manual_rate: float,
    tiers: Sequence[LogisticsTier],
) -> FreightQuote:
    """
    Resolve the per-kg freight rate for a shipment.

    Args:
        total_weight_kg: Billable shipment weight
        method: Shipping method (for diagnostics; tiers are already per-method)
        manual_rate: Rate entered on the record (<= 0 means unset)
        tiers: Weight brackets for the method, any order

    Returns:
        FreightQuote; never raises for numeric input
    """
    if manual_rate is not None and math.isfinite(manual_rate) and manual_rate > 0:
        return FreightQuote(rate_cny_per_kg=float(manual_rate), source=FreightRateSource.MANUAL)

    method_name = getattr(method, "value", method)
    if not tiers:
        logger.warning("No %s freight tiers configured and no manual rate: shipment is unpriced", method_name)
        return FreightQuote(rate_cny_per_kg=0.0, source=FreightRateSource.UNPRICED)

    weight = total_weight_kg if (math.isfinite(total_weight_kg) and total_weight_kg > 0) else 0.0
    ordered = _sorted_tiers(tiers)

    for tier in ordered:
        if tier.covers(weight):
            return FreightQuote(rate_cny_per_kg=tier.price, source=FreightRateSource.TIER, tier=tier)

    # No covering bracket
    top = max(ordered, key=lambda t: t.max_weight)
    if weight >= top.max_weight:
        logger.debug("Weight %.2f kg above highest %s bracket, using ceiling price %.2f", weight, method_name, top.price)
        return FreightQuote(rate_cny_per_kg=top.price, source=FreightRateSource.CEILING, tier=top)

    below = [t for t in ordered if t.min_weight <= weight]
    nearest = below[-1] if below else ordered[0]
    logger.debug("Weight %.2f kg falls in a bracket gap, using nearest bracket price %.2f", weight, nearest.price)
    return FreightQuote(rate_cny_per_kg=nearest.price, source=FreightRateSource.TIER, tier=nearest)


def resolve_freight_rate(
    total_weight_kg: float,
    method: ShippingMethod,
    manual_rate: float,
    tiers: Sequence[LogisticsTier],
) -> float:
    """
    Per-kg freight rate (CNY). 0 means unpriced.

    Examples:
        >>> tiers = [LogisticsTier(0, 21, 65), LogisticsTier(21, 100, 50), LogisticsTier(100, 9999, 40)]
        >>> resolve_freight_rate(150, ShippingMethod.AIR, 0, tiers)
        40
        >>> resolve_freight_rate(150, ShippingMethod.AIR, 62, tiers)
        62.0
    """
    return resolve_freight_quote(total_weight_kg, method, manual_rate, tiers).rate_cny_per_kg
