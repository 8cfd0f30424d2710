"""
Currency conversion and guarded arithmetic shared by the pricing engine.
"""
import math
from typing import Optional


def safe_divide(numerator: float, denominator: float, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Divide, returning *default* instead of raising or producing NaN/inf.

    Falls back when the denominator is zero, when either operand is not
    finite, or when the quotient itself overflows.

    Examples:
        >>> safe_divide(10, 4)
        2.5
        >>> safe_divide(10, 0)
        0.0
        >>> safe_divide(10, 0, default=None) is None
        True
    """
    if not (math.isfinite(numerator) and math.isfinite(denominator)):
        return default
    if denominator == 0:
        return default
    result = numerator / denominator
    if not math.isfinite(result):
        return default
    return result


class CurrencyConverter:
    """USD/CNY conversion at a single configured rate (CNY per 1 USD)."""

    def __init__(self, exchange_rate: float):
        self.exchange_rate = exchange_rate

    def cny_to_usd(self, amount_cny: float) -> float:
        """Convert CNY to USD; 0 when the rate is unusable."""
        if self.exchange_rate <= 0:
            return 0.0
        return safe_divide(amount_cny, self.exchange_rate)

    def usd_to_cny(self, amount_usd: float) -> float:
        """Convert USD to CNY; 0 when the rate is unusable."""
        if not math.isfinite(self.exchange_rate) or self.exchange_rate <= 0:
            return 0.0
        result = amount_usd * self.exchange_rate
        return result if math.isfinite(result) else 0.0
