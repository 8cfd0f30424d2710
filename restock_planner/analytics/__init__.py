"""Analytics package for portfolio-level planning figures."""

from .portfolio import (
    PortfolioSummary,
    ProductProfit,
    summarize_portfolio,
)

__all__ = [
    "PortfolioSummary",
    "ProductProfit",
    "summarize_portfolio",
]
