"""Planning workflows built on the domain layer."""

from .restock import (
    PlanTotals,
    RestockSuggestion,
    build_restock_plan,
    plan_totals,
)

__all__ = [
    "PlanTotals",
    "RestockSuggestion",
    "build_restock_plan",
    "plan_totals",
]
