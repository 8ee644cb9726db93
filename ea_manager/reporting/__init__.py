"""Dashboard reporting package."""

from ea_manager.reporting.aggregator import (
    MONTH_LABELS,
    compute_monthly_revenue_series,
    compute_stats,
)

__all__ = [
    "MONTH_LABELS",
    "compute_monthly_revenue_series",
    "compute_stats",
]
