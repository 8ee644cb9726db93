"""
Dashboard Aggregation

DESIGN DECISION: Aggregation is DETERMINISTIC and read-only.
Both functions are plain projections of the account collection;
they can be recomputed on every rerun and need no cached state.

Revenue comes from history entries only. An account with an empty
history contributes nothing, whatever its current package says.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from ea_manager.lifecycle.accounts import derive_status
from ea_manager.models.account import (
    Account,
    AccountStatus,
    AdminStats,
    MonthlyRevenue,
)


MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def compute_stats(
    accounts: Iterable[Account],
    today: date,
    expiring_within_days: int = 3,
) -> AdminStats:
    """
    Compute the admin dashboard statistics in a single pass.

    - total_revenue: every history entry of every account
    - this_month_revenue: entries dated in today's month and year
    - last_package_amount: the last entry visited, in collection order
    - active_accounts: accounts whose derived status is active
    - expiring_soon: accounts with 0 <= (expire - today) <= expiring_within_days
    """
    total = Decimal("0")
    this_month = Decimal("0")
    last_amount = Decimal("0")
    active = 0
    expiring = 0

    for account in accounts:
        if derive_status(account, today) == AccountStatus.ACTIVE:
            active += 1

        days_left = (account.expire - today).days
        if 0 <= days_left <= expiring_within_days:
            expiring += 1

        for entry in account.history:
            amount = entry.amount
            total += amount
            if entry.date.year == today.year and entry.date.month == today.month:
                this_month += amount
            last_amount = amount

    return AdminStats(
        total_revenue=total,
        this_month_revenue=this_month,
        last_package_amount=last_amount,
        active_accounts=active,
        expiring_soon=expiring,
    )


def compute_monthly_revenue_series(
    accounts: Iterable[Account],
    year: int,
) -> list[MonthlyRevenue]:
    """
    Revenue per calendar month of `year`.

    Always returns exactly 12 entries (Jan..Dec); months without
    purchases report zero so the chart keeps a stable shape.
    """
    buckets = [Decimal("0")] * 12
    for account in accounts:
        for entry in account.history:
            if entry.date.year == year:
                buckets[entry.date.month - 1] += entry.amount

    return [
        MonthlyRevenue(month=label, revenue=revenue)
        for label, revenue in zip(MONTH_LABELS, buckets)
    ]
