"""
Tests for dashboard statistics and the monthly revenue series.
"""

from datetime import date
from decimal import Decimal

from ea_manager.models.account import Account, AccountStatus, HistoryEntry, seed_accounts
from ea_manager.reporting import (
    MONTH_LABELS,
    compute_monthly_revenue_series,
    compute_stats,
)


def entry(day: date, package: str) -> HistoryEntry:
    return HistoryEntry(date=day, package=package, added="1 month")


def account(account_id: str, expire: date, *entries: HistoryEntry, status=AccountStatus.ACTIVE):
    return Account(
        account=account_id,
        expire=expire,
        status=status,
        package=entries[-1].package if entries else "$0",
        history=entries,
    )


class TestComputeStats:
    """Tests for compute_stats."""

    def test_empty_collection(self):
        stats = compute_stats([], date(2025, 5, 1))
        assert stats.total_revenue == Decimal("0")
        assert stats.this_month_revenue == Decimal("0")
        assert stats.last_package_amount == Decimal("0")
        assert stats.active_accounts == 0
        assert stats.expiring_soon == 0

    def test_seed_data(self):
        """Test stats over the demo accounts in the month of the seeded purchase."""
        stats = compute_stats(seed_accounts(), date(2024, 5, 20))
        assert stats.total_revenue == Decimal("22")
        assert stats.this_month_revenue == Decimal("22")
        assert stats.last_package_amount == Decimal("22")
        assert stats.active_accounts == 1
        assert stats.expiring_soon == 0

    def test_revenue_comes_from_history_only(self):
        """Test that an account without history adds no revenue."""
        no_history = Account(account="A", expire=date(2030, 1, 1), package="$99")
        stats = compute_stats([no_history], date(2025, 5, 1))
        assert stats.total_revenue == Decimal("0")

    def test_this_month_needs_same_year(self):
        accounts = [
            account(
                "A",
                date(2030, 1, 1),
                entry(date(2024, 5, 3), "$10"),
                entry(date(2025, 5, 3), "$20"),
                entry(date(2025, 4, 30), "$40"),
            )
        ]
        stats = compute_stats(accounts, date(2025, 5, 15))
        assert stats.total_revenue == Decimal("70")
        assert stats.this_month_revenue == Decimal("20")

    def test_last_package_follows_collection_order(self):
        """Test that the last entry visited wins, not the latest date."""
        accounts = [
            account("A", date(2030, 1, 1), entry(date(2025, 5, 1), "$30")),
            account("B", date(2030, 1, 1), entry(date(2024, 1, 1), "$10")),
        ]
        stats = compute_stats(accounts, date(2025, 5, 15))
        assert stats.last_package_amount == Decimal("10")

    def test_active_uses_derived_status(self):
        """Test that a stale stored status is not counted."""
        accounts = [
            account("A", date(2024, 1, 1), status=AccountStatus.ACTIVE),
            account("B", date(2030, 1, 1), status=AccountStatus.INACTIVE),
        ]
        stats = compute_stats(accounts, date(2025, 5, 1))
        assert stats.active_accounts == 1

    def test_expiring_soon_window(self):
        """Test the 0..N day window, both ends included."""
        today = date(2025, 5, 1)
        accounts = [
            account("today", date(2025, 5, 1)),
            account("in-3", date(2025, 5, 4)),
            account("in-4", date(2025, 5, 5)),
            account("yesterday", date(2025, 4, 30)),
        ]
        assert compute_stats(accounts, today).expiring_soon == 2
        assert compute_stats(accounts, today, expiring_within_days=4).expiring_soon == 3
        assert compute_stats(accounts, today, expiring_within_days=0).expiring_soon == 1

    def test_unparseable_package_counts_as_zero(self):
        accounts = [
            account(
                "A",
                date(2030, 1, 1),
                entry(date(2025, 5, 1), "free"),
                entry(date(2025, 5, 2), "$5"),
            )
        ]
        stats = compute_stats(accounts, date(2025, 5, 15))
        assert stats.total_revenue == Decimal("5")


class TestMonthlyRevenueSeries:
    """Tests for compute_monthly_revenue_series."""

    def test_empty_collection_has_twelve_zeros(self):
        series = compute_monthly_revenue_series([], 2025)
        assert [m.month for m in series] == list(MONTH_LABELS)
        assert [m.revenue for m in series] == [Decimal("0")] * 12

    def test_labels(self):
        assert MONTH_LABELS[0] == "Jan"
        assert MONTH_LABELS[-1] == "Dec"
        assert len(MONTH_LABELS) == 12

    def test_buckets_by_month(self):
        accounts = [
            account(
                "A",
                date(2030, 1, 1),
                entry(date(2025, 1, 31), "$10"),
                entry(date(2025, 1, 1), "$5"),
                entry(date(2025, 12, 25), "$7.50"),
            ),
            account("B", date(2030, 1, 1), entry(date(2025, 5, 10), "$22")),
        ]
        series = compute_monthly_revenue_series(accounts, 2025)
        revenue = {m.month: m.revenue for m in series}
        assert revenue["Jan"] == Decimal("15")
        assert revenue["May"] == Decimal("22")
        assert revenue["Dec"] == Decimal("7.50")
        assert revenue["Feb"] == Decimal("0")

    def test_other_years_are_ignored(self):
        accounts = [account("A", date(2030, 1, 1), entry(date(2024, 5, 10), "$22"))]
        series = compute_monthly_revenue_series(accounts, 2025)
        assert sum(m.revenue for m in series) == Decimal("0")
        assert len(series) == 12
