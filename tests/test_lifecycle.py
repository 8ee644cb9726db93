"""
Tests for the account lifecycle: status, expiry, validation, add/renew/remove.
"""

from datetime import date
from decimal import Decimal

import pytest

from ea_manager.lifecycle import (
    InvalidInputError,
    add_or_renew_account,
    compute_renewal_expiry,
    derive_status,
    find_account,
    normalize_statuses,
    remove_account,
    validate_renewal_input,
)
from ea_manager.lifecycle.accounts import MAX_RENEWAL_COUNT
from ea_manager.models.account import (
    Account,
    AccountStatus,
    DurationUnit,
    HistoryEntry,
    seed_accounts,
)


def make_account(account_id="EA-100", expire=date(2025, 6, 1), status=AccountStatus.ACTIVE):
    return Account(
        account=account_id,
        expire=expire,
        status=status,
        package="$22",
        history=(HistoryEntry(date=date(2025, 5, 1), package="$22", added="1 month"),),
    )


class TestDeriveStatus:
    """Tests for status derivation."""

    def test_day_after_expiry_is_inactive(self):
        """Test that an account is inactive the day after it expires."""
        account = make_account(expire=date(2025, 5, 10))
        assert derive_status(account, date(2025, 5, 11)) == AccountStatus.INACTIVE

    def test_expiry_day_is_active(self):
        """Test that the expiry day itself still counts as active."""
        account = make_account(expire=date(2025, 5, 10))
        assert derive_status(account, date(2025, 5, 10)) == AccountStatus.ACTIVE

    def test_stored_status_is_ignored(self):
        """Test that a stale stored status has no effect."""
        account = make_account(expire=date(2030, 1, 1), status=AccountStatus.INACTIVE)
        assert derive_status(account, date(2025, 5, 1)) == AccountStatus.ACTIVE

    def test_normalize_statuses(self):
        """Test that every status is recomputed, order preserved."""
        accounts = [
            make_account("A", expire=date(2024, 1, 1), status=AccountStatus.ACTIVE),
            make_account("B", expire=date(2030, 1, 1), status=AccountStatus.INACTIVE),
        ]
        normalized = normalize_statuses(accounts, date(2025, 5, 1))
        assert [a.account for a in normalized] == ["A", "B"]
        assert normalized[0].status == AccountStatus.INACTIVE
        assert normalized[1].status == AccountStatus.ACTIVE
        # Inputs are frozen and untouched
        assert accounts[0].status == AccountStatus.ACTIVE


class TestRenewalExpiry:
    """Tests for expiry stacking."""

    def test_stacks_on_future_expiry(self):
        """Test that remaining time is kept."""
        result = compute_renewal_expiry(
            date(2025, 6, 1), date(2025, 5, 1), 1, DurationUnit.MONTH
        )
        assert result == date(2025, 7, 1)

    def test_lapsed_account_restarts_from_today(self):
        """Test that a lapsed account starts over from today."""
        result = compute_renewal_expiry(
            date(2024, 1, 1), date(2025, 5, 1), 1, DurationUnit.WEEK
        )
        assert result == date(2025, 5, 8)

    def test_expiry_today_starts_from_today(self):
        result = compute_renewal_expiry(
            date(2025, 5, 1), date(2025, 5, 1), 3, DurationUnit.DAY
        )
        assert result == date(2025, 5, 4)

    def test_new_account_starts_from_today(self):
        result = compute_renewal_expiry(None, date(2025, 5, 1), 1, DurationUnit.MONTH)
        assert result == date(2025, 5, 31)

    def test_count_multiplies_unit(self):
        """Test that 2 months is 60 days."""
        result = compute_renewal_expiry(None, date(2025, 1, 1), 2, DurationUnit.MONTH)
        assert result == date(2025, 3, 2)


class TestValidation:
    """Tests for add/renew input validation."""

    def test_valid_input_is_normalized(self):
        account_id, amount, count, unit = validate_renewal_input(
            "  EA-100 ", "$22.50", "2", "Week"
        )
        assert account_id == "EA-100"
        assert amount == Decimal("22.50")
        assert count == 2
        assert unit == DurationUnit.WEEK

    @pytest.mark.parametrize("account_id", ["", "   ", None])
    def test_rejects_missing_account_id(self, account_id):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_renewal_input(account_id, "22", 1, "month")
        assert exc_info.value.field == "account"

    @pytest.mark.parametrize("amount", ["abc", "", "nan", "NaN", "inf", None, True])
    def test_rejects_non_numeric_amount(self, amount):
        """Test that non-numeric amounts never reach the collection."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_renewal_input("EA-100", amount, 1, "month")
        assert exc_info.value.field == "package"

    def test_rejects_float_nan(self):
        with pytest.raises(InvalidInputError):
            validate_renewal_input("EA-100", float("nan"), 1, "month")

    def test_rejects_negative_amount(self):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_renewal_input("EA-100", "-5", 1, "month")
        assert "negative" in exc_info.value.message

    def test_accepts_zero_amount(self):
        _, amount, _, _ = validate_renewal_input("EA-100", 0, 1, "month")
        assert amount == Decimal("0")

    def test_float_amount_keeps_short_form(self):
        _, amount, _, _ = validate_renewal_input("EA-100", 22.5, 1, "month")
        assert amount == Decimal("22.5")

    @pytest.mark.parametrize("count", [0, -1, "x", "1.5", True, 2.0])
    def test_rejects_bad_count(self, count):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_renewal_input("EA-100", "22", count, "month")
        assert exc_info.value.field == "count"

    def test_rejects_unknown_unit(self):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_renewal_input("EA-100", "22", 1, "year")
        assert exc_info.value.field == "unit"

    def test_rejects_overlong_account_id(self):
        """Test that an id the model can't hold is rejected up front."""
        with pytest.raises(InvalidInputError) as exc_info:
            add_or_renew_account([], "X" * 101, "22", 1, "month", date(2025, 5, 1))
        assert exc_info.value.field == "account"

    def test_accepts_longest_account_id(self):
        account_id, _, _, _ = validate_renewal_input("X" * 100, "22", 1, "month")
        assert len(account_id) == 100

    def test_rejects_count_above_cap(self):
        with pytest.raises(InvalidInputError) as exc_info:
            add_or_renew_account([], "EA-9", "22", 10**6, "month", date(2025, 5, 1))
        assert exc_info.value.field == "count"

    def test_accepts_count_at_cap(self):
        _, _, count, _ = validate_renewal_input("EA-9", "22", MAX_RENEWAL_COUNT, "month")
        assert count == MAX_RENEWAL_COUNT

    def test_invalid_input_error_is_value_error(self):
        assert issubclass(InvalidInputError, ValueError)


class TestAddOrRenew:
    """Tests for add_or_renew_account."""

    TODAY = date(2025, 5, 1)

    def test_new_account_is_appended(self):
        """Test that an unknown id creates a new account at the end."""
        accounts = seed_accounts()
        result = add_or_renew_account(accounts, "EA-003", "22", 1, "month", self.TODAY)

        assert [a.account for a in result] == ["EA-001", "EA-002", "EA-003"]
        new = result[-1]
        assert new.expire == date(2025, 5, 31)
        assert new.status == AccountStatus.ACTIVE
        assert new.package == "$22"
        assert new.history == (
            HistoryEntry(date=self.TODAY, package="$22", added="1 month"),
        )

    def test_input_collection_is_untouched(self):
        accounts = seed_accounts()
        add_or_renew_account(accounts, "EA-003", "22", 1, "month", self.TODAY)
        assert len(accounts) == 2

    def test_renewal_stacks_and_appends_history(self):
        """Test renewal of an account that still has time left."""
        accounts = [make_account("EA-100", expire=date(2025, 6, 1))]
        result = add_or_renew_account(accounts, "EA-100", "30", 2, "week", self.TODAY)

        renewed = result[0]
        assert len(result) == 1
        assert renewed.expire == date(2025, 6, 15)
        assert renewed.package == "$30"
        assert renewed.renewal_count == 2
        assert renewed.history[0] == accounts[0].history[0]
        assert renewed.latest_entry == HistoryEntry(
            date=self.TODAY, package="$30", added="2 week"
        )

    def test_renewal_reactivates_lapsed_account(self):
        """Test that a lapsed account becomes active again."""
        accounts = [
            make_account("EA-100", expire=date(2024, 1, 1), status=AccountStatus.INACTIVE)
        ]
        result = add_or_renew_account(accounts, "EA-100", "15", 1, "week", self.TODAY)
        assert result[0].expire == date(2025, 5, 8)
        assert result[0].status == AccountStatus.ACTIVE

    def test_renewal_keeps_position(self):
        accounts = seed_accounts()
        result = add_or_renew_account(accounts, "EA-001", "22", 1, "month", self.TODAY)
        assert [a.account for a in result] == ["EA-001", "EA-002"]

    def test_repeated_renewal_appends_twice(self):
        """Test that the same renewal twice gives two history entries."""
        accounts = add_or_renew_account([], "EA-100", "22", 1, "month", self.TODAY)
        accounts = add_or_renew_account(accounts, "EA-100", "22", 1, "month", self.TODAY)
        accounts = add_or_renew_account(accounts, "EA-100", "22", 1, "month", self.TODAY)

        assert len(accounts) == 1
        assert accounts[0].renewal_count == 3
        assert accounts[0].expire == date(2025, 7, 30)

    def test_renewal_past_date_range_is_rejected(self):
        """Test that stacking beyond the last representable date is an input error."""
        accounts = [make_account("EA-100", expire=date(9999, 12, 1))]
        with pytest.raises(InvalidInputError) as exc_info:
            add_or_renew_account(accounts, "EA-100", "22", 1, "month", self.TODAY)
        assert exc_info.value.field == "count"
        assert accounts[0].expire == date(9999, 12, 1)

    def test_invalid_input_changes_nothing(self):
        accounts = seed_accounts()
        with pytest.raises(InvalidInputError):
            add_or_renew_account(accounts, "EA-001", "abc", 1, "month", self.TODAY)
        assert accounts == seed_accounts()

    def test_decimal_amount_label(self):
        result = add_or_renew_account([], "EA-100", "9.50", 1, "day", self.TODAY)
        assert result[0].package == "$9.50"


class TestRemoveAndFind:
    """Tests for remove_account and find_account."""

    def test_remove_existing(self):
        result = remove_account(seed_accounts(), "EA-001")
        assert [a.account for a in result] == ["EA-002"]

    def test_remove_unknown_is_noop(self):
        """Test that removing an unknown id leaves the collection as is."""
        accounts = seed_accounts()
        assert remove_account(accounts, "EA-404") == accounts

    def test_find(self):
        accounts = seed_accounts()
        assert find_account(accounts, "EA-002").package == "$15"
        assert find_account(accounts, "EA-404") is None
