"""
Core Data Models for EA Subscription Manager

These models define the strict schemas for the account book:
1. Accounts and their append-only payment history
2. Derived, read-only dashboard projections (stats, chart series)
3. The cached AI audit summary

DESIGN DECISION: Accounts and history entries are frozen.
An update is always a whole-record replacement (model_copy), which
keeps history append-only and makes accidental in-place edits impossible.

JSON field names intentionally match the stored blob format
(account / expire / status / package / history / date / added),
so collections saved by earlier versions load unchanged.
"""

import datetime
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountStatus(str, Enum):
    """
    Account status.

    CRITICAL: Status is derived from the expiry date on every load.
    A stored status is never trusted.
    """
    ACTIVE = "active"
    INACTIVE = "inactive"


class DurationUnit(str, Enum):
    """
    Renewal duration unit.

    A month is exactly 30 days, not a calendar month.
    """
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @property
    def days(self) -> int:
        """Length of one unit in days."""
        return _UNIT_DAYS[self]


_UNIT_DAYS = {
    DurationUnit.DAY: 1,
    DurationUnit.WEEK: 7,
    DurationUnit.MONTH: 30,
}


# =============================================================================
# PACKAGE LABEL HELPERS
# =============================================================================

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_package_amount(label: str) -> Decimal:
    """
    Read the amount out of a package label such as "$22".

    Lenient on purpose: the leading numeric part is used and anything
    unparseable counts as zero revenue rather than failing the dashboard.
    """
    if not label:
        return Decimal("0")
    match = _LEADING_NUMBER.match(label.replace("$", ""))
    if not match:
        return Decimal("0")
    try:
        value = Decimal(match.group().strip())
    except InvalidOperation:
        return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def format_package_label(amount: Decimal) -> str:
    """Render an amount as a package label ("$22", "$9.50")."""
    return f"${amount:f}"


# =============================================================================
# ACCOUNT MODELS
# =============================================================================

MAX_ACCOUNT_ID_LENGTH = 100


class HistoryEntry(BaseModel):
    """
    One purchase/renewal of an account.

    Immutable once created.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    date: datetime.date = Field(
        ...,
        description="Day the purchase was recorded"
    )
    package: str = Field(
        ...,
        description="Amount paid, as a currency label (e.g. '$22')"
    )
    added: str = Field(
        ...,
        description="Duration bought, e.g. '1 month'"
    )

    @property
    def amount(self) -> Decimal:
        """Numeric value of the package label."""
        return parse_package_amount(self.package)


class Account(BaseModel):
    """
    A subscription slot.

    `account` is the primary key of the collection.
    `package` mirrors the most recent history entry.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    account: str = Field(
        ...,
        min_length=1,
        max_length=MAX_ACCOUNT_ID_LENGTH,
        description="Unique account identifier"
    )
    expire: datetime.date = Field(
        ...,
        description="Last day the subscription is valid"
    )
    status: AccountStatus = Field(
        default=AccountStatus.ACTIVE,
        description="Derived from expire; recomputed on load"
    )
    package: str = Field(
        ...,
        description="Current/most recent package label"
    )
    history: tuple[HistoryEntry, ...] = Field(
        default_factory=tuple,
        description="Purchases in insertion (chronological) order"
    )

    @property
    def latest_entry(self) -> Optional[HistoryEntry]:
        """Most recently appended history entry, if any."""
        return self.history[-1] if self.history else None

    @property
    def renewal_count(self) -> int:
        return len(self.history)


def seed_accounts() -> list[Account]:
    """
    The two demo accounts used when nothing has been stored yet.
    """
    return [
        Account(
            account="EA-001",
            expire=datetime.date(2025, 5, 10),
            status=AccountStatus.ACTIVE,
            package="$22",
            history=(
                HistoryEntry(
                    date=datetime.date(2024, 5, 10),
                    package="$22",
                    added="1 month",
                ),
            ),
        ),
        Account(
            account="EA-002",
            expire=datetime.date(2024, 1, 1),
            status=AccountStatus.INACTIVE,
            package="$15",
            history=(),
        ),
    ]


# =============================================================================
# DERIVED MODELS (never persisted)
# =============================================================================

class AdminStats(BaseModel):
    """
    Dashboard statistics derived from the account collection.

    NOTE: last_package_amount is the amount of the last history entry
    visited while iterating accounts in collection order, not the most
    recent renewal by date.
    """

    total_revenue: Decimal = Field(default=Decimal("0"))
    this_month_revenue: Decimal = Field(default=Decimal("0"))
    last_package_amount: Decimal = Field(default=Decimal("0"))
    active_accounts: int = Field(default=0, ge=0)
    expiring_soon: int = Field(default=0, ge=0)


class MonthlyRevenue(BaseModel):
    """One bar of the revenue chart."""

    month: str = Field(
        ...,
        description="Three-letter month label (Jan..Dec)"
    )
    revenue: Decimal = Field(default=Decimal("0"))


class AuditSummary(BaseModel):
    """
    AI-written audit text tagged with the collection generation it describes.
    """

    text: str
    generation: int = Field(ge=0)
    generated_at: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )
