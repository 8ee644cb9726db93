"""
Account Lifecycle

DESIGN DECISION: Lifecycle operations are pure functions over the
account collection. They take the current collection and return a new
one; nothing here touches storage, logging or UI state. The orchestrator
decides when to persist and what to log.

RULES:
1. Status is a function of the expiry date: inactive iff today > expire
2. Renewals stack on a future expiry, lapsed accounts restart from today
3. A month is 30 days (not calendar arithmetic)
4. History is append-only
5. Input is validated BEFORE any mutation - no NaN, no empty ids
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from ea_manager.models.account import (
    Account,
    AccountStatus,
    DurationUnit,
    HistoryEntry,
    MAX_ACCOUNT_ID_LENGTH,
    format_package_label,
)


AmountInput = Union[str, int, float, Decimal]

# Upper bound on units bought in one purchase
MAX_RENEWAL_COUNT = 1000


class InvalidInputError(ValueError):
    """User input was rejected before any mutation took place."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


# =============================================================================
# STATUS
# =============================================================================

def derive_status(account: Account, today: date) -> AccountStatus:
    """
    Inactive iff today is strictly after the expiry date.

    The expiry day itself still counts as active.
    """
    return AccountStatus.INACTIVE if today > account.expire else AccountStatus.ACTIVE


def normalize_statuses(accounts: Iterable[Account], today: date) -> list[Account]:
    """
    Recompute every account's status from its expiry date.

    Used on load, since a stored status may be days out of date.
    """
    normalized = []
    for account in accounts:
        status = derive_status(account, today)
        if status != account.status:
            account = account.model_copy(update={"status": status})
        normalized.append(account)
    return normalized


# =============================================================================
# EXPIRY
# =============================================================================

def compute_renewal_expiry(
    existing_expiry: Optional[date],
    today: date,
    count: int,
    unit: DurationUnit,
) -> date:
    """
    Compute the new expiry date for a purchase of `count` x `unit`.

    If the account still has time left (expiry in the future) the new
    time is added on top of it; otherwise it starts from today.
    """
    duration = timedelta(days=count * unit.days)
    if existing_expiry is not None and existing_expiry > today:
        base = existing_expiry
    else:
        base = today
    return base + duration


# =============================================================================
# INPUT VALIDATION
# =============================================================================

def _validate_account_id(account_id) -> str:
    if not isinstance(account_id, str) or not account_id.strip():
        raise InvalidInputError("account", "Account ID is required")
    account_id = account_id.strip()
    if len(account_id) > MAX_ACCOUNT_ID_LENGTH:
        raise InvalidInputError(
            "account",
            f"Account ID must be at most {MAX_ACCOUNT_ID_LENGTH} characters",
        )
    return account_id


def _validate_package_amount(package_amount: AmountInput) -> Decimal:
    if isinstance(package_amount, bool) or package_amount is None:
        raise InvalidInputError("package", "Package amount is required")

    if isinstance(package_amount, str):
        text = package_amount.strip()
        if text.startswith("$"):
            text = text[1:].strip()
        if not text:
            raise InvalidInputError("package", "Package amount is required")
    else:
        # str() first so floats keep their shortest repr (22.5, not 22.499...)
        text = str(package_amount)

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidInputError(
            "package", f"Package amount must be numeric, got {package_amount!r}"
        )

    if not amount.is_finite():
        raise InvalidInputError(
            "package", f"Package amount must be numeric, got {package_amount!r}"
        )
    if amount < 0:
        raise InvalidInputError("package", "Package amount cannot be negative")
    return amount


def _validate_count(count) -> int:
    if isinstance(count, bool):
        raise InvalidInputError("count", "Count must be a positive whole number")
    if isinstance(count, str):
        try:
            count = int(count.strip())
        except ValueError:
            raise InvalidInputError("count", "Count must be a positive whole number")
    if not isinstance(count, int) or count < 1:
        raise InvalidInputError("count", "Count must be a positive whole number")
    if count > MAX_RENEWAL_COUNT:
        raise InvalidInputError("count", f"Count must be at most {MAX_RENEWAL_COUNT}")
    return count


def _validate_unit(unit) -> DurationUnit:
    if isinstance(unit, DurationUnit):
        return unit
    try:
        return DurationUnit(str(unit).strip().lower())
    except ValueError:
        allowed = ", ".join(u.value for u in DurationUnit)
        raise InvalidInputError("unit", f"Unit must be one of: {allowed}")


def validate_renewal_input(
    account_id: str,
    package_amount: AmountInput,
    count,
    unit,
) -> tuple[str, Decimal, int, DurationUnit]:
    """
    Validate and normalize add/renew input.

    Raises:
        InvalidInputError: on the first invalid field
    """
    return (
        _validate_account_id(account_id),
        _validate_package_amount(package_amount),
        _validate_count(count),
        _validate_unit(unit),
    )


# =============================================================================
# MUTATIONS
# =============================================================================

def find_account(accounts: Iterable[Account], account_id: str) -> Optional[Account]:
    """Look up an account by id."""
    for account in accounts:
        if account.account == account_id:
            return account
    return None


def add_or_renew_account(
    accounts: Iterable[Account],
    account_id: str,
    package_amount: AmountInput,
    count,
    unit,
    today: date,
) -> list[Account]:
    """
    Add a new account or renew an existing one.

    Existing account: expiry extended (stacking on remaining time),
    status set active, package replaced and one history entry appended.
    Unknown account: appended to the end of the collection with a single
    history entry.

    Returns:
        A new collection; the input is left untouched

    Raises:
        InvalidInputError: if any input is invalid (collection unchanged)
    """
    account_id, amount, count, unit = validate_renewal_input(
        account_id, package_amount, count, unit
    )
    accounts = list(accounts)

    label = format_package_label(amount)
    entry = HistoryEntry(
        date=today,
        package=label,
        added=f"{count} {unit.value}",
    )

    existing = find_account(accounts, account_id)
    try:
        expire = compute_renewal_expiry(
            existing.expire if existing else None, today, count, unit
        )
    except OverflowError:
        raise InvalidInputError("count", "Renewal would extend past the latest supported date")

    if existing is None:
        new_account = Account(
            account=account_id,
            expire=expire,
            status=AccountStatus.ACTIVE,
            package=label,
            history=(entry,),
        )
        return accounts + [new_account]

    renewed = existing.model_copy(update={
        "expire": expire,
        "status": AccountStatus.ACTIVE,
        "package": label,
        "history": existing.history + (entry,),
    })
    return [renewed if a.account == account_id else a for a in accounts]


def remove_account(accounts: Iterable[Account], account_id: str) -> list[Account]:
    """
    Return the collection without `account_id`.

    Removing an unknown id is a no-op.
    """
    return [a for a in accounts if a.account != account_id]
