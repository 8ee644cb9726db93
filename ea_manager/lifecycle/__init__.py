"""Account lifecycle package."""

from ea_manager.lifecycle.accounts import (
    InvalidInputError,
    add_or_renew_account,
    compute_renewal_expiry,
    derive_status,
    find_account,
    normalize_statuses,
    remove_account,
    validate_renewal_input,
)

__all__ = [
    "InvalidInputError",
    "add_or_renew_account",
    "compute_renewal_expiry",
    "derive_status",
    "find_account",
    "normalize_statuses",
    "remove_account",
    "validate_renewal_input",
]
