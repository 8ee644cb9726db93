"""
Data Models Package

This package contains all Pydantic models used in the EA Subscription Manager.
All data flowing through the system must conform to these schemas.
"""

from ea_manager.models.account import (
    Account,
    AccountStatus,
    AdminStats,
    AuditSummary,
    DurationUnit,
    HistoryEntry,
    MonthlyRevenue,
    format_package_label,
    parse_package_amount,
    seed_accounts,
)
from ea_manager.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)
from ea_manager.models.session import (
    AppState,
    UserSession,
    ViewMode,
)

__all__ = [
    # Account models
    "Account",
    "AccountStatus",
    "AdminStats",
    "AuditSummary",
    "DurationUnit",
    "HistoryEntry",
    "MonthlyRevenue",
    "format_package_label",
    "parse_package_amount",
    "seed_accounts",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
    # Session state
    "AppState",
    "UserSession",
    "ViewMode",
]
