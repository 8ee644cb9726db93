"""
Activity Models for EA Subscription Manager

Every significant action on the account book is recorded as an event.
This provides:
1. Traceability of who changed which account and when
2. Debugging information when storage or the AI auditor fails
3. A "recent activity" panel for the admin

DESIGN DECISION: The activity trail is append-only and best-effort.
Losing an event never blocks or rolls back the action it describes.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """
    Types of events we record.
    """
    # Loading
    ACCOUNTS_LOADED = "accounts_loaded"
    ACCOUNTS_SEEDED = "accounts_seeded"
    LOAD_FAILED = "load_failed"

    # Account lifecycle
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_RENEWED = "account_renewed"
    ACCOUNT_REMOVED = "account_removed"
    INPUT_REJECTED = "input_rejected"

    # Persistence
    SAVE_FAILED = "save_failed"

    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"

    # AI auditor
    SUMMARY_GENERATED = "summary_generated"
    SUMMARY_FAILED = "summary_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """
    A single activity event.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: ActivityEventType = Field(
        ...,
        description="Type of event"
    )
    severity: ActivitySeverity = Field(
        default=ActivitySeverity.INFO,
        description="Event severity"
    )

    # Which account (or username, for session events) this is about
    entity_id: Optional[str] = Field(
        default=None,
        description="Account id or username the event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_id,
         description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_id or "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.account_added("EA-003", "$22", "1 month", date(2025, 6, 1))
        event = ActivityEventBuilder.login_failed("admin")
    """

    @staticmethod
    def accounts_loaded(count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ACCOUNTS_LOADED,
            description=f"Loaded {count} accounts from storage",
            details={"count": count},
        )

    @staticmethod
    def accounts_seeded(count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ACCOUNTS_SEEDED,
            description=f"Nothing stored yet, seeded {count} demo accounts",
            details={"count": count},
        )

    @staticmethod
    def load_failed(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOAD_FAILED,
            severity=ActivitySeverity.WARNING,
            description="Could not load accounts, falling back to demo data",
            error_message=error_message,
        )

    @staticmethod
    def account_added(
        account_id: str,
        package: str,
        added: str,
        expire: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ACCOUNT_ADDED,
            entity_id=account_id,
            description=f"Account added: {account_id} ({package}, {added})",
            details={
                "package": package,
                "added": added,
                "expire": expire,
            },
            is_user_action=True,
        )

    @staticmethod
    def account_renewed(
        account_id: str,
        package: str,
        added: str,
        previous_expire: str,
        expire: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ACCOUNT_RENEWED,
            entity_id=account_id,
            description=f"Account renewed: {account_id} until {expire}",
            details={
                "package": package,
                "added": added,
                "previous_expire": previous_expire,
                "expire": expire,
            },
            is_user_action=True,
        )

    @staticmethod
    def account_removed(account_id: str, found: bool) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ACCOUNT_REMOVED,
            entity_id=account_id,
            description=(
                f"Account removed: {account_id}"
                if found
                else f"Remove requested for unknown account: {account_id}"
            ),
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        field: str,
        message: str,
        account_id: Optional[str] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.INPUT_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_id=account_id or None,
            description=f"Input rejected: {field}",
            error_message=message,
            details={"field": field},
            is_user_action=True,
        )

    @staticmethod
    def save_failed(error_message: str, count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            description="Failed to persist account collection",
            error_message=error_message,
            details={"count": count},
        )

    @staticmethod
    def login_succeeded(username: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGIN_SUCCEEDED,
            entity_id=username,
            description=f"Admin signed in: {username}",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(username: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGIN_FAILED,
            severity=ActivitySeverity.WARNING,
            entity_id=username or None,
            description="Invalid username or password",
            is_user_action=True,
        )

    @staticmethod
    def logged_out(username: Optional[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGGED_OUT,
            entity_id=username,
            description="Admin signed out",
            is_user_action=True,
        )

    @staticmethod
    def summary_generated(generation: int, account_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SUMMARY_GENERATED,
            description=f"AI audit generated for {account_count} accounts",
            details={
                "generation": generation,
                "account_count": account_count,
            },
        )

    @staticmethod
    def summary_failed(generation: int, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SUMMARY_FAILED,
            severity=ActivitySeverity.WARNING,
            description="AI audit generation failed",
            error_message=error_message,
            details={"generation": generation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SYSTEM_ERROR,
            severity=ActivitySeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
