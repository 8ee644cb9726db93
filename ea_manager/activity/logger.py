"""
Activity Logger

DESIGN DECISION: Every significant action on the account book is logged.
This provides:
1. Traceability of adds, renewals and removals
2. Debugging capability when storage or the AI auditor fails
3. A recent-activity view for the admin

The activity logger:
- Always logs locally through structlog
- Gracefully handles storage failures (never crashes the app if logging fails)
"""

from typing import Optional

import structlog

from ea_manager.models.activity import ActivityEvent, ActivityEventBuilder
from ea_manager.services.storage import ActivityStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class ActivityLogger:
    """
    Central activity logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An optional storage backend (for the recent-activity panel)
    """

    def __init__(
        self,
        storage: Optional[ActivityStorageInterface] = None,
    ):
        """
        Initialize activity logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("ea_manager.activity")

    def log(self, event: ActivityEvent) -> bool:
        """
        Log an activity event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("activity_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "activity_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, limit: int = 20) -> list[ActivityEvent]:
        """
        Most recent events from storage (newest first).

        Returns an empty list when no storage is configured or it can't be read.
        """
        if not self._storage:
            return []
        try:
            return self._storage.get_recent_events(limit=limit)
        except Exception as e:
            self._logger.warning("activity_read_failed", error=str(e))
            return []

    def log_accounts_loaded(self, count: int) -> None:
        self.log(ActivityEventBuilder.accounts_loaded(count))

    def log_accounts_seeded(self, count: int) -> None:
        self.log(ActivityEventBuilder.accounts_seeded(count))

    def log_load_failed(self, error_message: str) -> None:
        self.log(ActivityEventBuilder.load_failed(error_message))

    def log_account_added(
        self,
        account_id: str,
        package: str,
        added: str,
        expire: str,
    ) -> None:
        """Log a newly added account."""
        self.log(ActivityEventBuilder.account_added(
            account_id=account_id,
            package=package,
            added=added,
            expire=expire,
        ))

    def log_account_renewed(
        self,
        account_id: str,
        package: str,
        added: str,
        previous_expire: str,
        expire: str,
    ) -> None:
        """Log a renewal of an existing account."""
        self.log(ActivityEventBuilder.account_renewed(
            account_id=account_id,
            package=package,
            added=added,
            previous_expire=previous_expire,
            expire=expire,
        ))

    def log_account_removed(self, account_id: str, found: bool) -> None:
        self.log(ActivityEventBuilder.account_removed(account_id, found))

    def log_input_rejected(
        self,
        field: str,
        message: str,
        account_id: Optional[str] = None,
    ) -> None:
        self.log(ActivityEventBuilder.input_rejected(field, message, account_id))

    def log_save_failed(self, error_message: str, count: int) -> None:
        self.log(ActivityEventBuilder.save_failed(error_message, count))

    def log_login_succeeded(self, username: str) -> None:
        self.log(ActivityEventBuilder.login_succeeded(username))

    def log_login_failed(self, username: str) -> None:
        self.log(ActivityEventBuilder.login_failed(username))

    def log_logged_out(self, username: Optional[str]) -> None:
        self.log(ActivityEventBuilder.logged_out(username))

    def log_summary_generated(self, generation: int, account_count: int) -> None:
        self.log(ActivityEventBuilder.summary_generated(generation, account_count))

    def log_summary_failed(self, generation: int, error_message: str) -> None:
        self.log(ActivityEventBuilder.summary_failed(generation, error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an unexpected error."""
        self.log(ActivityEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
