"""
Main Orchestrator for EA Subscription Manager

This module ties together all the components and defines the flows
the presentation layer calls:
1. Account book (load → add/renew/remove → persist → stats/chart)
2. AI audit (invalidate on change → regenerate lazily)
3. Admin session (login → dashboard → logout)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Invalid input never reaches the collection
- Every successful mutation is logged, invalidates the audit and is saved
- Storage and AI failures degrade the app, they never crash it

The lifecycle and reporting modules stay pure; all side effects live here.
"""

from datetime import date
from typing import Callable, Optional

import structlog

from ea_manager.activity import ActivityLogger
from ea_manager.agents import (
    AuditSummaryCache,
    AuditSummaryGenerator,
    GeminiAuditAgent,
)
from ea_manager.auth import CredentialVerifier, DemoCredentialVerifier
from ea_manager.config import get_settings
from ea_manager.lifecycle import (
    InvalidInputError,
    add_or_renew_account,
    find_account,
    normalize_statuses,
    remove_account,
    validate_renewal_input,
)
from ea_manager.models.account import (
    Account,
    AdminStats,
    AuditSummary,
    MonthlyRevenue,
    seed_accounts,
)
from ea_manager.models.activity import ActivityEvent
from ea_manager.models.session import AppState, UserSession, ViewMode
from ea_manager.reporting import compute_monthly_revenue_series, compute_stats
from ea_manager.services.storage import (
    AccountStorageInterface,
    ActivityStorageInterface,
    GoogleSheetsAccountStorage,
    GoogleSheetsActivityStorage,
    GoogleSheetsClient,
    InMemoryAccountStorage,
    InMemoryActivityStorage,
    LocalJsonAccountStorage,
    StorageError,
)


logger = structlog.get_logger(__name__)


class AccountBookFlow:
    """
    Owns the in-memory account collection.

    Flow for every mutation:
    1. Validate input (InvalidInputError → nothing changes)
    2. Replace the collection with the lifecycle result
    3. Log the activity event
    4. Invalidate the AI audit
    5. Save (best-effort - in-memory state stays authoritative)
    """

    def __init__(
        self,
        storage: Optional[AccountStorageInterface] = None,
        activity_logger: Optional[ActivityLogger] = None,
        summary_generator: Optional[AuditSummaryGenerator] = None,
        summary_cache: Optional[AuditSummaryCache] = None,
        expiring_soon_days: int = 3,
        seed_demo_data: bool = True,
        today_provider: Callable[[], date] = date.today,
    ):
        self._storage = storage
        self._activity = activity_logger or ActivityLogger()
        self._summary_generator = summary_generator
        self._summary_cache = summary_cache or AuditSummaryCache()
        self._expiring_soon_days = expiring_soon_days
        self._seed_demo_data = seed_demo_data
        self._today = today_provider

        self._accounts: list[Account] = []
        self.last_save_error: Optional[str] = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _initial_accounts(self) -> list[Account]:
        return seed_accounts() if self._seed_demo_data else []

    def load(self) -> list[Account]:
        """
        Load the collection from storage and recompute every status.

        - Nothing stored yet → seed demo data and save it
        - Storage unreadable → seed demo data in memory only, so the
          last good copy in storage isn't overwritten by the fallback
        """
        today = self._today()

        try:
            stored = self._storage.load() if self._storage else None
        except StorageError as e:
            self._activity.log_load_failed(str(e))
            self._accounts = normalize_statuses(self._initial_accounts(), today)
            self._summary_cache.invalidate()
            return self.accounts

        if stored is None:
            self._accounts = normalize_statuses(self._initial_accounts(), today)
            self._activity.log_accounts_seeded(len(self._accounts))
            self._save()
        else:
            self._accounts = normalize_statuses(stored, today)
            self._activity.log_accounts_loaded(len(self._accounts))

        self._summary_cache.invalidate()
        return self.accounts

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def accounts(self) -> list[Account]:
        """A copy of the current collection."""
        return list(self._accounts)

    def find(self, account_id: str) -> Optional[Account]:
        return find_account(self._accounts, account_id)

    def stats(self) -> AdminStats:
        """Dashboard statistics as of today."""
        return compute_stats(
            self._accounts,
            self._today(),
            expiring_within_days=self._expiring_soon_days,
        )

    def revenue_series(self, year: Optional[int] = None) -> list[MonthlyRevenue]:
        """Twelve monthly revenue buckets (current year by default)."""
        return compute_monthly_revenue_series(
            self._accounts,
            year if year is not None else self._today().year,
        )

    def recent_activity(self, limit: int = 20) -> list[ActivityEvent]:
        return self._activity.recent_events(limit=limit)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_or_renew(
        self,
        account_id: str,
        package_amount,
        count,
        unit,
    ) -> Account:
        """
        Add a new account or renew an existing one.

        Returns:
            The account as stored after the operation

        Raises:
            InvalidInputError: If any input is invalid (nothing changes)
        """
        today = self._today()

        try:
            account_id, amount, count, unit = validate_renewal_input(
                account_id, package_amount, count, unit
            )
            previous = find_account(self._accounts, account_id)
            updated = add_or_renew_account(
                self._accounts, account_id, amount, count, unit, today
            )
        except InvalidInputError as e:
            self._activity.log_input_rejected(
                e.field,
                e.message,
                account_id if isinstance(account_id, str) else None,
            )
            raise

        self._accounts = updated
        account = find_account(self._accounts, account_id)
        entry = account.latest_entry

        if previous is None:
            self._activity.log_account_added(
                account_id=account_id,
                package=entry.package,
                added=entry.added,
                expire=account.expire.isoformat(),
            )
        else:
            self._activity.log_account_renewed(
                account_id=account_id,
                package=entry.package,
                added=entry.added,
                previous_expire=previous.expire.isoformat(),
                expire=account.expire.isoformat(),
            )

        self._summary_cache.invalidate()
        self._save()
        return account

    def remove(self, account_id: str) -> bool:
        """
        Remove an account (confirmation is the caller's job).

        Returns:
            True if the account existed
        """
        found = find_account(self._accounts, account_id) is not None
        self._activity.log_account_removed(account_id, found)
        if not found:
            return False

        self._accounts = remove_account(self._accounts, account_id)
        self._summary_cache.invalidate()
        self._save()
        return True

    def _save(self) -> None:
        """Persist the collection; failures are logged, never raised."""
        if self._storage is None:
            return
        try:
            self._storage.save(self._accounts)
            self.last_save_error = None
        except StorageError as e:
            self.last_save_error = str(e)
            self._activity.log_save_failed(str(e), len(self._accounts))

    # -------------------------------------------------------------------------
    # AI audit
    # -------------------------------------------------------------------------

    @property
    def summary_cache(self) -> AuditSummaryCache:
        return self._summary_cache

    @property
    def summary_enabled(self) -> bool:
        return self._summary_generator is not None

    async def refresh_summary(self, retry_failed: bool = False) -> Optional[AuditSummary]:
        """
        Regenerate the AI audit if the book changed since the last one.

        Skipped when no generator is configured, the book is empty,
        the summary is current, a refresh is already running, or this
        generation already failed (unless retry_failed).
        """
        cache = self._summary_cache
        if self._summary_generator is None or not self._accounts:
            return cache.summary
        if not cache.needs_refresh or cache.is_generating:
            return cache.summary
        if cache.has_failed and not retry_failed:
            return cache.summary

        generation = cache.generation
        before = cache.summary
        result = await cache.refresh(
            self._accounts,
            self._summary_generator,
            retry_failed=retry_failed,
        )

        if result is not None and result is not before and result.generation == generation:
            self._activity.log_summary_generated(generation, len(self._accounts))
        elif cache.last_error:
            self._activity.log_summary_failed(generation, cache.last_error)
        return result


class SessionFlow:
    """
    Admin login/logout over the per-session AppState.

    NOTE: the credential check is whatever CredentialVerifier is injected;
    the default one is a demo placeholder (see ea_manager.auth).
    """

    LOGIN_ERROR = "Invalid username or password"

    def __init__(
        self,
        verifier: CredentialVerifier,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._verifier = verifier
        self._activity = activity_logger or ActivityLogger()

    def login(self, state: AppState, username: str, password: str) -> bool:
        """Sign in and switch to the dashboard, or set login_error."""
        if self._verifier.verify(username, password):
            state.session = UserSession(is_admin=True, username=username)
            state.view = ViewMode.ADMIN
            state.login_error = ""
            self._activity.log_login_succeeded(username)
            return True

        state.login_error = self.LOGIN_ERROR
        self._activity.log_login_failed(username)
        return False

    @property
    def login_hint(self) -> Optional[str]:
        """Credential hint from the verifier (the demo pair, or None)."""
        return self._verifier.hint()

    def logout(self, state: AppState) -> None:
        self._activity.log_logged_out(state.session.username)
        state.session = UserSession()
        state.view = ViewMode.PUBLIC

    def show(self, state: AppState, view: ViewMode) -> None:
        """Switch views; the dashboard requires an admin session."""
        if view == ViewMode.ADMIN and not state.session.is_admin:
            state.view = ViewMode.LOGIN
        else:
            state.view = view


def _build_storage(
    use_storage: bool,
) -> tuple[AccountStorageInterface, ActivityStorageInterface, Optional[str]]:
    """
    Pick storage backends from settings, degrading to in-memory.

    The third element is the reason for a fallback, if there was one.
    """
    app_settings = get_settings().app
    namespace = app_settings.storage_namespace

    if not use_storage:
        return InMemoryAccountStorage(namespace), InMemoryActivityStorage(), None

    if app_settings.storage_backend == "google_sheets":
        try:
            client = GoogleSheetsClient()
            return (
                GoogleSheetsAccountStorage(client, namespace),
                GoogleSheetsActivityStorage(client),
                None,
            )
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("google_sheets_not_configured", error=str(e))
            return InMemoryAccountStorage(namespace), InMemoryActivityStorage(), str(e)

    return (
        LocalJsonAccountStorage(app_settings.data_path, namespace),
        InMemoryActivityStorage(),
        None,
    )


def create_app_components(
    use_storage: bool = True,
) -> tuple[AccountBookFlow, SessionFlow]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False to keep everything in memory.

    Returns:
        (account_book_flow, session_flow), with accounts already loaded
    """
    app_settings = get_settings().app

    account_storage, activity_storage, fallback_reason = _build_storage(use_storage)
    activity_logger = ActivityLogger(activity_storage)
    if fallback_reason:
        activity_logger.log_error(
            error_type="storage_unavailable",
            error_message=fallback_reason,
            details={"backend": app_settings.storage_backend},
        )

    summary_generator = None
    try:
        summary_generator = GeminiAuditAgent()
    except Exception as e:
        # No API key - the dashboard works without the AI auditor
        logger.warning("summary_generator_not_configured", error=str(e))

    account_book = AccountBookFlow(
        storage=account_storage,
        activity_logger=activity_logger,
        summary_generator=summary_generator,
        expiring_soon_days=app_settings.expiring_soon_days,
        seed_demo_data=app_settings.seed_demo_data,
    )
    account_book.load()

    session_flow = SessionFlow(
        verifier=DemoCredentialVerifier(
            username=app_settings.demo_admin_username,
            password=app_settings.demo_admin_password,
        ),
        activity_logger=activity_logger,
    )

    return account_book, session_flow
