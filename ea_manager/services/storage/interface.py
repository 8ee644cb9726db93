"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the account book in a local JSON file by default
2. Swap in Google Sheets (or a real database) later
3. Use in-memory storage for testing
4. Keep business logic decoupled from storage implementation

The account collection is small, so the interface is whole-collection:
load everything, save everything. No partial updates.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ea_manager.models.account import Account
from ea_manager.models.activity import ActivityEvent


class AccountStorageInterface(ABC):
    """
    Abstract interface for the account collection.

    Implementations store one collection per namespace key.
    """

    @abstractmethod
    def load(self) -> Optional[list[Account]]:
        """
        Load the stored account collection.

        Returns:
            The accounts in stored order, or None if nothing has been
            stored under this namespace yet

        Raises:
            PersistenceUnavailableError: If the backend can't be read
        """
        pass

    @abstractmethod
    def save(self, accounts: Sequence[Account]) -> None:
        """
        Replace the stored collection with `accounts`.

        Raises:
            PersistenceUnavailableError: If the write fails
        """
        pass


class ActivityStorageInterface(ABC):
    """
    Abstract interface for activity trail storage.

    Activity events are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: ActivityEvent) -> bool:
        """
        Append an activity event.

        Returns:
            True if stored successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 50,
    ) -> list[ActivityEvent]:
        """
        Get the most recent events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceUnavailableError(StorageError):
    """Storage backend could not be reached, read or written."""
    pass


def serialize_accounts(accounts: Sequence[Account]) -> list[dict]:
    """Convert accounts to JSON-compatible dicts (ISO dates)."""
    return [account.model_dump(mode="json") for account in accounts]


def deserialize_accounts(data) -> list[Account]:
    """
    Rebuild accounts from stored dicts.

    Raises:
        PersistenceUnavailableError: If the stored blob is not a list of accounts
            or repeats an account id
    """
    if not isinstance(data, list):
        raise PersistenceUnavailableError(
            f"Stored accounts must be a list, got {type(data).__name__}"
        )
    try:
        accounts = [Account.model_validate(item) for item in data]
    except ValueError as e:
        raise PersistenceUnavailableError(f"Stored accounts are malformed: {e}")
    return ensure_unique_accounts(accounts)


def ensure_unique_accounts(accounts: list[Account]) -> list[Account]:
    """
    Check that every account id appears once.

    Raises:
        PersistenceUnavailableError: On the first repeated id
    """
    seen = set()
    for account in accounts:
        if account.account in seen:
            raise PersistenceUnavailableError(
                f"Stored accounts contain a duplicate id: {account.account!r}"
            )
        seen.add(account.account)
    return accounts
