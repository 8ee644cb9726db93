"""
In-memory storage backends.

Used when nothing else is configured, and in tests.
Contents live for the lifetime of the process only.
"""

from collections import deque
from typing import Optional, Sequence

from ea_manager.models.account import Account
from ea_manager.models.activity import ActivityEvent
from ea_manager.services.storage.interface import (
    AccountStorageInterface,
    ActivityStorageInterface,
    deserialize_accounts,
    serialize_accounts,
)


class InMemoryAccountStorage(AccountStorageInterface):
    """
    Keeps serialized collections in a dict keyed by namespace.

    Collections are stored serialized, exactly like the file backend,
    so a load never hands back the caller's own objects.
    """

    def __init__(self, namespace: str = "ea_accounts"):
        self._namespace = namespace
        self._slots: dict[str, list[dict]] = {}

    def load(self) -> Optional[list[Account]]:
        data = self._slots.get(self._namespace)
        if data is None:
            return None
        return deserialize_accounts(data)

    def save(self, accounts: Sequence[Account]) -> None:
        self._slots[self._namespace] = serialize_accounts(accounts)


class InMemoryActivityStorage(ActivityStorageInterface):
    """Bounded ring buffer of recent activity events."""

    def __init__(self, max_events: int = 500):
        self._events: deque[ActivityEvent] = deque(maxlen=max_events)

    def append_event(self, event: ActivityEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 50) -> list[ActivityEvent]:
        return list(reversed(self._events))[:limit]
