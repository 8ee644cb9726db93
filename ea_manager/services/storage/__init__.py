"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
A local JSON file is the default backend; Google Sheets and in-memory
backends implement the same interfaces.
"""

from ea_manager.services.storage.interface import (
    AccountStorageInterface,
    ActivityStorageInterface,
    PersistenceUnavailableError,
    StorageError,
    deserialize_accounts,
    ensure_unique_accounts,
    serialize_accounts,
)
from ea_manager.services.storage.local_json import LocalJsonAccountStorage
from ea_manager.services.storage.memory import (
    InMemoryAccountStorage,
    InMemoryActivityStorage,
)
from ea_manager.services.storage.google_sheets import (
    GoogleSheetsAccountStorage,
    GoogleSheetsActivityStorage,
    GoogleSheetsClient,
)

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    "ActivityStorageInterface",
    # Exceptions
    "PersistenceUnavailableError",
    "StorageError",
    # Serialization helpers
    "deserialize_accounts",
    "ensure_unique_accounts",
    "serialize_accounts",
    # Local / in-memory implementations
    "InMemoryAccountStorage",
    "InMemoryActivityStorage",
    "LocalJsonAccountStorage",
    # Google Sheets implementation
    "GoogleSheetsAccountStorage",
    "GoogleSheetsActivityStorage",
    "GoogleSheetsClient",
]
