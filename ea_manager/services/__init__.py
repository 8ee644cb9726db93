"""Services package."""

from ea_manager.services.storage import (
    AccountStorageInterface,
    ActivityStorageInterface,
    GoogleSheetsAccountStorage,
    GoogleSheetsActivityStorage,
    GoogleSheetsClient,
    InMemoryAccountStorage,
    InMemoryActivityStorage,
    LocalJsonAccountStorage,
    PersistenceUnavailableError,
    StorageError,
)

__all__ = [
    # Storage services
    "AccountStorageInterface",
    "ActivityStorageInterface",
    "GoogleSheetsAccountStorage",
    "GoogleSheetsActivityStorage",
    "GoogleSheetsClient",
    "InMemoryAccountStorage",
    "InMemoryActivityStorage",
    "LocalJsonAccountStorage",
    "PersistenceUnavailableError",
    "StorageError",
]
