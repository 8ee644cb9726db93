"""
Local JSON Storage

The default backend: one JSON file per namespace key inside the data
directory. This is the server-side stand-in for a per-browser
key-value slot.

Writes go to a temporary file first and are then moved into place,
so a crash mid-write leaves the previous collection intact.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence, Union

import structlog

from ea_manager.models.account import Account
from ea_manager.services.storage.interface import (
    AccountStorageInterface,
    PersistenceUnavailableError,
    deserialize_accounts,
    serialize_accounts,
)


logger = structlog.get_logger(__name__)


class LocalJsonAccountStorage(AccountStorageInterface):
    """
    Stores the account collection in `<data_dir>/<namespace>.json`.
    """

    def __init__(self, data_dir: Union[str, Path], namespace: str = "ea_accounts"):
        self._data_dir = Path(data_dir)
        self._namespace = namespace

    @property
    def path(self) -> Path:
        return self._data_dir / f"{self._namespace}.json"

    def load(self) -> Optional[list[Account]]:
        """Load accounts, or None if the file doesn't exist yet."""
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PersistenceUnavailableError(
                f"Stored accounts at {self.path} are not valid JSON: {e}"
            )
        except OSError as e:
            raise PersistenceUnavailableError(f"Failed to read {self.path}: {e}")

        accounts = deserialize_accounts(data)
        logger.debug("accounts_read", path=str(self.path), count=len(accounts))
        return accounts

    def save(self, accounts: Sequence[Account]) -> None:
        """Atomically replace the stored collection."""
        payload = serialize_accounts(accounts)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{self._namespace}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceUnavailableError(f"Failed to write {self.path}: {e}")

        logger.debug("accounts_written", path=str(self.path), count=len(payload))
