"""
Credential Verification

WARNING: DemoCredentialVerifier is a placeholder, NOT a security boundary.
It compares the submitted pair against one configured username/password
in plain text. Anyone deploying this dashboard beyond a demo must plug in
a real CredentialVerifier (hashed passwords, an identity provider, ...)
instead of relying on it.

The presentation layer only depends on CredentialVerifier, so swapping
the implementation does not touch any view code.
"""

import hmac
from abc import ABC, abstractmethod
from typing import Optional


class CredentialVerifier(ABC):
    """Checks a username/password pair."""

    @abstractmethod
    def verify(self, username: str, password: str) -> bool:
        """Return True if the credentials are accepted."""
        pass

    def hint(self) -> Optional[str]:
        """Text shown under the login form, if any."""
        return None


class DemoCredentialVerifier(CredentialVerifier):
    """
    Literal-equality check against a single configured pair.
    """

    def __init__(self, username: str = "admin", password: str = "admin123"):
        self._username = username
        self._password = password

    def verify(self, username: str, password: str) -> bool:
        if username is None or password is None:
            return False
        user_ok = hmac.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        pass_ok = hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        return user_ok and pass_ok

    def hint(self) -> Optional[str]:
        return f"username: **{self._username}**, password: **{self._password}**"
