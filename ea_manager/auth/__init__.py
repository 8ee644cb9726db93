"""Authentication package (demo placeholder)."""

from ea_manager.auth.credentials import (
    CredentialVerifier,
    DemoCredentialVerifier,
)

__all__ = [
    "CredentialVerifier",
    "DemoCredentialVerifier",
]
