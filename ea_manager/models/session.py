"""
UI session state.

The presentation layer keeps one AppState per browser session and
passes it to the flows that need it. The lifecycle and reporting
modules never see it.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ViewMode(str, Enum):
    """Which screen is shown."""
    PUBLIC = "PUBLIC"
    LOGIN = "LOGIN"
    ADMIN = "ADMIN"


class UserSession(BaseModel):
    """Who is signed in."""

    is_admin: bool = False
    username: Optional[str] = None


class AppState(BaseModel):
    """Mutable per-session UI state."""

    view: ViewMode = Field(default=ViewMode.PUBLIC)
    session: UserSession = Field(default_factory=UserSession)
    login_error: str = ""
