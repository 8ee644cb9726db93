"""
Tests for the demo credential check and the admin session flow.
"""

from ea_manager.activity import ActivityLogger
from ea_manager.auth import CredentialVerifier, DemoCredentialVerifier
from ea_manager.models.activity import ActivityEventType
from ea_manager.models.session import AppState, ViewMode
from ea_manager.orchestrator import SessionFlow
from ea_manager.services.storage import InMemoryActivityStorage


def make_flow():
    activity = ActivityLogger(InMemoryActivityStorage())
    return SessionFlow(DemoCredentialVerifier(), activity), activity


class TestDemoCredentialVerifier:
    """Tests for DemoCredentialVerifier."""

    def test_accepts_default_pair(self):
        assert DemoCredentialVerifier().verify("admin", "admin123") is True

    def test_rejects_wrong_password(self):
        assert DemoCredentialVerifier().verify("admin", "admin") is False

    def test_rejects_wrong_username(self):
        assert DemoCredentialVerifier().verify("root", "admin123") is False

    def test_rejects_missing_values(self):
        verifier = DemoCredentialVerifier()
        assert verifier.verify("", "") is False
        assert verifier.verify(None, None) is False

    def test_configured_pair(self):
        verifier = DemoCredentialVerifier(username="owner", password="s3cret")
        assert verifier.verify("owner", "s3cret") is True
        assert verifier.verify("admin", "admin123") is False

    def test_hint_shows_configured_pair(self):
        """Test that the login hint follows the configured credentials."""
        hint = DemoCredentialVerifier(username="owner", password="s3cret").hint()
        assert "owner" in hint
        assert "s3cret" in hint
        assert "admin123" not in hint


class TestSessionFlow:
    """Tests for login, logout and view switching."""

    def test_login_success_opens_dashboard(self):
        flow, activity = make_flow()
        state = AppState(view=ViewMode.LOGIN)

        assert flow.login(state, "admin", "admin123") is True
        assert state.session.is_admin is True
        assert state.session.username == "admin"
        assert state.view == ViewMode.ADMIN
        assert state.login_error == ""
        assert activity.recent_events()[0].event_type == ActivityEventType.LOGIN_SUCCEEDED

    def test_login_failure_sets_error(self):
        """Test that bad credentials leave the session signed out."""
        flow, activity = make_flow()
        state = AppState(view=ViewMode.LOGIN)

        assert flow.login(state, "admin", "wrong") is False
        assert state.session.is_admin is False
        assert state.view == ViewMode.LOGIN
        assert state.login_error == "Invalid username or password"
        assert activity.recent_events()[0].event_type == ActivityEventType.LOGIN_FAILED

    def test_successful_login_clears_previous_error(self):
        flow, _ = make_flow()
        state = AppState(view=ViewMode.LOGIN)
        flow.login(state, "admin", "wrong")
        flow.login(state, "admin", "admin123")
        assert state.login_error == ""

    def test_logout_returns_to_public(self):
        flow, activity = make_flow()
        state = AppState()
        flow.login(state, "admin", "admin123")

        flow.logout(state)

        assert state.session.is_admin is False
        assert state.session.username is None
        assert state.view == ViewMode.PUBLIC
        assert activity.recent_events()[0].event_type == ActivityEventType.LOGGED_OUT

    def test_login_hint_comes_from_verifier(self):
        flow = SessionFlow(DemoCredentialVerifier(username="owner", password="s3cret"))
        assert flow.login_hint == DemoCredentialVerifier("owner", "s3cret").hint()

    def test_no_hint_for_other_verifiers(self):
        class AllowNobody(CredentialVerifier):
            def verify(self, username, password):
                return False

        assert SessionFlow(AllowNobody()).login_hint is None

    def test_dashboard_requires_admin(self):
        """Test that asking for the dashboard while signed out shows the login form."""
        flow, _ = make_flow()
        state = AppState()

        flow.show(state, ViewMode.ADMIN)
        assert state.view == ViewMode.LOGIN

    def test_show_switches_views(self):
        flow, _ = make_flow()
        state = AppState()
        flow.login(state, "admin", "admin123")

        flow.show(state, ViewMode.PUBLIC)
        assert state.view == ViewMode.PUBLIC
        flow.show(state, ViewMode.ADMIN)
        assert state.view == ViewMode.ADMIN
