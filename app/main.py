"""
Streamlit Frontend for EA Subscription Manager

Three views:
1. Public Status - read-only account table for customers
2. Admin Access  - demo login form
3. Dashboard     - stats, revenue chart, subscriber management, AI auditor

DESIGN PRINCIPLES:
1. All state changes go through the orchestrator flows
2. Destructive actions need an explicit second click
3. Errors are shown in plain language, never as tracebacks
4. The AI auditor is optional - the dashboard works without it

Run: streamlit run app/main.py
"""

import asyncio

import pandas as pd
import streamlit as st

from ea_manager.config import get_settings, validate_all_settings
from ea_manager.lifecycle import InvalidInputError
from ea_manager.lifecycle.accounts import MAX_RENEWAL_COUNT
from ea_manager.models.account import AccountStatus, DurationUnit
from ea_manager.models.session import AppState, ViewMode
from ea_manager.orchestrator import AccountBookFlow, SessionFlow, create_app_components


# Page configuration
st.set_page_config(
    page_title="EA Pro Manager",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .audit-box {
        padding: 16px;
        background-color: #f3f0ff;
        border-radius: 10px;
        border-left: 5px solid #7c3aed;
        font-style: italic;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize storage: {e}")
        return create_app_components(use_storage=False)


def get_app_state() -> AppState:
    if "app_state" not in st.session_state:
        st.session_state.app_state = AppState()
    return st.session_state.app_state


def accounts_frame(account_book: AccountBookFlow) -> pd.DataFrame:
    """Account table for display."""
    rows = [
        {
            "Account": a.account,
            "Expires": a.expire.isoformat(),
            "Status": "🟢 Active" if a.status == AccountStatus.ACTIVE else "🔴 Expired",
            "Package": a.package,
            "Purchases": a.renewal_count,
        }
        for a in account_book.accounts
    ]
    return pd.DataFrame(rows, columns=["Account", "Expires", "Status", "Package", "Purchases"])


def main():
    """Main application entry point."""
    account_book, session_flow = get_components()
    state = get_app_state()

    render_sidebar(session_flow, state)

    if state.view == ViewMode.PUBLIC:
        render_public_page(account_book)
    elif state.view == ViewMode.LOGIN:
        render_login_page(session_flow, state)
    elif state.view == ViewMode.ADMIN:
        if state.session.is_admin:
            render_admin_page(account_book)
        else:
            session_flow.show(state, ViewMode.ADMIN)
            st.rerun()


def render_sidebar(session_flow: SessionFlow, state: AppState):
    """Navigation."""
    st.sidebar.title("📈 EA Pro Manager")
    st.sidebar.caption("SUBSCRIPTION SUITE")
    st.sidebar.markdown("---")

    if st.sidebar.button("Public Status"):
        session_flow.show(state, ViewMode.PUBLIC)
        st.rerun()

    if not state.session.is_admin:
        if st.sidebar.button("Admin Access"):
            session_flow.show(state, ViewMode.LOGIN)
            st.rerun()
    else:
        if st.sidebar.button("Dashboard"):
            session_flow.show(state, ViewMode.ADMIN)
            st.rerun()
        if st.sidebar.button("🚪 Logout"):
            session_flow.logout(state)
            st.rerun()
        st.sidebar.caption(f"Signed in as **{state.session.username}**")


def render_public_page(account_book: AccountBookFlow):
    """Render the public account status table."""
    st.title("Account Status")
    st.markdown("Live monitoring of active EA subscription slots.")

    df = accounts_frame(account_book)
    if df.empty:
        st.info("No accounts yet.")
        return
    st.dataframe(
        df[["Account", "Expires", "Status", "Package"]],
        use_container_width=True,
        hide_index=True,
    )


def render_login_page(session_flow: SessionFlow, state: AppState):
    """Render the admin login form."""
    st.title("🔐 System Login")
    st.markdown("Authorized personnel only.")

    col1, col2 = st.columns([1, 1])
    with col1:
        with st.form("login"):
            username = st.text_input("Username", placeholder="Enter username")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In", type="primary")

        if submitted:
            if session_flow.login(state, username, password):
                st.rerun()

        if state.login_error:
            st.error(state.login_error)

    with col2:
        hint = session_flow.login_hint
        if hint:
            st.info(
                f"Demo credentials: {hint}\n\n"
                "Set DEMO_ADMIN_USERNAME / DEMO_ADMIN_PASSWORD in `.env` to change them. "
                "This is a demo check only, not real authentication."
            )


def render_admin_page(account_book: AccountBookFlow):
    """Render the admin dashboard."""
    st.title("📊 Dashboard")

    if account_book.last_save_error:
        st.warning(
            "Changes could not be saved and only live in this session: "
            f"{account_book.last_save_error}"
        )

    stats = account_book.stats()
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Revenue", f"${stats.total_revenue:,.2f}")
    c2.metric("Active Accounts", stats.active_accounts)
    c3.metric("Expiring Soon", stats.expiring_soon)
    c4.metric("This Month", f"${stats.this_month_revenue:,.2f}")

    main_col, side_col = st.columns([2, 1])

    with main_col:
        render_revenue_chart(account_book)
        render_subscriber_table(account_book)

    with side_col:
        render_add_form(account_book)
        render_auditor(account_book)

    with st.expander("🕒 Recent activity"):
        events = account_book.recent_activity(limit=20)
        if not events:
            st.caption("No activity recorded yet.")
        for event in events:
            st.markdown(
                f"`{event.timestamp:%Y-%m-%d %H:%M}` {event.description}"
            )

    with st.expander("⚙️ Connection status"):
        render_connection_status()


def render_connection_status():
    """Which optional services are configured."""
    status = validate_all_settings()
    backend = get_settings().app.storage_backend
    st.caption(f"Storage backend: **{backend}**")

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Gemini (AI Auditor)", "gemini"),
        ("App settings", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


def render_revenue_chart(account_book: AccountBookFlow):
    st.subheader("Revenue Performance")
    series = account_book.revenue_series()
    # Numbered labels keep the bars in calendar order
    df = pd.DataFrame(
        {
            "Month": [f"{i:02d} {m.month}" for i, m in enumerate(series, start=1)],
            "Revenue": [float(m.revenue) for m in series],
        }
    )
    st.bar_chart(df, x="Month", y="Revenue")


def render_subscriber_table(account_book: AccountBookFlow):
    st.subheader("Subscriber Management")

    accounts = account_book.accounts
    if not accounts:
        st.info("No accounts yet. Add one with the form on the right.")
        return

    if "pending_delete" not in st.session_state:
        st.session_state.pending_delete = None

    header = st.columns([3, 2, 2, 2, 1])
    for col, label in zip(header, ["Account", "Expires", "Status", "Package", ""]):
        col.markdown(f"**{label}**")

    for account in accounts:
        cols = st.columns([3, 2, 2, 2, 1])
        cols[0].write(account.account)
        cols[1].write(account.expire.isoformat())
        cols[2].write("🟢 Active" if account.status == AccountStatus.ACTIVE else "🔴 Expired")
        cols[3].write(account.package)
        if cols[4].button("🗑️", key=f"delete_{account.account}", help="Delete"):
            st.session_state.pending_delete = account.account
            st.rerun()

    pending = st.session_state.pending_delete
    if pending:
        st.warning(f"Delete {pending}? This cannot be undone.")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("✅ Confirm delete", type="primary"):
                account_book.remove(pending)
                st.session_state.pending_delete = None
                st.rerun()
        with col2:
            if st.button("Cancel"):
                st.session_state.pending_delete = None
                st.rerun()


def render_add_form(account_book: AccountBookFlow):
    st.subheader("New Subscription")

    units = list(DurationUnit)
    with st.form("add_account", clear_on_submit=False):
        account_id = st.text_input("Account ID", placeholder="EA-XXXX")
        package = st.text_input("Package ($)", value="22")
        col1, col2 = st.columns(2)
        with col1:
            count = st.number_input(
                "Count", min_value=1, max_value=MAX_RENEWAL_COUNT, value=1, step=1
            )
        with col2:
            unit = st.selectbox(
                "Unit",
                options=units,
                index=units.index(DurationUnit.MONTH),
                format_func=lambda u: f"{u.value.title()}(s)",
            )
        submitted = st.form_submit_button("➕ Add/Renew Account", type="primary")

    if submitted:
        try:
            account = account_book.add_or_renew(account_id, package, int(count), unit)
        except InvalidInputError as e:
            st.error(e.message)
        else:
            st.success(f"{account.account} active until {account.expire.isoformat()}")


def render_auditor(account_book: AccountBookFlow):
    st.markdown("---")
    st.subheader("⚡ AI Auditor")

    if not account_book.summary_enabled:
        st.info("AI auditor is not configured. Set GEMINI_API_KEY to enable it.")
        return
    if not account_book.accounts:
        st.caption("Nothing to audit yet.")
        return

    cache = account_book.summary_cache
    if cache.needs_refresh and not cache.has_failed:
        with st.spinner("Generating audit..."):
            run_async(account_book.refresh_summary())

    if cache.text:
        st.markdown(f'<div class="audit-box">"{cache.text}"</div>', unsafe_allow_html=True)
        if cache.is_stale:
            st.caption("Describes an earlier state of the account book.")

    if cache.has_failed:
        st.warning(f"Audit could not be generated: {cache.last_error}")
        if st.button("🔁 Retry audit"):
            with st.spinner("Generating audit..."):
                run_async(account_book.refresh_summary(retry_failed=True))
            st.rerun()


if __name__ == "__main__":
    main()
