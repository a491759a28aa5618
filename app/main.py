"""
Streamlit Frontend for MoneyMigo

The sign-in page of the app.

DESIGN PRINCIPLES:
1. Clear error messages in simple language, never raw provider errors
2. The app stays usable without Firebase (demo mode)
3. Fixes that need the Firebase console link straight to the right page
4. No hidden actions

All decisions come from the session engine; this module only renders
the LoginFlow state and forwards button clicks.
"""

import asyncio
import re

import streamlit as st

from moneymigo.audit import AuthAuditLogger
from moneymigo.auth import SessionManager
from moneymigo.config import get_settings, validate_all_settings
from moneymigo.models.auth_error import AuthErrorKind, ProviderFeature, RecoveryActionType
from moneymigo.orchestrator import LoginFlow, create_app_components, create_provider


# Page configuration
st.set_page_config(
    page_title="MoneyMigo",
    page_icon="💰",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
</style>
""", unsafe_allow_html=True)


HOSTNAME_PATTERN = re.compile(r"^[A-Za-z0-9.-]+$")

KIND_LABELS = {
    AuthErrorKind.EMAIL_IN_USE: "Email Already Registered",
    AuthErrorKind.DOMAIN_UNAUTHORIZED: "Google Sign-In Blocked",
    AuthErrorKind.ANONYMOUS_DISABLED: "Guest Mode Disabled",
    AuthErrorKind.CONFIGURATION_MISSING: "Authentication Not Enabled",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components() -> tuple[LoginFlow, SessionManager, AuthAuditLogger]:
    """
    Get or create this browser session's components.

    Components live in st.session_state, not st.cache_resource: the
    SessionManager and provider adapter hold one user's identity.
    """
    if "login_flow" not in st.session_state:
        login_flow, session_manager, audit_logger = create_app_components(
            audit_logger=st.session_state.get("audit_logger"),
        )
        run_async(session_manager.initialize())
        st.session_state.login_flow = login_flow
        st.session_state.session_manager = session_manager
        st.session_state.audit_logger = audit_logger
    return (
        st.session_state.login_flow,
        st.session_state.session_manager,
        st.session_state.audit_logger,
    )


def current_domain() -> str:
    """Hostname the page was requested from."""
    fallback = get_settings().app.current_domain
    host = (st.context.headers.get("Host") or fallback).split(":")[0]
    return host if HOSTNAME_PATTERN.match(host) else fallback


def end_demo_session(login_flow: LoginFlow, session_manager: SessionManager):
    """Re-read configuration and run the startup decision again."""
    get_settings.cache_clear()
    firebase = get_settings().firebase
    if firebase == session_manager.firebase_settings:
        run_async(login_flow.sign_out())
    else:
        run_async(session_manager.reconfigure(create_provider(firebase), firebase))


def main():
    """Main application entry point."""
    login_flow, session_manager, audit_logger = get_components()

    st.sidebar.title("💰 MoneyMigo")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🔐 Account", "⚙️ Settings"],
        index=0,
    )

    render_quick_fixes(login_flow)

    if page == "🔐 Account":
        render_account_page(login_flow, session_manager)
    elif page == "⚙️ Settings":
        render_settings_page(audit_logger)


def render_prompt(login_flow: LoginFlow):
    """Render the current recovery prompt, if any."""
    prompt = login_flow.prompt
    if prompt is None:
        return

    # Rendered as markdown without HTML; descriptions can carry the Host header.
    body = f"**{prompt.title}**"
    if prompt.description:
        body += f"\n\n{prompt.description}"
    if prompt.severity == "info":
        st.info(body)
    else:
        st.error(body)

    if prompt.link:
        st.link_button(prompt.action_label or "Open Console", prompt.link)
    elif prompt.action_label == "Create Account":
        if st.button("Create Account"):
            login_flow.switch_to_sign_up()
            st.rerun()


def render_quick_fixes(login_flow: LoginFlow):
    """Sidebar summary of errors seen on this form."""
    if not login_flow.errors_seen:
        return

    st.sidebar.markdown("---")
    count = len(login_flow.errors_seen)
    st.sidebar.markdown(
        f"**{count} Authentication {'Error' if count == 1 else 'Errors'} Detected**"
    )

    for kind in login_flow.auto_handled:
        st.sidebar.success(f"{KIND_LABELS[kind]} - switched to sign-in mode")

    links = login_flow.console_links
    for kind, action in login_flow.pending_fixes:
        label = KIND_LABELS.get(kind, kind.value)
        if action.type == RecoveryActionType.SHOW_DOMAIN_FIX:
            st.sidebar.warning(f"{label}: add domain `{action.domain}`")
            st.sidebar.link_button("Fix in Firebase", links.settings)
        elif action.provider_feature == ProviderFeature.ANONYMOUS.value:
            st.sidebar.warning(f"{label}: enable Anonymous sign-in")
            st.sidebar.link_button("Enable Guest Mode", links.sign_in_providers)
        else:
            st.sidebar.warning(label)
            st.sidebar.link_button("Open Firebase Console", links.authentication)


def render_account_page(login_flow: LoginFlow, session_manager: SessionManager):
    """Render sign-in / sign-up, or the signed-in account."""
    session = login_flow.session

    if login_flow.is_demo:
        st.title("👋 Welcome to MoneyMigo Demo")
        st.info(
            "Running in demo mode - Firebase Authentication is not enabled "
            "or configured. Your data stays on this device."
        )
        render_prompt(login_flow)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Continue as Guest", type="primary"):
                run_async(login_flow.continue_as_guest())
                st.success("Welcome to MoneyMigo Demo! 👋")
        with col2:
            if st.button("End Demo Session"):
                end_demo_session(login_flow, session_manager)
                st.info("Demo session ended")
                st.rerun()
        return

    if session.is_signed_in:
        identity = session.identity
        name = identity.display_name or identity.email or "Guest"
        st.title(f"👋 Welcome, {name}")
        if session.is_anonymous:
            st.caption("You're using MoneyMigo as a guest.")
        render_prompt(login_flow)
        if st.button("Sign Out"):
            outcome = run_async(login_flow.sign_out())
            if outcome.succeeded:
                st.rerun()
        return

    st.title("💰 MoneyMigo")
    st.markdown("Create your account" if login_flow.is_sign_up else "Welcome back")

    render_prompt(login_flow)

    with st.form("login"):
        email = st.text_input("Email", placeholder="you@example.com")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button(
            "Create Account" if login_flow.is_sign_up else "Sign In",
            type="primary",
        )

    if submitted:
        with st.spinner("Signing you in..."):
            outcome = run_async(login_flow.submit(email, password))
        if outcome.succeeded or outcome.prompt is not None:
            st.rerun()

    toggle_label = (
        "Already have an account? Sign in"
        if login_flow.is_sign_up
        else "Don't have an account? Sign up"
    )
    if st.button(toggle_label):
        login_flow.toggle_mode()
        st.rerun()

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Continue with Google"):
            run_async(login_flow.continue_with_federated(current_domain()))
            st.rerun()
    with col2:
        if st.button("Continue as Guest"):
            run_async(login_flow.continue_as_guest())
            st.rerun()


def render_settings_page(audit_logger):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Firebase Authentication", "firebase"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Recent Activity")
    events = audit_logger.recent_events[-10:]
    if not events:
        st.caption("No authentication activity yet.")
    for event in reversed(events):
        st.markdown(
            f"- `{event.timestamp.strftime('%H:%M:%S')}` {event.description}"
        )

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To connect Firebase, create a `.env` file with `FIREBASE_API_KEY` "
        "and `FIREBASE_PROJECT_ID`. Without them the app runs in demo mode."
    )


if __name__ == "__main__":
    main()
