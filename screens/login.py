# app/screens/login.py
from __future__ import annotations
import logging
import streamlit as st

from core.errors import AuthenticationError, GatewayError
from core.policy import LOGIN_ROLES
from core.ui import get_api_client, get_session_store, handle_error

logger = logging.getLogger(__name__)


def _hide_sidebar():
    st.markdown(
        """
        <style>
            section[data-testid="stSidebar"] { display: none; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def _sign_in_tab(store, client):
    with st.form("login_form"):
        who = st.text_input("Username or email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login", type="primary", use_container_width=True)

    if not submitted:
        return
    if not who.strip() or not password:
        st.error("Username/email and password are required")
        return
    try:
        user = store.authenticate(client, who.strip(), password, required_roles=LOGIN_ROLES)
    except AuthenticationError as e:
        st.error(str(e))
        return
    except GatewayError as e:
        logger.warning("Login failed for %s: %s", who, e.message)
        st.error(e.message or "Login failed")
        return
    st.session_state.pop("show_login", None)
    st.success(f"Logged in as {user.get('username') or who}! Redirecting...")
    st.rerun()


def _sign_up_tab(store, client):
    with st.form("signup_form"):
        username = st.text_input("Username")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Create account", use_container_width=True)

    if not submitted:
        return
    missing = [label for label, v in (("Username", username), ("Email", email), ("Password", password)) if not v.strip()]
    if missing:
        st.error(", ".join(missing) + (" is" if len(missing) == 1 else " are") + " required")
        return
    if password != confirm:
        st.error("Passwords do not match")
        return
    try:
        store.register(client, {"username": username.strip(), "email": email.strip(), "password": password})
    except GatewayError as e:
        st.error(e.message or "Sign-up failed")
        return
    if store.is_authenticated() and not store.has_any_role(LOGIN_ROLES):
        # Accounts without an admin role cannot use the console
        st.session_state["login_flash"] = "Account created. An administrator must grant access before you can log in."
        store.logout()
    else:
        st.session_state["login_flash"] = "Account created."
    st.rerun()


def render():
    _hide_sidebar()
    st.title("🔐 Admin Login")
    try:
        store = get_session_store()
        client = get_api_client()
    except Exception as e:
        handle_error(e, "Could not start the login screen")
        st.stop()

    flash = st.session_state.pop("login_flash", None)
    if flash:
        st.success(flash)

    sign_in, sign_up = st.tabs(["Sign in", "Create account"])
    with sign_in:
        _sign_in_tab(store, client)
    with sign_up:
        _sign_up_tab(store, client)


if __name__ == "__main__":
    render()
