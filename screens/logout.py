# app/screens/logout.py
from __future__ import annotations
import streamlit as st

from core.ui import get_session_store


def render():
    st.title("🚪 Logout")
    store = get_session_store()

    if not store.is_authenticated():
        st.info("You are already logged out")
        if st.button("Go to Login Page", type="primary"):
            st.session_state["show_login"] = True
            st.rerun()
        return

    user = store.user or {}
    st.write(f"Signed in as **{user.get('username') or 'user'}**.")
    if st.button("Log out now", type="primary"):
        st.session_state["login_flash"] = f"Successfully logged out {user.get('username') or ''}".strip()
        # Clears storage and memory, then returns to the login screen
        store.logout()


if __name__ == "__main__":
    render()
