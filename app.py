# app.py
from __future__ import annotations
import logging

import streamlit as st

from core.nav_registry import ACCOUNT_SECTION, DEFAULT_ROUTE_KEY, visible_sections
from core.policy import LOGIN_ROLES
from core.settings import get_settings
from core.ui import get_session_store

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_pages(roles):
    pages = {}
    for section in visible_sections(roles):
        pages[section.title] = [
            st.Page(r.render, title=r.label, icon=r.icon, url_path=r.key, default=(r.key == DEFAULT_ROUTE_KEY))
            for r in section.routes
        ]
    pages[ACCOUNT_SECTION.title] = [
        st.Page(r.render, title=r.label, icon=r.icon, url_path=r.key) for r in ACCOUNT_SECTION.routes
    ]
    return pages


def main():
    settings = get_settings()
    _configure_logging(settings.app.log_level)
    st.set_page_config(page_title=settings.app.name, layout="wide", initial_sidebar_state="auto", page_icon="🎓")

    # 1. Restore any persisted session before a protected screen can render.
    try:
        store = get_session_store()
    except Exception as e:
        logger.error("Session restore failed", exc_info=True)
        st.error("Could not open local session storage. See details below.")
        with st.expander("Diagnostics"):
            st.exception(e)
        st.stop()

    # 2. Login gate. A stored session whose roles no longer qualify is dropped.
    if store.is_authenticated() and not store.has_any_role(LOGIN_ROLES):
        logger.warning("Stored session for %s lacks an admin role; clearing", (store.user or {}).get("username"))
        store.logout()

    if st.session_state.get("show_login") or not store.is_authenticated():
        from screens.login import render as login_render
        login_render()
        return

    # --- AUTHENTICATED APP FLOW ---
    user = store.user or {}
    display_name = (user.get("username") or "").strip() or "User"
    roles_str = ", ".join(sorted(store.roles))

    left, right = st.columns([0.8, 0.2])
    with left:
        st.caption(f"Signed in as **{display_name}** · _{roles_str}_")
    with right:
        if st.button("Logout", key="logout_top"):
            store.logout()

    pages = _build_pages(store.roles)
    if not any(k != ACCOUNT_SECTION.title for k in pages):
        st.error("No pages available for your current roles.")
        return
    nav = st.navigation(pages, position="sidebar")
    nav.run()


if __name__ == "__main__":
    main()
