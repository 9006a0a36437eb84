# app/core/ui.py
from __future__ import annotations
import logging
from typing import Any, Callable, Optional

import pandas as pd
import streamlit as st

from core.api import ApiClient
from core.bulk_import import BulkImportReconciler, UploadReport
from core.client_storage import ClientStorage
from core.db import get_engine
from core.entities import EntityDef
from core.errors import GatewayError
from core.forms import RecordFormController, SubmitOutcome
from core.list_engine import ListController, PageView, get_field, page_window
from core.session_store import SessionStore
from core.settings import get_settings

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Session-scoped singletons
# ------------------------------------------------------------

def _go_to_login() -> None:
    st.session_state["show_login"] = True
    for key in [k for k in st.session_state.keys() if str(k).startswith(("list:", "form:", "upload:"))]:
        del st.session_state[key]
    st.rerun()

def get_session_store() -> SessionStore:
    """The one SessionStore for this browser session, restored on first use."""
    if "session_store" not in st.session_state:
        settings = get_settings()
        engine = get_engine(settings.storage.url)
        store = SessionStore(ClientStorage(engine, settings.storage.profile), navigate=_go_to_login)
        store.restore_from_storage()
        st.session_state["session_store"] = store
    return st.session_state["session_store"]

def get_api_client() -> ApiClient:
    if "api_client" not in st.session_state:
        settings = get_settings()
        store = get_session_store()
        st.session_state["api_client"] = ApiClient(
            settings.api.base_url,
            token_provider=lambda: store.token,
            timeout=settings.api.timeout_seconds,
        )
    return st.session_state["api_client"]

def get_list_controller(entity: EntityDef) -> ListController:
    key = f"list:{entity.key}"
    if key not in st.session_state:
        gateway = get_api_client().resource(entity.key)
        ctrl = ListController(
            name=entity.key,
            fetch=gateway.list,
            predicates=entity.predicates,
            page_size=get_settings().ui.default_page_size,
        )
        ctrl.refresh()
        st.session_state[key] = ctrl
    return st.session_state[key]

def get_form_controller(entity: EntityDef) -> RecordFormController:
    key = f"form:{entity.key}"
    if key not in st.session_state:
        gateway = get_api_client().resource(entity.key)
        lists = get_list_controller(entity)
        st.session_state[key] = RecordFormController(entity.form, gateway, on_saved=lists.refresh)
    return st.session_state[key]

def get_reconciler(entity: EntityDef) -> BulkImportReconciler:
    key = f"upload:{entity.key}"
    if key not in st.session_state:
        gateway = get_api_client().resource(entity.key)
        lists = get_list_controller(entity)
        st.session_state[key] = BulkImportReconciler(gateway.upload, on_saved=lists.refresh)
    return st.session_state[key]

# ------------------------------------------------------------
# Messages
# ------------------------------------------------------------

def handle_error(e: Exception, user_message: str = "An error occurred.") -> None:
    """Log the full exception; show details only in debug mode."""
    logger.error("%s: %s", user_message, e, exc_info=True)
    if get_settings().app.debug:
        st.error(f"{user_message}\n\n**Debug Info:**\n```\n{e}\n```")
    elif isinstance(e, GatewayError):
        st.error(f"{user_message}: {e.message}")
    else:
        st.error(user_message)

def notify(outcome: SubmitOutcome) -> None:
    if outcome.ok:
        st.toast(outcome.message, icon="✅")
    else:
        st.toast(outcome.message, icon="❌")

# ------------------------------------------------------------
# Table, pagination, upload report
# ------------------------------------------------------------

def rows_to_frame(rows, columns) -> pd.DataFrame:
    data = [{header: get_field(r, path) for path, header in columns} for r in rows]
    return pd.DataFrame(data, columns=[header for _, header in columns])

def render_list_error(ctrl: ListController, label: str) -> None:
    st.error(f"Error loading {label}. {ctrl.error or ''}".strip())
    if st.button("🔄 Retry", key=f"retry_{ctrl.name}"):
        ctrl.refresh()
        st.rerun()

def render_pagination(ctrl: ListController, pv: PageView) -> None:
    sizes = get_settings().ui.page_sizes
    c1, c2, c3 = st.columns([0.55, 0.25, 0.2])
    with c1:
        window = page_window(pv.page, pv.total_pages)
        cols = st.columns(len(window) + 4)
        nav = [("⏮", 1, pv.page == 1), ("◀", max(1, pv.page - 1), pv.page == 1)]
        nav += [(str(p), p, p == pv.page) for p in window]
        nav += [("▶", min(pv.total_pages, pv.page + 1), pv.page == pv.total_pages),
                ("⏭", pv.total_pages, pv.page == pv.total_pages)]
        for i, (label, target, disabled) in enumerate(nav):
            with cols[i]:
                if st.button(label, key=f"pg_{ctrl.name}_{i}", disabled=disabled):
                    ctrl.go_to(target)
                    st.rerun()
    with c2:
        st.caption(f"Page {pv.page} of {pv.total_pages} · {pv.total} items")
    with c3:
        size = st.selectbox(
            "Rows per page",
            options=sizes,
            index=sizes.index(ctrl.page_size) if ctrl.page_size in sizes else 0,
            format_func=lambda s: f"{s}/page",
            key=f"pgsize_{ctrl.name}",
            label_visibility="collapsed",
        )
        if size != ctrl.page_size:
            ctrl.set_page_size(size)
            st.rerun()

def render_upload_report(report: UploadReport, on_close: Optional[Callable[[], Any]] = None, key: str = "upload_report") -> None:
    with st.container(border=True):
        st.markdown("#### Upload Summary")
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Processed", report.processed)
        c2.metric("Saved", report.saved)
        c3.metric("Skipped", report.skipped)
        c4.metric("Failed", report.failed)

        st.markdown("**Row Issues**")
        if not report.errors:
            st.caption("No errors or duplicates.")
        else:
            issues = report.issues_frame()
            st.dataframe(issues, use_container_width=True, hide_index=True, height=min(240, 38 + 35 * len(issues)))

        if st.button("Close", key=f"{key}_close") and on_close is not None:
            on_close()
            st.rerun()

def lookup_rows(entity: EntityDef) -> list:
    """Rows of another entity for dropdowns; empty while that list cannot load."""
    return list(get_list_controller(entity).rows or [])
