# app/screens/management.py
"""
Shared list / form / import page used by every management screen.

Each entity screen supplies three small callables:

- render_filters(ctrl, rows)        draw filter widgets, call ctrl.set_filter
- render_fields(form, ctx, key)     draw the editor widgets, call form.update
- context()                         lookups the fields and validators need
                                    (departments, sessions, numbering bands)
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Optional

import streamlit as st

from core.bulk_import import BulkImportReconciler, preview_upload
from core.entities import EntityDef
from core.errors import UploadInProgressError
from core.exports import export_rows
from core.forms import RecordFormController
from core.list_engine import ListController
from core.policy import can_edit_page
from core.ui import (
    get_form_controller,
    get_list_controller,
    get_reconciler,
    get_session_store,
    handle_error,
    notify,
    render_list_error,
    render_pagination,
    render_upload_report,
    rows_to_frame,
)

logger = logging.getLogger(__name__)

FilterFn = Callable[[ListController, list], None]
FieldsFn = Callable[[RecordFormController, Dict[str, Any], Callable[[str], str]], None]
ContextFn = Callable[[], Dict[str, Any]]


def _form_rev(entity: EntityDef) -> int:
    return st.session_state.get(f"formrev_{entity.key}", 0)

def _bump_form_rev(entity: EntityDef) -> None:
    # New widget keys so the editor picks up the fresh draft
    st.session_state[f"formrev_{entity.key}"] = _form_rev(entity) + 1

def ref_selectbox(label: str, rows: list, current: Any, key: str, text_field: str,
                  blank: str = "Select...") -> Any:
    """Selectbox over another entity's rows; returns the chosen id or ''."""
    names = {r.get("id"): str(r.get(text_field) or r.get("id")) for r in rows}
    options = [""] + list(names.keys())
    try:
        index = options.index(int(current)) if current not in (None, "") else 0
    except (TypeError, ValueError):
        index = 0
    return st.selectbox(label, options, index=index, key=key,
                        format_func=lambda rid: names.get(rid, blank) if rid != "" else blank)

def record_label(entity: EntityDef, row: Dict[str, Any]) -> str:
    parts = [str(row.get(path) or "") for path, _ in entity.columns[:3] if "." not in path]
    return " · ".join(p for p in parts if p) or f"#{row.get('id')}"


# ------------------------------------------------------------
# Editor
# ------------------------------------------------------------

def _render_editor(entity: EntityDef, form: RecordFormController, ctrl: ListController,
                   render_fields: FieldsFn, ctx: Dict[str, Any]) -> None:
    rev = _form_rev(entity)

    def key(field_name: str) -> str:
        return f"{entity.key}_{field_name}_{rev}"

    with st.container(border=True):
        st.subheader(f"Edit {entity.label}" if form.is_editing else f"Add {entity.label}")
        render_fields(form, ctx, key)

        if form.last_error:
            st.error(form.last_error)

        c1, c2, _ = st.columns([0.2, 0.2, 0.6])
        with c1:
            save = st.button("Update" if form.is_editing else "Create", type="primary",
                             key=f"save_{entity.key}_{rev}", disabled=form.submitting)
        with c2:
            cancel = st.button("Cancel", key=f"cancel_{entity.key}_{rev}")

    if cancel:
        form.close()
        st.rerun()
    if save:
        outcome = form.submit(ctrl.rows or [], **ctx)
        notify(outcome)
        if outcome.ok:
            st.rerun()
        elif outcome.is_validation_error:
            logger.info("%s validation failed: %s", entity.label, outcome.message)


# ------------------------------------------------------------
# List tab
# ------------------------------------------------------------

def _render_row_actions(entity: EntityDef, form: RecordFormController, rows: list, can_edit: bool) -> None:
    if not can_edit or not rows:
        return
    by_id = {r.get("id"): r for r in rows}
    confirm_key = f"confirm_delete_{entity.key}"
    c1, c2, c3 = st.columns([0.6, 0.2, 0.2])
    with c1:
        selected = st.selectbox(
            f"Select {entity.label.lower()}",
            options=list(by_id.keys()),
            format_func=lambda rid: record_label(entity, by_id[rid]),
            key=f"select_{entity.key}",
        )
    with c2:
        st.write("")
        if st.button("✏️ Edit", key=f"edit_{entity.key}", use_container_width=True):
            form.open_edit(by_id[selected])
            _bump_form_rev(entity)
            st.rerun()
    with c3:
        st.write("")
        if st.button("🗑️ Delete", key=f"delete_{entity.key}", use_container_width=True):
            st.session_state[confirm_key] = selected

    pending = st.session_state.get(confirm_key)
    if pending is not None and pending in by_id:
        st.warning(f"Delete {record_label(entity, by_id[pending])}? This cannot be undone.")
        y, n, _ = st.columns([0.15, 0.15, 0.7])
        if y.button("Confirm", type="primary", key=f"delete_yes_{entity.key}"):
            del st.session_state[confirm_key]
            notify(form.delete(pending))
            st.rerun()
        if n.button("Keep", key=f"delete_no_{entity.key}"):
            del st.session_state[confirm_key]
            st.rerun()


def _render_exports(entity: EntityDef, ctrl: ListController) -> None:
    rows = ctrl.filtered()
    c1, c2, _ = st.columns([0.2, 0.2, 0.6])
    for col, fmt, label in ((c1, "csv", "⬇️ CSV"), (c2, "excel", "⬇️ Excel")):
        name, data, mime = export_rows(rows, fmt, entity.export_name)
        with col:
            st.download_button(label, data=data, file_name=name, mime=mime,
                               key=f"export_{entity.key}_{fmt}", disabled=not rows,
                               use_container_width=True)


def _render_list_tab(entity: EntityDef, ctrl: ListController, form: RecordFormController,
                     render_filters: FilterFn, render_fields: FieldsFn,
                     ctx: Dict[str, Any], can_edit: bool) -> None:
    top_l, top_r = st.columns([0.8, 0.2])
    with top_l:
        if can_edit and not form.is_open and st.button(f"➕ Add {entity.label}", key=f"add_{entity.key}"):
            form.open_create()
            _bump_form_rev(entity)
            st.rerun()
    with top_r:
        if st.button("🔄 Refresh", key=f"refresh_{entity.key}", use_container_width=True):
            ctrl.refresh()
            st.rerun()

    if form.is_open and can_edit:
        _render_editor(entity, form, ctrl, render_fields, ctx)

    if ctrl.error and not ctrl.loaded:
        render_list_error(ctrl, entity.title.replace("Manage ", "").lower())
        return
    if ctrl.error:
        st.warning(f"Showing last loaded data. {ctrl.error}")

    render_filters(ctrl, ctrl.rows or [])

    pv = ctrl.view()
    if pv.total == 0:
        st.info("No records found.")
    else:
        st.dataframe(rows_to_frame(pv.rows, entity.columns), use_container_width=True, hide_index=True)
        render_pagination(ctrl, pv)

    _render_row_actions(entity, form, pv.rows, can_edit)

    st.divider()
    _render_exports(entity, ctrl)


# ------------------------------------------------------------
# Import tab
# ------------------------------------------------------------

def _render_import_tab(entity: EntityDef, rec: BulkImportReconciler) -> None:
    st.caption("Upload a CSV or Excel file. Rows are validated by the server; "
               "saved rows appear in the list and rejected rows are reported below.")

    if rec.error:
        st.error(f"Upload failed: {rec.error}")

    uploaded = st.file_uploader(
        f"{entity.label} file",
        type=["csv", "xlsx", "xls"],
        key=f"upload_{entity.key}_{rec.input_nonce}",
        disabled=rec.busy,
    )
    if uploaded is not None:
        with st.expander("Preview", expanded=True):
            try:
                total, head = preview_upload(uploaded)
                st.caption(f"{total} row(s) in file; showing the first {len(head)}.")
                st.dataframe(head, use_container_width=True, hide_index=True)
            except Exception as e:
                handle_error(e, "Could not read the file for preview")

        if st.button("📤 Upload", type="primary", key=f"do_upload_{entity.key}", disabled=rec.busy):
            try:
                with st.spinner("Uploading..."):
                    report = rec.submit(uploaded)
            except UploadInProgressError as e:
                st.warning(str(e))
            else:
                if report is not None:
                    st.toast(report.summary(), icon="📤")
                st.rerun()

    if rec.report is not None:
        render_upload_report(rec.report, on_close=rec.dismiss, key=f"report_{entity.key}")


# ------------------------------------------------------------
# Page
# ------------------------------------------------------------

def render_management(
    entity: EntityDef,
    page_name: str,
    render_filters: FilterFn,
    render_fields: FieldsFn,
    context: Optional[ContextFn] = None,
) -> None:
    st.title(entity.title)

    try:
        store = get_session_store()
        can_edit = can_edit_page(page_name, store.roles)
        ctrl = get_list_controller(entity)
        form = get_form_controller(entity)
        ctx = context() if context else {}
    except Exception as e:
        handle_error(e, f"Could not initialise {entity.title.lower()}")
        st.stop()

    tab_names = ["📋 List"] + (["📤 Bulk Import"] if entity.uploadable and can_edit else [])
    tabs = st.tabs(tab_names)

    with tabs[0]:
        try:
            _render_list_tab(entity, ctrl, form, render_filters, render_fields, ctx, can_edit)
        except Exception as e:
            handle_error(e, f"Error rendering {entity.label.lower()} list")

    if len(tabs) > 1:
        with tabs[1]:
            try:
                _render_import_tab(entity, get_reconciler(entity))
            except Exception as e:
                handle_error(e, "Error rendering bulk import")
