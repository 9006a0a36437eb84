# app/screens/credit_hours.py
from __future__ import annotations
import streamlit as st

from core.course_rules import SEMESTER_VALUES
from core.entities import CREDIT_HOURS, SESSION
from core.policy import require_page
from core.ui import lookup_rows
from screens.management import ref_selectbox, render_management

PAGE_NAME = "Credit Hours"


def _context():
    return {"sessions": lookup_rows(SESSION)}


def _filters(ctrl, rows):
    c1, c2 = st.columns([0.7, 0.3])
    with c1:
        ctrl.set_filter("q", st.text_input("🔍 Search by session", value=ctrl.filters.get("q", ""), key="ch_q"))
    with c2:
        options = [""] + SEMESTER_VALUES
        current = ctrl.filters.get("semester") or ""
        ctrl.set_filter("semester", st.selectbox("Semester", options, index=options.index(current),
                                                 format_func=lambda s: s or "All", key="ch_sem"))


def _fields(form, ctx, key):
    d = form.draft
    c1, c2 = st.columns(2)
    with c1:
        session = ref_selectbox("Session *", ctx.get("sessions", []), d.get("sessionId"),
                                key=key("sessionId"), text_field="intakeSession")
    with c2:
        sem = d.get("semester") if d.get("semester") in SEMESTER_VALUES else SEMESTER_VALUES[0]
        semester = st.selectbox("Semester *", SEMESTER_VALUES, index=SEMESTER_VALUES.index(sem), key=key("semester"))
    c1, c2 = st.columns(2)
    with c1:
        lo = st.text_input("Minimum hours *", value=str(d.get("minHours", "")), key=key("minHours"))
    with c2:
        hi = st.text_input("Maximum hours *", value=str(d.get("maxHours", "")), key=key("maxHours"))
    form.update(sessionId=session, semester=semester, minHours=lo, maxHours=hi)


@require_page(PAGE_NAME)
def render():
    render_management(CREDIT_HOURS, PAGE_NAME, _filters, _fields, context=_context)


if __name__ == "__main__":
    render()
