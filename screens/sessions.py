# app/screens/sessions.py
from __future__ import annotations
import datetime
import streamlit as st

from core.entities import SESSION
from core.policy import require_page
from screens.management import render_management

PAGE_NAME = "Academic Sessions"


def _filters(ctrl, rows):
    c1, c2 = st.columns([0.7, 0.3])
    with c1:
        ctrl.set_filter("q", st.text_input("🔍 Search sessions", value=ctrl.filters.get("q", ""), key="ses_q"))
    with c2:
        st.write("")
        ctrl.set_filter("current_only", st.checkbox("Current only", value=bool(ctrl.filters.get("current_only")),
                                                    key="ses_current"))


def _fields(form, ctx, key):
    d = form.draft
    c1, c2, c3 = st.columns([0.4, 0.3, 0.3])
    with c1:
        label = st.text_input("Intake session *", value=d.get("intakeSession", ""), key=key("intakeSession"),
                              placeholder="2025/2026")
    with c2:
        year = st.number_input("Intake year *", min_value=1900, max_value=2200, step=1,
                               value=int(d.get("intakeYear") or datetime.date.today().year), key=key("intakeYear"))
    with c3:
        st.write("")
        current = st.checkbox("Current session", value=bool(d.get("isCurrent")), key=key("isCurrent"))
    form.update(intakeSession=label, intakeYear=year, isCurrent=current)


@require_page(PAGE_NAME)
def render():
    render_management(SESSION, PAGE_NAME, _filters, _fields)


if __name__ == "__main__":
    render()
