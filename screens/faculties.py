# app/screens/faculties.py
from __future__ import annotations
import streamlit as st

from core.entities import FACULTY
from core.list_engine import distinct_values
from core.policy import require_page
from screens.management import render_management

PAGE_NAME = "Faculties"


def _filters(ctrl, rows):
    c1, c2 = st.columns([0.7, 0.3])
    with c1:
        ctrl.set_filter("q", st.text_input("🔍 Search name, code or institution",
                                           value=ctrl.filters.get("q", ""), key="fac_q"))
    with c2:
        codes = [""] + distinct_values(rows, "facultyCode")
        current = ctrl.filters.get("code") or ""
        ctrl.set_filter("code", st.selectbox("Code", codes, index=codes.index(current) if current in codes else 0,
                                             format_func=lambda c: c or "All", key="fac_code"))


def _fields(form, ctx, key):
    d = form.draft
    c1, c2 = st.columns(2)
    with c1:
        name = st.text_input("Faculty name *", value=d.get("facultyName", ""), key=key("facultyName"))
        code = st.text_input("Faculty code *", value=d.get("facultyCode", ""), key=key("facultyCode"),
                             help="Stored in upper case")
    with c2:
        institution = st.text_input("Institution *", value=d.get("institution", ""), key=key("institution"))
    form.update(facultyName=name, facultyCode=code, institution=institution)


@require_page(PAGE_NAME)
def render():
    render_management(FACULTY, PAGE_NAME, _filters, _fields)


if __name__ == "__main__":
    render()
