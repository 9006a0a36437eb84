# app/screens/programs.py
from __future__ import annotations
import streamlit as st

from core.entities import DEPARTMENT, PROGRAM
from core.policy import require_page
from core.ui import lookup_rows
from screens.management import ref_selectbox, render_management

PAGE_NAME = "Programs"


def _context():
    return {"departments": lookup_rows(DEPARTMENT)}


def _filters(ctrl, rows):
    c1, c2 = st.columns([0.6, 0.4])
    with c1:
        ctrl.set_filter("q", st.text_input("🔍 Search programs", value=ctrl.filters.get("q", ""), key="prog_q"))
    with c2:
        depts = lookup_rows(DEPARTMENT)
        ctrl.set_filter("deptId", ref_selectbox("Department", depts, ctrl.filters.get("deptId"),
                                                key="prog_dept", text_field="deptName", blank="All departments"))


def _fields(form, ctx, key):
    d = form.draft
    c1, c2, c3 = st.columns([0.5, 0.2, 0.3])
    with c1:
        name = st.text_input("Program name *", value=d.get("programName", ""), key=key("programName"))
    with c2:
        years = st.number_input("Duration (years) *", min_value=1, max_value=10, step=1,
                                value=int(d.get("durationYears") or 3), key=key("durationYears"))
    with c3:
        dept = ref_selectbox("Department *", ctx.get("departments", []), d.get("departmentId"),
                             key=key("departmentId"), text_field="deptName")
    form.update(programName=name, durationYears=years, departmentId=dept)


@require_page(PAGE_NAME)
def render():
    render_management(PROGRAM, PAGE_NAME, _filters, _fields, context=_context)


if __name__ == "__main__":
    render()
