# app/screens/departments.py
from __future__ import annotations
import streamlit as st

from core.entities import DEPARTMENT
from core.policy import require_page
from screens.management import render_management

PAGE_NAME = "Departments"


def _filters(ctrl, rows):
    ctrl.set_filter("q", st.text_input("🔍 Search departments", value=ctrl.filters.get("q", ""), key="dept_q"))


def _fields(form, ctx, key):
    d = form.draft
    c1, c2 = st.columns([0.7, 0.3])
    name = c1.text_input("Department name *", value=d.get("deptName", ""), key=key("deptName"))
    code = c2.text_input("Department code *", value=d.get("deptCode", ""), key=key("deptCode"))
    form.update(deptName=name, deptCode=code)


@require_page(PAGE_NAME)
def render():
    render_management(DEPARTMENT, PAGE_NAME, _filters, _fields)


if __name__ == "__main__":
    render()
