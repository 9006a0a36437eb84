# app/screens/courses.py
"""
Courses: the only screen with cross-field rules.

- Course code must match "ABC 111" and, for a known (level, semester),
  fall inside that level's numbering band.
- Category follows the selected department.
- Prerequisites are picked from the same department.
"""
from __future__ import annotations
import streamlit as st

from core.course_rules import (
    SEMESTER_VALUES,
    STATUS_VALUES,
    category_for_department,
    numbering_bands,
    prerequisite_candidates,
)
from core.entities import COURSE, DEPARTMENT
from core.list_engine import distinct_values
from core.policy import require_page
from core.settings import get_settings
from core.ui import get_list_controller, lookup_rows
from screens.management import ref_selectbox, render_management

PAGE_NAME = "Courses"


def _context():
    return {
        "departments": lookup_rows(DEPARTMENT),
        "numbering_bands": numbering_bands(get_settings().courses.numbering_bands),
    }


def _level_options(rows, bands):
    known = list(bands.keys())
    return known + [lvl for lvl in distinct_values(rows, "level") if lvl not in bands]


def _select(label, options, current, key, all_label=None):
    opts = ([""] if all_label else []) + list(options)
    index = opts.index(current) if current in opts else 0
    return st.selectbox(label, opts, index=index, key=key,
                        format_func=(lambda v: v or all_label) if all_label else str)


def _filters(ctrl, rows):
    bands = numbering_bands(get_settings().courses.numbering_bands)
    c1, c2, c3, c4 = st.columns([0.35, 0.25, 0.2, 0.2])
    with c1:
        ctrl.set_filter("q", st.text_input("🔍 Search title or code", value=ctrl.filters.get("q", ""), key="crs_q"))
    with c2:
        ctrl.set_filter("deptId", ref_selectbox("Department", lookup_rows(DEPARTMENT), ctrl.filters.get("deptId"),
                                                key="crs_dept", text_field="deptName", blank="All departments"))
    with c3:
        ctrl.set_filter("courseCode", _select("Course code", distinct_values(rows, "courseCode"),
                                              ctrl.filters.get("courseCode"), "crs_code", all_label="All codes"))
    with c4:
        ctrl.set_filter("level", _select("Level", distinct_values(rows, "level", preferred=list(bands)),
                                         ctrl.filters.get("level"), "crs_level", all_label="All levels"))


def _code_hint(level, semester, bands):
    base = (bands.get(level) or {}).get(semester)
    if base:
        return f"{level} {semester.title()} semester: {base + 1}–{base + 9}"
    return "Format: ABC 111"


def _fields(form, ctx, key):
    d = form.draft
    bands = ctx.get("numbering_bands") or {}
    courses = get_list_controller(COURSE).rows or []
    departments = ctx.get("departments", [])

    c1, c2, c3 = st.columns(3)
    with c1:
        level = _select("Level", _level_options(courses, bands), d.get("level"), key("level"))
    with c2:
        semester = _select("Semester", SEMESTER_VALUES, d.get("semester"), key("semester"))
    with c3:
        status = _select("Status", STATUS_VALUES, d.get("status"), key("status"))

    c1, c2, c3 = st.columns([0.3, 0.5, 0.2])
    with c1:
        code = st.text_input("Course code *", value=d.get("courseCode", ""), key=key("courseCode"),
                             help=_code_hint(level, semester, bands))
    with c2:
        title = st.text_input("Title *", value=d.get("courseTitle", ""), key=key("courseTitle"))
    with c3:
        units = st.text_input("Credit unit", value=str(d.get("creditUnit") or ""), key=key("creditUnit"))

    c1, c2 = st.columns(2)
    with c1:
        dept = ref_selectbox("Department *", departments, d.get("departmentId"),
                             key=key("departmentId"), text_field="deptName")
    with c2:
        # Follows the department until the user types a category of their own
        same_dept = str(dept) == str(d.get("departmentId"))
        default = d.get("courseCategory") if same_dept and d.get("courseCategory") else \
            category_for_department(departments, dept)
        category = st.text_input("Category", value=default, key=f"{key('courseCategory')}_{dept}")

    st.markdown("**Prerequisites**")
    search = st.text_input("Search by code or title", key=key("prereq_search"), disabled=dept == "")
    candidates = prerequisite_candidates(courses, dept, search, exclude_id=form.editing_id)
    by_id = {c.get("id"): c for c in courses}
    selected = [p for p in d.get("prerequisiteIds") or [] if p in by_id]
    options = list(dict.fromkeys(selected + [c.get("id") for c in candidates]))
    prereqs = st.multiselect(
        "Prerequisite courses",
        options=options,
        default=selected,
        format_func=lambda cid: f"{by_id[cid].get('courseCode')} · {by_id[cid].get('courseTitle')}",
        key=key("prerequisiteIds"),
        disabled=dept == "",
        placeholder="Select a department first" if dept == "" else "Choose courses",
    )

    form.update(
        level=level,
        semester=semester,
        status=status,
        courseCode=code,
        courseTitle=title,
        creditUnit=units,
        departmentId=dept,
        courseCategory=category,
        prerequisiteIds=prereqs,
    )


@require_page(PAGE_NAME)
def render():
    render_management(COURSE, PAGE_NAME, _filters, _fields, context=_context)


if __name__ == "__main__":
    render()
