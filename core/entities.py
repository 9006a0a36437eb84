# app/core/entities.py
"""
Per-entity definitions for the management screens: which resource to call,
which filters apply, which columns to show and how the form validates.
"""
from __future__ import annotations
import datetime
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from core.course_rules import (
    SEMESTER_VALUES,
    find_duplicate_code,
    validate_course_code,
    validate_prerequisites,
)
from core.errors import ValidationError
from core.forms import FormSpec, is_empty
from core.list_engine import ExactMatch, TextSearch

INTAKE_SESSION_RE = re.compile(r"\d{4}/\d{4}")


@dataclass
class EntityDef:
    key: str                         # resource name on the gateway
    label: str                       # singular, used in messages
    title: str                       # page heading
    form: FormSpec
    predicates: Callable[[Dict[str, Any]], List[Any]]
    columns: Sequence[Tuple[str, str]]           # (dotted field, header)
    export_name: str
    uploadable: bool = False


# ------------------ Helpers ------------------

def positive_int(value: Any) -> Optional[int]:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def non_negative_int(value: Any) -> Optional[int]:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return n if n >= 0 else None


def _ref_id(value: Any) -> Optional[int]:
    if isinstance(value, Mapping):
        value = value.get("id")
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def unique_code(field_name: str, label: str) -> Callable:
    def _check(draft: Dict[str, Any], ctx: Dict[str, Any]) -> Optional[ValidationError]:
        dup = find_duplicate_code(draft.get(field_name), ctx.get("rows"), ctx.get("editing_id"), field=field_name)
        if dup:
            return ValidationError(f"A {label.lower()} with this code already exists.",
                                   kind=ValidationError.DUPLICATE, field=field_name)
        return None
    return _check


def positive_field(field_name: str, label: str) -> Callable:
    def _check(draft: Dict[str, Any], ctx: Dict[str, Any]) -> Optional[ValidationError]:
        value = draft.get(field_name)
        if is_empty(value):
            return None
        if positive_int(value) is None:
            return ValidationError(f"{label} must be a positive whole number",
                                   kind=ValidationError.BUSINESS, field=field_name)
        return None
    return _check


# ------------------ Faculty ------------------

def _faculty_defaults() -> Dict[str, Any]:
    return {"facultyName": "", "facultyCode": "", "institution": ""}

def _faculty_payload(d: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "facultyName": str(d.get("facultyName") or "").strip(),
        "facultyCode": str(d.get("facultyCode") or "").strip().upper(),
        "institution": str(d.get("institution") or "").strip(),
    }

def _faculty_predicates(f: Dict[str, Any]) -> List[Any]:
    return [
        TextSearch(("facultyName", "facultyCode", "institution"), f.get("q")),
        ExactMatch("facultyCode", f.get("code"), case_sensitive=False),
    ]

FACULTY = EntityDef(
    key="faculties",
    label="Faculty",
    title="Manage Faculties",
    form=FormSpec(
        entity="Faculty",
        defaults=_faculty_defaults,
        required=(("facultyName", "Faculty name"), ("facultyCode", "Faculty code"), ("institution", "Institution")),
        validators=(unique_code("facultyCode", "Faculty"),),
        build_payload=_faculty_payload,
        edit_values=lambda r: {k: r.get(k) or "" for k in _faculty_defaults()},
    ),
    predicates=_faculty_predicates,
    columns=(("id", "ID"), ("facultyName", "Name"), ("facultyCode", "Code"),
             ("institution", "Institution"), ("createdDate", "Created")),
    export_name="faculties",
    uploadable=True,
)


# ------------------ Department ------------------

def _department_defaults() -> Dict[str, Any]:
    return {"deptName": "", "deptCode": ""}

def _department_payload(d: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "deptName": str(d.get("deptName") or "").strip(),
        "deptCode": str(d.get("deptCode") or "").strip().upper(),
    }

DEPARTMENT = EntityDef(
    key="departments",
    label="Department",
    title="Manage Departments",
    form=FormSpec(
        entity="Department",
        defaults=_department_defaults,
        required=(("deptName", "Department name"), ("deptCode", "Department code")),
        validators=(unique_code("deptCode", "Department"),),
        build_payload=_department_payload,
        edit_values=lambda r: {k: r.get(k) or "" for k in _department_defaults()},
    ),
    predicates=lambda f: [
        TextSearch(("deptName", "deptCode"), f.get("q")),
        ExactMatch("deptCode", f.get("code"), case_sensitive=False),
    ],
    columns=(("id", "ID"), ("deptName", "Name"), ("deptCode", "Code"), ("createdDate", "Created")),
    export_name="departments",
    uploadable=True,
)


# ------------------ Program ------------------

def _program_defaults() -> Dict[str, Any]:
    return {"programName": "", "durationYears": 3, "departmentId": ""}

def _program_payload(d: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "programName": str(d.get("programName") or "").strip(),
        "durationYears": positive_int(d.get("durationYears")),
        "department": {"id": _ref_id(d.get("departmentId"))},
    }

def _program_edit_values(r: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "programName": r.get("programName") or "",
        "durationYears": r.get("durationYears") or 3,
        "departmentId": _ref_id(r.get("department")) or "",
    }

PROGRAM = EntityDef(
    key="programs",
    label="Program",
    title="Manage Programs",
    form=FormSpec(
        entity="Program",
        defaults=_program_defaults,
        required=(("programName", "Program name"), ("durationYears", "Duration"), ("departmentId", "Department")),
        validators=(positive_field("durationYears", "Duration"),),
        build_payload=_program_payload,
        edit_values=_program_edit_values,
    ),
    predicates=lambda f: [
        TextSearch(("programName",), f.get("q")),
        ExactMatch("department.id", f.get("deptId")),
    ],
    columns=(("id", "ID"), ("programName", "Program"), ("durationYears", "Duration (years)"),
             ("department.deptName", "Department")),
    export_name="programs",
    uploadable=True,
)


# ------------------ Course ------------------

def _course_defaults() -> Dict[str, Any]:
    return {
        "courseCode": "",
        "courseTitle": "",
        "creditUnit": "",
        "status": "CORE",
        "semester": "FIRST",
        "level": "",
        "courseCategory": "",
        "departmentId": "",
        "prerequisiteIds": [],
    }

def _course_payload(d: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "courseCode": str(d.get("courseCode") or "").strip(),
        "courseTitle": str(d.get("courseTitle") or "").strip(),
        "creditUnit": positive_int(d.get("creditUnit")),
        "status": d.get("status"),
        "semester": d.get("semester"),
        "level": d.get("level"),
        "courseCategory": d.get("courseCategory"),
        "departmentId": _ref_id(d.get("departmentId")),
        "prerequisiteIds": [int(p) for p in d.get("prerequisiteIds") or []],
    }

def _course_edit_values(r: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "courseCode": r.get("courseCode") or "",
        "courseTitle": r.get("courseTitle") or "",
        "creditUnit": r.get("creditUnit") or "",
        "status": r.get("status") or "CORE",
        "semester": r.get("semester") or "FIRST",
        "level": r.get("level") or "",
        "courseCategory": r.get("courseCategory") or "",
        "departmentId": _ref_id(r.get("department")) or "",
        "prerequisiteIds": [p.get("id") for p in r.get("prerequisites") or [] if isinstance(p, Mapping)],
    }

def _course_code_rule(draft: Dict[str, Any], ctx: Dict[str, Any]) -> Optional[ValidationError]:
    msg = validate_course_code(draft.get("courseCode"), draft.get("level"), draft.get("semester"),
                               bands=ctx.get("numbering_bands"))
    if not msg:
        return None
    kind = ValidationError.BUSINESS if msg.startswith("Invalid code") else ValidationError.STRUCTURAL
    return ValidationError(msg, kind=kind, field="courseCode")

def _course_prerequisites_rule(draft: Dict[str, Any], ctx: Dict[str, Any]) -> Optional[ValidationError]:
    msg = validate_prerequisites(ctx.get("editing_id"), draft.get("prerequisiteIds") or [], ctx.get("rows"))
    if msg:
        return ValidationError(msg, kind=ValidationError.BUSINESS, field="prerequisiteIds")
    return None

COURSE = EntityDef(
    key="courses",
    label="Course",
    title="Manage Courses",
    form=FormSpec(
        entity="Course",
        defaults=_course_defaults,
        required=(("courseCode", "Course Code"), ("courseTitle", "Title"), ("departmentId", "Department")),
        validators=(
            _course_code_rule,
            positive_field("creditUnit", "Credit unit"),
            unique_code("courseCode", "Course"),
            _course_prerequisites_rule,
        ),
        build_payload=_course_payload,
        edit_values=_course_edit_values,
    ),
    predicates=lambda f: [
        TextSearch(("courseTitle", "courseCode"), f.get("q")),
        ExactMatch("department.id", f.get("deptId")),
        ExactMatch("courseCode", f.get("courseCode")),
        ExactMatch("level", f.get("level")),
    ],
    columns=(("courseCode", "Code"), ("courseTitle", "Title"), ("creditUnit", "Units"),
             ("status", "Status"), ("level", "Level"), ("semester", "Semester"),
             ("department.deptName", "Department")),
    export_name="courses",
    uploadable=True,
)


# ------------------ Academic session ------------------

def _session_defaults() -> Dict[str, Any]:
    return {"intakeSession": "", "intakeYear": datetime.date.today().year, "isCurrent": False}

def _session_payload(d: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "intakeSession": str(d.get("intakeSession") or "").strip(),
        "intakeYear": positive_int(d.get("intakeYear")),
        "isCurrent": bool(d.get("isCurrent")),
    }

def _session_label_rule(draft: Dict[str, Any], ctx: Dict[str, Any]) -> Optional[ValidationError]:
    label = str(draft.get("intakeSession") or "").strip()
    if not INTAKE_SESSION_RE.fullmatch(label):
        return ValidationError("Intake session must look like 2025/2026",
                               kind=ValidationError.STRUCTURAL, field="intakeSession")
    return None

SESSION = EntityDef(
    key="sessions",
    label="Academic Session",
    title="Manage Academic Sessions",
    form=FormSpec(
        entity="Academic Session",
        defaults=_session_defaults,
        required=(("intakeSession", "Intake session"), ("intakeYear", "Intake year")),
        validators=(_session_label_rule, positive_field("intakeYear", "Intake year")),
        build_payload=_session_payload,
        edit_values=lambda r: {
            "intakeSession": r.get("intakeSession") or "",
            "intakeYear": r.get("intakeYear") or datetime.date.today().year,
            "isCurrent": bool(r.get("isCurrent")),
        },
    ),
    predicates=lambda f: [
        TextSearch(("intakeSession", "intakeYear"), f.get("q")),
        ExactMatch("isCurrent", "True" if f.get("current_only") else None),
    ],
    columns=(("id", "ID"), ("intakeSession", "Session"), ("intakeYear", "Intake year"), ("isCurrent", "Current")),
    export_name="sessions",
)


# ------------------ Credit-hour rule ------------------

def _credit_defaults() -> Dict[str, Any]:
    return {"sessionId": "", "semester": "FIRST", "minHours": "", "maxHours": ""}

def _credit_payload(d: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "sessionId": _ref_id(d.get("sessionId")),
        "semester": d.get("semester"),
        "minHours": non_negative_int(d.get("minHours")),
        "maxHours": non_negative_int(d.get("maxHours")),
    }

def _credit_bounds_rule(draft: Dict[str, Any], ctx: Dict[str, Any]) -> Optional[ValidationError]:
    lo, hi = non_negative_int(draft.get("minHours")), non_negative_int(draft.get("maxHours"))
    if lo is None or hi is None:
        return ValidationError("Minimum and maximum hours must be whole numbers",
                               kind=ValidationError.STRUCTURAL, field="minHours" if lo is None else "maxHours")
    if lo > hi:
        return ValidationError("Minimum hours cannot exceed maximum hours",
                               kind=ValidationError.BUSINESS, field="minHours")
    if draft.get("semester") not in SEMESTER_VALUES:
        return ValidationError("Semester must be FIRST or SECOND", kind=ValidationError.STRUCTURAL, field="semester")
    return None

CREDIT_HOURS = EntityDef(
    key="credit-hours",
    label="Credit hours rule",
    title="Manage Credit Hours",
    form=FormSpec(
        entity="Credit hours rule",
        defaults=_credit_defaults,
        required=(("sessionId", "Session"), ("semester", "Semester"),
                  ("minHours", "Minimum hours"), ("maxHours", "Maximum hours")),
        validators=(_credit_bounds_rule,),
        build_payload=_credit_payload,
        edit_values=lambda r: {
            "sessionId": r.get("sessionId") or _ref_id(r.get("session")) or "",
            "semester": r.get("semester") or "FIRST",
            "minHours": r.get("minHours", ""),
            "maxHours": r.get("maxHours", ""),
        },
    ),
    predicates=lambda f: [
        TextSearch(("sessionName",), f.get("q")),
        ExactMatch("semester", f.get("semester")),
    ],
    columns=(("id", "ID"), ("sessionName", "Session"), ("semester", "Semester"),
             ("minHours", "Min hours"), ("maxHours", "Max hours"), ("createdDate", "Created")),
    export_name="credit_hours",
)


ENTITIES: Dict[str, EntityDef] = {e.key: e for e in (FACULTY, DEPARTMENT, PROGRAM, COURSE, SESSION, CREDIT_HOURS)}
