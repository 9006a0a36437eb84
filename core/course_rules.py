# app/core/course_rules.py
from __future__ import annotations
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from core.list_engine import get_field

# ------------------ Course code constraints ------------------

COURSE_CODE_RE = re.compile(r"[A-Za-z]{3,4}\s\d{3}")

# (level, semester) -> base; the numeric suffix must fall in base+1..base+9
DEFAULT_NUMBERING_BANDS: Dict[str, Dict[str, int]] = {
    "Tier I":   {"FIRST": 110, "SECOND": 120},
    "Tier II":  {"FIRST": 210, "SECOND": 220},
    "Tier III": {"FIRST": 310, "SECOND": 320},
}

STATUS_VALUES = ["CORE", "ELECTIVE"]
SEMESTER_VALUES = ["FIRST", "SECOND"]


def numbering_bands(overrides: Optional[Mapping[str, Mapping[str, int]]] = None) -> Dict[str, Dict[str, int]]:
    bands = {lvl: dict(sem) for lvl, sem in DEFAULT_NUMBERING_BANDS.items()}
    for lvl, sem in (overrides or {}).items():
        bands.setdefault(lvl, {}).update({str(k).upper(): int(v) for k, v in sem.items()})
    return bands


def is_valid_course_code(code: Optional[str]) -> bool:
    return bool(code and COURSE_CODE_RE.fullmatch(code))


def validate_course_code(code: Optional[str], level: Optional[str], semester: Optional[str],
                         bands: Optional[Mapping[str, Mapping[str, int]]] = None) -> Optional[str]:
    """Return an error message, or None if the code is acceptable.

    Unknown (level, semester) pairs skip the numbering check.
    """
    if not code:
        return "Course code is required"
    if not COURSE_CODE_RE.fullmatch(code):
        return "Course code must look like ABC 111 (3–4 letters + space + 3 digits)"

    table = bands if bands is not None else DEFAULT_NUMBERING_BANDS
    base = (table.get(level or "") or {}).get((semester or "").upper())
    if not base:
        return None

    number = int(code.split()[1])
    if number < base + 1 or number > base + 9:
        return (f"Invalid code: For {level} {semester} semester, "
                f"code must be between {base + 1} and {base + 9}")
    return None


def normalize_code(code: Any) -> str:
    return str(code or "").strip().lower()


def find_duplicate_code(code: str, rows: Optional[Iterable[Mapping[str, Any]]],
                        exclude_id: Any = None, field: str = "courseCode") -> Optional[Mapping[str, Any]]:
    """First row (other than `exclude_id`) whose code equals `code`, trimmed and case-folded."""
    target = normalize_code(code)
    if not target:
        return None
    for row in rows or []:
        if exclude_id is not None and str(row.get("id")) == str(exclude_id):
            continue
        if normalize_code(row.get(field)) == target:
            return row
    return None


# ------------------ Prerequisites ------------------

def _prereq_ids(course: Mapping[str, Any]) -> List[Any]:
    if course.get("prerequisiteIds") is not None:
        return list(course["prerequisiteIds"])
    return [p.get("id") if isinstance(p, Mapping) else p for p in (course.get("prerequisites") or [])]


def prerequisite_graph(courses: Optional[Iterable[Mapping[str, Any]]]) -> Dict[str, Set[str]]:
    graph: Dict[str, Set[str]] = {}
    for c in courses or []:
        if c.get("id") is None:
            continue
        graph[str(c["id"])] = {str(p) for p in _prereq_ids(c) if p is not None}
    return graph


def validate_prerequisites(course_id: Any, prerequisite_ids: Iterable[Any],
                           courses: Optional[Iterable[Mapping[str, Any]]]) -> Optional[str]:
    """Reject self-reference and any prerequisite chain leading back to the course."""
    wanted = [str(p) for p in prerequisite_ids or [] if p is not None]
    if course_id is None:
        # A course that does not exist yet cannot be anyone's prerequisite
        return None
    me = str(course_id)
    if me in wanted:
        return "A course cannot be its own prerequisite"

    graph = prerequisite_graph(courses)
    graph[me] = set(wanted)
    stack, seen = list(wanted), set()
    while stack:
        node = stack.pop()
        if node == me:
            return "Prerequisites would create a cycle"
        if node in seen:
            continue
        seen.add(node)
        stack.extend(graph.get(node, ()))
    return None


def prerequisite_candidates(courses: Optional[Iterable[Mapping[str, Any]]], department_id: Any,
                            search: str = "", exclude_id: Any = None) -> List[Mapping[str, Any]]:
    """Courses of the chosen department matching `search` on code or title."""
    if department_id in (None, ""):
        return []
    q = (search or "").strip().lower()
    out = []
    for c in courses or []:
        if str(get_field(c, "department.id")) != str(department_id):
            continue
        if exclude_id is not None and str(c.get("id")) == str(exclude_id):
            continue
        if q and q not in str(c.get("courseCode") or "").lower() and q not in str(c.get("courseTitle") or "").lower():
            continue
        out.append(c)
    return out


def category_for_department(departments: Optional[Iterable[Mapping[str, Any]]], department_id: Any) -> str:
    for d in departments or []:
        if str(d.get("id")) == str(department_id):
            return d.get("deptName") or ""
    return ""
