# core/nav_registry.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List

from core.policy import can_view_page

PageFn = Callable[[], None]

@dataclass(frozen=True)
class Route:
    key: str                  # stable id, also the url path
    label: str                # UI label
    icon: str                 # emoji
    policy_page_key: str      # must match a policy.PAGE_ACCESS name
    render: PageFn

@dataclass
class Section:
    title: str
    routes: List[Route]

# Screens modules only define render(); nothing runs on import.
from screens.faculties import render as faculties_render
from screens.departments import render as departments_render
from screens.programs import render as programs_render
from screens.courses import render as courses_render
from screens.sessions import render as sessions_render
from screens.credit_hours import render as credit_hours_render
from screens.logout import render as logout_render

SECTIONS: List[Section] = [
    Section("Academic Structure", [
        Route("faculties",    "Faculties",         "🏛️", "Faculties",         faculties_render),
        Route("departments",  "Departments",       "🏢", "Departments",       departments_render),
        Route("programs",     "Programs",          "📚", "Programs",          programs_render),
        Route("courses",      "Courses",           "📘", "Courses",           courses_render),
    ]),
    Section("Calendar", [
        Route("sessions",     "Academic Sessions", "🗓️", "Academic Sessions", sessions_render),
        Route("credit_hours", "Credit Hours",      "⏱️", "Credit Hours",      credit_hours_render),
    ]),
]

ACCOUNT_SECTION = Section("Account", [
    Route("logout", "Logout", "🚪", "", logout_render),
])

ROUTE_INDEX: Dict[str, Route] = {r.key: r for s in SECTIONS for r in s.routes}
DEFAULT_ROUTE_KEY = "faculties"  # after login, where to land


def visible_sections(roles: Iterable[str]) -> List[Section]:
    """Sections trimmed to the routes `roles` may view; empty sections dropped."""
    roles = set(roles)
    out = []
    for s in SECTIONS:
        routes = [r for r in s.routes if can_view_page(r.policy_page_key, roles)]
        if routes:
            out.append(Section(s.title, routes))
    return out
