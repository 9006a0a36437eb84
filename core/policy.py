# app/core/policy.py
from __future__ import annotations
import functools
from typing import Callable, Dict, FrozenSet, Iterable, List

import streamlit as st

from core.session_store import ADMIN_ROLES

# ============================================================================
# PAGE ACCESS
# ============================================================================

PAGE_ACCESS: Dict[str, Dict[str, FrozenSet[str]]] = {
    "Faculties":         {"view": ADMIN_ROLES, "edit": ADMIN_ROLES},
    "Departments":       {"view": ADMIN_ROLES, "edit": ADMIN_ROLES},
    "Programs":          {"view": ADMIN_ROLES, "edit": ADMIN_ROLES},
    "Courses":           {"view": ADMIN_ROLES, "edit": ADMIN_ROLES},
    "Academic Sessions": {"view": ADMIN_ROLES, "edit": ADMIN_ROLES},
    "Credit Hours":      {"view": ADMIN_ROLES, "edit": ADMIN_ROLES},
}

# Only these roles may sign in to the console
LOGIN_ROLES = ADMIN_ROLES


def _allowed(page_name: str, permission: str) -> FrozenSet[str]:
    return PAGE_ACCESS.get(page_name, {}).get(permission, frozenset())

def can_view_page(page_name: str, roles: Iterable[str]) -> bool:
    return bool(set(roles) & _allowed(page_name, "view"))

def can_edit_page(page_name: str, roles: Iterable[str]) -> bool:
    return bool(set(roles) & _allowed(page_name, "edit"))

def visible_pages_for(roles: Iterable[str]) -> List[str]:
    roles = set(roles)
    return sorted(p for p in PAGE_ACCESS if can_view_page(p, roles))

def require_page(page_name: str):
    """Stop rendering a screen the current user may not view."""
    def _wrap(fn: Callable):
        @functools.wraps(fn)
        def _inner(*args, **kwargs):
            from core.ui import get_session_store
            store = get_session_store()
            if not store.is_authenticated() or not can_view_page(page_name, store.roles):
                st.error("Access Denied. You don't have permission to view this page.")
                st.stop()
            return fn(*args, **kwargs)
        return _inner
    return _wrap
