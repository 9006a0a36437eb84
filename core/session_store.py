# app/core/session_store.py
from __future__ import annotations
import json
import logging
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional

from core.client_storage import ClientStorage
from core.errors import AuthenticationError

logger = logging.getLogger(__name__)

__all__ = ["SessionStore", "normalize_user", "TOKEN_KEY", "USER_KEY", "ADMIN_ROLES"]

TOKEN_KEY = "authToken"
USER_KEY = "authUser"

ADMIN = "ADMIN"
SUPERADMIN = "SUPERADMIN"
STAFF = "STAFF"
ADMIN_ROLES = frozenset({ADMIN, SUPERADMIN})

def _role_list(user: Dict[str, Any]) -> list[str]:
    roles = user.get("roles")
    if isinstance(roles, str):
        roles = [roles]
    elif not isinstance(roles, (list, tuple, set, frozenset)):
        roles = [user.get("role")] if user.get("role") else []
    return sorted({str(r).strip().upper() for r in roles if r and str(r).strip()})

def normalize_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of `user` with `roles` always a sorted list of upper-case tags."""
    out = dict(user)
    out["roles"] = _role_list(user)
    out.pop("role", None)
    return out


class SessionStore:
    """
    Owns the logged-in user for one console session.

    Lifecycle: restore_from_storage() at start-up → login() → logout().
    Readers get copies; only login/logout mutate.
    """

    def __init__(self, storage: ClientStorage, navigate: Optional[Callable[[], Any]] = None):
        self._storage = storage
        self._navigate = navigate
        self._token: Optional[str] = None
        self._user: Optional[Dict[str, Any]] = None
        self._ready = False

    # ---- lifecycle ----
    def restore_from_storage(self) -> bool:
        """Load a persisted session. Returns True if one was found."""
        self._token, self._user = None, None
        try:
            token = self._storage.get(TOKEN_KEY)
            raw_user = self._storage.get(USER_KEY)
            user = json.loads(raw_user) if raw_user else None
            if token and isinstance(user, dict):
                self._token = token
                self._user = normalize_user(user)
        except (ValueError, TypeError) as e:
            logger.warning("Stored session is malformed; starting logged out: %s", e)
        except Exception:
            logger.error("Could not read stored session; starting logged out", exc_info=True)
        finally:
            self._ready = True
        return self._token is not None

    def login(self, token: Optional[str], user: Optional[Dict[str, Any]]) -> None:
        if not token or not user:
            return
        normalized = normalize_user(user)
        self._storage.set(TOKEN_KEY, token)
        self._storage.set(USER_KEY, json.dumps(normalized, ensure_ascii=False))
        self._token = token
        self._user = normalized
        self._ready = True
        logger.info("Logged in as %s (%s)", normalized.get("username"), ", ".join(normalized["roles"]))

    def logout(self) -> None:
        try:
            self._storage.remove(TOKEN_KEY, USER_KEY)
        finally:
            self._token = None
            self._user = None
            if self._navigate is not None:
                self._navigate()

    # ---- queries ----
    @property
    def ready(self) -> bool:
        return self._ready

    def is_authenticated(self) -> bool:
        return bool(self._token)

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        if self._user is None:
            return None
        out = dict(self._user)
        out["roles"] = list(self._user["roles"])
        return out

    @property
    def roles(self) -> FrozenSet[str]:
        if not self._token or not self._user:
            return frozenset()
        return frozenset(self._user["roles"])

    def has_role(self, role: str) -> bool:
        return (role or "").strip().upper() in self.roles

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return any(self.has_role(r) for r in roles)

    def is_admin(self) -> bool:
        return self.has_role(ADMIN)

    def is_superadmin(self) -> bool:
        return self.has_role(SUPERADMIN)

    def is_staff(self) -> bool:
        return self.has_role(STAFF)

    # ---- backend-assisted flows ----
    def authenticate(self, gateway, username_or_email: str, password: str,
                     required_roles: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Log in against the backend; optionally require one of `required_roles`."""
        res = gateway.login({"usernameOrEmail": username_or_email, "password": password}) or {}
        token = res.get("token")
        if not token:
            raise AuthenticationError("Invalid username or password")

        user = normalize_user({
            "username": res.get("username"),
            "roles": res.get("roles") or [],
            "id": res.get("identifier") or res.get("id"),
        })
        if required_roles is not None:
            wanted = {r.upper() for r in required_roles}
            if not wanted.intersection(user["roles"]):
                raise AuthenticationError(
                    "Access denied: only " + " or ".join(sorted(wanted)) + " can log in here"
                )
        self.login(token, user)
        return self.user or {}

    def register(self, gateway, payload: Dict[str, Any]) -> Dict[str, Any]:
        res = gateway.signup(payload) or {}
        if res.get("token"):
            self.login(res["token"], {"username": res.get("username"), "roles": res.get("roles") or []})
        return res
