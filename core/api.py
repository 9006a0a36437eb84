# app/core/api.py
"""
REST gateway for the admin console.

One ApiClient wraps a requests.Session; each backend resource is exposed as a
ResourceGateway with list/get/create/update/delete (and upload where the
backend accepts bulk files). Errors are mapped onto core.errors:

- TransportError      connection failure / timeout
- BackendRejection    any non-2xx, body passed through unchanged
- AuthorizationError  401; logged and propagated. There is no automatic
                      logout here, a forced redirect on 401 loops.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Dict, List, Optional

import requests

from core.errors import AuthorizationError, BackendRejection, TransportError
from core.bulk_import import UploadReport

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]

@dataclass(frozen=True)
class Endpoints:
    list: str
    get: str
    create: str
    update: str
    delete: str
    upload: Optional[str] = None

def _default_endpoints(resource: str, uploadable: bool = False) -> Endpoints:
    return Endpoints(
        list=f"/api/{resource}/all",
        get=f"/api/{resource}/{{id}}",
        create=f"/api/{resource}/create",
        update=f"/api/{resource}/update/{{id}}",
        delete=f"/api/{resource}/delete/{{id}}",
        upload=f"/api/upload/{resource}" if uploadable else None,
    )

ENDPOINTS: Dict[str, Endpoints] = {
    "faculties": Endpoints(
        list="/api/faculties",
        get="/api/faculties/{id}",
        create="/api/faculties/create",
        update="/api/faculties/{id}",
        delete="/api/faculties/{id}",
        upload="/api/upload/faculty",
    ),
    "departments": _default_endpoints("departments", uploadable=True),
    "programs": _default_endpoints("programs", uploadable=True),
    "courses": _default_endpoints("courses", uploadable=True),
    "sessions": Endpoints(
        list="/api/sessions/all",
        get="/api/sessions/{id}",
        create="/api/sessions/create",
        update="/api/sessions/{id}",
        delete="/api/sessions/{id}",
    ),
    "credit-hours": _default_endpoints("credit-hours"),
}

AUTH_LOGIN_PATH = "/api/auth/login"
AUTH_SIGNUP_PATH = "/api/auth/signup"


class ApiClient:
    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider or (lambda: None)
        self.timeout = timeout
        self.session = session or requests.Session()
        self._resources: Dict[str, ResourceGateway] = {}

    def _headers(self, json_body: bool = True) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = "application/json"
        token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, *, json: Any = None, files: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method,
                url,
                json=json,
                files=files,
                headers=self._headers(json_body=files is None),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.error("%s %s timed out after %ss", method, path, self.timeout)
            raise TransportError(f"Request timed out: {method} {path}") from e
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise TransportError(f"Network error: {e}") from e

        payload = _decode_body(resp)
        if resp.status_code == 401:
            logger.warning("401 on %s %s; returning error to caller (no automatic logout)", method, path)
            raise AuthorizationError(resp.status_code, payload)
        if not 200 <= resp.status_code < 300:
            logger.info("%s %s rejected with %s", method, path, resp.status_code)
            raise BackendRejection(resp.status_code, payload)
        return payload

    # ---- auth ----
    def login(self, credentials: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", AUTH_LOGIN_PATH, json=credentials) or {}

    def signup(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", AUTH_SIGNUP_PATH, json=data) or {}

    # ---- resources ----
    def resource(self, name: str) -> "ResourceGateway":
        if name not in ENDPOINTS:
            raise KeyError(f"Unknown resource: {name}")
        if name not in self._resources:
            self._resources[name] = ResourceGateway(self, name, ENDPOINTS[name])
        return self._resources[name]

    @property
    def faculties(self) -> "ResourceGateway":
        return self.resource("faculties")

    @property
    def departments(self) -> "ResourceGateway":
        return self.resource("departments")

    @property
    def programs(self) -> "ResourceGateway":
        return self.resource("programs")

    @property
    def courses(self) -> "ResourceGateway":
        return self.resource("courses")

    @property
    def sessions(self) -> "ResourceGateway":
        return self.resource("sessions")

    @property
    def credit_hours(self) -> "ResourceGateway":
        return self.resource("credit-hours")


class ResourceGateway:
    def __init__(self, client: ApiClient, name: str, endpoints: Endpoints):
        self.client = client
        self.name = name
        self.endpoints = endpoints

    @property
    def can_upload(self) -> bool:
        return self.endpoints.upload is not None

    def list(self) -> List[Dict[str, Any]]:
        data = self.client.request("GET", self.endpoints.list)
        if not data:
            return []
        if isinstance(data, list):
            return list(data)
        if isinstance(data, dict):
            # Some list endpoints wrap rows, e.g. {"content": [...]}
            for key in ("content", "items", "data", "results"):
                if isinstance(data.get(key), list):
                    return list(data[key])
        # HTML from a proxy or a wrong base URL, or an unrelated object
        logger.error("GET %s returned a non-list body (%s)", self.endpoints.list, type(data).__name__)
        raise BackendRejection(200, data, f"Unexpected response from {self.endpoints.list}")

    def get(self, record_id: Any) -> Any:
        return self.client.request("GET", self.endpoints.get.format(id=record_id))

    def create(self, payload: Dict[str, Any]) -> Any:
        return self.client.request("POST", self.endpoints.create, json=payload)

    def update(self, record_id: Any, payload: Dict[str, Any]) -> Any:
        return self.client.request("PUT", self.endpoints.update.format(id=record_id), json=payload)

    def delete(self, record_id: Any) -> Any:
        return self.client.request("DELETE", self.endpoints.delete.format(id=record_id))

    def upload(self, file: BinaryIO, filename: Optional[str] = None) -> UploadReport:
        if not self.can_upload:
            raise NotImplementedError(f"{self.name} has no bulk upload endpoint")
        name = filename or getattr(file, "name", None) or "upload.csv"
        content_type = getattr(file, "type", None) or "application/octet-stream"
        data = self.client.request("POST", self.endpoints.upload, files={"file": (name, file, content_type)})
        return UploadReport.from_payload(data)


def _decode_body(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
