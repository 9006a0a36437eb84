from __future__ import annotations
from typing import Any, Optional

class ConsoleError(Exception):
    """Base class for errors raised by the console core."""

class ValidationError(ConsoleError):
    """A draft record failed a client-side check; nothing was sent."""

    STRUCTURAL = "structural"
    BUSINESS = "business"
    REQUIRED = "required"
    DUPLICATE = "duplicate"

    def __init__(self, message: str, kind: str = BUSINESS, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.field = field

class GatewayError(ConsoleError):
    """Any failure of a call to the REST backend."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class TransportError(GatewayError):
    """Connection failure or timeout; no response was received."""

class BackendRejection(GatewayError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, payload: Any = None, message: Optional[str] = None):
        super().__init__(message or _message_from_payload(payload) or f"Request failed with status {status}")
        self.status = status
        self.payload = payload

class AuthorizationError(BackendRejection):
    """HTTP 401. Propagated to the caller; never triggers a logout."""

class AuthenticationError(ConsoleError):
    """Login was refused, either by the backend or by the role gate."""

class UploadInProgressError(ConsoleError):
    """A bulk upload is already running for this control."""

def _message_from_payload(payload: Any) -> Optional[str]:
    if payload is None:
        return None
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if value:
                return str(value)
        return None
    text = str(payload).strip()
    return text or None
