# app/core/forms.py
"""
Generic create/edit form controller shared by every management screen.

A FormSpec says what an entity's form looks like (defaults, required fields,
validators, payload shape); a RecordFormController owns one draft and runs
validate → submit → refresh.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from core.errors import GatewayError, ValidationError

logger = logging.getLogger(__name__)

# validator(draft, context) -> ValidationError | None
# context: {"rows": existing rows, "editing_id": id or None, ...}
Validator = Callable[[Dict[str, Any], Dict[str, Any]], Optional[ValidationError]]


@dataclass
class FormSpec:
    entity: str
    defaults: Callable[[], Dict[str, Any]]
    required: Sequence[Tuple[str, str]] = ()
    validators: Sequence[Validator] = ()
    build_payload: Callable[[Dict[str, Any]], Dict[str, Any]] = dict
    edit_values: Callable[[Dict[str, Any]], Dict[str, Any]] = dict


@dataclass
class SubmitOutcome:
    ok: bool
    message: str
    record: Any = None
    error: Optional[Exception] = None

    @property
    def is_validation_error(self) -> bool:
        return isinstance(self.error, ValidationError)


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return False


def check_required(draft: Dict[str, Any], required: Sequence[Tuple[str, str]]) -> Optional[ValidationError]:
    missing = [label for key, label in required if is_empty(draft.get(key))]
    if not missing:
        return None
    if len(missing) == 1:
        msg = f"{missing[0]} is required"
    else:
        msg = ", ".join(missing[:-1]) + f" & {missing[-1]} are required"
    first_key = next(key for key, label in required if label == missing[0])
    return ValidationError(msg, kind=ValidationError.REQUIRED, field=first_key)


class RecordFormController:
    def __init__(self, spec: FormSpec, gateway, on_saved: Optional[Callable[[], Any]] = None):
        self.spec = spec
        self.gateway = gateway
        self.on_saved = on_saved
        self.draft: Dict[str, Any] = spec.defaults()
        self.editing_id: Any = None
        self.is_open = False
        self.submitting = False
        self.last_error: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def open_create(self) -> None:
        self.draft = self.spec.defaults()
        self.editing_id = None
        self.last_error = None
        self.is_open = True

    def open_edit(self, record: Dict[str, Any]) -> None:
        self.draft = {**self.spec.defaults(), **self.spec.edit_values(record)}
        self.editing_id = record.get("id")
        self.last_error = None
        self.is_open = True

    def update(self, **values: Any) -> None:
        self.draft.update(values)

    def close(self) -> None:
        self.is_open = False
        self.editing_id = None
        self.draft = self.spec.defaults()
        self.last_error = None

    def validate(self, rows: Optional[List[Dict[str, Any]]] = None, **context: Any) -> Optional[ValidationError]:
        err = check_required(self.draft, self.spec.required)
        if err:
            return err
        ctx = {"rows": rows or [], "editing_id": self.editing_id, **context}
        for validator in self.spec.validators:
            err = validator(self.draft, ctx)
            if err:
                return err
        return None

    def submit(self, rows: Optional[List[Dict[str, Any]]] = None, **context: Any) -> SubmitOutcome:
        err = self.validate(rows, **context)
        if err:
            self.last_error = err.message
            return SubmitOutcome(False, err.message, error=err)

        payload = self.spec.build_payload(self.draft)
        self.submitting = True
        try:
            if self.is_editing:
                record = self.gateway.update(self.editing_id, payload)
                message = f"{self.spec.entity} updated successfully"
            else:
                record = self.gateway.create(payload)
                message = f"{self.spec.entity} created successfully"
        except GatewayError as e:
            logger.warning("%s submit rejected: %s", self.spec.entity, e.message)
            self.last_error = e.message
            return SubmitOutcome(False, e.message, error=e)
        finally:
            self.submitting = False

        if self.on_saved is not None:
            self.on_saved()
        self.close()
        return SubmitOutcome(True, message, record=record)

    def delete(self, record_id: Any) -> SubmitOutcome:
        try:
            self.gateway.delete(record_id)
        except GatewayError as e:
            logger.warning("%s delete %s failed: %s", self.spec.entity, record_id, e.message)
            return SubmitOutcome(False, f"Delete failed: {e.message}", error=e)
        if self.on_saved is not None:
            self.on_saved()
        return SubmitOutcome(True, f"{self.spec.entity} deleted")
