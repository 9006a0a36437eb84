from __future__ import annotations
import io
import logging
import threading
from typing import Any, BinaryIO, Callable, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from core.errors import GatewayError, UploadInProgressError

logger = logging.getLogger(__name__)

class UploadIssue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    row_number: Optional[int] = Field(default=None, alias="rowNumber")
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def _null_message(cls, v: Any) -> Any:
        return "" if v is None else v

class UploadReport(BaseModel):
    """Outcome of one bulk import: counts plus ordered per-row issues."""
    model_config = ConfigDict(populate_by_name=True)

    processed: int = 0
    saved: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[UploadIssue] = Field(default_factory=list)

    # Java Integer fields arrive as null when the server never set them
    @field_validator("processed", "saved", "skipped", "failed", mode="before")
    @classmethod
    def _null_count(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("errors", mode="before")
    @classmethod
    def _null_errors(cls, v: Any) -> Any:
        return [] if v is None else v

    @classmethod
    def from_payload(cls, data: Any) -> "UploadReport":
        if not isinstance(data, dict):
            return cls()
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            # The upload itself succeeded; keep what can be read
            logger.warning("Unreadable upload report, showing counts only: %s", e)
            counts = {k: data.get(k) for k in ("processed", "saved", "skipped", "failed")}
            return cls.model_validate({k: v for k, v in counts.items() if isinstance(v, int)})

    @property
    def has_issues(self) -> bool:
        return bool(self.errors)

    def summary(self) -> str:
        return (f"Processed {self.processed} · Saved {self.saved} · "
                f"Skipped {self.skipped} · Failed {self.failed}")

    def issues_frame(self) -> pd.DataFrame:
        """Row issues in backend order, one line each."""
        return pd.DataFrame(
            [{"Row": e.row_number, "Message": e.message} for e in self.errors],
            columns=["Row", "Message"],
        )


UploadFn = Callable[[BinaryIO], UploadReport]


class BulkImportReconciler:
    """
    Sends one file at a time to a bulk-upload endpoint and keeps the
    reconciliation report until it is dismissed.

    - At most one upload in flight; a second submit raises UploadInProgressError.
    - On success the owning list is re-fetched even if some rows failed.
    - On a request-level failure no report is kept and `input_nonce` is bumped
      so the screen can reset its file input.
    """

    def __init__(self, upload_fn: UploadFn, on_saved: Optional[Callable[[], Any]] = None):
        self.upload_fn = upload_fn
        self.on_saved = on_saved
        self.report: Optional[UploadReport] = None
        self.error: Optional[str] = None
        self.input_nonce = 0
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def submit(self, file: BinaryIO) -> Optional[UploadReport]:
        if not self._lock.acquire(blocking=False):
            raise UploadInProgressError("An upload is already in progress.")
        try:
            self.error = None
            try:
                report = self.upload_fn(file)
            except GatewayError as e:
                logger.error("Bulk upload failed: %s", e.message)
                self.report = None
                self.error = e.message or "Upload failed"
                self.input_nonce += 1
                return None
            logger.info("Bulk upload finished: %s", report.summary())
            self.report = report
            if self.on_saved is not None:
                self.on_saved()
            return report
        finally:
            self._lock.release()

    def dismiss(self) -> None:
        self.report = None
        self.error = None


def preview_upload(file: BinaryIO, max_rows: int = 10) -> Tuple[int, pd.DataFrame]:
    """Read a CSV/XLSX upload for a quick look; returns (row_count, head). Rewinds the file."""
    name = (getattr(file, "name", "") or "").lower()
    raw = file.read()
    try:
        if name.endswith((".xlsx", ".xls")):
            df = pd.read_excel(io.BytesIO(raw), dtype=str).fillna("")
        else:
            df = pd.read_csv(io.BytesIO(raw), dtype=str).fillna("")
    finally:
        file.seek(0)
    return len(df), (df.head(max_rows) if max_rows else df)
