"""
CSV / Excel export of the rows currently shown by a management screen.
"""
from __future__ import annotations
import io
import logging
from typing import Any, Iterable, Mapping, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

CSV_MIME = "text/csv"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _flatten_value(value: Any) -> Any:
    # Lists of references (e.g. prerequisites) become "3, 7"
    if isinstance(value, list):
        parts = [str(v.get("id", "")) if isinstance(v, Mapping) else str(v) for v in value]
        return ", ".join(p for p in parts if p)
    return value


def flatten_rows(rows: Optional[Iterable[Mapping[str, Any]]]) -> pd.DataFrame:
    rows = list(rows or [])
    if not rows:
        return pd.DataFrame()
    df = pd.json_normalize(rows)
    for col in df.columns:
        df[col] = df[col].map(_flatten_value)
    return df


def to_csv_bytes(rows: Optional[Iterable[Mapping[str, Any]]]) -> bytes:
    df = flatten_rows(rows)
    if df.empty and not len(df.columns):
        return b""
    out = io.StringIO()
    df.to_csv(out, index=False)
    return out.getvalue().encode("utf-8")


def to_xlsx_bytes(rows: Optional[Iterable[Mapping[str, Any]]], sheet_name: str = "Sheet1") -> bytes:
    df = flatten_rows(rows)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return buffer.getvalue()


def export_rows(rows: Optional[Iterable[Mapping[str, Any]]], fmt: str, basename: str) -> Tuple[str, bytes, str]:
    """Returns (file_name, data, mime). Excel failures fall back to CSV."""
    rows = list(rows or [])
    if fmt == "excel":
        try:
            return f"{basename}.xlsx", to_xlsx_bytes(rows), XLSX_MIME
        except Exception:
            logger.error("XLSX export failed for %s; falling back to CSV", basename, exc_info=True)
    return f"{basename}.csv", to_csv_bytes(rows), CSV_MIME
