# app/core/list_engine.py
"""
Client-side list engine: filter → paginate over a fetched collection.

`paginate` is a pure function of (source, predicates, page, page_size); it
never mutates the source. `ListController` is the per-screen stateful part:
it owns the fetched rows, the filter values and the page, and uses a fetch
generation counter so a superseded fetch cannot overwrite newer data.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from core.errors import GatewayError

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


def get_field(row: Any, path: str) -> Any:
    """Read a dotted path ("department.id") from a dict or object; None if absent."""
    cur = row
    for part in path.split("."):
        if cur is None:
            return None
        if isinstance(cur, Mapping):
            cur = cur.get(part)
        else:
            cur = getattr(cur, part, None)
    return cur


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive substring match on any of `fields`."""
    fields: Sequence[str]
    query: Optional[str] = None

    @property
    def active(self) -> bool:
        return not _is_blank(self.query)

    def __call__(self, row: Any) -> bool:
        q = str(self.query).strip().lower()
        for f in self.fields:
            value = get_field(row, f)
            if value is not None and q in str(value).lower():
                return True
        return False


@dataclass(frozen=True)
class ExactMatch:
    """Equality on one field, compared as strings so "1" matches 1."""
    field: str
    value: Any = None
    case_sensitive: bool = True

    @property
    def active(self) -> bool:
        return not _is_blank(self.value)

    def __call__(self, row: Any) -> bool:
        actual = get_field(row, self.field)
        if actual is None:
            return False
        a, b = str(actual).strip(), str(self.value).strip()
        if not self.case_sensitive:
            a, b = a.lower(), b.lower()
        return a == b


def apply_filters(source: Optional[Iterable[Any]], predicates: Iterable[Any]) -> List[Any]:
    if source is None:
        return []
    rows = list(source)
    for pred in predicates:
        if getattr(pred, "active", True):
            rows = [r for r in rows if pred(r)]
    return rows


def total_pages(count: int, page_size: int) -> int:
    if page_size <= 0:
        return 1
    return max(1, math.ceil(count / page_size))


def safe_page(page: int, count: int, page_size: int) -> int:
    return min(max(1, int(page or 1)), total_pages(count, page_size))


@dataclass
class PageView:
    rows: List[Any]
    page: int
    total_pages: int
    total: int
    clamped: bool = False

    @property
    def empty(self) -> bool:
        return not self.rows


def paginate(source: Optional[Iterable[Any]], predicates: Iterable[Any], page: int, page_size: int) -> PageView:
    filtered = apply_filters(source, predicates)
    pages = total_pages(len(filtered), page_size)
    current = safe_page(page, len(filtered), page_size)
    start = (current - 1) * page_size
    return PageView(
        rows=filtered[start:start + page_size],
        page=current,
        total_pages=pages,
        total=len(filtered),
        clamped=current != page,
    )


def page_window(page: int, pages: int, radius: int = 2) -> List[int]:
    """Page numbers shown around the current one in the pager."""
    return list(range(max(1, page - radius), min(pages, page + radius) + 1))


def distinct_values(rows: Optional[Iterable[Any]], path: str, preferred: Sequence[str] = ()) -> List[str]:
    seen = set()
    for r in rows or []:
        v = get_field(r, path)
        if not _is_blank(v):
            seen.add(str(v))
    head = [p for p in preferred if p in seen]
    rest = sorted(v for v in seen if v not in preferred)
    return head + rest


# ------------------------------------------------------------------
# Per-screen controller
# ------------------------------------------------------------------

PredicateFactory = Callable[[Dict[str, Any]], List[Any]]


@dataclass
class ListController:
    """
    Fetched rows + filter state + pagination for one management screen.

    `predicates` turns the current filter values into predicate objects;
    it is the only screen-specific piece.
    """
    name: str
    fetch: Callable[[], List[Any]]
    predicates: PredicateFactory
    page_size: int = 10
    filters: Dict[str, Any] = field(default_factory=dict)
    page: int = 1
    rows: Optional[List[Any]] = None
    error: Optional[str] = None
    generation: int = 0
    loading: bool = False

    # ---- fetch lifecycle ----
    def begin_fetch(self) -> int:
        self.generation += 1
        self.loading = True
        return self.generation

    def complete_fetch(self, generation: int, rows: Optional[List[Any]]) -> bool:
        if generation != self.generation:
            logger.debug("%s: dropping stale fetch %s (current %s)", self.name, generation, self.generation)
            return False
        self.rows = list(rows or [])
        self.error = None
        self.loading = False
        return True

    def fail_fetch(self, generation: int, message: str) -> bool:
        if generation != self.generation:
            return False
        self.error = message
        self.loading = False
        return True

    def refresh(self) -> None:
        gen = self.begin_fetch()
        try:
            rows = self.fetch()
        except GatewayError as e:
            logger.error("%s: list fetch failed: %s", self.name, e.message)
            self.fail_fetch(gen, e.message)
            return
        self.complete_fetch(gen, rows)

    @property
    def loaded(self) -> bool:
        return self.rows is not None

    # ---- filters & paging ----
    def set_filter(self, key: str, value: Any) -> None:
        if self.filters.get(key) != value:
            self.filters[key] = value
            self.page = 1

    def set_page_size(self, size: int) -> None:
        if size != self.page_size:
            self.page_size = int(size)
            self.page = 1

    def go_to(self, page: int) -> None:
        self.page = int(page)

    def filtered(self) -> List[Any]:
        return apply_filters(self.rows, self.predicates(self.filters))

    def view(self) -> PageView:
        pv = paginate(self.rows, self.predicates(self.filters), self.page, self.page_size)
        if pv.clamped:
            self.page = pv.page
        return pv
