"""
Filter → paginate behaviour of the client-side list engine.
"""
import math

import pytest
from hypothesis import given, settings, strategies as st

from core.errors import TransportError
from core.list_engine import (
    ExactMatch,
    ListController,
    TextSearch,
    apply_filters,
    distinct_values,
    get_field,
    page_window,
    paginate,
    safe_page,
    total_pages,
)

rows_strategy = st.lists(
    st.fixed_dictionaries({
        "id": st.integers(min_value=1, max_value=10_000),
        "name": st.text(alphabet="abcXYZ ", max_size=8),
        "department": st.fixed_dictionaries({"id": st.integers(min_value=1, max_value=4)}),
    }),
    max_size=40,
)


@given(rows=rows_strategy, dept=st.one_of(st.none(), st.integers(min_value=1, max_value=4)),
       query=st.one_of(st.none(), st.text(alphabet="abcXYZ", max_size=2)))
@settings(max_examples=100)
def test_filter_output_is_exact_subset(rows, dept, query):
    preds = [TextSearch(("name",), query), ExactMatch("department.id", dept)]
    active = [p for p in preds if p.active]
    out = apply_filters(rows, preds)

    assert all(r in rows for r in out)
    assert all(all(p(r) for p in active) for r in out)
    excluded = [r for r in rows if r not in out]
    assert all(not all(p(r) for p in active) for r in excluded)


@given(rows=rows_strategy)
def test_filtering_does_not_mutate_source(rows):
    snapshot = [dict(r) for r in rows]
    apply_filters(rows, [TextSearch(("name",), "a")])
    paginate(rows, [TextSearch(("name",), "a")], 3, 5)
    assert rows == snapshot


@given(page=st.integers(min_value=-5, max_value=50), count=st.integers(min_value=0, max_value=500),
       size=st.sampled_from([10, 20, 50, 100]))
def test_safe_page_formula(page, count, size):
    expected = min(max(1, page), max(1, math.ceil(count / size)))
    assert safe_page(page, count, size) == expected


def test_total_pages_is_at_least_one():
    assert total_pages(0, 10) == 1
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


def test_department_filter_scenario():
    rows = [
        {"id": 1, "programName": "BSc CS", "department": {"id": 1}},
        {"id": 2, "programName": "BSc Maths", "department": {"id": 2}},
        {"id": 3, "programName": "MSc CS", "department": {"id": 1}},
    ]
    pv = paginate(rows, [ExactMatch("department.id", 1)], page=1, page_size=10)
    assert [r["id"] for r in pv.rows] == [1, 3]
    assert pv.total == 2
    assert pv.total_pages == 1


def test_exact_match_compares_as_strings():
    row = {"department": {"id": 7}}
    assert ExactMatch("department.id", "7")(row)
    assert not ExactMatch("department.id", "8")(row)
    assert not ExactMatch("missing", "x")(row)


def test_exact_match_case_insensitive_option():
    row = {"facultyCode": "SCI"}
    assert ExactMatch("facultyCode", "sci", case_sensitive=False)(row)
    assert not ExactMatch("facultyCode", "sci")(row)


def test_blank_predicates_are_inactive():
    rows = [{"name": "a"}, {"name": "b"}]
    assert apply_filters(rows, [TextSearch(("name",), "  "), ExactMatch("name", "")]) == rows


def test_none_source_gives_empty_list():
    assert apply_filters(None, []) == []
    pv = paginate(None, [], 1, 10)
    assert pv.empty
    assert pv.total_pages == 1


def test_paginate_clamps_past_end():
    rows = [{"id": i} for i in range(25)]
    pv = paginate(rows, [], page=9, page_size=10)
    assert pv.page == 3
    assert pv.clamped
    assert [r["id"] for r in pv.rows] == list(range(20, 25))


def test_get_field_reads_dotted_paths():
    assert get_field({"a": {"b": {"c": 3}}}, "a.b.c") == 3
    assert get_field({"a": None}, "a.b") is None


def test_page_window():
    assert page_window(1, 10) == [1, 2, 3]
    assert page_window(5, 10) == [3, 4, 5, 6, 7]
    assert page_window(10, 10) == [8, 9, 10]


def test_distinct_values_prefers_known_order():
    rows = [{"level": "Tier II"}, {"level": "Custom"}, {"level": "Tier I"}, {"level": ""}]
    assert distinct_values(rows, "level", preferred=["Tier I", "Tier II", "Tier III"]) == ["Tier I", "Tier II", "Custom"]


class TestListController:
    def _ctrl(self, fetch):
        return ListController(
            name="programs",
            fetch=fetch,
            predicates=lambda f: [ExactMatch("department.id", f.get("deptId"))],
            page_size=2,
        )

    def test_refresh_loads_rows(self):
        ctrl = self._ctrl(lambda: [{"id": 1, "department": {"id": 1}}])
        ctrl.refresh()
        assert ctrl.loaded
        assert ctrl.error is None
        assert not ctrl.loading

    def test_stale_fetch_is_ignored(self):
        ctrl = self._ctrl(lambda: [])
        old = ctrl.begin_fetch()
        new = ctrl.begin_fetch()
        assert ctrl.complete_fetch(new, [{"id": 2}])
        assert not ctrl.complete_fetch(old, [{"id": 1}])
        assert ctrl.rows == [{"id": 2}]

    def test_failed_fetch_keeps_previous_rows(self):
        calls = {"n": 0}

        def fetch():
            calls["n"] += 1
            if calls["n"] > 1:
                raise TransportError("Network error: down")
            return [{"id": 1}]

        ctrl = self._ctrl(fetch)
        ctrl.refresh()
        ctrl.refresh()
        assert ctrl.rows == [{"id": 1}]
        assert ctrl.error == "Network error: down"

    def test_filter_change_resets_page(self):
        rows = [{"id": i, "department": {"id": 1 if i % 2 else 2}} for i in range(10)]
        ctrl = self._ctrl(lambda: rows)
        ctrl.refresh()
        ctrl.go_to(3)
        ctrl.set_filter("deptId", 1)
        assert ctrl.page == 1
        pv = ctrl.view()
        assert pv.total == 5
        assert pv.total_pages == 3

    def test_view_writes_back_clamped_page(self):
        ctrl = self._ctrl(lambda: [{"id": 1}, {"id": 2}, {"id": 3}])
        ctrl.refresh()
        ctrl.go_to(7)
        assert ctrl.view().page == 2
        assert ctrl.page == 2

    @pytest.mark.parametrize("size", [10, 20])
    def test_page_size_change_resets_page(self, size):
        ctrl = self._ctrl(lambda: [])
        ctrl.go_to(4)
        ctrl.set_page_size(size)
        assert ctrl.page == 1
        assert ctrl.page_size == size
