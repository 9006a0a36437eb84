import pytest
from hypothesis import given, strategies as st

from core.course_rules import (
    DEFAULT_NUMBERING_BANDS,
    category_for_department,
    find_duplicate_code,
    is_valid_course_code,
    numbering_bands,
    prerequisite_candidates,
    validate_course_code,
    validate_prerequisites,
)


@pytest.mark.parametrize("code", ["CSC 101", "csc 101", "CSCI 999", "Mth 110"])
def test_structurally_valid_codes(code):
    assert is_valid_course_code(code)


@pytest.mark.parametrize("code", ["C 101", "CSCI1010", "csc-101", "CSC  101", "CSC 1010", "CSCIE 101", "CSC 101\n", " CSC 101", "", None])
def test_structurally_invalid_codes(code):
    assert not is_valid_course_code(code)


def test_required_message():
    assert validate_course_code("", "Tier I", "FIRST") == "Course code is required"


def test_structural_message():
    msg = validate_course_code("csc-101", "Tier I", "FIRST")
    assert msg.startswith("Course code must look like ABC 111")


@given(n=st.integers(min_value=111, max_value=119))
def test_tier_one_first_band_accepts(n):
    assert validate_course_code(f"CSC {n}", "Tier I", "FIRST") is None


@pytest.mark.parametrize("n", [100, 110, 120, 121, 211])
def test_tier_one_first_band_rejects(n):
    msg = validate_course_code(f"CSC {n}", "Tier I", "FIRST")
    assert msg == "Invalid code: For Tier I FIRST semester, code must be between 111 and 119"


def test_tier_three_second_band():
    assert validate_course_code("CSC 325", "Tier III", "SECOND") is None
    assert "between 321 and 329" in validate_course_code("CSC 315", "Tier III", "SECOND")


def test_unmapped_level_skips_band_check():
    assert validate_course_code("CSC 999", "Postgraduate", "FIRST") is None
    assert validate_course_code("CSC 999", None, None) is None


def test_numbering_band_overrides_merge_with_defaults():
    bands = numbering_bands({"NCE I": {"first": 110, "second": 120}})
    assert bands["NCE I"] == {"FIRST": 110, "SECOND": 120}
    assert bands["Tier II"] == DEFAULT_NUMBERING_BANDS["Tier II"]
    assert validate_course_code("EDU 115", "NCE I", "FIRST", bands=bands) is None


class TestDuplicates:
    rows = [{"id": 1, "courseCode": "MTH 101"}, {"id": 2, "courseCode": "CSC 111"}]

    def test_case_and_whitespace_insensitive(self):
        assert find_duplicate_code(" mth 101 ", self.rows)["id"] == 1

    def test_editing_record_excludes_itself(self):
        assert find_duplicate_code("mth 101", self.rows, exclude_id=1) is None

    def test_other_record_still_conflicts_when_editing(self):
        assert find_duplicate_code("mth 101", self.rows, exclude_id=2)["id"] == 1

    def test_blank_code_never_duplicates(self):
        assert find_duplicate_code("  ", self.rows) is None


class TestPrerequisites:
    def test_self_reference_rejected(self, courses):
        assert validate_prerequisites(10, [10], courses) == "A course cannot be its own prerequisite"

    def test_cycle_rejected(self, courses):
        # 13 <- 11 <- 10 already; making 10 depend on 13 closes the loop
        assert validate_prerequisites(10, [13], courses) == "Prerequisites would create a cycle"

    def test_acyclic_accepted(self, courses):
        assert validate_prerequisites(13, [10, 11], courses) is None

    def test_new_course_cannot_cycle(self, courses):
        assert validate_prerequisites(None, [10, 11], courses) is None

    def test_candidates_are_same_department(self, courses):
        ids = [c["id"] for c in prerequisite_candidates(courses, 1)]
        assert ids == [10, 11, 13]

    def test_candidates_search_and_exclude(self, courses):
        ids = [c["id"] for c in prerequisite_candidates(courses, "1", search="prog", exclude_id=13)]
        assert ids == [11]

    def test_no_department_no_candidates(self, courses):
        assert prerequisite_candidates(courses, "") == []


def test_category_follows_department(departments):
    assert category_for_department(departments, "2") == "Mathematics"
    assert category_for_department(departments, 99) == ""
