"""
Screen rendering, driven through streamlit's AppTest harness.

AppTest scripts run as standalone pages, so each one does its own imports.
"""
from unittest.mock import MagicMock, patch

from streamlit.testing.v1 import AppTest

from screens.login import _sign_up_tab


def _upload_report_app():
    import streamlit as st
    from core.bulk_import import UploadReport
    from core.ui import render_upload_report

    n_errors = st.session_state.get("n_errors", 0)
    render_upload_report(UploadReport.from_payload({
        "processed": 5,
        "saved": 5 - n_errors,
        "skipped": 0,
        "failed": n_errors,
        "errors": [{"rowNumber": i + 2, "message": f"problem {i}"} for i in range(n_errors)],
    }))


def _department_list_app():
    import streamlit as st
    from core.api import ApiClient
    from core.entities import DEPARTMENT
    from core.list_engine import ListController
    from screens.departments import _fields, _filters
    from screens.management import render_management

    class _AdminStore:
        roles = ["ADMIN"]

    if "list:departments" not in st.session_state:
        st.session_state["session_store"] = _AdminStore()
        st.session_state["api_client"] = ApiClient("http://backend.invalid")
        ctrl = ListController(
            name="departments",
            fetch=lambda: [
                {"id": 1, "deptName": "Computer Science", "deptCode": "CSC"},
                {"id": 2, "deptName": "Mathematics", "deptCode": "MTH"},
            ],
            predicates=DEPARTMENT.predicates,
        )
        ctrl.refresh()
        st.session_state["list:departments"] = ctrl
    render_management(DEPARTMENT, "Departments", _filters, _fields)


def test_upload_report_without_issues_says_so():
    at = AppTest.from_function(_upload_report_app)
    at.run()

    assert not at.exception
    assert "No errors or duplicates." in [c.value for c in at.caption]
    assert len(at.dataframe) == 0


def test_upload_report_lists_issues_in_backend_order():
    at = AppTest.from_function(_upload_report_app)
    at.session_state["n_errors"] = 3
    at.run()

    assert not at.exception
    assert "No errors or duplicates." not in [c.value for c in at.caption]
    frame = at.dataframe[0].value
    assert list(frame["Row"]) == [2, 3, 4]
    assert list(frame["Message"]) == ["problem 0", "problem 1", "problem 2"]


def test_filter_with_no_match_shows_empty_state():
    at = AppTest.from_function(_department_list_app)
    at.run()
    assert not at.exception
    assert "No records found." not in [i.value for i in at.info]
    assert len(at.dataframe[0].value) == 2

    at.text_input(key="dept_q").input("zoology").run()

    assert not at.exception
    assert "No records found." in [i.value for i in at.info]
    assert len(at.dataframe) == 0


def _run_sign_up(has_login_role):
    store = MagicMock()
    store.is_authenticated.return_value = True
    store.has_any_role.return_value = has_login_role
    with patch("screens.login.st") as st:
        st.session_state = {}
        st.form_submit_button.return_value = True
        st.text_input.side_effect = ["newadmin", "new@uni.edu", "s3cret", "s3cret"]
        _sign_up_tab(store, MagicMock())
    return store, st


def test_sign_up_without_admin_role_logs_out_with_notice():
    store, st = _run_sign_up(has_login_role=False)

    store.logout.assert_called_once()
    assert st.session_state["login_flash"] == (
        "Account created. An administrator must grant access before you can log in.")
    st.rerun.assert_called_once()


def test_sign_up_with_admin_role_keeps_session():
    store, st = _run_sign_up(has_login_role=True)

    store.logout.assert_not_called()
    assert st.session_state["login_flash"] == "Account created."
    st.rerun.assert_called_once()
