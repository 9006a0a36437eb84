"""
Gateway behaviour with requests.Session mocked out.
"""
import io
from unittest.mock import MagicMock

import pytest
import requests

from core.api import ApiClient
from core.errors import AuthorizationError, BackendRejection, TransportError


def _response(status=200, body=None, text=None):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    if body is not None:
        resp.content = b"x"
        resp.json.return_value = body
    elif text is not None:
        resp.content = text.encode()
        resp.json.side_effect = ValueError("not json")
        resp.text = text
    else:
        resp.content = b""
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


def _client(session, token="tok-123"):
    return ApiClient("http://backend:8080/", token_provider=lambda: token, timeout=5, session=session)


def test_bearer_header_and_url(session):
    session.request.return_value = _response(body=[{"id": 1}])
    rows = _client(session).faculties.list()

    assert rows == [{"id": 1}]
    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert method == "GET"
    assert url == "http://backend:8080/api/faculties"
    assert kwargs["headers"]["Authorization"] == "Bearer tok-123"
    assert kwargs["timeout"] == 5


def test_no_token_no_authorization_header(session):
    session.request.return_value = _response(body=[])
    _client(session, token=None).departments.list()
    assert "Authorization" not in session.request.call_args.kwargs["headers"]


def test_empty_list_body_is_empty_list(session):
    session.request.return_value = _response()
    assert _client(session).courses.list() == []


def test_wrapped_list_is_unwrapped(session):
    session.request.return_value = _response(body={"content": [{"id": 4}]})
    assert _client(session).programs.list() == [{"id": 4}]


@pytest.mark.parametrize("op,args,method,path", [
    ("get", (3,), "GET", "/api/courses/3"),
    ("create", ({"courseCode": "CSC 111"},), "POST", "/api/courses/create"),
    ("update", (3, {"courseCode": "CSC 111"}), "PUT", "/api/courses/update/3"),
    ("delete", (3,), "DELETE", "/api/courses/delete/3"),
])
def test_crud_paths(session, op, args, method, path):
    session.request.return_value = _response(body={"id": 3})
    getattr(_client(session).courses, op)(*args)
    called_method, url = session.request.call_args.args
    assert called_method == method
    assert url.endswith(path)


@pytest.mark.parametrize("resource,op,args,method,path", [
    ("faculties", "list", (), "GET", "/api/faculties"),
    ("faculties", "update", (7, {"facultyName": "Science"}), "PUT", "/api/faculties/7"),
    ("faculties", "delete", (7,), "DELETE", "/api/faculties/7"),
    ("sessions", "list", (), "GET", "/api/sessions/all"),
    ("sessions", "update", (2, {"sessionName": "2024/2025"}), "PUT", "/api/sessions/2"),
    ("sessions", "delete", (2,), "DELETE", "/api/sessions/2"),
])
def test_faculty_and_session_paths(session, resource, op, args, method, path):
    session.request.return_value = _response(body=[] if op == "list" else {"id": 1})
    getattr(_client(session).resource(resource), op)(*args)
    called_method, url = session.request.call_args.args
    assert called_method == method
    assert url == "http://backend:8080" + path


@pytest.mark.parametrize("text", ["<html><body>Bad gateway</body></html>", "ok"])
def test_non_json_list_body_is_rejected(session, text):
    session.request.return_value = _response(text=text)
    with pytest.raises(BackendRejection, match="Unexpected response"):
        _client(session).faculties.list()


def test_unrelated_object_is_rejected(session):
    session.request.return_value = _response(body={"message": "ok"})
    with pytest.raises(BackendRejection):
        _client(session).departments.list()


def test_401_propagates_without_side_effects(session):
    session.request.return_value = _response(401, body={"message": "Token expired"})
    with pytest.raises(AuthorizationError) as exc:
        _client(session).faculties.list()
    assert exc.value.status == 401
    assert exc.value.message == "Token expired"


def test_rejection_body_passes_through(session):
    session.request.return_value = _response(409, body={"error": "Duplicate course code"})
    with pytest.raises(BackendRejection) as exc:
        _client(session).courses.create({"courseCode": "CSC 111"})
    assert exc.value.message == "Duplicate course code"
    assert exc.value.payload == {"error": "Duplicate course code"}


def test_rejection_without_body(session):
    session.request.return_value = _response(500)
    with pytest.raises(BackendRejection, match="Request failed with status 500"):
        _client(session).courses.delete(1)


def test_timeout_is_transport_error(session):
    session.request.side_effect = requests.Timeout()
    with pytest.raises(TransportError, match="timed out"):
        _client(session).faculties.list()


def test_connection_error_is_transport_error(session):
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(TransportError, match="Network error"):
        _client(session).faculties.list()


def test_upload_sends_multipart_and_parses_report(session):
    session.request.return_value = _response(body={
        "processed": 3, "saved": 2, "skipped": 0, "failed": 1,
        "errors": [{"rowNumber": 3, "message": "Duplicate code"}],
    })
    file = io.BytesIO(b"facultyName,facultyCode\nScience,SCI\n")
    report = _client(session).faculties.upload(file, filename="faculties.csv")

    kwargs = session.request.call_args.kwargs
    assert session.request.call_args.args[1].endswith("/api/upload/faculty")
    assert kwargs["files"]["file"][0] == "faculties.csv"
    assert "Content-Type" not in kwargs["headers"]
    assert report.failed == 1
    assert report.errors[0].row_number == 3


def test_upload_not_offered_for_sessions(session):
    with pytest.raises(NotImplementedError):
        _client(session).sessions.upload(io.BytesIO(b""))


def test_unknown_resource():
    with pytest.raises(KeyError):
        ApiClient("http://x").resource("students")


def test_login_posts_credentials(session):
    session.request.return_value = _response(body={"token": "jwt"})
    assert _client(session, token=None).login({"usernameOrEmail": "a", "password": "b"}) == {"token": "jwt"}
    assert session.request.call_args.args[1].endswith("/api/auth/login")
    assert session.request.call_args.kwargs["json"] == {"usernameOrEmail": "a", "password": "b"}
