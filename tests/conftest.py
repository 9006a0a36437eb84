import pytest

from core.client_storage import ClientStorage
from core.db import get_engine
from core.session_store import SessionStore


@pytest.fixture
def engine(tmp_path):
    return get_engine(f"sqlite:///{tmp_path / 'client_storage.db'}")


@pytest.fixture
def storage(engine):
    return ClientStorage(engine, profile="test")


@pytest.fixture
def store(storage):
    return SessionStore(storage)


@pytest.fixture
def departments():
    return [
        {"id": 1, "deptName": "Computer Science", "deptCode": "CSC"},
        {"id": 2, "deptName": "Mathematics", "deptCode": "MTH"},
    ]


@pytest.fixture
def courses():
    return [
        {"id": 10, "courseCode": "CSC 111", "courseTitle": "Intro to Computing", "level": "Tier I",
         "semester": "FIRST", "department": {"id": 1, "deptName": "Computer Science"}, "prerequisites": []},
        {"id": 11, "courseCode": "CSC 121", "courseTitle": "Programming I", "level": "Tier I",
         "semester": "SECOND", "department": {"id": 1, "deptName": "Computer Science"},
         "prerequisites": [{"id": 10}]},
        {"id": 12, "courseCode": "MTH 101", "courseTitle": "Calculus", "level": "Tier I",
         "semester": "FIRST", "department": {"id": 2, "deptName": "Mathematics"}, "prerequisites": []},
        {"id": 13, "courseCode": "CSC 211", "courseTitle": "Data Structures", "level": "Tier II",
         "semester": "FIRST", "department": {"id": 1, "deptName": "Computer Science"},
         "prerequisites": [{"id": 11}]},
    ]
