# tests/conftest.py
import os
import tempfile
from datetime import datetime, timedelta, timezone

# Point the app at throwaway storage before anything from classroom is imported,
# settings are read once and cached
TEST_ROOT = tempfile.mkdtemp(prefix="classroom-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(TEST_ROOT, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(TEST_ROOT, "uploads")
os.environ["LOG_DIR"] = os.path.join(TEST_ROOT, "logs")
os.environ["BCRYPT_ROUNDS"] = "4"  # Lowest cost bcrypt accepts, keeps the suite fast

import pytest
from fastapi.testclient import TestClient

from classroom.db.base import Base
from classroom.db.session import engine
from classroom.main import app as fastapi_app

PASSWORD = "secret123"


def iso_from_now(**delta) -> str:
    """ISO timestamp relative to now, as the client sends due dates"""
    return (datetime.now(timezone.utc) + timedelta(**delta)).isoformat()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client():
    """A test client over an empty database"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(fastapi_app) as test_client:
        yield test_client


@pytest.fixture
def due_in():
    return iso_from_now


@pytest.fixture
def register_user(client):
    """Register a user and return ``(user, headers)``"""
    def _register(name: str, email: str, role: str):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": PASSWORD, "role": role},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], auth_header(body["token"])
    return _register


@pytest.fixture
def teacher(register_user):
    return register_user("Terry Teacher", "teacher@example.com", "teacher")


@pytest.fixture
def other_teacher(register_user):
    return register_user("Olive Other", "other.teacher@example.com", "teacher")


@pytest.fixture
def student(register_user):
    return register_user("Sam Student", "student@example.com", "student")


@pytest.fixture
def outsider(register_user):
    """A student who never joins the group"""
    return register_user("Olly Outsider", "outsider@example.com", "student")


@pytest.fixture
def group(client, teacher, student):
    """Group "Math101" owned by ``teacher`` with ``student`` as a member"""
    _, teacher_headers = teacher
    _, student_headers = student

    response = client.post("/api/groups", json={"name": "Math101"}, headers=teacher_headers)
    assert response.status_code == 201, response.text
    created = response.json()

    response = client.post("/api/groups/join", json={"joinCode": created["joinCode"]}, headers=student_headers)
    assert response.status_code == 200, response.text
    return created


@pytest.fixture
def create_task(client, teacher):
    """Create a task in a group as ``teacher``; form fields override the defaults"""
    _, teacher_headers = teacher

    def _create(group_id: str, files=None, expected_status: int = 201, **fields):
        data = {
            "title": "HW1",
            "description": "Solve the exercises",
            "dueDate": iso_from_now(days=7),
        }
        data.update(fields)
        response = client.post(
            f"/api/groups/{group_id}/tasks", data=data, files=files, headers=teacher_headers
        )
        assert response.status_code == expected_status, response.text
        return response.json()
    return _create
