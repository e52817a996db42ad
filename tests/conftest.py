# tests/conftest.py
import os
import tempfile

# Settings and the loguru sinks are built at import time
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "student-records-test-logs"))
os.environ.setdefault("REQUEST_TIMEOUT_SECONDS", "0")

import pytest
from httpx import AsyncClient, ASGITransport

from student_records.core.database import Database
from student_records.main import create_app


@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'students.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session_factory() as s:
        yield s


@pytest.fixture
async def client(database):
    app = create_app(database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def student_payload():
    return {
        "first_name": "Ann",
        "last_name": "Lee",
        "email": "a@x.com",
        "dob": "2000-01-01",
        "marks": [{"subject": "Math", "marks": 90, "term": "Final"}],
    }


@pytest.fixture
def make_student(client):
    async def _make(**overrides) -> dict:
        payload = {"first_name": "Student", "email": "s@x.com", "dob": "2001-05-10"}
        payload.update(overrides)
        r = await client.post("/students", json=payload)
        assert r.status_code == 201, r.text
        return r.json()["student"]

    return _make
