import json
import os
import tempfile

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError

# ------------------------------------------------------------------
# FORCE TESTING CONFIG
# Must happen BEFORE importing app.* so settings and the engine see it.
# ------------------------------------------------------------------
_DB_PATH = os.path.join(tempfile.gettempdir(), f"lms_identity_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("REDIS_URL", None)

from app.api.deps import get_backend, get_hr_client  # noqa: E402
from app.core.database import AsyncSessionLocal, drop_db, init_db  # noqa: E402
from app.core.session import MemorySessionBackend, SessionHolder  # noqa: E402
from app.main import app  # noqa: E402
from app.services.hr_client import HRClient  # noqa: E402
from app.services.profile_store import DepartmentStore, ProfileStore  # noqa: E402

HR_LOGIN_URL = "https://hr.test/api/login"
HR_ROSTER_URL = "https://hr.test/api/employees"


class FakeHR:
    """Scriptable stand-in for the HR service, served through httpx.MockTransport."""

    def __init__(self):
        self.login_status = 404
        self.login_body: dict = {"error": "not found"}
        self.login_error: Exception | None = None
        self.roster: list = []
        self.roster_status = 200
        self.login_calls: list[dict] = []

    def employee(self, **fields):
        self.login_status = 200
        self.login_body = {"success": True, "employee": fields}

    def reject(self, status: int, error: str = "rejected"):
        self.login_status = status
        self.login_body = {"error": error}

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/login"):
            self.login_calls.append(json.loads(request.content))
            if self.login_error is not None:
                raise self.login_error
            return httpx.Response(self.login_status, json=self.login_body)
        if request.url.path.endswith("/employees"):
            return httpx.Response(self.roster_status, json=self.roster)
        return httpx.Response(404)


@pytest_asyncio.fixture
async def setup_db():
    await drop_db()
    await init_db()
    yield


@pytest_asyncio.fixture
async def db_session(setup_db):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def store(db_session):
    return ProfileStore(db_session)


@pytest.fixture
def departments(db_session):
    return DepartmentStore(db_session)


@pytest.fixture
def fake_hr():
    return FakeHR()


@pytest.fixture
def hr_client(fake_hr):
    return HRClient(
        login_url=HR_LOGIN_URL,
        roster_url=HR_ROSTER_URL,
        timeout=1,
        transport=httpx.MockTransport(fake_hr.handler),
    )


@pytest.fixture
def session_backend():
    return MemorySessionBackend()


@pytest.fixture
def session_holder(session_backend):
    return SessionHolder(session_backend, "test-session")


@pytest_asyncio.fixture
async def client(setup_db, hr_client, session_backend):
    app.dependency_overrides[get_hr_client] = lambda: hr_client
    app.dependency_overrides[get_backend] = lambda: session_backend
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


class BrokenSession:
    """AsyncSession stand-in whose database has gone away."""

    def __init__(self):
        self.rolled_back = False

    def add(self, instance):
        pass

    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is unavailable"))

    async def merge(self, instance):
        return instance

    async def commit(self):
        raise OperationalError("COMMIT", {}, Exception("database is unavailable"))

    async def rollback(self):
        self.rolled_back = True


@pytest.fixture
def broken_session():
    return BrokenSession()
