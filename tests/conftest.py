"""
NITC Blogs test fixtures

Every test gets a fresh app over an in-memory SQLite database, a recording
mail transport (so raw tokens can be read back the way a user would read
them from their inbox) and a controllable clock.
"""
import re
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio

from nitc_blogs.core.config import Settings
from nitc_blogs.db.users import UserRepository
from nitc_blogs.main import create_app
from nitc_blogs.services.auth import AuthService
from nitc_blogs.services.email import EmailDeliveryError, OutboundEmail

TOKEN_IN_URL = re.compile(r"/auth/(confirmSignup|resetPassword)/([0-9a-f]{64})")

PASSWORD = "CorrectHorse42"


class FakeClock:
    def __init__(self):
        self.now = datetime.now(tz=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


class RecordingTransport:
    def __init__(self):
        self.sent: list[OutboundEmail] = []
        self.fail = False

    async def deliver(self, message: OutboundEmail) -> None:
        if self.fail:
            raise EmailDeliveryError("SMTP server unavailable")
        self.sent.append(message)

    def last_token(self, kind: str) -> str:
        for message in reversed(self.sent):
            match = TOKEN_IN_URL.search(message.text)
            if match and match.group(1) == kind:
                return match.group(2)
        raise AssertionError(f"no {kind} email was sent")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite+aiosqlite://",
        JWT_SECRET_KEY="test-secret-key-for-testing-only",
        BCRYPT_ROUNDS=4,
        RATE_LIMIT_ENABLED=False,
        METRICS_ENABLED=False,
        ENVIRONMENT="development",
        CLIENT_URL="http://client.test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mailbox() -> RecordingTransport:
    return RecordingTransport()


@pytest_asyncio.fixture
async def app(settings, clock, mailbox):
    application = create_app(settings, clock=clock)
    application.state.auth.mailer.transport = mailbox
    await application.state.db.create_all()
    yield application
    await application.state.db.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.db.sessionmaker() as session:
        yield session


@pytest.fixture
def auth_service(app, settings, db_session) -> AuthService:
    return AuthService(UserRepository(db_session), app.state.auth, settings)


@pytest.fixture
def register(client, mailbox):
    """Sign up and confirm a user through the HTTP surface."""

    async def _register(email: str = "a@nitc.ac.in", name: str = "Asha Menon", password: str = PASSWORD):
        r = await client.post(
            "/api/v1/users/signup",
            json={"name": name, "email": email, "password": password, "passwordConfirm": password},
        )
        assert r.status_code == 200, r.text
        r = await client.post(f"/api/v1/users/confirmSignup/{mailbox.last_token('confirmSignup')}")
        assert r.status_code == 200, r.text

    return _register


@pytest.fixture
def login(client):
    async def _login(email: str = "a@nitc.ac.in", password: str = PASSWORD) -> str:
        r = await client.post("/api/v1/users/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["token"]

    return _login


@pytest.fixture
def make_admin(app):
    async def _make_admin(email: str, branch: str = "all", semester: str = "all") -> None:
        async with app.state.db.sessionmaker() as session:
            users = UserRepository(session)
            user = await users.get_by_email(email)
            user.is_admin = True
            user.admin_branch = branch
            user.admin_semester = semester
            await users.save(user)

    return _make_admin


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_header():
    return bearer
