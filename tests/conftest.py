# tests/conftest.py
import httpx
import pytest
from starlette.responses import RedirectResponse

from app.config import Settings
from app.main import create_app
from app.models.base import Base
from app.models.user import User  # noqa: F401 - registers the table
from app.schemas import GoogleProfile


def make_settings(**overrides) -> Settings:
    values = dict(
        SESSION_SECRET="test-session-secret",
        GOOGLE_CLIENT_ID="test-client-id",
        GOOGLE_CLIENT_SECRET="test-client-secret",
        CLIENT_URL="http://testserver",
        DATABASE_URL="sqlite+aiosqlite://",
        TEST=True,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeGoogleStrategy:
    """Stands in for Google: no network, returns a fixed profile."""

    name = "google"

    def __init__(self, profile: GoogleProfile):
        self.profile = profile
        self.calls = 0

    async def challenge(self, request):
        return RedirectResponse("https://accounts.example.test/o/oauth2/auth", status_code=302)

    async def fetch_profile(self, request):
        self.calls += 1
        return self.profile


@pytest.fixture
def profile():
    return GoogleProfile(
        id="google-123",
        display_name="Ada Lovelace",
        emails=["ada@example.com"],
        photos=["https://img.example.com/ada.png"],
    )


@pytest.fixture
def fake_strategy(profile):
    return FakeGoogleStrategy(profile)


@pytest.fixture
async def make_app(fake_strategy):
    """Build apps with their own in-memory database and the fake strategy."""
    engines = []

    async def _make(**overrides):
        app = create_app(make_settings(**overrides))
        app.state.authenticator.use(fake_strategy)
        async with app.state.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        engines.append(app.state.engine)
        return app

    yield _make

    for engine in engines:
        await engine.dispose()


@pytest.fixture
async def app(make_app):
    return await make_app()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
async def db(app):
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture
def login(client):
    """Run the OAuth callback; returns a Cookie header for the new session."""

    async def _login() -> str:
        r = await client.get("/auth/google/callback", params={"code": "abc", "state": "xyz"})
        assert r.status_code == 302
        # Tests pass cookies explicitly
        client.cookies.clear()
        return r.headers["set-cookie"].split(";", 1)[0]

    return _login
