"""
Cookie session storage and the per-request AuthSession.
"""
import pytest
from itsdangerous import URLSafeTimedSerializer
from starlette.requests import Request

from app.schemas import UserSnapshot
from app.services.session_store import AuthSession, CookieSessionStorage, Session

SECRET = "session-secret"


def make_request(cookie: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", cookie.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest.fixture
def storage():
    return CookieSessionStorage(secret=SECRET)


@pytest.fixture
def snapshot():
    return UserSnapshot(
        id="row-1",
        user_id="google-123",
        email="ada@example.com",
        name="Ada Lovelace",
        image="",
        provider="google",
    )


async def test_no_cookie_reads_no_user(storage):
    auth_session = await AuthSession.from_request(storage, make_request())

    assert await auth_session.read_user() is None


async def test_written_user_is_read_back(storage, snapshot):
    headers = await AuthSession(storage, Session()).write_user(snapshot)

    set_cookie = headers["Set-Cookie"]
    assert set_cookie.startswith("__session=")
    assert "HttpOnly" in set_cookie
    assert "Path=/" in set_cookie

    cookie = set_cookie.split(";", 1)[0]
    auth_session = await AuthSession.from_request(storage, make_request(cookie))

    assert await auth_session.read_user() == snapshot


async def test_tampered_cookie_reads_no_user(storage, snapshot):
    headers = await AuthSession(storage, Session()).write_user(snapshot)
    cookie = headers["Set-Cookie"].split(";", 1)[0]

    auth_session = await AuthSession.from_request(storage, make_request(cookie[:-2] + "xx"))

    assert await auth_session.read_user() is None


async def test_cookie_signed_with_other_secret_reads_no_user(storage, snapshot):
    other = CookieSessionStorage(secret="someone-else")
    headers = await AuthSession(other, Session()).write_user(snapshot)
    cookie = headers["Set-Cookie"].split(";", 1)[0]

    auth_session = await AuthSession.from_request(storage, make_request(cookie))

    assert await auth_session.read_user() is None


async def test_unknown_payload_version_reads_no_user(storage, snapshot):
    serializer = URLSafeTimedSerializer(SECRET, salt="auth-session")
    token = serializer.dumps({"v": 2, "user": snapshot.model_dump()})

    auth_session = await AuthSession.from_request(storage, make_request(f"__session={token}"))

    assert await auth_session.read_user() is None


async def test_clear_expires_cookie(storage, snapshot):
    headers = await AuthSession(storage, Session()).write_user(snapshot)
    cookie = headers["Set-Cookie"].split(";", 1)[0]
    auth_session = await AuthSession.from_request(storage, make_request(cookie))

    cleared = await auth_session.clear()

    assert cleared["Set-Cookie"].startswith("__session=")
    assert "Max-Age=0" in cleared["Set-Cookie"]
    assert "01 Jan 1970 00:00:00 GMT" in cleared["Set-Cookie"]
    assert "HttpOnly" in cleared["Set-Cookie"]
    assert await auth_session.read_user() is None


async def test_secure_cookie_attribute():
    storage = CookieSessionStorage(secret=SECRET, secure=True, same_site="strict")

    set_cookie = await storage.commit_session(Session())

    assert "Secure" in set_cookie
    assert "SameSite=strict" in set_cookie


def test_session_only_holds_the_user_key():
    session = Session()

    with pytest.raises(KeyError):
        session.get("cart")


async def test_committed_cookie_uses_configured_max_age(snapshot):
    storage = CookieSessionStorage(secret=SECRET, cookie_name="sid", max_age=3600)

    headers = await AuthSession(storage, Session()).write_user(snapshot)

    set_cookie = headers["Set-Cookie"]
    assert set_cookie.startswith("sid=")
    assert "Max-Age=3600" in set_cookie
    assert "SameSite=lax" in set_cookie
    assert "Secure" not in set_cookie
