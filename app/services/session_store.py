"""
Cookie-backed session storage for the logged-in user.

The whole session lives in one signed cookie. itsdangerous signs and
timestamps the payload; anything that fails verification reads as an
empty session.
"""
from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer
from pydantic import ValidationError
from starlette.requests import Request, cookie_parser
from starlette.responses import Response

from app.logging_config import get_logger
from app.models.user import User
from app.schemas import SESSION_VERSION, SessionData, UserSnapshot

logger = get_logger(component="session")

SESSION_KEY = "user"


class Session:
    """A decoded session; mutate it, then commit or destroy it via the storage."""

    def __init__(self, data: Optional[SessionData] = None):
        self.data = data or SessionData()

    def get(self, key: str):
        if key != SESSION_KEY:
            raise KeyError(key)
        return self.data.user

    def set(self, key: str, user: UserSnapshot) -> None:
        if key != SESSION_KEY:
            raise KeyError(key)
        self.data.user = user


class CookieSessionStorage:
    """Encodes sessions into Set-Cookie values and back."""

    def __init__(
        self,
        secret: str,
        cookie_name: str = "__session",
        max_age: int = 60 * 60 * 24 * 30,
        path: str = "/",
        secure: bool = False,
        same_site: str = "lax",
    ):
        self.serializer = URLSafeTimedSerializer(secret, salt="auth-session")
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.path = path
        self.secure = secure
        self.same_site = same_site

    async def get_session(self, cookie_header: Optional[str]) -> Session:
        """Decode the session from a raw Cookie header."""
        if not cookie_header:
            return Session()

        token = cookie_parser(cookie_header).get(self.cookie_name)
        if not token:
            return Session()

        try:
            payload = self.serializer.loads(token, max_age=self.max_age)
        except BadSignature:
            # SignatureExpired is a BadSignature too
            logger.info("session_rejected", reason="bad_signature")
            return Session()

        try:
            data = SessionData.model_validate(payload)
        except ValidationError:
            logger.info("session_rejected", reason="invalid_payload")
            return Session()

        if data.v != SESSION_VERSION:
            logger.info("session_rejected", reason="version_mismatch", version=data.v)
            return Session()

        return Session(data)

    async def commit_session(self, session: Session) -> str:
        """Return the Set-Cookie value that stores this session."""
        token = self.serializer.dumps(session.data.model_dump(mode="json"))
        return self._cookie(token)

    async def destroy_session(self, session: Session) -> str:
        """Return the Set-Cookie value that removes the session cookie."""
        session.data = SessionData()
        return self._expired_cookie()

    def _cookie(self, value: str) -> str:
        response = Response()
        response.set_cookie(
            self.cookie_name,
            value,
            max_age=self.max_age,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite=self.same_site,
        )
        return response.headers["set-cookie"]

    def _expired_cookie(self) -> str:
        response = Response()
        response.delete_cookie(
            self.cookie_name,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite=self.same_site,
        )
        return response.headers["set-cookie"]


class AuthSession:
    """
    Reads and writes the logged-in user for one request.

    Usage:
        auth_session = await AuthSession.from_request(storage, request)
        user = await auth_session.read_user()
        headers = await auth_session.write_user(user)
    """

    def __init__(self, storage: CookieSessionStorage, session: Session):
        self.storage = storage
        self.session = session

    @classmethod
    async def from_request(cls, storage: CookieSessionStorage, request: Request) -> "AuthSession":
        session = await storage.get_session(request.headers.get("cookie"))
        return cls(storage, session)

    async def read_user(self) -> Optional[UserSnapshot]:
        return self.session.get(SESSION_KEY)

    async def write_user(self, user: User | UserSnapshot) -> dict[str, str]:
        """Store the user and return headers carrying the committed cookie."""
        if not isinstance(user, UserSnapshot):
            user = UserSnapshot.model_validate(user)
        self.session.set(SESSION_KEY, user)
        return {"Set-Cookie": await self.storage.commit_session(self.session)}

    async def clear(self) -> dict[str, str]:
        """Destroy the session and return headers that remove the cookie."""
        return {"Set-Cookie": await self.storage.destroy_session(self.session)}
