"""
Authenticator: configuration checks and user lookup-or-create.
"""
import pytest
from sqlalchemy import func, select

from app.exceptions import (
    AuthConfigurationError,
    MissingEmailError,
    UnknownStrategyError,
    UserCreationError,
)
from app.models.user import User
from app.schemas import GoogleProfile
from app.services.authenticator import Authenticator
from app.services.user_service import UserService

from conftest import make_settings


@pytest.mark.parametrize(
    "missing",
    ["SESSION_SECRET", "GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "CLIENT_URL"],
)
def test_missing_setting_fails_at_construction(missing):
    settings = make_settings(**{missing: None})

    with pytest.raises(AuthConfigurationError) as exc_info:
        Authenticator(settings)

    assert missing in str(exc_info.value)


def test_google_redirect_uri_built_from_client_url():
    authenticator = Authenticator(make_settings(CLIENT_URL="https://login.example.com/"))

    strategy = authenticator.get_strategy("google")

    assert strategy.redirect_uri == "https://login.example.com/auth/google/callback"


def test_unknown_strategy():
    authenticator = Authenticator(make_settings())

    with pytest.raises(UnknownStrategyError):
        authenticator.get_strategy("github")


@pytest.fixture
def authenticator(app):
    return app.state.authenticator


@pytest.fixture
def count_creates(monkeypatch):
    calls = []
    original = UserService.create

    async def spy(self, **kwargs):
        calls.append(kwargs)
        return await original(self, **kwargs)

    monkeypatch.setattr(UserService, "create", spy)
    return calls


async def test_existing_email_returns_row_without_insert(authenticator, db, count_creates):
    existing = await UserService(db).create(
        user_id="google-old",
        email="ada@example.com",
        name="Ada (old name)",
        image="",
        provider="google",
    )
    count_creates.clear()

    profile = GoogleProfile(
        id="google-123",
        display_name="Ada Lovelace",
        emails=["ada@example.com"],
        photos=["https://img.example.com/new.png"],
    )
    user = await authenticator.verify(profile, db)

    assert user.id == existing.id
    assert count_creates == []
    # Not refreshed from the profile
    assert user.name == "Ada (old name)"
    assert user.user_id == "google-old"
    assert user.image == ""


async def test_new_email_inserts_once(authenticator, db, profile, count_creates):
    user = await authenticator.verify(profile, db)

    assert len(count_creates) == 1
    assert user.user_id == "google-123"
    assert user.email == "ada@example.com"
    assert user.name == "Ada Lovelace"
    assert user.image == "https://img.example.com/ada.png"
    assert user.provider == "google"
    assert user.password == ""

    total = await db.scalar(select(func.count()).select_from(User))
    assert total == 1


async def test_missing_photo_stored_as_empty_string(authenticator, db):
    profile = GoogleProfile(id="google-9", display_name="No Photo", emails=["np@example.com"])

    user = await authenticator.verify(profile, db)

    assert user.image == ""


async def test_repeat_login_keeps_single_row(authenticator, db, profile):
    first = await authenticator.verify(profile, db)
    second = await authenticator.verify(profile, db)

    assert first.id == second.id
    total = await db.scalar(select(func.count()).select_from(User))
    assert total == 1


async def test_insert_without_row_is_fatal(authenticator, db, profile, monkeypatch):
    async def no_row(self, **kwargs):
        return None

    monkeypatch.setattr(UserService, "create", no_row)

    with pytest.raises(UserCreationError):
        await authenticator.verify(profile, db)


async def test_authenticate_uses_strategy_profile(authenticator, db, fake_strategy):
    user = await authenticator.authenticate("google", request=None, db=db)

    assert fake_strategy.calls == 1
    assert user.email == "ada@example.com"


async def test_profiles_without_email_are_never_merged(authenticator, db, count_creates):
    first = GoogleProfile(id="google-A", display_name="First")
    second = GoogleProfile(id="google-B", display_name="Second")

    with pytest.raises(MissingEmailError):
        await authenticator.verify(first, db)
    with pytest.raises(MissingEmailError):
        await authenticator.verify(second, db)

    assert count_creates == []
    total = await db.scalar(select(func.count()).select_from(User))
    assert total == 0
