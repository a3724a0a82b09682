"""Tests for authentication dependencies."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from regulon.core.auth_middleware import (
    AuthContext,
    check_origin,
    get_current_user,
    require_auth,
    require_drafting_access,
    require_function_auth,
)
from regulon.core.identity import SessionSnapshot
from regulon.core.schemas_identity import AppRole, Persona, ResolvedIdentity

CREDENTIALS = HTTPAuthorizationCredentials(scheme="Bearer", credentials="jwt-token")


def _identity(*roles):
    return ResolvedIdentity(user_id="user-1", roles=list(roles))


def _supabase_user(user_id="user-1", email="user@example.com"):
    sb = MagicMock()
    sb.auth.get_user.return_value = MagicMock(user=MagicMock(id=user_id, email=email))
    return sb


@pytest.fixture
def session():
    session = MagicMock()
    session.snapshot = AsyncMock(
        return_value=SessionSnapshot(
            user_id="user-1",
            email="user@example.com",
            identity=ResolvedIdentity(
                user_id="user-1", roles=[AppRole.MANAGER], persona=Persona.EXTERNAL_CA
            ),
        )
    )
    return session


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_no_credentials(self, session):
        assert await get_current_user(None, session) is None
        session.snapshot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_valid_token_resolves_identity(self, session):
        with patch("regulon.db.supabase_client.get_supabase", return_value=_supabase_user()) as sb:
            auth = await get_current_user(CREDENTIALS, session)

        sb.return_value.auth.get_user.assert_called_once_with("jwt-token")
        session.snapshot.assert_awaited_once_with("user-1", "user@example.com")
        assert auth.user_id == "user-1"
        assert auth.token == "jwt-token"
        assert auth.roles == [AppRole.MANAGER]
        assert auth.can_draft() is True

    @pytest.mark.asyncio
    async def test_rejected_token(self, session):
        sb = MagicMock()
        sb.auth.get_user.side_effect = Exception("invalid JWT")

        with patch("regulon.db.supabase_client.get_supabase", return_value=sb):
            assert await get_current_user(CREDENTIALS, session) is None

    @pytest.mark.asyncio
    async def test_identity_deadline_overrun_is_no_session(self, session):
        session.snapshot.return_value = SessionSnapshot.logged_out()

        with patch("regulon.db.supabase_client.get_supabase", return_value=_supabase_user()):
            assert await get_current_user(CREDENTIALS, session) is None


class TestRequireDependencies:
    @pytest.mark.asyncio
    async def test_require_auth_rejects_anonymous(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_auth(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_function_auth_optional_by_default(self, settings_factory):
        with patch(
            "regulon.core.auth_middleware.get_settings",
            return_value=settings_factory(ENFORCE_FUNCTION_AUTH=False),
        ):
            assert await require_function_auth(None) is None

    @pytest.mark.asyncio
    async def test_function_auth_enforced(self, settings_factory):
        with patch(
            "regulon.core.auth_middleware.get_settings",
            return_value=settings_factory(ENFORCE_FUNCTION_AUTH=True),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await require_function_auth(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_drafting_requires_manager_or_admin_when_enforced(self, settings_factory):
        user = AuthContext(user_id="user-1", token="t", identity=_identity(AppRole.USER))
        admin = AuthContext(user_id="user-2", token="t", identity=_identity(AppRole.ADMIN))

        with patch(
            "regulon.core.auth_middleware.get_settings",
            return_value=settings_factory(ENFORCE_FUNCTION_AUTH=True),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await require_drafting_access(user)
            assert await require_drafting_access(admin) is admin

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_drafting_roles_not_checked_when_not_enforced(self, settings_factory):
        user = AuthContext(user_id="user-1", token="t", identity=_identity(AppRole.USER))

        with patch(
            "regulon.core.auth_middleware.get_settings",
            return_value=settings_factory(ENFORCE_FUNCTION_AUTH=False),
        ):
            assert await require_drafting_access(user) is user


class TestCheckOrigin:
    @pytest.mark.asyncio
    async def test_empty_allow_list_allows_all(self, settings_factory):
        with patch(
            "regulon.core.auth_middleware.get_settings",
            return_value=settings_factory(ALLOWED_ORIGINS=""),
        ):
            await check_origin("https://anywhere.example")

    @pytest.mark.asyncio
    async def test_listed_origin_allowed_and_missing_origin_ignored(self, settings_factory):
        with patch(
            "regulon.core.auth_middleware.get_settings",
            return_value=settings_factory(ALLOWED_ORIGINS="https://regulon.app"),
        ):
            await check_origin("https://regulon.app")
            await check_origin(None)

    @pytest.mark.asyncio
    async def test_unlisted_origin_rejected(self, settings_factory):
        with patch(
            "regulon.core.auth_middleware.get_settings",
            return_value=settings_factory(ALLOWED_ORIGINS="https://regulon.app"),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await check_origin("https://evil.example")

        assert exc_info.value.status_code == 403
