"""Authentication dependencies for FastAPI."""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from regulon.core.config import get_settings
from regulon.core.errors import AccessDenied, AuthRejected, to_http_exception
from regulon.core.identity import SessionContext, SessionSnapshot, build_session_context
from regulon.core.schemas_identity import AppRole, ResolvedIdentity

logger = logging.getLogger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)

DRAFTING_ROLES = frozenset({AppRole.MANAGER, AppRole.ADMIN})


class AuthContext:
    """Context object containing authenticated user info."""

    def __init__(self, user_id: str, token: str, identity: ResolvedIdentity, email: Optional[str] = None):
        self.user_id = user_id
        self.email = email
        self.token = token
        self.identity = identity

    @property
    def roles(self) -> list[AppRole]:
        return self.identity.roles

    def can_draft(self) -> bool:
        return self.identity.has_any_role(DRAFTING_ROLES)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(user_id=self.user_id, email=self.email, identity=self.identity)


def get_session_context(request: Request) -> SessionContext:
    """Session boundary created at startup; built lazily if the app skipped lifespan."""
    context = getattr(request.app.state, "session_context", None)
    if context is None:
        context = build_session_context(get_settings().IDENTITY_TIMEOUT_SECONDS)
        request.app.state.session_context = context
    return context


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: SessionContext = Depends(get_session_context),
) -> Optional[AuthContext]:
    """
    Validate the bearer token with Supabase Auth and resolve identity.

    Returns None if no valid auth is present, if the token is rejected, or if
    identity resolution overruns its deadline.
    """
    if not credentials:
        return None

    token = credentials.credentials

    try:
        from regulon.db.supabase_client import get_supabase

        client = get_supabase()
        auth_response = await asyncio.to_thread(client.auth.get_user, token)
    except Exception as e:
        logger.warning(f"Auth error: {e}")
        return None

    if not auth_response or not auth_response.user:
        return None

    user_id = str(auth_response.user.id)
    email = auth_response.user.email

    snapshot = await session.snapshot(user_id, email)
    if not snapshot.is_authenticated:
        return None

    return AuthContext(user_id=user_id, token=token, identity=snapshot.identity, email=email)


async def require_auth(
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> AuthContext:
    """Require authentication. Raises 401 if not authenticated."""
    if not auth:
        raise to_http_exception(AuthRejected("Not authenticated"))
    return auth


async def require_function_auth(
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> Optional[AuthContext]:
    """Bearer token is optional unless ENFORCE_FUNCTION_AUTH is set."""
    if get_settings().ENFORCE_FUNCTION_AUTH and not auth:
        raise to_http_exception(AuthRejected("Missing or invalid authorization token"))
    return auth


async def require_drafting_access(
    auth: Optional[AuthContext] = Depends(require_function_auth),
) -> Optional[AuthContext]:
    """When auth is enforced, only manager or admin accounts may draft."""
    if get_settings().ENFORCE_FUNCTION_AUTH and auth is not None and not auth.can_draft():
        raise to_http_exception(AccessDenied("Drafting is restricted to CA (manager) or admin accounts"))
    return auth


def origin_allowed(origin: Optional[str]) -> bool:
    """Whether an Origin passes the allow-list. Requests without one always pass."""
    allowed = get_settings().allowed_origins
    return not allowed or not origin or origin in allowed


async def check_origin(origin: Optional[str] = Header(None)) -> None:
    """Reject browser requests from origins outside the configured allow-list."""
    if not origin_allowed(origin):
        raise to_http_exception(AccessDenied("Origin not allowed"))
