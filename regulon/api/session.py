"""Session endpoints: resolved identity, landing decision and route guard."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from regulon.core.auth_middleware import (
    AuthContext,
    get_current_user,
    get_session_context,
    require_auth,
)
from regulon.core.identity import SessionContext, SessionSnapshot
from regulon.core.route_guard import (
    ROUTE_POLICIES,
    Destination,
    LandingState,
    check_route_access,
    decide_landing,
)
from regulon.core.schemas_identity import IdentityResponse, PersonaUpdateRequest
from regulon.db.user_personas import set_user_persona

router = APIRouter(prefix="/session", tags=["session"])


class LandingResponse(BaseModel):
    state: LandingState
    redirect_to: Optional[Destination] = None
    return_to: Optional[str] = None


class RouteAccessResponse(BaseModel):
    path: str
    allowed: bool
    state: LandingState
    redirect_to: Optional[Destination] = None
    return_to: Optional[str] = None


def _snapshot(auth: Optional[AuthContext]) -> SessionSnapshot:
    return auth.snapshot() if auth else SessionSnapshot.logged_out()


@router.get("/identity", response_model=IdentityResponse)
async def get_identity(auth: AuthContext = Depends(require_auth)) -> IdentityResponse:
    """Roles, primary role, persona and verification for the caller."""
    return IdentityResponse.from_identity(auth.identity)


@router.get("/landing", response_model=LandingResponse)
async def get_landing(
    requested_path: Optional[str] = Query(None, alias="from"),
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> LandingResponse:
    """Where the landing router sends the caller."""
    decision = decide_landing(_snapshot(auth), requested_path)
    return LandingResponse(
        state=decision.state,
        redirect_to=decision.redirect_to,
        return_to=decision.return_to,
    )


@router.get("/route-access", response_model=RouteAccessResponse)
async def get_route_access(
    path: str = Query(..., description="Dashboard path, e.g. /app/ca-dashboard"),
    auth: Optional[AuthContext] = Depends(get_current_user),
) -> RouteAccessResponse:
    """Apply a dashboard route's allow-lists to the caller."""
    policy = ROUTE_POLICIES.get(path)
    if policy is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown route")

    decision = check_route_access(_snapshot(auth), policy, requested_path=path)
    return RouteAccessResponse(
        path=path,
        allowed=decision.allowed,
        state=decision.state,
        redirect_to=decision.redirect_to,
        return_to=decision.return_to,
    )


@router.put("/persona", response_model=IdentityResponse)
async def choose_persona(
    request: PersonaUpdateRequest,
    auth: AuthContext = Depends(require_auth),
    session: SessionContext = Depends(get_session_context),
) -> IdentityResponse:
    """Role chooser: store a persona, then re-resolve the caller's identity."""
    await set_user_persona(auth.user_id, request.persona)
    snapshot = await session.refresh(auth.user_id, auth.email)
    if snapshot.identity is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity could not be refreshed. Please retry.",
        )
    return IdentityResponse.from_identity(snapshot.identity)
