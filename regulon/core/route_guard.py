"""Landing router and route-scoped guard.

Routing "errors" are modelled as alternate destinations: an account is never
shown an error page for a role or persona mismatch, it is redirected to login,
the role chooser, the verification flow or a low-privilege dashboard.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from regulon.core.identity import SessionSnapshot
from regulon.core.schemas_identity import (
    VERIFICATION_REQUIRED_PERSONAS,
    AppRole,
    Persona,
)


class LandingState(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    NEEDS_ROLE_SELECTION = "needs_role_selection"
    NEEDS_VERIFICATION = "needs_verification"
    LANDED = "landed"


class Destination(str, Enum):
    LOGIN = "/auth"
    ROLE_CHOOSER = "/auth?mode=signup"
    VERIFICATION = "/app/verification"
    LANDING = "/app"
    ADMIN_DASHBOARD = "/app/admin-dashboard"
    LEGAL_DASHBOARD = "/app/legal-dashboard"
    CA_DASHBOARD = "/app/ca-dashboard"
    CA_FIRM_DASHBOARD = "/app/ca-firm-dashboard"
    COMPANY_DASHBOARD = "/app/dashboard"
    UNIVERSITY_DASHBOARD = "/app/university"


@dataclass(frozen=True)
class LandingDecision:
    state: LandingState
    redirect_to: Optional[Destination] = None
    return_to: Optional[str] = None


PERSONA_DESTINATIONS: dict[Persona, Destination] = {
    Persona.ADMIN: Destination.ADMIN_DASHBOARD,
    Persona.IN_HOUSE_LAWYER: Destination.LEGAL_DASHBOARD,
    Persona.EXTERNAL_CA: Destination.CA_DASHBOARD,
    Persona.IN_HOUSE_CA: Destination.CA_DASHBOARD,
    Persona.CA_FIRM: Destination.CA_FIRM_DASHBOARD,
    Persona.COMPANY_OWNER: Destination.COMPANY_DASHBOARD,
}


def persona_destination(persona: Persona) -> Destination:
    """Dashboard for a persona. Every member must have an entry."""
    try:
        return PERSONA_DESTINATIONS[persona]
    except KeyError:
        raise ValueError(f"Unhandled persona: {persona!r}") from None


def role_destination(roles: list[AppRole]) -> Destination:
    """Dashboard for legacy accounts that only carry roles."""
    if AppRole.ADMIN in roles:
        return Destination.ADMIN_DASHBOARD
    if AppRole.MANAGER in roles:
        return Destination.CA_DASHBOARD
    return Destination.COMPANY_DASHBOARD


def needs_verification(snapshot: SessionSnapshot) -> bool:
    identity = snapshot.identity
    if identity is None or identity.persona is None:
        return False
    return identity.persona in VERIFICATION_REQUIRED_PERSONAS and not identity.is_verified


def decide_landing(
    snapshot: SessionSnapshot, requested_path: Optional[str] = None
) -> LandingDecision:
    """Pick the single landing destination for a navigation attempt.

    Rules are evaluated in a fixed order; verification is checked before any
    persona or role dispatch.
    """
    if snapshot.loading:
        return LandingDecision(state=LandingState.LOADING)

    if not snapshot.is_authenticated:
        return LandingDecision(
            state=LandingState.UNAUTHENTICATED,
            redirect_to=Destination.LOGIN,
            return_to=requested_path,
        )

    persona = snapshot.persona
    roles = snapshot.roles

    if persona is None and not roles:
        return LandingDecision(
            state=LandingState.NEEDS_ROLE_SELECTION,
            redirect_to=Destination.ROLE_CHOOSER,
        )

    if needs_verification(snapshot):
        return LandingDecision(
            state=LandingState.NEEDS_VERIFICATION,
            redirect_to=Destination.VERIFICATION,
        )

    if persona is not None:
        return LandingDecision(state=LandingState.LANDED, redirect_to=persona_destination(persona))

    return LandingDecision(state=LandingState.LANDED, redirect_to=role_destination(roles))


# ============================================================================
# Route-scoped guard
# ============================================================================


@dataclass(frozen=True)
class RoutePolicy:
    """Allow-lists for one dashboard route. Empty lists are not checked."""

    allow_roles: frozenset[AppRole] = field(default_factory=frozenset)
    allow_personas: frozenset[Persona] = field(default_factory=frozenset)
    require_verified: bool = True


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    state: LandingState
    redirect_to: Optional[Destination] = None
    return_to: Optional[str] = None


def check_route_access(
    snapshot: SessionSnapshot,
    policy: RoutePolicy,
    requested_path: Optional[str] = None,
) -> GuardDecision:
    """Apply a route's role and persona allow-lists.

    When both lists are present each must pass on its own. A failed role check
    falls back to the company dashboard only when no persona list exists;
    otherwise the account is sent back through the landing router.
    """
    if snapshot.loading:
        return GuardDecision(allowed=False, state=LandingState.LOADING)

    if not snapshot.is_authenticated:
        return GuardDecision(
            allowed=False,
            state=LandingState.UNAUTHENTICATED,
            redirect_to=Destination.LOGIN,
            return_to=requested_path,
        )

    identity = snapshot.identity
    if identity is None:
        return GuardDecision(
            allowed=False,
            state=LandingState.UNAUTHENTICATED,
            redirect_to=Destination.LOGIN,
            return_to=requested_path,
        )

    if policy.allow_roles and not identity.has_any_role(policy.allow_roles):
        redirect = Destination.LANDING if policy.allow_personas else Destination.COMPANY_DASHBOARD
        return GuardDecision(allowed=False, state=LandingState.LANDED, redirect_to=redirect)

    if policy.allow_personas and identity.persona not in policy.allow_personas:
        return GuardDecision(
            allowed=False, state=LandingState.LANDED, redirect_to=Destination.LANDING
        )

    if policy.require_verified and needs_verification(snapshot):
        return GuardDecision(
            allowed=False,
            state=LandingState.NEEDS_VERIFICATION,
            redirect_to=Destination.VERIFICATION,
        )

    return GuardDecision(allowed=True, state=LandingState.LANDED)


_ALL_ROLES = frozenset(AppRole)
_CA_ROLES = frozenset({AppRole.MANAGER, AppRole.ADMIN})

ROUTE_POLICIES: dict[str, RoutePolicy] = {
    Destination.COMPANY_DASHBOARD.value: RoutePolicy(
        allow_roles=_ALL_ROLES,
        allow_personas=frozenset({Persona.COMPANY_OWNER, Persona.ADMIN}),
    ),
    Destination.CA_DASHBOARD.value: RoutePolicy(
        allow_roles=_CA_ROLES,
        allow_personas=frozenset({Persona.EXTERNAL_CA, Persona.IN_HOUSE_CA, Persona.ADMIN}),
    ),
    Destination.ADMIN_DASHBOARD.value: RoutePolicy(
        allow_roles=frozenset({AppRole.ADMIN}),
        allow_personas=frozenset({Persona.ADMIN}),
    ),
    Destination.LEGAL_DASHBOARD.value: RoutePolicy(
        allow_roles=_CA_ROLES,
        allow_personas=frozenset({Persona.IN_HOUSE_LAWYER, Persona.ADMIN}),
    ),
    Destination.CA_FIRM_DASHBOARD.value: RoutePolicy(
        allow_roles=_CA_ROLES,
        allow_personas=frozenset({Persona.CA_FIRM, Persona.ADMIN}),
    ),
    Destination.VERIFICATION.value: RoutePolicy(
        allow_roles=_ALL_ROLES,
        allow_personas=frozenset(Persona),
        require_verified=False,
    ),
    Destination.UNIVERSITY_DASHBOARD.value: RoutePolicy(allow_roles=_ALL_ROLES),
}
