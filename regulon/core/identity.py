"""Identity resolution: roles, persona and verification for an account.

Resolution is read-only and fail-safe. A lookup error degrades the account to
"no roles, no persona" instead of failing the request, and a resolution that
overruns its deadline is treated as no session at all.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from regulon.core.logging import get_logger, log_with_context
from regulon.core.schemas_identity import (
    AppRole,
    Persona,
    PersonaSource,
    ResolvedIdentity,
    VerificationStatus,
    derive_persona,
    sort_roles,
)

logger = get_logger(__name__)

RoleReader = Callable[[str], Awaitable[list[AppRole]]]
PersonaReader = Callable[[str], Awaitable[Optional[Persona]]]
VerificationReader = Callable[[str], Awaitable[VerificationStatus]]


class IdentityResolver:
    """Maps an authenticated account id to roles, persona and verification."""

    def __init__(
        self,
        role_reader: RoleReader,
        persona_reader: PersonaReader,
        verification_reader: VerificationReader,
        timeout_seconds: float = 3.0,
    ):
        self._read_roles = role_reader
        self._read_persona = persona_reader
        self._read_verification = verification_reader
        self.timeout_seconds = timeout_seconds

    async def resolve(self, user_id: str, email: Optional[str] = None) -> ResolvedIdentity:
        """Resolve identity for an already-authenticated account."""
        try:
            raw_roles, stored_persona = await asyncio.gather(
                self._read_roles(user_id),
                self._read_persona(user_id),
            )
        except Exception as e:
            log_with_context(
                logger,
                logging.WARNING,
                f"Role/persona lookup failed, degrading to empty identity: {e}",
                user_id=user_id,
            )
            raw_roles, stored_persona = [], None

        roles = sort_roles(list(raw_roles))

        if stored_persona is not None:
            persona = stored_persona
            source = PersonaSource.STORED
        else:
            persona = derive_persona(roles)
            source = PersonaSource.DERIVED if persona else None

        try:
            verification = await self._read_verification(user_id)
        except Exception as e:
            log_with_context(
                logger,
                logging.WARNING,
                f"Verification lookup failed: {e}",
                user_id=user_id,
            )
            verification = VerificationStatus.NOT_SUBMITTED

        return ResolvedIdentity(
            user_id=user_id,
            email=email,
            roles=roles,
            persona=persona,
            persona_source=source,
            verification_status=verification,
        )

    async def resolve_with_deadline(
        self, user_id: str, email: Optional[str] = None
    ) -> Optional[ResolvedIdentity]:
        """Resolve within ``timeout_seconds``; None means treat as logged out."""
        try:
            return await asyncio.wait_for(self.resolve(user_id, email), self.timeout_seconds)
        except asyncio.TimeoutError:
            log_with_context(
                logger,
                logging.WARNING,
                "Identity resolution timed out, treating as no session",
                user_id=user_id,
                timeout_seconds=self.timeout_seconds,
            )
            return None


@dataclass
class SessionSnapshot:
    """What the route guard sees for one navigation attempt."""

    loading: bool = False
    user_id: Optional[str] = None
    email: Optional[str] = None
    identity: Optional[ResolvedIdentity] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None and self.identity is not None

    @property
    def roles(self) -> list[AppRole]:
        return self.identity.roles if self.identity else []

    @property
    def persona(self) -> Optional[Persona]:
        return self.identity.persona if self.identity else None

    @classmethod
    def logged_out(cls) -> "SessionSnapshot":
        return cls()

    @classmethod
    def pending(cls) -> "SessionSnapshot":
        return cls(loading=True)


@dataclass
class SessionContext:
    """Process-wide session boundary, built once at startup.

    Every component that needs identity receives this object instead of
    reaching for globals. Snapshots are recomputed on auth state changes.
    """

    resolver: IdentityResolver
    _listeners: list[Callable[[SessionSnapshot], None]] = field(default_factory=list)

    def subscribe(self, listener: Callable[[SessionSnapshot], None]) -> Callable[[], None]:
        """Register for auth state changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def snapshot(self, user_id: Optional[str], email: Optional[str] = None) -> SessionSnapshot:
        """Build the snapshot for an (optionally) authenticated account."""
        if not user_id:
            return SessionSnapshot.logged_out()
        identity = await self.resolver.resolve_with_deadline(user_id, email)
        if identity is None:
            return SessionSnapshot.logged_out()
        return SessionSnapshot(user_id=user_id, email=email, identity=identity)

    async def refresh(self, user_id: Optional[str], email: Optional[str] = None) -> SessionSnapshot:
        """Re-resolve after an auth state change and notify listeners."""
        snapshot = await self.snapshot(user_id, email)
        self._notify(snapshot)
        return snapshot

    def sign_out(self) -> SessionSnapshot:
        snapshot = SessionSnapshot.logged_out()
        self._notify(snapshot)
        return snapshot

    def _notify(self, snapshot: SessionSnapshot) -> None:
        for listener in list(self._listeners):
            listener(snapshot)


def build_session_context(timeout_seconds: float) -> SessionContext:
    """Wire the resolver to the Supabase tables."""
    from regulon.db.user_personas import get_user_persona
    from regulon.db.user_roles import list_user_roles
    from regulon.db.user_verifications import get_verification_status

    resolver = IdentityResolver(
        role_reader=list_user_roles,
        persona_reader=get_user_persona,
        verification_reader=get_verification_status,
        timeout_seconds=timeout_seconds,
    )
    return SessionContext(resolver=resolver)
