"""Tests for identity resolution and the session boundary."""

import asyncio

import pytest

from regulon.core.identity import IdentityResolver, SessionContext, SessionSnapshot
from regulon.core.schemas_identity import (
    AppRole,
    Persona,
    PersonaSource,
    VerificationStatus,
    derive_persona,
    sort_roles,
)

USER_ID = "3f0c2f8e-0000-4000-8000-000000000001"


def _reader(value):
    async def read(user_id):
        return value

    return read


def _failing_reader(exc=RuntimeError("db down")):
    async def read(user_id):
        raise exc

    return read


def _slow_reader(value, delay=1.0):
    async def read(user_id):
        await asyncio.sleep(delay)
        return value

    return read


def _resolver(roles=None, persona=None, verification=VerificationStatus.NOT_SUBMITTED, **kwargs):
    return IdentityResolver(
        role_reader=kwargs.pop("role_reader", _reader(roles or [])),
        persona_reader=kwargs.pop("persona_reader", _reader(persona)),
        verification_reader=kwargs.pop("verification_reader", _reader(verification)),
        **kwargs,
    )


class TestRoleHelpers:
    def test_sort_roles_orders_by_priority_and_dedupes(self):
        roles = [AppRole.USER, AppRole.ADMIN, AppRole.MANAGER, AppRole.USER]
        assert sort_roles(roles) == [AppRole.ADMIN, AppRole.MANAGER, AppRole.USER]

    @pytest.mark.parametrize(
        "roles, expected",
        [
            ([AppRole.ADMIN, AppRole.USER], Persona.ADMIN),
            ([AppRole.MANAGER], Persona.EXTERNAL_CA),
            ([AppRole.USER], Persona.COMPANY_OWNER),
            ([], None),
        ],
    )
    def test_derive_persona(self, roles, expected):
        assert derive_persona(roles) == expected

    def test_unknown_role_parses_to_none(self):
        assert AppRole.parse("superuser") is None
        assert AppRole.parse("manager") == AppRole.MANAGER

    def test_verified_status_alias(self):
        assert VerificationStatus.parse("verified") == VerificationStatus.APPROVED
        assert VerificationStatus.parse(None) == VerificationStatus.NOT_SUBMITTED


class TestIdentityResolver:
    @pytest.mark.asyncio
    async def test_derives_persona_when_none_stored(self):
        identity = await _resolver(roles=[AppRole.USER, AppRole.ADMIN]).resolve(USER_ID)

        assert identity.roles == [AppRole.ADMIN, AppRole.USER]
        assert identity.primary_role == AppRole.ADMIN
        assert identity.persona == Persona.ADMIN
        assert identity.persona_source == PersonaSource.DERIVED

    @pytest.mark.asyncio
    async def test_stored_persona_wins_over_roles(self):
        identity = await _resolver(roles=[AppRole.MANAGER], persona=Persona.CA_FIRM).resolve(USER_ID)

        assert identity.persona == Persona.CA_FIRM
        assert identity.persona_source == PersonaSource.STORED

    @pytest.mark.asyncio
    async def test_no_roles_no_persona(self):
        identity = await _resolver().resolve(USER_ID)

        assert identity.roles == []
        assert identity.primary_role is None
        assert identity.persona is None
        assert identity.persona_source is None

    @pytest.mark.asyncio
    async def test_lookup_failure_degrades_to_empty_identity(self):
        resolver = _resolver(role_reader=_failing_reader(), persona=Persona.ADMIN)

        identity = await resolver.resolve(USER_ID)

        assert identity.roles == []
        assert identity.persona is None

    @pytest.mark.asyncio
    async def test_verification_failure_reads_as_not_submitted(self):
        resolver = _resolver(roles=[AppRole.USER], verification_reader=_failing_reader())

        identity = await resolver.resolve(USER_ID)

        assert identity.verification_status == VerificationStatus.NOT_SUBMITTED
        assert identity.is_verified is False

    @pytest.mark.asyncio
    async def test_resolution_is_idempotent(self):
        resolver = _resolver(
            roles=[AppRole.MANAGER, AppRole.USER],
            verification=VerificationStatus.APPROVED,
        )

        first = await resolver.resolve(USER_ID, "ca@example.com")
        second = await resolver.resolve(USER_ID, "ca@example.com")

        assert first == second
        assert first.is_verified is True

    @pytest.mark.asyncio
    async def test_deadline_overrun_returns_none(self):
        resolver = _resolver(
            role_reader=_slow_reader([AppRole.ADMIN]),
            timeout_seconds=0.05,
        )

        assert await resolver.resolve_with_deadline(USER_ID) is None

    @pytest.mark.asyncio
    async def test_deadline_met_returns_identity(self):
        resolver = _resolver(roles=[AppRole.USER], timeout_seconds=1.0)

        identity = await resolver.resolve_with_deadline(USER_ID)

        assert identity is not None
        assert identity.persona == Persona.COMPANY_OWNER


class TestSessionContext:
    @pytest.mark.asyncio
    async def test_snapshot_without_user_is_logged_out(self):
        context = SessionContext(resolver=_resolver())

        snapshot = await context.snapshot(None)

        assert snapshot == SessionSnapshot.logged_out()
        assert snapshot.is_authenticated is False

    @pytest.mark.asyncio
    async def test_timed_out_resolution_is_logged_out(self):
        resolver = _resolver(role_reader=_slow_reader([AppRole.ADMIN]), timeout_seconds=0.05)
        context = SessionContext(resolver=resolver)

        snapshot = await context.snapshot(USER_ID)

        assert snapshot.is_authenticated is False
        assert snapshot.loading is False

    @pytest.mark.asyncio
    async def test_refresh_notifies_subscribers_until_unsubscribed(self):
        context = SessionContext(resolver=_resolver(roles=[AppRole.USER]))
        seen = []
        unsubscribe = context.subscribe(seen.append)

        await context.refresh(USER_ID)
        context.sign_out()
        unsubscribe()
        await context.refresh(USER_ID)

        assert len(seen) == 2
        assert seen[0].persona == Persona.COMPANY_OWNER
        assert seen[1].is_authenticated is False

    def test_pending_snapshot_is_loading(self):
        snapshot = SessionSnapshot.pending()
        assert snapshot.loading is True
        assert snapshot.roles == []
        assert snapshot.persona is None
