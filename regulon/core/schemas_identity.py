"""Pydantic schemas for roles, personas and verification."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AppRole(str, Enum):
    """Coarse RBAC role stored in ``user_roles``."""
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"

    @property
    def priority(self) -> int:
        return ROLE_PRIORITY[self]

    @classmethod
    def parse(cls, value: object) -> Optional["AppRole"]:
        """Return the matching role, or None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


ROLE_PRIORITY: dict[AppRole, int] = {
    AppRole.ADMIN: 3,
    AppRole.MANAGER: 2,
    AppRole.USER: 1,
}


class Persona(str, Enum):
    """Fine-grained account classification used for dashboard routing."""
    COMPANY_OWNER = "company_owner"
    EXTERNAL_CA = "external_ca"
    CA_FIRM = "ca_firm"
    IN_HOUSE_CA = "in_house_ca"
    IN_HOUSE_LAWYER = "in_house_lawyer"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object) -> Optional["Persona"]:
        """Return the matching persona, or None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


# Personas that must hold an approved verification before landing.
VERIFICATION_REQUIRED_PERSONAS: frozenset[Persona] = frozenset(
    {
        Persona.EXTERNAL_CA,
        Persona.IN_HOUSE_CA,
        Persona.IN_HOUSE_LAWYER,
        Persona.COMPANY_OWNER,
        Persona.ADMIN,
        Persona.CA_FIRM,
    }
)

# Personas verified with a professional licence rather than a registration number.
LICENSED_PERSONAS: frozenset[Persona] = frozenset(
    {Persona.EXTERNAL_CA, Persona.IN_HOUSE_CA, Persona.IN_HOUSE_LAWYER}
)


class PersonaSource(str, Enum):
    STORED = "stored"
    DERIVED = "derived"


class VerificationStatus(str, Enum):
    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    APPROVED = "approved"

    @classmethod
    def parse(cls, value: object) -> "VerificationStatus":
        if value in ("approved", "verified"):
            return cls.APPROVED
        if value == "pending":
            return cls.PENDING
        return cls.NOT_SUBMITTED


def sort_roles(roles: list[AppRole]) -> list[AppRole]:
    """Sort roles by descending priority, dropping duplicates."""
    return sorted(set(roles), key=lambda role: role.priority, reverse=True)


def derive_persona(roles: list[AppRole]) -> Optional[Persona]:
    """Derive a persona for accounts that never stored one."""
    if AppRole.ADMIN in roles:
        return Persona.ADMIN
    if AppRole.MANAGER in roles:
        return Persona.EXTERNAL_CA
    if AppRole.USER in roles:
        return Persona.COMPANY_OWNER
    return None


# ============================================================================
# Identity
# ============================================================================


class ResolvedIdentity(BaseModel):
    """Roles, persona and verification state for one account."""
    user_id: str
    email: Optional[str] = None
    roles: list[AppRole] = Field(default_factory=list)
    persona: Optional[Persona] = None
    persona_source: Optional[PersonaSource] = None
    verification_status: VerificationStatus = VerificationStatus.NOT_SUBMITTED

    @property
    def primary_role(self) -> Optional[AppRole]:
        return self.roles[0] if self.roles else None

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.APPROVED

    def has_any_role(self, allowed: "list[AppRole] | frozenset[AppRole]") -> bool:
        return any(role in self.roles for role in allowed)


class IdentityResponse(BaseModel):
    """Wire shape of a resolved identity."""
    user_id: str
    email: Optional[str] = None
    roles: list[AppRole]
    primary_role: Optional[AppRole] = None
    persona: Optional[Persona] = None
    persona_source: Optional[PersonaSource] = None
    verification_status: VerificationStatus
    is_verified: bool

    @classmethod
    def from_identity(cls, identity: ResolvedIdentity) -> "IdentityResponse":
        return cls(
            user_id=identity.user_id,
            email=identity.email,
            roles=identity.roles,
            primary_role=identity.primary_role,
            persona=identity.persona,
            persona_source=identity.persona_source,
            verification_status=identity.verification_status,
            is_verified=identity.is_verified,
        )


class PersonaUpdateRequest(BaseModel):
    """Role-chooser submission."""
    persona: Persona


# ============================================================================
# Verification
# ============================================================================


class VerificationSubmission(BaseModel):
    """Identity/licence metadata submitted for approval."""
    entity_name: str = Field(..., min_length=2)
    registration_number: Optional[str] = None
    license_number: Optional[str] = None
    jurisdiction: str = Field(..., min_length=2)
    notes: Optional[str] = None
    document_path: Optional[str] = None

    @field_validator("entity_name", "jurisdiction", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class VerificationRecord(BaseModel):
    """Stored verification row."""
    user_id: str
    persona: Optional[Persona] = None
    status: VerificationStatus = VerificationStatus.NOT_SUBMITTED
    entity_name: Optional[str] = None
    registration_number: Optional[str] = None
    license_number: Optional[str] = None
    jurisdiction: Optional[str] = None
    notes: Optional[str] = None
    document_path: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: object) -> VerificationStatus:
        return VerificationStatus.parse(value)

    @field_validator("persona", mode="before")
    @classmethod
    def _parse_persona(cls, value: object) -> Optional[Persona]:
        return Persona.parse(value)
