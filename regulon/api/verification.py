"""Verification submission endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from regulon.core.auth_middleware import AuthContext, require_auth
from regulon.core.logging import get_logger
from regulon.core.schemas_identity import (
    LICENSED_PERSONAS,
    Persona,
    VerificationRecord,
    VerificationSubmission,
)
from regulon.db.user_verifications import get_verification, upsert_verification

logger = get_logger(__name__)

router = APIRouter(prefix="/verification", tags=["verification"])


def required_fields(persona: Persona) -> list[str]:
    """Submission fields a persona must supply."""
    if persona in LICENSED_PERSONAS:
        return ["entity_name", "license_number", "jurisdiction"]
    return ["entity_name", "registration_number", "jurisdiction"]


def _check_submission(persona: Persona, submission: VerificationSubmission) -> None:
    if "license_number" in required_fields(persona):
        if len((submission.license_number or "").strip()) < 3:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="License number is required"
            )
    elif len((submission.registration_number or "").strip()) < 3:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Registration number is required"
        )


@router.get("", response_model=VerificationRecord)
async def get_my_verification(auth: AuthContext = Depends(require_auth)) -> VerificationRecord:
    """Current verification record; not_submitted when none exists."""
    record = await get_verification(auth.user_id)
    if record is None:
        return VerificationRecord(user_id=auth.user_id, persona=auth.identity.persona)
    return record


@router.post("", response_model=VerificationRecord, status_code=status.HTTP_201_CREATED)
async def submit_verification(
    submission: VerificationSubmission,
    auth: AuthContext = Depends(require_auth),
) -> VerificationRecord:
    """Submit identity/licence metadata; the record moves to pending."""
    persona = auth.identity.persona
    if persona is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Choose a role before submitting verification",
        )

    _check_submission(persona, submission)
    record = await upsert_verification(auth.user_id, persona, submission)
    logger.info(f"Verification submitted for user {auth.user_id} as {persona.value}")
    return record
