"""Database operations for persona verification records."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from regulon.core.schemas_identity import (
    Persona,
    VerificationRecord,
    VerificationStatus,
    VerificationSubmission,
)
from regulon.db.supabase_client import get_supabase as get_client


async def get_verification(user_id: str) -> Optional[VerificationRecord]:
    """Get the verification record for a user."""
    client = get_client()
    query = (
        client.table("user_verifications")
        .select("*")
        .eq("user_id", user_id)
        .limit(1)
    )
    result = await asyncio.to_thread(query.execute)
    if result.data:
        return VerificationRecord(**result.data[0])
    return None


async def get_verification_status(user_id: str) -> VerificationStatus:
    """Get only the status; a missing record reads as not submitted."""
    record = await get_verification(user_id)
    if record is None:
        return VerificationStatus.NOT_SUBMITTED
    return record.status


async def upsert_verification(
    user_id: str,
    persona: Persona,
    submission: VerificationSubmission,
) -> VerificationRecord:
    """Submit (or resubmit) verification metadata. Always resets to pending."""
    client = get_client()
    payload = {
        "user_id": user_id,
        "persona": persona.value,
        "status": VerificationStatus.PENDING.value,
        "entity_name": submission.entity_name.strip(),
        "registration_number": submission.registration_number,
        "license_number": submission.license_number,
        "jurisdiction": submission.jurisdiction.strip(),
        "notes": submission.notes,
        "document_path": submission.document_path,
        "submitted_at": datetime.now(timezone.utc).isoformat(),
    }
    query = client.table("user_verifications").upsert(payload, on_conflict="user_id")
    result = await asyncio.to_thread(query.execute)
    if result.data:
        return VerificationRecord(**result.data[0])
    return VerificationRecord(**payload)
