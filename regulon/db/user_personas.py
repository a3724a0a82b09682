"""Database operations for stored personas."""

import asyncio
from typing import Optional

from regulon.core.schemas_identity import Persona
from regulon.db.supabase_client import get_supabase as get_client


async def get_user_persona(user_id: str) -> Optional[Persona]:
    """Get the stored persona for a user, or None if unset or unrecognised."""
    client = get_client()
    query = (
        client.table("user_personas")
        .select("persona")
        .eq("user_id", user_id)
        .limit(1)
    )
    result = await asyncio.to_thread(query.execute)
    if result.data:
        return Persona.parse(result.data[0].get("persona"))
    return None


async def set_user_persona(user_id: str, persona: Persona) -> Persona:
    """Store the persona picked in the role chooser."""
    client = get_client()
    query = client.table("user_personas").upsert(
        {"user_id": user_id, "persona": persona.value},
        on_conflict="user_id",
    )
    await asyncio.to_thread(query.execute)
    return persona
