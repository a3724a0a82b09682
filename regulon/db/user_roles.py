"""Database operations for coarse user roles."""

import asyncio

from regulon.core.schemas_identity import AppRole
from regulon.db.supabase_client import get_supabase as get_client


async def list_user_roles(user_id: str) -> list[AppRole]:
    """List the roles granted to a user. Unknown role values are dropped."""
    client = get_client()
    query = client.table("user_roles").select("role").eq("user_id", user_id)
    result = await asyncio.to_thread(query.execute)
    roles = [AppRole.parse(row.get("role")) for row in result.data or []]
    return [role for role in roles if role is not None]
