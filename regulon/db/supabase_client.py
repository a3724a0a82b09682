"""Shared Supabase client for auth checks and identity table reads."""

from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from regulon.core.config import get_settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Return the process-wide Supabase client, built on first use.

    Table reads are bounded by the identity deadline, so the PostgREST
    timeout is kept at the same value.

    Raises:
        RuntimeError: If the client cannot be created from settings
    """
    settings = get_settings()
    options = ClientOptions(postgrest_client_timeout=settings.IDENTITY_TIMEOUT_SECONDS)
    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY, options)
    except Exception as e:
        raise RuntimeError(f"Supabase client unavailable: {e}") from e
