"""Supabase client singleton for database and identity operations."""

from functools import lru_cache
from typing import Any

from supabase import Client, create_client
from supabase.lib.client_options import SyncClientOptions

from src.core.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """Get cached Supabase client singleton.

    Uses the secret key, which bypasses RLS at the PostgREST level and
    unlocks the auth admin API. Only call it after the request's identity
    has been verified.

    PostgREST round-trips are bounded by ``supabase_timeout_seconds``; a
    timed-out call raises and the invocation reports failure.

    Returns:
        Client: Supabase client instance.
    """
    settings = get_settings()
    options = SyncClientOptions(
        postgrest_client_timeout=settings.supabase_timeout_seconds,
        auto_refresh_token=False,
        persist_session=False,
    )
    return create_client(
        settings.supabase_url,
        settings.supabase_secret_key,
        options=options,
    )


async def check_database_connection(table: str | None = None) -> dict[str, Any]:
    """Check that a table can be read.

    Args:
        table: Table to probe, defaults to the profiles table.

    Returns:
        dict: Connection status with 'healthy' boolean and optional 'error' message.
    """
    table = table or get_settings().profiles_table
    try:
        client = get_supabase_client()
        client.table(table).select("id").limit(1).execute()
        return {"healthy": True}
    except Exception as e:
        return {"healthy": False, "error": str(e)}
