"""
Farkle Duel - Supabase Client

The Realtime API is only implemented on the async client, so the client
is created on the gateway's event loop rather than at import time.
"""

from supabase import AsyncClient, acreate_client

from src.config.settings import get_settings


async def create_realtime_client() -> AsyncClient:
    """Create a Supabase async client from settings.

    The service key is preferred: reading the private intake topics is
    limited to the server.
    """
    settings = get_settings()
    key = settings.supabase_service_key or settings.supabase_anon_key
    return await acreate_client(settings.supabase_url, key)
