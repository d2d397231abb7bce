import asyncio
from typing import Optional

from supabase import AsyncClient, create_async_client

from studylens.core.settings import settings

_client: Optional[AsyncClient] = None
_client_lock = asyncio.Lock()


async def get_async_supabase_client() -> AsyncClient:
    """
    Shared async Supabase client built from SUPABASE_URL / SUPABASE_SERVICE_KEY.
    Concurrent first callers wait on one creation instead of racing.
    """
    global _client
    if _client is not None:
        return _client

    async with _client_lock:
        if _client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
                raise ValueError("Supabase is not configured: set SUPABASE_URL and SUPABASE_SERVICE_KEY.")
            _client = await create_async_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
    return _client


def reset_async_supabase_client() -> None:
    """Drops the shared client; the next call opens fresh connections."""
    global _client
    _client = None
