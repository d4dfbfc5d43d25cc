"""
Database Module - Supabase Client

Provides the async Supabase client singleton used by repositories and
the identity adapter.
"""

import asyncio
from typing import Optional

from supabase._async.client import AsyncClient, create_client as acreate_client

from farmcart.config import get_settings
from farmcart.logging import get_logger

logger = get_logger(__name__)

_async_supabase_client: Optional[AsyncClient] = None
_client_lock: Optional[asyncio.Lock] = None


def _get_lock() -> asyncio.Lock:
    """Get or create the init lock (created lazily inside the running loop)."""
    global _client_lock
    if _client_lock is None:
        _client_lock = asyncio.Lock()
    return _client_lock


async def get_supabase() -> AsyncClient:
    """
    Get async Supabase client (singleton).

    Raises:
        ValueError: If SUPABASE_URL or the API key is not configured
    """
    global _async_supabase_client
    if _async_supabase_client is not None:
        return _async_supabase_client

    async with _get_lock():
        # Double-check after acquiring lock
        if _async_supabase_client is None:
            settings = get_settings()
            if not settings.supabase_url or not settings.supabase_key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
            logger.info("Initializing async Supabase client...")
            _async_supabase_client = await acreate_client(
                settings.supabase_url, settings.supabase_key
            )
    return _async_supabase_client


async def close_supabase() -> None:
    """Drop the client singleton and sign out its auth session."""
    global _async_supabase_client
    if _async_supabase_client is None:
        return
    try:
        await _async_supabase_client.auth.sign_out()
    except Exception as e:
        logger.warning("Supabase sign-out on close failed: %s", type(e).__name__)
    _async_supabase_client = None
