"""Supabase client used by the Supabase-backed assignment repository."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Cached client for the drivers/assignments project, or None when credentials are missing.

    Creating the client does not open a connection; query failures surface on first use.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning(
            "Supabase credentials not configured (DISPATCH_SUPABASE_URL / DISPATCH_SUPABASE_KEY)"
        )
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None
