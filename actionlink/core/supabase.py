"""
Supabase client wrapper for the ActionLink API
"""

from functools import lru_cache
import logging

from supabase import create_client, Client

from actionlink.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get Supabase client instance (cached)

    Uses the service role key; the actions table is only ever touched
    server-side.

    Returns:
        Supabase client instance
    """
    try:
        client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
        logger.info("Supabase client created")
        return client
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        raise
