import logging
from functools import lru_cache

from google import genai
from supabase import create_client, Client

from storyquest.core.config import get_settings

logger = logging.getLogger("storyquest.deps")


@lru_cache
def get_supabase_client() -> Client | None:
    """Return the shared Supabase client, or None when Supabase is not configured."""
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_key:
        logger.warning("Supabase env vars missing; using in-memory stores")
        return None
    return create_client(settings.supabase_url, settings.supabase_service_key)


@lru_cache
def get_genai_client(api_key: str) -> genai.Client:
    return genai.Client(api_key=api_key)


@lru_cache
def get_story_pipeline():
    """Build the process-wide StoryPipeline wired to the configured stores."""
    from storyquest.services.ai import GeminiStoryClient
    from storyquest.services.story_cache import InMemoryStoryCache, SupabaseStoryCache
    from storyquest.services.story_pipeline import StoryPipeline
    from storyquest.services.usage_store import InMemoryUsageStore, SupabaseUsageStore

    settings = get_settings()
    sb = get_supabase_client()
    if sb is None:
        cache = InMemoryStoryCache(expiry_days=settings.cache_expiry_days)
        usage = InMemoryUsageStore()
    else:
        cache = SupabaseStoryCache(sb, expiry_days=settings.cache_expiry_days)
        usage = SupabaseUsageStore(sb)
    return StoryPipeline(
        cache=cache,
        usage=usage,
        generator=GeminiStoryClient(settings),
        settings=settings,
    )
