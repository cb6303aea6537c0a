from fastapi import APIRouter

from storyquest.core.config import get_settings
from storyquest.services.lexicon import get_lexicon

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "healthy",
        "lexicon_version": get_lexicon().version,
        "supabase_configured": bool(settings.supabase_url and settings.supabase_service_key),
        "gemini_configured": bool(settings.gemini_api_key),
    }
