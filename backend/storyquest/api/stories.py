import asyncio
import logging
from fastapi import APIRouter, HTTPException, Header

from storyquest.core.config import get_settings
from storyquest.core.deps import get_story_pipeline, get_supabase_client
from storyquest.core.errors import StoryPipelineError
from storyquest.models.story import (
    CheckpointGradeRequest,
    CheckpointGradeResponse,
    StoryGenerationRequest,
    StoryGenerationResponse,
    ThemeInfo,
    UsageResponse,
)
from storyquest.services.checkpoint_grader import grade_checkpoint_answer
from storyquest.services.lexicon import get_lexicon
from storyquest.services.story_cache import purge_expired_stories
from storyquest.services.telemetry import instrument
from storyquest.services.usage_store import get_daily_story_count

logger = logging.getLogger("storyquest.stories")
router = APIRouter(prefix="/api/stories", tags=["stories"])


def get_user_id_from_token(authorization: str) -> str:
    """Extract user_id from Supabase JWT token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid authorization header")

    supabase = get_supabase_client()
    if supabase is None:
        raise HTTPException(status_code=503, detail="Authentication is not configured")

    token = authorization.replace("Bearer ", "")
    try:
        user_response = supabase.auth.get_user(token)
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid token")
        return user_response.user.id
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=401, detail=f"Authentication failed: {str(e)}")


@router.post("/generate", response_model=StoryGenerationResponse)
@instrument(route="/api/stories/generate", version="v1")
async def generate_story(request: StoryGenerationRequest, authorization: str = Header(None)):
    """Generate (or serve from cache) a validated story for the signed-in user."""
    user_id = get_user_id_from_token(authorization)
    pipeline = get_story_pipeline()
    try:
        result = await pipeline.generate_story(user_id, request.theme, request.topic, request.age)
    except StoryPipelineError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.reason)
    return StoryGenerationResponse(**result.story.model_dump(), cached=result.cached)


@router.get("/usage", response_model=UsageResponse)
@instrument(route="/api/stories/usage", version="v1")
async def get_usage(authorization: str = Header(None)):
    """Stories generated today against the daily limit."""
    user_id = get_user_id_from_token(authorization)
    pipeline = get_story_pipeline()
    count = await asyncio.to_thread(get_daily_story_count, pipeline.usage, user_id)
    limit = get_settings().daily_story_limit
    return UsageResponse(stories_today=count, daily_limit=limit, remaining=max(0, limit - count))


@router.post("/checkpoint/grade", response_model=CheckpointGradeResponse)
@instrument(route="/api/stories/checkpoint/grade", version="v1")
def grade_checkpoint(req: CheckpointGradeRequest):
    return CheckpointGradeResponse(
        correct=grade_checkpoint_answer(req.checkpoint, req.answer),
        expected=req.checkpoint.expected,
    )


@router.get("/themes", response_model=list[ThemeInfo])
def list_themes():
    lexicon = get_lexicon()
    return [
        ThemeInfo(
            name=name,
            description=entry.description,
            icon=entry.icon,
            characters=entry.characters,
        )
        for name, entry in lexicon.themes.items()
    ]


@router.post("/cache/purge")
@instrument(route="/api/stories/cache/purge", version="v1")
def purge_cache(x_admin_secret: str = Header(None)):
    """Delete cached stories past the expiry window. Called by the scheduler."""
    settings = get_settings()
    if not settings.admin_secret or x_admin_secret != settings.admin_secret:
        raise HTTPException(status_code=403, detail="Admin secret required")

    pipeline = get_story_pipeline()
    result = purge_expired_stories(pipeline.cache, settings.cache_expiry_days)
    if not result.ok:
        raise HTTPException(status_code=500, detail="Failed to purge cached stories")
    return {"success": True, "deleted": result.value}
