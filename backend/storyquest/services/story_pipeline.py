"""
Story Pipeline: admission, generation, validation, persistence.

    Admitted -> Generating -> Validating -> (Retrying ->) Done | Rejected

  1. Input checks      theme, topic, safety screen, age (no I/O)
  2. Cache lookup      hit returns immediately with cached=True
  3. Quota check       count >= daily limit raises QuotaExceededError
  4. Attempt loop      prompt -> Gemini -> schema -> vocabulary gate,
                       at most ``max_generation_attempts`` times; only
                       RETRYABLE_ERRORS earn another attempt
  5. Educational gate  terminal on first failure, never retried
  6. Persist           cache put + usage increment, both best-effort

Cache and usage failures never reach the caller: a failed read counts as
"absent" / zero and a failed write is logged. A rejected request leaves no
cache entry and no usage increment behind.
"""
from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum

from storyquest.core.config import Settings, get_settings
from storyquest.core.errors import (
    RETRYABLE_ERRORS,
    EducationalQualityError,
    InvalidAgeError,
    InvalidThemeError,
    InvalidTopicError,
    QuotaExceededError,
    ServiceError,
    StoryPipelineError,
    UnsafeTopicError,
    VocabularyRejection,
)
from storyquest.models.story import GeneratedStory, StoryDocument, Theme
from storyquest.services.lexicon import Lexicon, get_lexicon
from storyquest.services.prompt_builder import compose_story_prompt
from storyquest.services.response_validator import validate_story_response
from storyquest.services.safety_screener import screen_topic
from storyquest.services.story_cache import StoryCache, normalize_topic
from storyquest.services.telemetry import aemit_event
from storyquest.services.usage_store import UsageStore
from storyquest.utils.educational_gate import check_educational_content
from storyquest.utils.vocabulary_gate import check_vocabulary, story_text_for_vocabulary

logger = logging.getLogger("storyquest.pipeline")

MIN_AGE = 4
MAX_AGE = 12


class PipelineState(str, Enum):
    ADMITTED = "admitted"
    GENERATING = "generating"
    VALIDATING = "validating"
    RETRYING = "retrying"
    DONE = "done"
    REJECTED = "rejected"


# ──────────────────────────────────────────────
# Input validation
# ──────────────────────────────────────────────

def validate_theme(theme) -> Theme:
    try:
        return Theme(theme)
    except ValueError:
        allowed = ", ".join(t.value for t in Theme)
        raise InvalidThemeError(f"Invalid theme: '{theme}'. Choose one of: {allowed}") from None


def validate_topic(topic) -> str:
    if not isinstance(topic, str) or not topic.strip():
        raise InvalidTopicError("Invalid topic: please type what you want to learn about")
    return topic.strip()


def validate_age(age) -> int:
    if isinstance(age, bool) or not isinstance(age, int) or not MIN_AGE <= age <= MAX_AGE:
        raise InvalidAgeError(f"Age must be between {MIN_AGE} and {MAX_AGE} years old")
    return age


class StoryPipeline:
    def __init__(
        self,
        cache: StoryCache,
        usage: UsageStore,
        generator,
        settings: Settings | None = None,
        lexicon: Lexicon | None = None,
    ):
        self.cache = cache
        self.usage = usage
        self.generator = generator
        self.settings = settings or get_settings()
        self.lexicon = lexicon or get_lexicon()

    async def generate_story(self, user_id: str, theme, topic, age=7) -> GeneratedStory:
        t0 = time.time()
        theme_value = validate_theme(theme)
        topic_text = validate_topic(topic)
        screen = screen_topic(topic_text, self.lexicon)
        if not screen.safe:
            raise UnsafeTopicError(screen.reason or "Topic not appropriate for children")
        age_value = validate_age(age)

        normalized = normalize_topic(topic_text)
        self._log_state(PipelineState.ADMITTED, user_id, theme_value, normalized)

        cached = await self._cached_story(user_id, theme_value, normalized)
        if cached is not None:
            await aemit_event("story_cached", route="pipeline", user_id=user_id, theme=theme_value.value,
                              topic=normalized, cached=True, ok=True)
            return GeneratedStory(story=cached, cached=True)

        await self._check_quota(user_id)

        try:
            story, attempts = await self._generate_validated(theme_value, topic_text, age_value)
        except StoryPipelineError as exc:
            self._log_state(PipelineState.REJECTED, user_id, theme_value, normalized)
            await aemit_event("story_rejected", route="pipeline", user_id=user_id, theme=theme_value.value,
                              topic=normalized, error_type=exc.__class__.__name__,
                              latency_ms=int((time.time() - t0) * 1000), ok=False)
            raise

        await self._persist(user_id, theme_value, normalized, story)
        self._log_state(PipelineState.DONE, user_id, theme_value, normalized)
        await aemit_event("story_generated", route="pipeline", user_id=user_id, theme=theme_value.value,
                          topic=normalized, attempts=attempts, cached=False,
                          latency_ms=int((time.time() - t0) * 1000), ok=True)
        return GeneratedStory(story=story, cached=False)

    # ── Admission ─────────────────────────────────────────────────────────────

    async def _cached_story(self, user_id: str, theme: Theme, topic: str) -> StoryDocument | None:
        result = await asyncio.to_thread(self.cache.get, user_id, theme.value, topic)
        if not result.ok:
            # unreadable cache counts as a miss
            logger.warning("Cache check failed (non-blocking): %s", result.error)
            return None
        if result.value is not None:
            logger.info("Cache hit for theme=%s topic=%s", theme.value, topic)
        return result.value

    async def _check_quota(self, user_id: str) -> None:
        result = await asyncio.to_thread(self.usage.get_today_count, user_id)
        if not result.ok:
            # unreadable usage counts as zero
            logger.warning("Daily usage check failed (non-blocking): %s", result.error)
        count = result.value_or(0)
        limit = self.settings.daily_story_limit
        logger.info("Daily usage check: %s/%s for user %s", count, limit, user_id)
        if count >= limit:
            raise QuotaExceededError(f"Daily limit of {limit} stories reached. Try again tomorrow!")

    # ── Generate + validate ───────────────────────────────────────────────────

    async def _generate_validated(self, theme: Theme, topic: str, age: int) -> tuple[StoryDocument, int]:
        api_key = self.settings.gemini_api_key
        if not api_key:
            raise ServiceError("Story service API key not configured")

        story, attempts = await self._generate_with_retry(theme, topic, age, api_key)

        gate = check_educational_content(
            story, topic, self.lexicon, min_score=self.settings.educational_min_score
        )
        if not gate.ok:
            logger.warning("Educational validation failed: %s", gate.reason)
            raise EducationalQualityError(
                "Story does not contain sufficient educational content. "
                "Please try asking about the topic in a different way."
            )
        return story, attempts

    async def _generate_with_retry(
        self, theme: Theme, topic: str, age: int, api_key: str
    ) -> tuple[StoryDocument, int]:
        max_attempts = max(1, self.settings.max_generation_attempts)
        attempt = 1
        while True:
            try:
                return await self._attempt(theme, topic, age, api_key), attempt
            except RETRYABLE_ERRORS as exc:
                if attempt >= max_attempts:
                    logger.error("Story generation failed after %d attempts: %s", attempt, exc.reason)
                    raise
                logger.warning("Attempt %d failed (%s); regenerating", attempt, exc.reason)
                self._log_state(PipelineState.RETRYING, None, theme, topic)
                attempt += 1

    async def _attempt(self, theme: Theme, topic: str, age: int, api_key: str) -> StoryDocument:
        prompt = compose_story_prompt(
            theme, topic, age, self.lexicon, young_age_max=self.settings.young_age_max
        )
        self._log_state(PipelineState.GENERATING, None, theme, topic)
        raw = await self.generator.generate(prompt, api_key)
        story = validate_story_response(raw)
        self._log_state(PipelineState.VALIDATING, None, theme, topic)

        vocab = check_vocabulary(story_text_for_vocabulary(story), age, self.lexicon)
        if not vocab.ok:
            logger.warning("Vocabulary validation failed: %s", vocab.reason)
            raise VocabularyRejection(vocab.reason)
        return story

    # ── Persist ───────────────────────────────────────────────────────────────

    async def _persist(self, user_id: str, theme: Theme, topic: str, story: StoryDocument) -> None:
        put = await asyncio.to_thread(self.cache.put, user_id, theme.value, topic, story)
        if not put.ok:
            logger.warning("Failed to cache story (non-blocking): %s", put.error)

        inc = await asyncio.to_thread(self.usage.increment_today, user_id)
        if not inc.ok:
            logger.warning("Usage tracking failed (non-blocking): %s", inc.error)

    def _log_state(self, state: PipelineState, user_id, theme: Theme, topic: str) -> None:
        logger.info("[%s] user=%s theme=%s topic=%s", state.value, user_id, theme.value, topic)
