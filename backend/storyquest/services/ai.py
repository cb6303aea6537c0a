"""
Gemini generation client.

One request per ``generate`` call. Returns the first candidate's raw text and
never retries: regeneration is decided by the pipeline.

Failure mapping:
  transport error / non-success status  -> ServiceError
  prompt or candidate blocked by safety -> SafetyBlockedError
  no text in the first candidate        -> EmptyResponseError
"""
import logging
import os

import httpx
from google.genai import errors, types

from storyquest.core.config import Settings, get_settings
from storyquest.core.deps import get_genai_client
from storyquest.core.errors import EmptyResponseError, SafetyBlockedError, ServiceError
from storyquest.services.prompt_builder import StoryPrompt

logger = logging.getLogger("storyquest.gemini")
_prompt_logger = logging.getLogger("storyquest.gemini_prompts")

# Strictest available filtering for every harm category the API exposes to us.
SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def build_generation_config(prompt: StoryPrompt, settings: Settings) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        system_instruction=prompt.system_instruction,
        temperature=settings.generation_temperature,
        max_output_tokens=settings.generation_max_output_tokens,
        top_k=settings.generation_top_k,
        top_p=settings.generation_top_p,
        candidate_count=1,
        response_mime_type="application/json",
        safety_settings=[
            types.SafetySetting(
                category=category,
                threshold=types.HarmBlockThreshold.BLOCK_LOW_AND_ABOVE,
            )
            for category in SAFETY_CATEGORIES
        ],
        # No thinking tokens ahead of the JSON output
        thinking_config=types.ThinkingConfig(thinking_budget=0),
    )


def extract_text(response) -> str:
    """Pull the first candidate's text out of a GenerateContentResponse."""
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and getattr(feedback, "block_reason", None):
        logger.warning("Prompt blocked upstream: %s", feedback.block_reason)
        raise SafetyBlockedError("Content blocked by safety filters. Please try a different topic.")

    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise EmptyResponseError("No response from the story service")

    candidate = candidates[0]
    if candidate.finish_reason == types.FinishReason.SAFETY:
        logger.warning("Candidate blocked upstream (finish_reason=SAFETY)")
        raise SafetyBlockedError("Content blocked by safety filters. Please try a different topic.")

    content = getattr(candidate, "content", None)
    parts = (getattr(content, "parts", None) or []) if content is not None else []
    text = "".join(part.text for part in parts if getattr(part, "text", None))
    if not text.strip():
        raise EmptyResponseError("No response from the story service")
    return text


class GeminiStoryClient:
    def __init__(self, settings: Settings | None = None, client=None):
        self.settings = settings or get_settings()
        self._client = client

    def _get_client(self, api_key: str):
        if self._client is not None:
            return self._client
        return get_genai_client(api_key)

    async def generate(self, prompt: StoryPrompt, api_key: str) -> str:
        if not api_key:
            raise ServiceError("Story service API key not configured")

        config = build_generation_config(prompt, self.settings)

        if os.environ.get("DEBUG_LLM_PROMPTS", "").lower() in ("1", "true"):
            _prompt_logger.warning(
                "\n\n%s\n"
                "── SYSTEM ──────────────────────────────────────────────\n%s\n"
                "── USER ────────────────────────────────────────────────\n%s\n"
                "── CONFIG ──────────────────────────────────────────────\n"
                "  model=%s  temp=%s  max_tokens=%s\n"
                "%s",
                "=" * 60,
                prompt.system_instruction,
                prompt.user_instruction,
                self.settings.gemini_model,
                self.settings.generation_temperature,
                self.settings.generation_max_output_tokens,
                "=" * 60,
            )

        client = self._get_client(api_key)
        try:
            response = await client.aio.models.generate_content(
                model=self.settings.gemini_model,
                contents=prompt.user_instruction,
                config=config,
            )
        except errors.APIError as exc:
            logger.error("Gemini API error %s: %s", exc.code, exc.message)
            raise ServiceError(f"Story service error: {exc.message or f'HTTP {exc.code}'}") from exc
        except httpx.HTTPError as exc:
            logger.error("Gemini transport failure: %s", exc)
            raise ServiceError("Story service is unreachable. Please try again.") from exc

        return extract_text(response)
