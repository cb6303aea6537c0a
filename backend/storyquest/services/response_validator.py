"""Parse raw model text into a StoryDocument, all or nothing.

No repair is attempted: one bad field discards the whole candidate.
"""
import json
import logging
import re

from pydantic import ValidationError

from storyquest.core.errors import MalformedJSONError, SchemaViolationError
from storyquest.models.story import StoryDocument

logger = logging.getLogger("storyquest.validator")

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_RAW_LOG_LIMIT = 500


def clean_json_response(content: str) -> str:
    """Strip markdown fences from model output."""
    return _FENCE_RE.sub("", content).strip()


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "story"


def validate_story_response(raw_text: str) -> StoryDocument:
    cleaned = clean_json_response(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning(
            "Model output is not valid JSON (%s). Raw: %s", exc, raw_text[:_RAW_LOG_LIMIT]
        )
        raise MalformedJSONError("Invalid response format from the story service.") from exc

    if not isinstance(data, dict):
        logger.warning("Model output is JSON but not an object. Raw: %s", raw_text[:_RAW_LOG_LIMIT])
        raise SchemaViolationError("story", "Generated story has an invalid shape (story)")

    try:
        return StoryDocument.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = _field_path(first["loc"])
        logger.warning(
            "Story schema violation at '%s': %s. Raw: %s",
            field, first["msg"], raw_text[:_RAW_LOG_LIMIT],
        )
        raise SchemaViolationError(
            field, f"Generated story has an invalid shape ({field})"
        ) from exc
