"""Tests for the Gemini client: config, response extraction, error mapping."""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from google.genai import errors, types

from storyquest.core.errors import EmptyResponseError, SafetyBlockedError, ServiceError
from storyquest.models.story import Theme
from storyquest.services.ai import GeminiStoryClient, build_generation_config, extract_text
from storyquest.services.prompt_builder import compose_story_prompt


# ── Helper builders ───────────────────────────────────────────────────────────

def _response(text=None, finish_reason=types.FinishReason.STOP, block_reason=None, candidates=True):
    parts = [SimpleNamespace(text=text)] if text is not None else []
    candidate = SimpleNamespace(finish_reason=finish_reason, content=SimpleNamespace(parts=parts))
    return SimpleNamespace(
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
        candidates=[candidate] if candidates else [],
    )


def _client(response=None, side_effect=None):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=side_effect)
    return client


@pytest.fixture
def prompt():
    return compose_story_prompt(Theme.SPACE, "stars", 7)


# ── Config ────────────────────────────────────────────────────────────────────

class TestGenerationConfig:
    def test_strict_safety_on_every_category(self, prompt, settings):
        config = build_generation_config(prompt, settings)
        assert len(config.safety_settings) == 4
        assert all(
            s.threshold == types.HarmBlockThreshold.BLOCK_LOW_AND_ABOVE
            for s in config.safety_settings
        )

    def test_single_candidate_no_thinking(self, prompt, settings):
        config = build_generation_config(prompt, settings)
        assert config.candidate_count == 1
        assert config.thinking_config.thinking_budget == 0
        assert config.system_instruction == prompt.system_instruction

    def test_sampling_comes_from_settings(self, prompt, settings):
        config = build_generation_config(prompt, settings.model_copy(update={"generation_temperature": 0.2}))
        assert config.temperature == 0.2
        assert config.top_k == settings.generation_top_k
        assert config.max_output_tokens == settings.generation_max_output_tokens


# ── Response extraction ───────────────────────────────────────────────────────

class TestExtractText:
    def test_first_candidate_text(self):
        assert extract_text(_response('{"steps": []}')) == '{"steps": []}'

    def test_multiple_parts_are_joined(self):
        response = _response("a")
        response.candidates[0].content.parts.append(SimpleNamespace(text="b"))
        assert extract_text(response) == "ab"

    def test_blocked_prompt(self):
        with pytest.raises(SafetyBlockedError):
            extract_text(_response("text", block_reason="SAFETY"))

    def test_safety_finish_reason(self):
        with pytest.raises(SafetyBlockedError):
            extract_text(_response("partial", finish_reason=types.FinishReason.SAFETY))

    def test_no_candidates(self):
        with pytest.raises(EmptyResponseError):
            extract_text(_response(candidates=False))

    def test_blank_text(self):
        with pytest.raises(EmptyResponseError):
            extract_text(_response("   "))

    def test_no_parts(self):
        with pytest.raises(EmptyResponseError):
            extract_text(_response(None))

    def test_safety_block_is_a_service_error(self):
        assert issubclass(SafetyBlockedError, ServiceError)


# ── Client ────────────────────────────────────────────────────────────────────

class TestGeminiStoryClient:
    def test_generate_returns_text(self, prompt, settings):
        client = _client(_response("story text"))
        gemini = GeminiStoryClient(settings, client=client)

        assert asyncio.run(gemini.generate(prompt, "test-key")) == "story text"
        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == settings.gemini_model
        assert kwargs["contents"] == prompt.user_instruction

    def test_missing_key(self, prompt, settings):
        client = _client(_response("story text"))
        with pytest.raises(ServiceError):
            asyncio.run(GeminiStoryClient(settings, client=client).generate(prompt, ""))
        client.aio.models.generate_content.assert_not_called()

    def test_transport_error(self, prompt, settings):
        client = _client(side_effect=httpx.ConnectError("connection refused"))
        with pytest.raises(ServiceError) as exc_info:
            asyncio.run(GeminiStoryClient(settings, client=client).generate(prompt, "test-key"))
        assert "unreachable" in exc_info.value.reason

    def test_api_error(self, prompt, settings):
        api_error = errors.ServerError(
            503, {"error": {"code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE"}}
        )
        client = _client(side_effect=api_error)
        with pytest.raises(ServiceError):
            asyncio.run(GeminiStoryClient(settings, client=client).generate(prompt, "test-key"))

    def test_safety_block_propagates(self, prompt, settings):
        client = _client(_response("", finish_reason=types.FinishReason.SAFETY))
        with pytest.raises(SafetyBlockedError):
            asyncio.run(GeminiStoryClient(settings, client=client).generate(prompt, "test-key"))

    def test_prompt_logging_flag(self, prompt, settings, monkeypatch, caplog):
        monkeypatch.setenv("DEBUG_LLM_PROMPTS", "1")
        client = _client(_response("story text"))
        with caplog.at_level("WARNING", logger="storyquest.gemini_prompts"):
            asyncio.run(GeminiStoryClient(settings, client=client).generate(prompt, "test-key"))
        assert "── SYSTEM" in caplog.text
