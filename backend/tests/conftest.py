"""Shared fixtures. All tests run offline: no Supabase, no Gemini."""
import copy
import json

import pytest

from storyquest.core.config import Settings
from storyquest.services.story_cache import InMemoryStoryCache
from storyquest.services.story_pipeline import StoryPipeline
from storyquest.services.usage_store import InMemoryUsageStore

VALID_STORY = {
    "steps": [
        "Wow! Stars are like giant night lights in the sky. What makes them special is that they shine so bright.",
        "Remember how we said stars shine? That happens because they are hot like a big campfire, so they glow when it gets dark.",
        "Now you know stars are hot and bright. When you look up at night from home, you can see them twinkle every day the sky is clear.",
    ],
    "choices": [
        ["Keep exploring!", "Tell me more!"],
        ["Show me more cool stuff!", "Let's play with this idea!"],
        ["I want to try this!", "Share with my friends!"],
    ],
    "checkpoint": {
        "question": "How many stars can you count in the picture?",
        "expected": "3",
        "type": "count",
    },
    "hint": "Stars are hot like a campfire!",
    "parent_digest": {
        "skills": ["Curiosity about stars", "Counting"],
        "note": "Your child learned why stars shine at night.",
        "home_activity": "Count the stars together tonight.",
    },
}


class FakeGenerator:
    """Stands in for GeminiStoryClient. Replays ``responses`` in order; the
    last one repeats. Exceptions in the list are raised instead of returned."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0
        self.prompts = []

    async def generate(self, prompt, api_key):
        self.calls += 1
        self.prompts.append(prompt)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def story_data():
    return copy.deepcopy(VALID_STORY)


@pytest.fixture
def story_json(story_data):
    return json.dumps(story_data)


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key="test-key",
        supabase_url="",
        supabase_service_key="",
        daily_story_limit=20,
        max_generation_attempts=2,
    )


@pytest.fixture
def make_pipeline(settings):
    def _make(generator, cache=None, usage=None, **overrides):
        cfg = settings.model_copy(update=overrides) if overrides else settings
        return StoryPipeline(
            cache=cache if cache is not None else InMemoryStoryCache(),
            usage=usage if usage is not None else InMemoryUsageStore(),
            generator=generator,
            settings=cfg,
        )
    return _make


@pytest.fixture
def fake_generator():
    return FakeGenerator
