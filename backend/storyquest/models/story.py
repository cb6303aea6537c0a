from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class Theme(str, Enum):
    SPACE = "Space"
    FOREST = "Forest"


Step = Annotated[str, Field(min_length=1)]
ChoicePair = Annotated[tuple[str, ...], Field(min_length=2, max_length=2)]


class Checkpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    question: str = Field(min_length=5)
    expected: str = Field(min_length=1)
    type: Literal["compare", "count"]


class ParentDigest(BaseModel):
    model_config = ConfigDict(frozen=True)

    skills: tuple[str, ...] = Field(min_length=1)
    note: str = Field(min_length=10)
    home_activity: str = Field(min_length=5)


class StoryDocument(BaseModel):
    """A validated story: accepted whole or discarded whole.

    Sequences are tuples and nested models are frozen: the whole document
    is read-only, including copies held by the cache.
    """

    model_config = ConfigDict(frozen=True)

    steps: tuple[Step, ...] = Field(min_length=3, max_length=3)
    choices: tuple[ChoicePair, ...] = Field(min_length=3, max_length=3)
    checkpoint: Checkpoint
    hint: str = Field(min_length=5)
    parent_digest: ParentDigest


class GeneratedStory(BaseModel):
    story: StoryDocument
    cached: bool


# ──────────────────────────────────────────────
# HTTP request / response models
# ──────────────────────────────────────────────

class StoryGenerationRequest(BaseModel):
    theme: str
    topic: str
    age: int = 7


class StoryGenerationResponse(StoryDocument):
    cached: bool


class UsageResponse(BaseModel):
    stories_today: int
    daily_limit: int
    remaining: int


class CheckpointGradeRequest(BaseModel):
    checkpoint: Checkpoint
    answer: str


class CheckpointGradeResponse(BaseModel):
    correct: bool
    expected: str


class ThemeInfo(BaseModel):
    name: str
    description: str
    icon: str
    characters: list[str]
