"""
Prompt Builder: turns a validated (theme, topic, age) into a generation request.

Pure string building: no I/O, and the returned prompt is used for exactly one
generation call.

  checkpoint_type_for_age(age, young_age_max) -> "count" | "compare"
  build_theme_context(theme, age, ...)       -> str
  compose_story_prompt(theme, topic, age, ...) -> StoryPrompt
"""
from __future__ import annotations

from dataclasses import dataclass

from storyquest.models.story import Theme
from storyquest.prompts.story_generation import (
    CHECKPOINT_GUIDANCE,
    STORY_SYSTEM_PROMPT,
    STORY_USER_PROMPT,
    THEME_CONTEXT_TEMPLATE,
)
from storyquest.services.lexicon import Lexicon, get_lexicon

# Caps keep the prompt short; the model only needs a flavour of each list.
_THEME_WORDS_LIMIT = 8
_AGE_WORDS_LIMIT = 12
_FORBIDDEN_TERMS_LIMIT = 12


@dataclass(frozen=True)
class StoryPrompt:
    system_instruction: str
    user_instruction: str

    @property
    def text(self) -> str:
        return f"{self.system_instruction}\n\n{self.user_instruction}"


def checkpoint_type_for_age(age: int, young_age_max: int = 6) -> str:
    return "count" if age <= young_age_max else "compare"


def build_theme_context(
    theme: Theme, age: int, lexicon: Lexicon | None = None, young_age_max: int = 6
) -> str:
    lexicon = lexicon or get_lexicon()
    entry = lexicon.theme(theme.value)
    age_words = lexicon.age_words(age, young_age_max)
    return THEME_CONTEXT_TEMPLATE.format(
        description=entry.description,
        theme=theme.value,
        theme_words=", ".join(entry.vocabulary[:_THEME_WORDS_LIMIT]),
        age_words=", ".join(age_words[:_AGE_WORDS_LIMIT]),
        characters=", ".join(entry.characters),
    )


def compose_story_prompt(
    theme: Theme,
    topic: str,
    age: int,
    lexicon: Lexicon | None = None,
    young_age_max: int = 6,
) -> StoryPrompt:
    lexicon = lexicon or get_lexicon()
    checkpoint_type = checkpoint_type_for_age(age, young_age_max)

    forbidden = (
        lexicon.words("scientific_register")
        + lexicon.words("scientific_phrases")
    )[:_FORBIDDEN_TERMS_LIMIT]

    system_instruction = STORY_SYSTEM_PROMPT.format(
        age=age,
        forbidden_terms=", ".join(f'"{t}"' for t in forbidden),
    )
    user_instruction = STORY_USER_PROMPT.format(
        topic=topic,
        age=age,
        theme_context=build_theme_context(theme, age, lexicon, young_age_max),
        checkpoint_type=checkpoint_type,
        checkpoint_guidance=CHECKPOINT_GUIDANCE[checkpoint_type],
    )
    return StoryPrompt(system_instruction=system_instruction, user_instruction=user_instruction)
