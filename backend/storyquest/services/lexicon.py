"""
Lexicon Store: every word list the moderation gates consult.

The lists live in data/lexicon.json (versioned) and are loaded once per
process. All gates go through ``Lexicon.contains_any`` so that substring
matching behaves identically everywhere: case-insensitive, first listed
term wins.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel

logger = logging.getLogger("storyquest.lexicon")

LEXICON_PATH = Path(__file__).parent.parent / "data" / "lexicon.json"

# Categories screened against incoming topics, in lookup order.
TOPIC_BANNED_CATEGORIES = (
    "explicit_banned",
    "scary_content",
    "inappropriate_for_age",
    "personal_info",
    "warning_phrases",
    "banned_complexity",
)


class ThemeEntry(BaseModel):
    description: str
    icon: str = ""
    vocabulary: list[str]
    characters: list[str]


class Lexicon(BaseModel):
    version: str
    categories: dict[str, list[str]]
    themes: dict[str, ThemeEntry]

    def words(self, category: str) -> list[str]:
        try:
            return self.categories[category]
        except KeyError:
            raise KeyError(f"Unknown lexicon category '{category}'") from None

    def contains_any(self, text: str, category: str | Iterable[str]) -> Optional[str]:
        """Return the first term of ``category`` found in ``text``, else None.

        ``category`` may be a single name or several names searched in order.
        """
        names = (category,) if isinstance(category, str) else tuple(category)
        lowered = text.lower()
        for name in names:
            for term in self.words(name):
                if term.lower() in lowered:
                    return term
        return None

    def theme(self, name: str) -> ThemeEntry:
        return self.themes[name]

    def age_words(self, age: int, young_age_max: int) -> list[str]:
        if age <= young_age_max:
            return self.words("age_words_young")
        return self.words("age_words_older")


def load_lexicon(path: Path = LEXICON_PATH) -> Lexicon:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    lexicon = Lexicon.model_validate(data)
    logger.info(
        "Loaded lexicon v%s (%d categories, %d themes)",
        lexicon.version, len(lexicon.categories), len(lexicon.themes),
    )
    return lexicon


@lru_cache
def get_lexicon() -> Lexicon:
    return load_lexicon()
