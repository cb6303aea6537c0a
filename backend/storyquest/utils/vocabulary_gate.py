"""vocabulary_gate.py: age-appropriateness scan of a validated story.

Three tiers, checked in order, first hit wins:
  1. banned_complexity   : abstract / psychological / scientific jargon
  2. scientific_phrases  : compound scientific terms ("nuclear fusion")
  3. scientific_register : bare science words ("energy", "force")

A hit rejects the whole story, not just the offending sentence.
"""
from storyquest.models.story import StoryDocument
from storyquest.services.lexicon import Lexicon, get_lexicon
from storyquest.utils.gate_result import GateResult

_TIERS = (
    ("banned_complexity", 'Content contains advanced vocabulary "{term}" inappropriate for age {age}. Please use simpler language.'),
    ("scientific_phrases", 'Content contains complex scientific phrase "{term}" inappropriate for age {age}. Use simple everyday words instead.'),
    ("scientific_register", 'Content contains scientific term "{term}" too advanced for age {age}. Explain using familiar objects and activities instead.'),
)


def story_text_for_vocabulary(story: StoryDocument) -> str:
    """Steps plus the checkpoint question: everything the child reads."""
    return " ".join(story.steps) + " " + story.checkpoint.question


def check_vocabulary(text: str, age: int, lexicon: Lexicon | None = None) -> GateResult:
    lexicon = lexicon or get_lexicon()
    lowered = text.lower()
    for category, message in _TIERS:
        term = lexicon.contains_any(lowered, category)
        if term:
            return GateResult(ok=False, reason=message.format(term=term, age=age))
    return GateResult(ok=True)
