"""Lenient grading of a child's typed checkpoint answer.

Count questions whose expected answer and typed answer both start with a
number are decided by that number alone. Otherwise, tried in order until one
matches:
  exact (case/space-insensitive) -> whole-word containment either way ->
  synonym table (compare questions) -> containment after dropping articles
  and prepositions.
"""
import re

from storyquest.models.story import Checkpoint

COMPARE_SYNONYMS: dict[str, list[str]] = {
    "big": ["large", "huge", "giant", "enormous", "massive"],
    "small": ["tiny", "little", "mini", "miniature"],
    "fast": ["quick", "speedy", "rapid", "swift"],
    "slow": ["sluggish", "gradual", "leisurely"],
    "hot": ["warm", "heated", "burning"],
    "cold": ["cool", "freezing", "chilly", "icy"],
    "bright": ["shiny", "brilliant", "glowing", "luminous"],
    "dark": ["dim", "shadowy", "gloomy"],
}

_FILLER_RE = re.compile(r"\b(the|a|an|is|are|was|were|in|on|at|by|for|with|to)\b")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _contains_words(haystack: str, needle: str) -> bool:
    return bool(needle) and re.search(rf"\b{re.escape(needle)}\b", haystack) is not None


def _contains_either_way(a: str, b: str) -> bool:
    return _contains_words(a, b) or _contains_words(b, a)


def _leading_int(text: str):
    m = _LEADING_INT_RE.match(text)
    return int(m.group(1)) if m else None


def _synonym_match(user: str, expected: str) -> bool:
    for key, values in COMPARE_SYNONYMS.items():
        if key in expected and any(s in user for s in values):
            return True
        if expected in values and key in user:
            return True
    return False


def _strip_filler(text: str) -> str:
    return " ".join(_FILLER_RE.sub("", text).split())


def grade_checkpoint_answer(checkpoint: Checkpoint, answer: str) -> bool:
    user = answer.lower().strip()
    expected = checkpoint.expected.lower().strip()
    if not user:
        return False

    if checkpoint.type == "count":
        user_n, expected_n = _leading_int(user), _leading_int(expected)
        if user_n is not None and expected_n is not None:
            return user_n == expected_n

    if user == expected or _contains_either_way(user, expected):
        return True

    if checkpoint.type == "compare" and _synonym_match(user, expected):
        return True

    clean_user, clean_expected = _strip_filler(user), _strip_filler(expected)
    if clean_user and clean_user == clean_expected:
        return True
    return _contains_either_way(clean_user, clean_expected)
