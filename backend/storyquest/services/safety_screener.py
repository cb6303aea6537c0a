"""Pre-generation screening of the child's topic.

Checks run in a fixed order and stop at the first failure:
banned lexicon terms, then length bounds, then spam-like character runs.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

from storyquest.services.lexicon import TOPIC_BANNED_CATEGORIES, Lexicon, get_lexicon

logger = logging.getLogger("storyquest.safety")

MIN_TOPIC_LENGTH = 2
MAX_TOPIC_LENGTH = 200

# Six or more of the same character in a row.
_SPAM_RUN_RE = re.compile(r"(.)\1{5,}")


@dataclass(frozen=True)
class ScreenResult:
    safe: bool
    reason: Optional[str] = None


def screen_topic(topic: str, lexicon: Lexicon | None = None) -> ScreenResult:
    lexicon = lexicon or get_lexicon()
    text = topic.lower().strip()

    banned = lexicon.contains_any(text, TOPIC_BANNED_CATEGORIES)
    if banned:
        logger.warning("Topic rejected: contains banned term '%s'", banned)
        return ScreenResult(
            safe=False,
            reason=f'Topic contains inappropriate content for children: "{banned}"',
        )

    if len(text) < MIN_TOPIC_LENGTH:
        return ScreenResult(safe=False, reason="Topic is too short")

    if len(text) > MAX_TOPIC_LENGTH:
        return ScreenResult(safe=False, reason="Topic is too long")

    if _SPAM_RUN_RE.search(text):
        logger.warning("Topic rejected: repeated-character pattern")
        return ScreenResult(safe=False, reason="Invalid input pattern: too many repeated characters")

    return ScreenResult(safe=True)
