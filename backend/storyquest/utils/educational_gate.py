"""educational_gate.py: does the story actually teach the requested topic?

Heuristic checks over the lowercased step text, evaluated in a fixed order;
the first failure is reported:

  1. Topic coverage score   explanatory +1, analogy +1, real-world +1,
                            topic mentioned +2; must reach min_score
  2. Checkpoint relevance   question names the topic or a topic word > 3 chars
  3. Vagueness              no filler phrases standing in for explanation
  4. Progression            step 1 defines (what/is/are),
                            step 2 explains (how/because/when)

Never retried by the pipeline: a failure here is terminal.
"""
import logging

from storyquest.models.story import StoryDocument
from storyquest.services.lexicon import Lexicon, get_lexicon
from storyquest.utils.gate_result import GateResult

logger = logging.getLogger("storyquest.educational_gate")

DEFAULT_MIN_SCORE = 2


def _topic_mentioned(steps_text: str, steps: list[str], topic: str) -> bool:
    if topic in steps_text:
        return True
    first_word = topic.split(" ")[0]
    return any(first_word in step.lower() for step in steps)


def educational_score(story: StoryDocument, topic: str, lexicon: Lexicon | None = None) -> int:
    lexicon = lexicon or get_lexicon()
    topic_lower = topic.lower().strip()
    steps_text = " ".join(story.steps).lower()

    score = 0
    if lexicon.contains_any(steps_text, "explanatory_markers"):
        score += 1
    if lexicon.contains_any(steps_text, "analogy_markers"):
        score += 1
    if lexicon.contains_any(steps_text, "real_world_markers"):
        score += 1
    if _topic_mentioned(steps_text, story.steps, topic_lower):
        score += 2  # Topic mention is worth more
    else:
        logger.info("Topic '%s' not directly mentioned in steps", topic_lower)
    return score


def checkpoint_tests_topic(story: StoryDocument, topic: str) -> bool:
    topic_lower = topic.lower().strip()
    question = story.checkpoint.question.lower()
    if topic_lower in question:
        return True
    return any(len(word) > 3 and word in question for word in topic_lower.split(" "))


def check_educational_content(
    story: StoryDocument,
    topic: str,
    lexicon: Lexicon | None = None,
    min_score: int = DEFAULT_MIN_SCORE,
) -> GateResult:
    lexicon = lexicon or get_lexicon()

    # ── Check 1: Topic coverage score ─────────────────────────────────────
    score = educational_score(story, topic, lexicon)
    if score < min_score:
        return GateResult(
            ok=False,
            reason="Story needs more educational content. Try asking about the topic in a more specific way.",
        )

    # ── Check 2: Checkpoint tests the topic ───────────────────────────────
    if not checkpoint_tests_topic(story, topic):
        return GateResult(ok=False, reason="Checkpoint question does not test understanding of the topic")

    # ── Check 3: Vague filler ─────────────────────────────────────────────
    steps_text = " ".join(story.steps).lower()
    vague = lexicon.contains_any(steps_text, "vague_phrases")
    if vague:
        logger.info("Vague phrase '%s' in story", vague)
        return GateResult(ok=False, reason="Story uses vague language instead of clear explanations")

    # ── Check 4: What → how progression ───────────────────────────────────
    defines = lexicon.contains_any(story.steps[0], "definition_markers")
    explains = lexicon.contains_any(story.steps[1], "causal_markers")
    if not defines or not explains:
        return GateResult(
            ok=False,
            reason="Story does not follow educational progression (what → how → application)",
        )

    return GateResult(ok=True)
