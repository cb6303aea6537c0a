"""Tests for grade_checkpoint_answer(): lenient matching of typed answers."""
import pytest

from storyquest.models.story import Checkpoint
from storyquest.services.checkpoint_grader import grade_checkpoint_answer


def _cp(expected: str, type_: str = "compare") -> Checkpoint:
    return Checkpoint(question="Which one is bigger, the sun or the moon?", expected=expected, type=type_)


class TestExactAndContainment:
    @pytest.mark.parametrize("answer", ["the sun", "The Sun", "  the sun  ", "sun"])
    def test_matches(self, answer):
        assert grade_checkpoint_answer(_cp("the sun"), answer) is True

    def test_answer_inside_sentence(self):
        assert grade_checkpoint_answer(_cp("sun"), "I think the sun is bigger") is True

    def test_empty_answer(self):
        assert grade_checkpoint_answer(_cp("sun"), "   ") is False

    def test_wrong_answer(self):
        assert grade_checkpoint_answer(_cp("the sun"), "moon") is False

    @pytest.mark.parametrize("answer", ["s", "su", "un"])
    def test_word_fragments_do_not_match(self, answer):
        assert grade_checkpoint_answer(_cp("sun"), answer) is False

    def test_word_inside_longer_word_does_not_match(self):
        assert grade_checkpoint_answer(_cp("moon"), "moonlight") is False


class TestCount:
    def test_leading_number(self):
        assert grade_checkpoint_answer(_cp("3 stars", "count"), "3") is True

    def test_different_number(self):
        assert grade_checkpoint_answer(_cp("3", "count"), "4") is False

    def test_number_prefix_is_not_enough(self):
        assert grade_checkpoint_answer(_cp("10", "count"), "1") is False
        assert grade_checkpoint_answer(_cp("1", "count"), "10") is False

    def test_number_decides_even_with_matching_words(self):
        assert grade_checkpoint_answer(_cp("10 stars", "count"), "1 stars") is False
        assert grade_checkpoint_answer(_cp("10 stars", "count"), "10") is True

    def test_spelled_out_number_falls_back_to_words(self):
        assert grade_checkpoint_answer(_cp("three stars", "count"), "three") is True

    def test_numbers_only_for_count_questions(self):
        assert grade_checkpoint_answer(_cp("3 big ones"), "3 small ones") is False


class TestCompareSynonyms:
    @pytest.mark.parametrize("answer", ["huge", "it is giant", "LARGE"])
    def test_synonym_of_expected(self, answer):
        assert grade_checkpoint_answer(_cp("big"), answer) is True

    def test_expected_is_the_synonym(self):
        assert grade_checkpoint_answer(_cp("tiny"), "small") is True

    def test_synonyms_only_for_compare_questions(self):
        assert grade_checkpoint_answer(_cp("big", "count"), "huge") is False

    def test_opposite_is_wrong(self):
        assert grade_checkpoint_answer(_cp("hot"), "freezing") is False


class TestFillerWords:
    def test_articles_and_prepositions_ignored(self):
        assert grade_checkpoint_answer(_cp("in the big tree"), "a big tree") is True
