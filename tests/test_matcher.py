"""Tests for quiz answer classification."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from quiz_bridge.core.matcher import (
    MatchKind,
    classify,
    edit_distance,
    is_close_match,
    max_close_distance,
    normalize_answer,
)


class TestEditDistance:
    """Tests for Levenshtein distance."""

    def test_known_distances(self):
        assert edit_distance("kitten", "sitting") == 3
        assert edit_distance("paris", "pariss") == 1
        assert edit_distance("london", "paris") == 6
        assert edit_distance("", "abc") == 3
        assert edit_distance("abc", "") == 3
        assert edit_distance("", "") == 0

    def test_substitution_counts_once(self):
        assert edit_distance("cat", "cut") == 1


class TestCloseThreshold:
    """Tests for the length-driven close threshold."""

    def test_short_candidate(self):
        assert max_close_distance("abcdefghij") == 2

    def test_long_candidate_minimum(self):
        assert max_close_distance("abcdefghijk") == 3

    def test_long_candidate_ratio(self):
        assert max_close_distance("a" * 45) == 4
        assert max_close_distance("a" * 50) == 5

    def test_threshold_uses_candidate_length(self):
        """The submitted answer's length picks the threshold, not the correct one's."""
        correct = "abcdefghijklmnop"
        candidate = "abcdefghijklm"  # 13 chars -> threshold 3, distance 3
        assert is_close_match(candidate, correct)
        assert not is_close_match("abcdefghi", "abcdefghijkl")  # 9 chars, distance 3


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(
        ("candidate", "correct", "expected"),
        [
            ("Paris", "Paris", MatchKind.EXACT),
            ("  PARIS ", "paris", MatchKind.EXACT),
            ("The answer is Paris", "Paris", MatchKind.PARTIAL),
            ("Par", "Paris", MatchKind.PARTIAL),
            ("Pariss", "Paris", MatchKind.PARTIAL),
            ("Pari", "Paris", MatchKind.PARTIAL),
            ("Parsi", "Paris", MatchKind.CLOSE),
            ("London", "Paris", MatchKind.NONE),
        ],
    )
    def test_cases(self, candidate: str, correct: str, expected: MatchKind):
        assert classify(candidate, correct) == expected

    def test_close_missing_letter(self):
        """One letter dropped from the middle is close, not partial."""
        assert classify("Pars", "Paris") == MatchKind.CLOSE

    def test_partial_wins_over_close(self):
        """Containment is checked before edit distance."""
        assert is_close_match("pariss", "paris")
        assert classify("Pariss", "Paris") == MatchKind.PARTIAL
        assert is_close_match("pari", "paris")
        assert classify("Pari", "Paris") == MatchKind.PARTIAL

    def test_long_answer_typos(self):
        assert classify("Leonardo da Vinchi", "Leonardo da Vinci") == MatchKind.CLOSE
        assert classify("Michelangelo", "Leonardo da Vinci") == MatchKind.NONE

    def test_normalize(self):
        assert normalize_answer("  Hello World\n") == "hello world"


class TestMatcherProperties:
    """Property-based tests for the matcher."""

    @given(a=st.text(max_size=30), b=st.text(max_size=30))
    @settings(max_examples=200)
    def test_edit_distance_symmetric(self, a: str, b: str):
        assert edit_distance(a, b) == edit_distance(b, a)

    @given(a=st.text(max_size=40))
    def test_edit_distance_identity(self, a: str):
        assert edit_distance(a, a) == 0

    @given(a=st.text(max_size=30), b=st.text(max_size=30))
    def test_edit_distance_bounded_by_longer(self, a: str, b: str):
        assert edit_distance(a, b) <= max(len(a), len(b))

    @given(x=st.text(alphabet=st.characters(min_codepoint=97, max_codepoint=122), min_size=1))
    def test_classify_reflexive(self, x: str):
        assert classify(x, x) == MatchKind.EXACT
