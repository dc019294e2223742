"""Fuzzy classification of quiz answers."""

from enum import Enum

# Candidates up to this length may be at most SHORT_MAX_DISTANCE edits away
SHORT_ANSWER_LENGTH = 10
SHORT_MAX_DISTANCE = 2
# Longer candidates get max(LONG_MIN_DISTANCE, 10% of their length)
LONG_MIN_DISTANCE = 3
LONG_DISTANCE_RATIO = 0.1


class MatchKind(str, Enum):
    """How closely an answer matches the correct one."""

    EXACT = "exact"
    PARTIAL = "partial"
    CLOSE = "close"
    NONE = "none"


def normalize_answer(text: str) -> str:
    """Normalize an answer for comparison."""
    return text.strip().lower()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert/delete/substitute costs."""
    m, n = len(a), len(b)
    dp = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(m + 1):
        dp[i][0] = i
    for j in range(n + 1):
        dp[0][j] = j

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if a[i - 1] == b[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = 1 + min(
                    dp[i - 1][j],  # deletion
                    dp[i][j - 1],  # insertion
                    dp[i - 1][j - 1],  # substitution
                )

    return dp[m][n]


def max_close_distance(candidate: str) -> int:
    """Largest edit distance still counted as close.

    The threshold is driven by the submitted candidate's length only.
    """
    length = len(candidate)
    if length <= SHORT_ANSWER_LENGTH:
        return SHORT_MAX_DISTANCE
    return max(LONG_MIN_DISTANCE, int(length * LONG_DISTANCE_RATIO))


def is_close_match(candidate: str, correct: str) -> bool:
    """Check whether two normalized answers are within the close threshold."""
    return edit_distance(candidate, correct) <= max_close_distance(candidate)


def classify(candidate: str, correct: str) -> MatchKind:
    """Classify a candidate answer against the correct answer.

    Checks run in order and the first hit wins: exact equality, substring
    containment either way, then edit distance.
    """
    candidate = normalize_answer(candidate)
    correct = normalize_answer(correct)

    if candidate == correct:
        return MatchKind.EXACT

    if correct in candidate or candidate in correct:
        return MatchKind.PARTIAL

    if is_close_match(candidate, correct):
        return MatchKind.CLOSE

    return MatchKind.NONE
