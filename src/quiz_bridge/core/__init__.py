"""Core routing and quiz logic."""

from .identity import IdentityResolver, strip_address
from .matcher import MatchKind, classify, edit_distance, is_close_match
from .mentions import MentionFilter
from .quiz import EndReason, QuizAlreadyActiveError, QuizEngine, QuizError, QuizSession
from .router import MessageRouter, Route

__all__ = [
    "EndReason",
    "IdentityResolver",
    "MatchKind",
    "MentionFilter",
    "MessageRouter",
    "QuizAlreadyActiveError",
    "QuizEngine",
    "QuizError",
    "QuizSession",
    "Route",
    "classify",
    "edit_distance",
    "is_close_match",
    "strip_address",
]
