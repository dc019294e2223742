"""Logging utilities for quiz-bridge."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Generator


@dataclass
class SessionStats:
    """Cumulative statistics for a session.

    Thread-safe counters for tracking bridge activity metrics.
    """

    messages_received: int = 0
    messages_forwarded: int = 0
    messages_diverted: int = 0
    messages_dropped: int = 0
    quizzes_started: int = 0
    quizzes_ended: int = 0
    commands_handled: int = 0
    answers: dict[str, int] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def increment(self, stat: str, amount: int = 1) -> None:
        """Increment a stat counter."""
        with self._lock:
            if hasattr(self, stat) and stat != "_lock":
                current = getattr(self, stat)
                if isinstance(current, int):
                    setattr(self, stat, current + amount)

    def increment_answer(self, kind: str) -> None:
        """Track a classified quiz answer."""
        with self._lock:
            self.answers[kind] = self.answers.get(kind, 0) + 1

    def summary(self) -> dict[str, Any]:
        """Return a summary of all stats."""
        with self._lock:
            return {
                "received": self.messages_received,
                "forwarded": self.messages_forwarded,
                "diverted": self.messages_diverted,
                "dropped": self.messages_dropped,
                "quizzes_started": self.quizzes_started,
                "quizzes_ended": self.quizzes_ended,
                "commands": self.commands_handled,
                "answers": dict(self.answers),
            }

    def summary_line(self) -> str:
        """Return a single-line summary for logging."""
        with self._lock:
            return (
                f"received={self.messages_received} "
                f"forwarded={self.messages_forwarded} diverted={self.messages_diverted} "
                f"dropped={self.messages_dropped} "
                f"quizzes={self.quizzes_started}/{self.quizzes_ended}"
            )


# Global session stats instance
_session_stats: SessionStats | None = None
_stats_lock = Lock()


def get_session_stats() -> SessionStats:
    """Get the global session stats instance."""
    global _session_stats
    with _stats_lock:
        if _session_stats is None:
            _session_stats = SessionStats()
        return _session_stats


def reset_session_stats() -> None:
    """Reset session stats (mainly for testing)."""
    global _session_stats
    with _stats_lock:
        _session_stats = SessionStats()


@contextmanager
def log_timing(
    logger: logging.Logger, operation: str
) -> Generator[None, None, None]:
    """Context manager for timing operations.

    Logs at DEBUG level on completion.

    Example:
        with log_timing(logger, "Mention check"):
            mentioned = await mention_filter.is_mentioned(...)
        # Logs: "Mention check completed in 1.23ms"
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"{operation} completed in {elapsed_ms:.2f}ms")
