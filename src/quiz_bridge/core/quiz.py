"""Quiz session state and answer checking."""

import dataclasses
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from quiz_bridge.config import QuizConfig
from quiz_bridge.core.locks import ChatLocks
from quiz_bridge.core.logging import get_session_stats
from quiz_bridge.core.matcher import MatchKind, classify, normalize_answer
from quiz_bridge.transport.base import MessageKey, MessageSender

logger = logging.getLogger(__name__)


class EndReason(str, Enum):
    """Why a quiz session ended."""

    ANSWERED = "answered"
    TIMEOUT = "timeout"  # Reserved, nothing drives it yet
    CANCELLED = "cancelled"


class QuizError(Exception):
    """Base class for quiz errors."""


class QuizAlreadyActiveError(QuizError):
    """Raised when starting a quiz in a chat that already has one."""

    def __init__(self, chat_id: str):
        super().__init__(f"A quiz is already active in {chat_id}")
        self.chat_id = chat_id


@dataclass(frozen=True)
class QuizSession:
    """A single quiz question and its expected answer."""

    question: str
    normalized_answer: str
    chat_id: str
    reply_message_id: str | None = None
    start_time: datetime = field(default_factory=datetime.now)
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the control channel."""
        return {
            "active": self.active,
            "question": self.question,
            "normalizedAnswer": self.normalized_answer,
            "startTime": int(self.start_time.timestamp() * 1000),
            "chatId": self.chat_id,
            "replyMessageId": self.reply_message_id,
        }


QuizStartHandler = Callable[[QuizSession], Coroutine[Any, Any, None]]
QuizEndHandler = Callable[[QuizSession, EndReason], Coroutine[Any, Any, None]]


class QuizEngine:
    """Runs quiz sessions, one per chat.

    Sessions are created by start_quiz and removed by end_quiz; nothing
    else mutates them. Callers only ever see copies.
    """

    def __init__(
        self,
        sender: MessageSender,
        config: QuizConfig | None = None,
        on_quiz_start: QuizStartHandler | None = None,
        on_quiz_end: QuizEndHandler | None = None,
    ):
        self._sender = sender
        self._config = config or QuizConfig()
        self._on_quiz_start = on_quiz_start
        self._on_quiz_end = on_quiz_end
        self._sessions: dict[str, QuizSession] = {}
        self._locks = ChatLocks()

    async def start_quiz(
        self,
        chat_id: str,
        question: str,
        answer: str,
        reply_to_message_id: str | None = None,
    ) -> QuizSession:
        """Post a question to a group and start accepting answers.

        Args:
            chat_id: Group address the quiz runs in
            question: Question text (display only)
            answer: Correct answer, compared case-insensitively
            reply_to_message_id: Optional message the quiz is anchored to

        Returns:
            Snapshot of the new session

        Raises:
            QuizAlreadyActiveError: The chat already has an active quiz
        """
        async with self._locks.hold(chat_id):
            if chat_id in self._sessions:
                raise QuizAlreadyActiveError(chat_id)

            text = self._config.question_template.format(question=question)
            await self._sender.send_message(chat_id, text)

            session = QuizSession(
                question=question,
                normalized_answer=normalize_answer(answer),
                chat_id=chat_id,
                reply_message_id=reply_to_message_id,
            )
            self._sessions[chat_id] = session

        logger.info(f"QUIZ_START: {chat_id}: {question}")
        get_session_stats().increment("quizzes_started")

        if self._on_quiz_start:
            await self._on_quiz_start(dataclasses.replace(session))
        return dataclasses.replace(session)

    async def end_quiz(self, reason: EndReason, chat_id: str | None = None) -> list[QuizSession]:
        """End the quiz in one chat, or every active quiz if chat_id is None.

        Ending a chat with no active quiz does nothing and fires no event.

        Returns:
            The sessions that were ended
        """
        chat_ids = [chat_id] if chat_id is not None else list(self._sessions)
        ended: list[QuizSession] = []
        for cid in chat_ids:
            async with self._locks.hold(cid):
                session = self._sessions.pop(cid, None)
            if session is None:
                continue
            await self._finish(session, reason)
            ended.append(session)
        return ended

    async def _finish(self, session: QuizSession, reason: EndReason) -> None:
        logger.info(f"QUIZ_END: {session.chat_id}: {reason.value}")
        get_session_stats().increment("quizzes_ended")
        if self._on_quiz_end:
            await self._on_quiz_end(dataclasses.replace(session), reason)

    async def check_answer(
        self, chat_id: str, content: str, key: MessageKey
    ) -> MatchKind | None:
        """Check a group message against the chat's active quiz.

        Messages from chats without an active quiz are ignored.

        Returns:
            The classification, or None if the message was ignored
        """
        if chat_id not in self._sessions:
            return None

        cfg = self._config
        async with self._locks.hold(chat_id):
            session = self._sessions.get(chat_id)
            if session is None:
                return None

            kind = classify(content, session.normalized_answer)
            logger.info(f"QUIZ_ANSWER: {chat_id}: {content!r} -> {kind.value}")
            get_session_stats().increment_answer(kind.value)

            if kind is MatchKind.EXACT:
                await self._sender.send_react(chat_id, cfg.correct_reaction, key)
                await self._sender.send_message(chat_id, cfg.correct_message)
                self._sessions.pop(chat_id, None)
            elif kind is MatchKind.PARTIAL:
                await self._sender.send_react(chat_id, cfg.partial_reaction, key)
            elif kind is MatchKind.CLOSE:
                await self._sender.send_react(chat_id, cfg.close_reaction, key)

        if kind is MatchKind.EXACT:
            await self._finish(session, EndReason.ANSWERED)
        return kind

    def get_quiz(self, chat_id: str | None = None) -> QuizSession | None:
        """Get a copy of a chat's session.

        Without chat_id, returns the most recently started session.
        """
        if chat_id is not None:
            session = self._sessions.get(chat_id)
        elif self._sessions:
            session = max(self._sessions.values(), key=lambda s: s.start_time)
        else:
            session = None
        return dataclasses.replace(session) if session else None

    def get_quizzes(self) -> list[QuizSession]:
        """Get copies of all active sessions, oldest first."""
        sessions = sorted(self._sessions.values(), key=lambda s: s.start_time)
        return [dataclasses.replace(s) for s in sessions]

    def is_quiz_active(self, chat_id: str | None = None) -> bool:
        """Check if a quiz is active in a chat, or in any chat."""
        if chat_id is not None:
            return chat_id in self._sessions
        return bool(self._sessions)
