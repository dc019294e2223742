"""Message routing between the agent and the quiz engine."""

import logging
from collections.abc import Callable, Coroutine
from enum import Enum
from typing import Any

from quiz_bridge.core.locks import ChatLocks
from quiz_bridge.core.logging import get_session_stats, log_timing
from quiz_bridge.core.mentions import MentionFilter
from quiz_bridge.transport.base import InboundMessage, RawMessage

logger = logging.getLogger(__name__)

AgentHandler = Callable[[InboundMessage], Coroutine[Any, Any, None]]
IgnoredGroupHandler = Callable[[RawMessage], Coroutine[Any, Any, None]]


class Route(str, Enum):
    """Where a message was sent."""

    AGENT = "agent"
    QUIZ = "quiz"


class MessageRouter:
    """Dispatches each inbound message to exactly one handler.

    Private messages always go to the agent. Group messages go to the agent
    when the bot is mentioned and to the ignored-group handler otherwise.
    Messages from the same chat are evaluated one at a time.
    """

    def __init__(
        self,
        mention_filter: MentionFilter,
        bot_address: Callable[[], str | None],
        on_message: AgentHandler,
        on_ignored_group_message: IgnoredGroupHandler,
    ):
        self._mention_filter = mention_filter
        self._bot_address = bot_address
        self._on_message = on_message
        self._on_ignored_group_message = on_ignored_group_message
        self._locks = ChatLocks()

    async def route(self, message: InboundMessage, raw: RawMessage) -> Route:
        """Route a decoded message.

        Args:
            message: The decoded message (content already extracted)
            raw: The undecoded message it came from

        Returns:
            The route taken
        """
        stats = get_session_stats()

        if not message.is_group:
            logger.info(f"ROUTE: {message.sender} -> agent (private)")
            await self._on_message(message)
            stats.increment("messages_forwarded")
            return Route.AGENT

        async with self._locks.hold(message.sender):
            with log_timing(logger, "Mention check"):
                mentioned = await self._mention_filter.is_mentioned(
                    message.mentions, self._bot_address() or ""
                )

            if mentioned:
                logger.info(f"ROUTE: {message.sender} -> agent (mentioned)")
                await self._on_message(message)
                stats.increment("messages_forwarded")
                return Route.AGENT

            logger.debug(f"ROUTE: {message.sender} -> quiz")
            await self._on_ignored_group_message(raw)
            stats.increment("messages_diverted")
            return Route.QUIZ
