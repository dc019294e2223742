"""Mention detection for group messages."""

import logging
from collections.abc import Sequence

from quiz_bridge.core.identity import IdentityResolver

logger = logging.getLogger(__name__)


class MentionFilter:
    """Decides whether the bot is among a message's mentions."""

    def __init__(self, resolver: IdentityResolver):
        self._resolver = resolver

    async def is_mentioned(self, mentions: Sequence[str], bot_address: str) -> bool:
        """Check if the bot address is in the mention list.

        Entries are resolved in order and the check stops at the first match.
        """
        if not mentions:
            return False

        bot = await self._resolver.resolve(bot_address)
        for mention in mentions:
            if await self._resolver.resolve(mention) == bot:
                logger.debug(f"Bot mentioned as {mention}")
                return True
        return False
