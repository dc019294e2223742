"""Messaging transport contract and event decoding."""

from quiz_bridge.transport.base import (
    InboundMessage,
    MessageKey,
    MessageSender,
    RawMessage,
    Transport,
    TransportListener,
)
from quiz_bridge.transport.events import (
    extract_content,
    extract_mentions,
    is_group_chat,
    parse_upsert,
    to_inbound,
)

__all__ = [
    "InboundMessage",
    "MessageKey",
    "MessageSender",
    "RawMessage",
    "Transport",
    "TransportListener",
    "extract_content",
    "extract_mentions",
    "is_group_chat",
    "parse_upsert",
    "to_inbound",
]
