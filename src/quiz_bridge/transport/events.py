"""Decoding of raw transport events into messages."""

import logging
from typing import Any

from quiz_bridge.transport.base import InboundMessage, MessageKey, RawMessage

logger = logging.getLogger(__name__)

GROUP_SUFFIX = "@g.us"
STATUS_BROADCAST = "status@broadcast"

# (message field, label used on the agent path)
_CAPTIONED = (
    ("imageMessage", "Image"),
    ("videoMessage", "Video"),
    ("documentMessage", "Document"),
)


def is_group_chat(chat_id: str) -> bool:
    """Check whether a chat address is a group."""
    return chat_id.endswith(GROUP_SUFFIX)


def parse_upsert(event: dict[str, Any]) -> list[RawMessage]:
    """Decode a messages.upsert event.

    Only live ("notify") batches are used. Own messages and status
    broadcasts are skipped.
    """
    if event.get("type") != "notify":
        logger.debug(f"Skipping upsert of type {event.get('type')!r}")
        return []

    messages: list[RawMessage] = []
    for item in event.get("messages") or []:
        key = MessageKey.from_dict(item.get("key") or {})
        if key.from_me:
            continue
        if key.remote_jid == STATUS_BROADCAST:
            continue
        messages.append(
            RawMessage(
                message=item.get("message"),
                key=key,
                timestamp=int(item.get("messageTimestamp") or 0),
            )
        )
    return messages


def extract_content(message: dict[str, Any] | None, annotate: bool = True) -> str | None:
    """Extract the text of a message.

    Args:
        message: The platform message body
        annotate: Prefix captions with the media type and describe voice
            messages (agent path). Without it only plain text and bare
            captions are returned (quiz path).

    Returns:
        Text content, or None if the message carries none
    """
    if not message:
        return None

    if message.get("conversation"):
        return message["conversation"]

    extended = message.get("extendedTextMessage") or {}
    if extended.get("text"):
        return extended["text"]

    for field_name, label in _CAPTIONED:
        caption = (message.get(field_name) or {}).get("caption")
        if caption:
            return f"[{label}] {caption}" if annotate else caption

    if annotate and message.get("audioMessage"):
        return "[Voice Message]"

    return None


def extract_mentions(message: dict[str, Any] | None) -> list[str]:
    """Get the addresses a message explicitly mentions."""
    if not message:
        return []
    extended = message.get("extendedTextMessage") or {}
    context_info = extended.get("contextInfo") or {}
    return list(context_info.get("mentionedJid") or [])


def to_inbound(raw: RawMessage, content: str) -> InboundMessage:
    """Build the agent-facing message from a raw message."""
    return InboundMessage(
        id=raw.key.id,
        sender=raw.key.remote_jid,
        pn=raw.key.remote_jid_alt or "",
        content=content,
        timestamp=raw.timestamp,
        is_group=is_group_chat(raw.key.remote_jid),
        mentions=extract_mentions(raw.message),
    )
