"""Transport contract consumed by the bridge core."""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class MessageKey:
    """Platform key identifying a single message (used as a reaction target)."""

    id: str
    remote_jid: str
    remote_jid_alt: str | None = None
    from_me: bool = False
    participant: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the platform's camelCase key shape."""
        data: dict[str, Any] = {
            "id": self.id,
            "remoteJid": self.remote_jid,
            "fromMe": self.from_me,
        }
        if self.remote_jid_alt is not None:
            data["remoteJidAlt"] = self.remote_jid_alt
        if self.participant is not None:
            data["participant"] = self.participant
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessageKey":
        """Deserialize from the platform's key shape."""
        return cls(
            id=data.get("id") or "",
            remote_jid=data.get("remoteJid") or "",
            remote_jid_alt=data.get("remoteJidAlt"),
            from_me=bool(data.get("fromMe", False)),
            participant=data.get("participant"),
        )


@dataclass
class RawMessage:
    """Undecoded inbound message as delivered by the transport."""

    message: dict[str, Any] | None
    key: MessageKey
    timestamp: int = 0

    @property
    def chat_id(self) -> str:
        return self.key.remote_jid


@dataclass
class InboundMessage:
    """Decoded message forwarded to the agent process."""

    id: str
    sender: str
    pn: str
    content: str
    timestamp: int
    is_group: bool
    mentions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sender": self.sender,
            "pn": self.pn,
            "content": self.content,
            "timestamp": self.timestamp,
            "isGroup": self.is_group,
        }


@runtime_checkable
class MessageSender(Protocol):
    """Outbound capability: send text and reactions."""

    async def send_message(self, to: str, text: str) -> None: ...

    async def send_react(self, to: str, emoji: str, key: MessageKey) -> None: ...


class TransportListener(Protocol):
    """Receiver of transport events."""

    async def on_upsert(self, event: dict[str, Any]) -> None: ...

    async def on_status(self, status: str) -> None: ...

    async def on_qr(self, qr: str) -> None: ...


@runtime_checkable
class Transport(MessageSender, Protocol):
    """Full messaging-platform session as seen by the bridge."""

    @property
    def bot_address(self) -> str | None: ...

    async def lookup_phone(self, lid: str) -> str | None: ...

    async def connect(self, listener: TransportListener) -> None: ...

    async def disconnect(self) -> None: ...
