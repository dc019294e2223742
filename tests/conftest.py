"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Any

import pytest

from quiz_bridge.config import Config, QuizConfig
from quiz_bridge.core.logging import reset_session_stats
from quiz_bridge.transport.base import MessageKey, TransportListener


class FakeTransport:
    """In-memory transport recording everything sent through it."""

    def __init__(
        self,
        bot_address: str | None = "15550001111:3@s.whatsapp.net",
        directory: dict[str, str] | None = None,
    ):
        self._bot_address = bot_address
        self.directory = directory or {}
        self.sent: list[tuple[str, str]] = []
        self.reactions: list[tuple[str, str, MessageKey]] = []
        self.lookups: list[str] = []
        self.fail_sends = False
        self.listener: TransportListener | None = None
        self.connected = False

    @property
    def bot_address(self) -> str | None:
        return self._bot_address

    async def send_message(self, to: str, text: str) -> None:
        if self.fail_sends:
            raise ConnectionError("Not connected")
        self.sent.append((to, text))

    async def send_react(self, to: str, emoji: str, key: MessageKey) -> None:
        if self.fail_sends:
            raise ConnectionError("Not connected")
        self.reactions.append((to, emoji, key))

    async def lookup_phone(self, lid: str) -> str | None:
        self.lookups.append(lid)
        return self.directory.get(lid)

    async def connect(self, listener: TransportListener) -> None:
        self.listener = listener
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False


def make_upsert(
    chat_id: str,
    text: str | None = None,
    mentions: list[str] | None = None,
    message_id: str = "MSG1",
    from_me: bool = False,
    message: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a single-message notify upsert event."""
    if message is None:
        if mentions is not None:
            message = {
                "extendedTextMessage": {
                    "text": text,
                    "contextInfo": {"mentionedJid": mentions},
                }
            }
        else:
            message = {"conversation": text}
    return {
        "type": "notify",
        "messages": [
            {
                "key": {"id": message_id, "remoteJid": chat_id, "fromMe": from_me},
                "message": message,
                "messageTimestamp": 1700000000,
            }
        ],
    }


@pytest.fixture(autouse=True)
def fresh_stats():
    """Isolate the global session stats between tests."""
    reset_session_stats()
    yield
    reset_session_stats()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def quiz_config() -> QuizConfig:
    return QuizConfig()


@pytest.fixture
def default_config() -> Config:
    """Provide a default configuration for testing."""
    return Config()


@pytest.fixture
def message_key() -> MessageKey:
    return MessageKey(id="ANS1", remote_jid="G1@g.us", participant="15550002222@s.whatsapp.net")


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary config file."""
    config_content = """
gateway:
  host: "127.0.0.1"
  port: 4010
  token: "secret-token"
  auth_timeout_seconds: 2.5

quiz:
  correct_message: "Well done!"
  partial_reaction: "👀"

transport:
  factory: "my_transport:create"
"""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(config_content)
    return config_path
