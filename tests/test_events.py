"""Tests for transport event decoding."""

from conftest import make_upsert
from quiz_bridge.transport.base import MessageKey
from quiz_bridge.transport.events import (
    extract_content,
    extract_mentions,
    is_group_chat,
    parse_upsert,
    to_inbound,
)


class TestParseUpsert:
    """Tests for parse_upsert."""

    def test_notify_message(self):
        messages = parse_upsert(make_upsert("G1@g.us", "hello", message_id="ABC"))

        assert len(messages) == 1
        assert messages[0].key.id == "ABC"
        assert messages[0].chat_id == "G1@g.us"
        assert messages[0].timestamp == 1700000000

    def test_non_notify_skipped(self):
        event = make_upsert("G1@g.us", "hello")
        event["type"] = "append"
        assert parse_upsert(event) == []

    def test_own_messages_skipped(self):
        assert parse_upsert(make_upsert("G1@g.us", "hello", from_me=True)) == []

    def test_status_broadcast_skipped(self):
        assert parse_upsert(make_upsert("status@broadcast", "story")) == []

    def test_missing_messages(self):
        assert parse_upsert({"type": "notify"}) == []


class TestExtractContent:
    """Tests for extract_content."""

    def test_conversation(self):
        assert extract_content({"conversation": "hi"}) == "hi"

    def test_extended_text(self):
        assert extract_content({"extendedTextMessage": {"text": "reply"}}) == "reply"

    def test_captions_annotated(self):
        assert extract_content({"imageMessage": {"caption": "cat"}}) == "[Image] cat"
        assert extract_content({"videoMessage": {"caption": "clip"}}) == "[Video] clip"
        assert extract_content({"documentMessage": {"caption": "doc"}}) == "[Document] doc"

    def test_captions_plain(self):
        assert extract_content({"imageMessage": {"caption": "cat"}}, annotate=False) == "cat"

    def test_voice_message(self):
        assert extract_content({"audioMessage": {"seconds": 3}}) == "[Voice Message]"
        assert extract_content({"audioMessage": {"seconds": 3}}, annotate=False) is None

    def test_no_content(self):
        assert extract_content(None) is None
        assert extract_content({}) is None
        assert extract_content({"imageMessage": {}}) is None
        assert extract_content({"stickerMessage": {}}) is None

    def test_conversation_preferred(self):
        message = {"conversation": "a", "extendedTextMessage": {"text": "b"}}
        assert extract_content(message) == "a"


class TestMentionsAndGroups:
    """Tests for mention extraction and group detection."""

    def test_extract_mentions(self):
        message = {
            "extendedTextMessage": {
                "text": "@bot hi",
                "contextInfo": {"mentionedJid": ["1@s.whatsapp.net", "2@lid"]},
            }
        }
        assert extract_mentions(message) == ["1@s.whatsapp.net", "2@lid"]

    def test_no_mentions(self):
        assert extract_mentions({"conversation": "hi"}) == []
        assert extract_mentions(None) == []

    def test_is_group_chat(self):
        assert is_group_chat("123-456@g.us")
        assert not is_group_chat("15550001111@s.whatsapp.net")

    def test_to_inbound(self):
        raw = parse_upsert(make_upsert("G1@g.us", "hey", mentions=["1@lid"]))[0]
        inbound = to_inbound(raw, "hey")

        assert inbound.is_group is True
        assert inbound.mentions == ["1@lid"]
        assert inbound.to_dict() == {
            "id": "MSG1",
            "sender": "G1@g.us",
            "pn": "",
            "content": "hey",
            "timestamp": 1700000000,
            "isGroup": True,
        }


class TestMessageKey:
    """Tests for MessageKey."""

    def test_round_trip_shape(self):
        data = {"id": "X", "remoteJid": "G1@g.us", "fromMe": False, "participant": "1@lid"}
        assert MessageKey.from_dict(data).to_dict() == data

    def test_defaults(self):
        key = MessageKey.from_dict({})
        assert key.id == ""
        assert key.remote_jid == ""
        assert key.from_me is False
