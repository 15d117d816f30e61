"""
Tests for event parsing and frame encoding.
"""

import json

import pytest

from chat_relay.components.events.types import (
    ChatMessage,
    SendMessage,
    SetUsername,
    UsernameAnnouncement,
    encode_frame,
    parse_inbound,
)
from shared.utils.exceptions import InvalidInputError


class TestParseInbound:
    """Client frames are validated before routing."""

    def test_set_username(self):
        event = parse_inbound('{"type": "set-username", "payload": "  alice  "}')

        assert event == SetUsername(name="alice")

    def test_send_message_keeps_claimed_name(self):
        raw = json.dumps({"type": "send-message", "payload": {"userName": "bob", "message": "hi"}})

        event = parse_inbound(raw)

        assert event == SendMessage(body="hi", user_name="bob")

    def test_send_message_without_user_name(self):
        event = parse_inbound('{"type": "send-message", "payload": {"message": "hi"}}')

        assert event.user_name is None
        assert event.body == "hi"

    def test_message_body_is_not_stripped(self):
        event = parse_inbound('{"type": "send-message", "payload": {"message": "  spaced  "}}')

        assert event.body == "  spaced  "

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[1, 2]",
            '"set-username"',
            "{}",
            '{"type": 7}',
            '{"type": "shout", "payload": "x"}',
            '{"type": "connect"}',
            '{"type": "disconnect"}',
            '{"type": "set-username", "payload": ""}',
            '{"type": "set-username", "payload": "   "}',
            '{"type": "set-username", "payload": 42}',
            '{"type": "set-username"}',
            '{"type": "send-message", "payload": "hi"}',
            '{"type": "send-message", "payload": {"message": ""}}',
            '{"type": "send-message", "payload": {"message": 5}}',
            '{"type": "send-message", "payload": {"userName": "bob"}}',
        ],
    )
    def test_invalid_frames_raise(self, raw):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_inbound(raw, connection_id="c1")

        assert exc_info.value.kind == "InvalidInput"
        assert exc_info.value.connection_id == "c1"

    def test_json_error_is_not_chained(self):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_inbound("{broken")

        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__


class TestEncodeFrame:
    """Outbound events use the {type, payload} envelope."""

    def test_new_user(self):
        frame = encode_frame(UsernameAnnouncement(display_name="alice"))

        assert json.loads(frame) == {"type": "new-user", "payload": "alice"}

    def test_new_message(self):
        frame = encode_frame(ChatMessage(sender_display_name="alice", body="hi bob"))

        assert json.loads(frame) == {
            "type": "new-message",
            "payload": {"userName": "alice", "message": "hi bob"},
        }

    def test_non_ascii_is_kept_verbatim(self):
        frame = encode_frame(ChatMessage(sender_display_name="zoë", body="¡hola! 👋"))

        assert "zoë" in frame
        assert "👋" in frame
