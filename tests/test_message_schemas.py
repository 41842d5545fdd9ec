import json

import pytest
from pydantic import ValidationError

from conversation_relay.exceptions import MalformedEventError
from conversation_relay.models.message_schemas import (
    EndMessage,
    EndResponse,
    ErrorMessage,
    HandoffData,
    InterruptMessage,
    PromptMessage,
    SetupMessage,
    TextResponse,
    parse_event,
)


class TestInboundMessages:

    def test_setup_message(self):
        message = parse_event({
            "type": "setup",
            "sessionId": "VX123",
            "callSid": "CA123",
            "from": "+15551234567",
            "customParameters": {"foo": "bar"},
        })

        assert isinstance(message, SetupMessage)
        assert message.callSid == "CA123"
        # Undeclared fields are kept for logging
        assert message.model_dump()["customParameters"] == {"foo": "bar"}

    def test_prompt_message(self):
        message = parse_event('{"type": "prompt", "voicePrompt": "I need help", "lang": "en-US", "last": true}')

        assert isinstance(message, PromptMessage)
        assert message.voicePrompt == "I need help"
        assert message.last is True

    def test_prompt_requires_voice_prompt(self):
        with pytest.raises(ValidationError):
            PromptMessage(type="prompt")

    @pytest.mark.parametrize(
        "payload, model",
        [
            ({"type": "interrupt", "utteranceUntilInterrupt": "Sure"}, InterruptMessage),
            ({"type": "error", "description": "Invalid message"}, ErrorMessage),
            ({"type": "end"}, EndMessage),
        ],
    )
    def test_other_inbound_messages(self, payload, model):
        assert isinstance(parse_event(payload), model)

    def test_parse_bytes(self):
        assert isinstance(parse_event(b'{"type": "end"}'), EndMessage)


class TestParseEventErrors:

    @pytest.mark.parametrize(
        "data",
        [
            "{not json",
            "42",
            '"prompt"',
            "{}",
            '{"type": "media"}',
            '{"type": "prompt", "voicePrompt": 5}',
            {"type": None},
        ],
    )
    def test_malformed_events_raise(self, data):
        with pytest.raises(MalformedEventError):
            parse_event(data)

    def test_error_keeps_payload(self):
        with pytest.raises(MalformedEventError) as exc_info:
            parse_event({"type": "unknown"})

        assert exc_info.value.payload == {"type": "unknown"}


class TestOutboundMessages:

    def test_text_response(self):
        response = TextResponse(token="Hello!")

        assert json.loads(response.model_dump_json()) == {"type": "text", "token": "Hello!"}

    def test_end_response_serializes_handoff(self):
        handoff = HandoffData(
            reason="billing issue",
            transcript=[{"role": "customer", "text": "Hi", "timestamp": "2024-01-01T00:00:00Z"}],
            summary="Hi",
        )

        payload = json.loads(EndResponse.from_handoff(handoff).model_dump_json())

        assert payload["type"] == "end"
        assert isinstance(payload["handoffData"], str)
        assert json.loads(payload["handoffData"]) == {
            "reason": "billing issue",
            "transcript": [{"role": "customer", "text": "Hi", "timestamp": "2024-01-01T00:00:00Z"}],
            "summary": "Hi",
        }
