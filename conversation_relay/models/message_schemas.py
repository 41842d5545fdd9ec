"""
Pydantic models for Twilio ConversationRelay message schemas.

This module defines structured data models for the incoming and outgoing
messages of the ConversationRelay WebSocket protocol, providing type validation
and a single entry point, parse_event, for turning raw frames into typed events.
"""

import json
from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from conversation_relay.config.constants import (
    EVENT_TYPE_END,
    EVENT_TYPE_ERROR,
    EVENT_TYPE_INTERRUPT,
    EVENT_TYPE_PROMPT,
    EVENT_TYPE_SETUP,
)
from conversation_relay.exceptions import MalformedEventError


# Base Models
class BaseMessage(BaseModel):
    """Base model for all ConversationRelay messages."""

    type: str = Field(..., description="Message type identifier")


class InboundMessage(BaseMessage):
    """Base model for messages sent by ConversationRelay.

    Fields beyond the ones declared are kept so they can be logged.
    """

    model_config = ConfigDict(extra="allow")


# Inbound Messages
class SetupMessage(InboundMessage):
    """Model for the setup message sent when the relay connects."""

    type: Literal["setup"]
    callSid: Optional[str] = Field(None, description="Call identifier")
    sessionId: Optional[str] = Field(None, description="Relay session identifier")


class PromptMessage(InboundMessage):
    """Model for the prompt message carrying a transcribed customer utterance."""

    type: Literal["prompt"]
    voicePrompt: str = Field(..., description="Transcribed customer utterance")
    lang: Optional[str] = Field(None, description="Recognition language")
    last: Optional[bool] = Field(None, description="Whether the prompt is final")


class InterruptMessage(InboundMessage):
    """Model for the interrupt message sent when the customer barges in."""

    type: Literal["interrupt"]
    utteranceUntilInterrupt: Optional[str] = None


class ErrorMessage(InboundMessage):
    """Model for an error reported by ConversationRelay."""

    type: Literal["error"]
    description: Optional[str] = None


class EndMessage(InboundMessage):
    """Model for the end message sent when the relay session finishes."""

    type: Literal["end"]


# Outbound Messages
class TextResponse(BaseMessage):
    """Model for a text token to be spoken to the customer."""

    type: Literal["text"] = "text"
    token: str = Field(..., description="Text to synthesize")


class HandoffData(BaseModel):
    """Structured payload handed to the human-routing system on escalation."""

    reason: str
    transcript: List[Dict[str, Any]]
    summary: str


class EndResponse(BaseMessage):
    """Model for the end message that ends the relay session with a handoff."""

    type: Literal["end"] = "end"
    handoffData: str = Field(..., description="Serialized HandoffData JSON")

    @classmethod
    def from_handoff(cls, handoff: HandoffData) -> "EndResponse":
        return cls(handoffData=handoff.model_dump_json())


# Union type for all possible incoming messages
IncomingMessage = Union[
    SetupMessage,
    PromptMessage,
    InterruptMessage,
    ErrorMessage,
    EndMessage,
]

# Union type for all possible outgoing messages
OutgoingMessage = Union[TextResponse, EndResponse]

INBOUND_MODELS: Dict[str, Type[InboundMessage]] = {
    EVENT_TYPE_SETUP: SetupMessage,
    EVENT_TYPE_PROMPT: PromptMessage,
    EVENT_TYPE_INTERRUPT: InterruptMessage,
    EVENT_TYPE_ERROR: ErrorMessage,
    EVENT_TYPE_END: EndMessage,
}


def parse_event(data: Union[str, bytes, Dict[str, Any]]) -> IncomingMessage:
    """
    Parse a raw ConversationRelay frame into a typed inbound message.

    Args:
        data: The raw JSON payload of a text or binary frame, or an already
            decoded dictionary

    Returns:
        The validated message model for the frame's type

    Raises:
        MalformedEventError: If the frame is not JSON, has no known type, or
            fails validation for its type
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise MalformedEventError(f"Invalid JSON: {e}", data) from e

    if not isinstance(data, dict):
        raise MalformedEventError("Event must be a JSON object", data)

    message_type = data.get("type")
    model = INBOUND_MODELS.get(message_type)
    if model is None:
        raise MalformedEventError(f"Unknown message type: {message_type}", data)

    try:
        return model(**data)
    except ValidationError as e:
        raise MalformedEventError(f"Invalid {message_type} message: {e}", data) from e
