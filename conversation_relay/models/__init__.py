"""
Models module for data structures and state management in the conversation relay.

Key components:
- conversation: Conversation and Turn records and the ConversationStore that
  tracks every call seen by the process.
- message_schemas: Pydantic models for the ConversationRelay WebSocket protocol,
  plus parse_event for validating inbound frames.

Usage examples:
```python
from conversation_relay.models.conversation import ConversationStore
from conversation_relay.models.message_schemas import TextResponse, parse_event

store = ConversationStore()
conversation = store.get_or_create("CA123", "+15551234567")

event = parse_event('{"type": "prompt", "voicePrompt": "Hi there"}')
await websocket.send_text(TextResponse(token="Hello!").model_dump_json())
```
"""

from conversation_relay.models.conversation import Conversation, ConversationStore, Turn
from conversation_relay.models.message_schemas import (
    BaseMessage,
    EndMessage,
    EndResponse,
    ErrorMessage,
    HandoffData,
    IncomingMessage,
    InterruptMessage,
    OutgoingMessage,
    PromptMessage,
    SetupMessage,
    TextResponse,
    parse_event,
)
