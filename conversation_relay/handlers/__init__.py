"""
Handlers module for the conversation relay.

Key components:
- transcript_recorder: Appends customer and agent turns to a conversation and
  builds the bounded customer summary attached to handoffs.
- call_handlers: Twilio voice webhooks (incoming call, handoff) and transcript
  lookups by call SID or TaskRouter task SID.

Usage examples:
```python
from conversation_relay.handlers.call_handlers import handle_incoming_call
from conversation_relay.handlers.transcript_recorder import transcript_recorder

twiml = handle_incoming_call("CA123", "+15551234567", "relay.example.com", store)
transcript_recorder.record(conversation, "customer", "I need help")
summary = transcript_recorder.summarize(conversation)
```
"""

# Handlers module initialization
