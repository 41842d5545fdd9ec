"""
Bot module: the virtual agent behind each relay connection.

Key components:
- dialogue_engine: Calls OpenAI chat completions with a call's dialogue history
  and classifies each reply as a spoken answer or an escalation.
- relay_session: The per-connection ConversationRelay state machine that records
  the transcript, emits replies and schedules the delayed handoff.

Usage examples:
```python
from conversation_relay.bot.dialogue_engine import DialogueEngine
from conversation_relay.bot.relay_session import RelaySession

engine = DialogueEngine()
session = RelaySession(websocket, conversation, engine)
await session.handle_message('{"type": "setup"}')
await session.handle_message('{"type": "prompt", "voicePrompt": "Hi"}')
```
"""

# Bot module initialization
