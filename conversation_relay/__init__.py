"""
Conversation Relay Agent - Twilio ConversationRelay to OpenAI bridge with human handoff

This application answers phone calls with a virtual agent. Twilio transcribes
the caller and streams each utterance over a ConversationRelay WebSocket; the
service asks an OpenAI chat model for a reply and streams it back as text for
speech synthesis. When the model decides a human is needed, the caller hears
an acknowledgement and the call is handed to a Twilio Flex queue with the
transcript and a summary attached.

Architecture Overview:
- FastAPI server exposing the voice webhooks and the relay WebSocket endpoint
- One RelaySession state machine per WebSocket connection
- Shared in-memory ConversationStore holding every call's transcript
- OpenAI chat completions for dialogue, Twilio TwiML and REST for handoff

Key Components:
- bot: Dialogue engine and the relay session state machine
- config: Constants, agent prompt and logging setup
- handlers: Transcript recording and the Twilio voice webhooks
- models: Conversation records, the store and protocol message schemas
- services: Twilio TaskRouter lookups
- websocket_manager: Binds each WebSocket to its RelaySession

Getting Started:
1. Set up environment variables:
   - OPENAI_API_KEY: Your OpenAI API key
   - TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN: Twilio credentials
   - FLEX_WORKSPACE_SID, FLEX_WORKFLOW_SID: Flex TaskRouter routing
   - PORT: Port to run the server on (default 3000)
   - LOG_LEVEL: Logging level (default INFO)

2. Start the server:
   ```bash
   python run.py
   ```

3. Point the Twilio number's voice webhook at http://your-server/voice/incoming
"""
