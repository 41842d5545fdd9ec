"""
WebSocket connection manager for Twilio ConversationRelay.

This module implements the server side of the ConversationRelay WebSocket
protocol, providing the infrastructure to:
- Accept connections bound to a call SID
- Locate (or lazily create) the call's conversation
- Feed every inbound frame to the call's RelaySession, one at a time
- Clean up when the relay or the transport ends the session

The RelayWebSocketManager is the central component that ties each WebSocket
to its own RelaySession while sharing one ConversationStore and one dialogue
engine between all of them.
"""

import logging
from typing import Dict, Optional, Union

from fastapi import WebSocket, WebSocketDisconnect

from conversation_relay.bot.dialogue_engine import DialogueEngine
from conversation_relay.bot.relay_session import RelaySession
from conversation_relay.config.constants import HANDOFF_DELAY_SECONDS, LOGGER_NAME
from conversation_relay.models.conversation import ConversationStore

logger = logging.getLogger(LOGGER_NAME)


class RelayWebSocketManager:
    """Manages ConversationRelay WebSocket connections and their sessions.

    Each connection gets a fresh RelaySession, and with it a fresh dialogue
    history. A reconnect for the same call keeps the stored transcript.
    """

    def __init__(
        self,
        conversation_store: Optional[ConversationStore] = None,
        dialogue_engine: Optional[DialogueEngine] = None,
        handoff_delay: float = HANDOFF_DELAY_SECONDS,
    ):
        self.conversation_store = conversation_store or ConversationStore()
        self.dialogue_engine = dialogue_engine or DialogueEngine()
        self.handoff_delay = handoff_delay
        self.sessions: Dict[str, RelaySession] = {}

    def create_session(self, websocket: WebSocket, call_sid: str) -> RelaySession:
        conversation = self.conversation_store.get_or_create(call_sid)
        return RelaySession(
            websocket,
            conversation,
            self.dialogue_engine,
            handoff_delay=self.handoff_delay,
        )

    async def _receive_frame(self, websocket: WebSocket) -> Union[str, bytes, None]:
        """Read one frame, text or binary.

        Raises:
            WebSocketDisconnect: When the client has gone away
        """
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
        text = message.get("text")
        return text if text is not None else message.get("bytes")

    async def handle_websocket(self, websocket: WebSocket, call_sid: str):
        """Handle a relay connection throughout its lifecycle.

        Args:
            websocket: The FastAPI WebSocket connection object
            call_sid: Call identifier taken from the connection path

        Frames are processed strictly in order: the next frame is not read
        until the previous one, including its model round trip, is handled.
        The loop ends when the relay sends ``end`` or the transport closes.
        """
        await websocket.accept()
        logger.info(f"WebSocket connected for call: {call_sid}")

        session = self.create_session(websocket, call_sid)
        self.sessions[call_sid] = session

        try:
            while not session.closed:
                data = await self._receive_frame(websocket)
                try:
                    await session.handle_message(data)
                except Exception as e:
                    logger.error(f"Error handling event for call {call_sid}: {e}", exc_info=True)
        except WebSocketDisconnect as e:
            logger.info(f"WebSocket disconnected for call {call_sid} (code {e.code})")
        except Exception as e:
            logger.error(f"Error in WebSocket connection for call {call_sid}: {e}", exc_info=True)
        finally:
            session.connection_closed()
            if self.sessions.get(call_sid) is session:
                del self.sessions[call_sid]
            try:
                await websocket.close()
            except (RuntimeError, OSError) as e:
                logger.debug(f"WebSocket for call {call_sid} already closed: {e}")
            logger.info(f"WebSocket closed for call: {call_sid}")
