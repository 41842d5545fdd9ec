"""
ConversationRelay session state machine.

A RelaySession owns one WebSocket connection bound to one call. It consumes
inbound protocol events one at a time, drives the dialogue engine for each
customer prompt, records the transcript, and emits text replies. When the
model asks for a human agent the session speaks an acknowledgement, stops
accepting prompts, and after a short pause sends the end event that carries
the handoff bundle.

State flow:
    AWAITING_SETUP -> ACTIVE -> ESCALATING -> CLOSED

CLOSED is terminal and reachable from every state, either through an ``end``
event or the transport closing.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from conversation_relay.bot.dialogue_engine import DialogueEngine, EscalationDecision
from conversation_relay.config.constants import (
    ESCALATION_ACKNOWLEDGEMENT,
    EVENT_TYPE_END,
    EVENT_TYPE_ERROR,
    EVENT_TYPE_INTERRUPT,
    EVENT_TYPE_PROMPT,
    EVENT_TYPE_SETUP,
    HANDOFF_DELAY_SECONDS,
    LOGGER_NAME,
    SPEAKER_AGENT,
    SPEAKER_CUSTOMER,
)
from conversation_relay.exceptions import DialogueFailure, MalformedEventError
from conversation_relay.handlers.transcript_recorder import (
    TranscriptRecorder,
    transcript_recorder,
)
from conversation_relay.models.conversation import Conversation, Turn
from conversation_relay.models.message_schemas import (
    EndResponse,
    HandoffData,
    IncomingMessage,
    OutgoingMessage,
    PromptMessage,
    TextResponse,
    parse_event,
)

logger = logging.getLogger(LOGGER_NAME)

# Internal events that drive transitions but never arrive on the wire
EVENT_ESCALATE = "escalate"
EVENT_CLOSE = "close"


class SessionState(str, Enum):
    AWAITING_SETUP = "awaiting_setup"
    ACTIVE = "active"
    ESCALATING = "escalating"
    CLOSED = "closed"


def transition(state: SessionState, event: str) -> SessionState:
    """
    Compute the next session state for an event.

    Pure function of (state, event); the session applies side effects. Events
    that do not apply in the current state leave it unchanged. A prompt before
    setup activates the session, so a relay that skips setup still gets answers.
    """
    if state is SessionState.CLOSED:
        return state
    if event in (EVENT_TYPE_END, EVENT_CLOSE):
        return SessionState.CLOSED
    if state is SessionState.AWAITING_SETUP and event in (EVENT_TYPE_SETUP, EVENT_TYPE_PROMPT):
        return SessionState.ACTIVE
    if state is SessionState.ACTIVE and event == EVENT_ESCALATE:
        return SessionState.ESCALATING
    return state


class RelaySession:
    """Protocol state machine for one ConversationRelay connection."""

    def __init__(
        self,
        websocket: WebSocket,
        conversation: Conversation,
        dialogue_engine: DialogueEngine,
        recorder: TranscriptRecorder = transcript_recorder,
        handoff_delay: float = HANDOFF_DELAY_SECONDS,
    ):
        self.websocket = websocket
        self.conversation = conversation
        self.dialogue_engine = dialogue_engine
        self.recorder = recorder
        self.handoff_delay = handoff_delay

        self.state = SessionState.AWAITING_SETUP
        self.history = dialogue_engine.initialize()
        self.handoff_task: Optional[asyncio.Task] = None
        self._transport_closed = False

    @property
    def call_sid(self) -> str:
        return self.conversation.call_sid

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def _advance(self, event: str) -> None:
        new_state = transition(self.state, event)
        if new_state is not self.state:
            logger.info(
                f"Session {self.call_sid}: {self.state.value} -> {new_state.value} on {event}"
            )
            self.state = new_state

    async def handle_message(self, data: Union[str, bytes, Dict[str, Any]]) -> None:
        """
        Parse and process one inbound frame.

        Malformed frames are logged and dropped; the connection stays open.
        """
        try:
            event = parse_event(data)
        except MalformedEventError as e:
            logger.warning(f"Dropping malformed event for call {self.call_sid}: {e}")
            return
        await self.handle_event(event)

    async def handle_event(self, event: IncomingMessage) -> None:
        """Process one validated inbound event."""
        message_type = event.type
        logger.info(f"Received {message_type} for call: {self.call_sid}")

        if message_type == EVENT_TYPE_SETUP:
            if self.state is not SessionState.AWAITING_SETUP:
                logger.info(f"Repeated setup ignored for call: {self.call_sid}")
            self._advance(EVENT_TYPE_SETUP)

        elif message_type == EVENT_TYPE_PROMPT:
            await self._handle_prompt(event)

        elif message_type == EVENT_TYPE_INTERRUPT:
            # The in-flight reply, if any, is not cancelled
            logger.info(f"Customer interrupted on call: {self.call_sid}")

        elif message_type == EVENT_TYPE_ERROR:
            logger.error(
                f"ConversationRelay error on call {self.call_sid}: {event.model_dump()}"
            )

        elif message_type == EVENT_TYPE_END:
            logger.info(f"Call ended: {self.call_sid}")
            self._advance(EVENT_TYPE_END)

    async def _handle_prompt(self, event: PromptMessage) -> None:
        if self.state is SessionState.AWAITING_SETUP:
            logger.warning(f"Prompt before setup on call: {self.call_sid}")
            self._advance(EVENT_TYPE_PROMPT)

        if self.state is not SessionState.ACTIVE:
            logger.warning(
                f"Ignoring prompt in state {self.state.value} for call: {self.call_sid}"
            )
            return

        customer_text = event.voicePrompt
        logger.info(f"Customer said: {customer_text}")
        self.recorder.record(self.conversation, SPEAKER_CUSTOMER, customer_text)

        try:
            decision = await self.dialogue_engine.turn(self.history, customer_text)
        except DialogueFailure as e:
            logger.error(f"Dialogue failure on call {self.call_sid}: {e}")
            return

        self.recorder.record(self.conversation, SPEAKER_AGENT, decision.reply_text)
        logger.info(f"AI response: {decision.reply_text}")

        if decision.is_escalation:
            await self._escalate(decision)
        else:
            await self._send(TextResponse(token=decision.reply_text))

    async def _escalate(self, decision: EscalationDecision) -> None:
        reason = decision.reason
        logger.info(f"Escalating call {self.call_sid}: {reason}")

        if not self.conversation.set_escalation_reason(reason):
            logger.warning(
                f"Call {self.call_sid} already escalated for "
                f"'{self.conversation.escalation_reason}', ignoring '{reason}'"
            )

        await self._send(TextResponse(token=ESCALATION_ACKNOWLEDGEMENT))
        self._advance(EVENT_ESCALATE)

        # Snapshot now so the bundle reflects the transcript at decision time
        transcript = list(self.conversation.transcript)
        self.handoff_task = asyncio.create_task(
            self._send_handoff_after_delay(self.conversation.escalation_reason, transcript)
        )

    def build_handoff(self, reason: str, transcript: List[Turn]) -> HandoffData:
        snapshot = self.conversation.model_copy(update={"transcript": transcript})
        return HandoffData(
            reason=reason,
            transcript=snapshot.transcript_payload(),
            summary=self.recorder.summarize(snapshot),
        )

    async def _send_handoff_after_delay(self, reason: str, transcript: List[Turn]) -> None:
        await asyncio.sleep(self.handoff_delay)
        handoff = self.build_handoff(reason, transcript)
        logger.info(f"Sending handoff for call: {self.call_sid}")
        await self._send(EndResponse.from_handoff(handoff))

    async def _send(self, message: OutgoingMessage) -> None:
        """Send a message; sending after the transport closed is a no-op."""
        if self._transport_closed:
            logger.debug(f"Connection closed, not sending {message.type} for call: {self.call_sid}")
            return
        try:
            await self.websocket.send_text(message.model_dump_json())
        except (RuntimeError, WebSocketDisconnect, OSError) as e:
            self._transport_closed = True
            logger.debug(f"Send failed for call {self.call_sid}: {e}")

    def connection_closed(self) -> None:
        """Mark the transport closed. Pending handoffs become no-ops."""
        self._transport_closed = True
        self._advance(EVENT_CLOSE)
