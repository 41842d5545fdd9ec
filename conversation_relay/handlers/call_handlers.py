"""
Handles the Twilio voice webhooks and transcript lookups around a relay call.

This module covers the thin HTTP-facing collaborators of the relay session:
- the inbound call webhook, which registers the conversation and returns the
  TwiML that connects the call to the ConversationRelay WebSocket
- the handoff webhook, which Twilio calls after the relay session ends and
  which enqueues the call to Flex with the conversation attached to the task
- the transcript lookup used by agent desktops, by call SID or task SID
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from twilio.twiml.voice_response import VoiceResponse

from conversation_relay.config.constants import (
    DEFAULT_ESCALATION_REASON,
    DEFAULT_VOICE,
    DEFAULT_WELCOME_GREETING,
    HOLD_MESSAGE,
    LOGGER_NAME,
    TASK_SID_PREFIX,
)
from conversation_relay.exceptions import UnknownConversationError
from conversation_relay.handlers.transcript_recorder import transcript_recorder
from conversation_relay.models.conversation import Conversation, ConversationStore
from conversation_relay.services.task_lookup import TaskLookup

logger = logging.getLogger(LOGGER_NAME)

RELAY_VOICE = os.getenv("RELAY_VOICE", DEFAULT_VOICE)
WELCOME_GREETING = os.getenv("WELCOME_GREETING", DEFAULT_WELCOME_GREETING)
FLEX_WORKFLOW_SID = os.getenv("FLEX_WORKFLOW_SID")


def websocket_scheme(host: str) -> str:
    """Return the WebSocket scheme for a public host; tunnels terminate TLS."""
    return "wss" if "ngrok" in host else "ws"


def handle_incoming_call(
    call_sid: str,
    caller_phone: str,
    host: str,
    conversation_store: ConversationStore,
    voice: str = RELAY_VOICE,
    welcome_greeting: str = WELCOME_GREETING,
) -> str:
    """
    Register a new call and build the TwiML that connects it to the relay.

    Args:
        call_sid: The CallSid from the webhook
        caller_phone: The From number from the webhook
        host: Public host name the relay WebSocket is reachable at
        conversation_store: Store to register the conversation in

    Returns:
        The TwiML document as a string
    """
    logger.info(f"Incoming call from {caller_phone}, CallSid: {call_sid}")
    conversation_store.get_or_create(call_sid, caller_phone)

    response = VoiceResponse()
    connect = response.connect(action=f"https://{host}/voice/handoff")
    connect.add_child(
        "ConversationRelay",
        url=f"{websocket_scheme(host)}://{host}/conversation/{call_sid}",
        voice=voice,
        welcome_greeting=welcome_greeting,
    )
    twiml = str(response)
    logger.debug(f"TwiML Response: {twiml}")
    return twiml


def build_task_attributes(
    call_sid: str,
    conversation: Optional[Conversation],
    fallback_caller: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the Flex task descriptor for an escalated call.

    Args:
        call_sid: The call being handed off
        conversation: The call's conversation, if the process knows it
        fallback_caller: Caller number from the webhook, used when the
            conversation is unknown
    """
    caller = conversation.caller_phone if conversation else fallback_caller
    transcript = conversation.transcript_payload() if conversation else []
    reason = conversation.escalation_reason if conversation else None
    return {
        "type": "inbound",
        "name": caller,
        "from": caller,
        "direction": "inbound",
        "callSid": call_sid,
        "conversationSummary": transcript_recorder.summarize(conversation),
        "virtualAgentTranscript": json.dumps(transcript),
        "escalationReason": reason or DEFAULT_ESCALATION_REASON,
    }


def handle_handoff(
    call_sid: str,
    caller_phone: Optional[str],
    conversation_store: ConversationStore,
    workflow_sid: Optional[str] = FLEX_WORKFLOW_SID,
) -> str:
    """
    Build the TwiML that enqueues an escalated call to Flex.

    Returns:
        The TwiML document as a string
    """
    logger.info(f"Escalating call {call_sid} to human agent")
    conversation = conversation_store.get(call_sid)
    if conversation is None:
        logger.warning(f"Handoff for unknown call: {call_sid}")

    task_attributes = build_task_attributes(call_sid, conversation, caller_phone)
    logger.info(f"Task attributes: {task_attributes}")

    response = VoiceResponse()
    response.say(HOLD_MESSAGE)
    enqueue = response.enqueue(workflow_sid=workflow_sid)
    enqueue.task(json.dumps(task_attributes))
    return str(response)


async def lookup_conversation(
    identifier: str,
    conversation_store: ConversationStore,
    task_lookup: TaskLookup,
) -> Conversation:
    """
    Find a conversation by call SID, or by the TaskRouter task created for it.

    Raises:
        UnknownConversationError: If neither lookup finds a conversation
    """
    conversation = conversation_store.get(identifier)

    if conversation is None and identifier.startswith(TASK_SID_PREFIX):
        call_sid = await task_lookup.resolve_call_sid(identifier)
        if call_sid:
            conversation = conversation_store.get(call_sid)

    if conversation is None:
        raise UnknownConversationError(identifier)
    return conversation
