"""
Conversation state management for ConversationRelay calls.

This module provides the Conversation and Turn records that make up a call's
transcript, and the ConversationStore registry that maps call identifiers to
their conversations. The store is the only state shared across relay
sessions; every conversation it holds is mutated only by the session owning
that call's connection.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from conversation_relay.config.constants import UNKNOWN_CALLER


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Turn(BaseModel):
    """One recorded utterance. ``role`` is the speaker."""

    model_config = ConfigDict(frozen=True)

    role: Literal["customer", "agent"] = Field(..., description="Who spoke")
    text: str = Field(..., description="What was said")
    timestamp: datetime = Field(default_factory=utc_now)


class Conversation(BaseModel):
    """
    State for a single call.

    The transcript is append-only and the escalation reason can be set once.
    """

    call_sid: str = Field(..., description="Call identifier")
    caller_phone: str = Field(UNKNOWN_CALLER, description="Originating address")
    start_time: datetime = Field(default_factory=utc_now)
    transcript: List[Turn] = Field(default_factory=list)
    escalation_reason: Optional[str] = None

    def set_escalation_reason(self, reason: str) -> bool:
        """
        Store the escalation reason unless one is already set.

        Returns:
            True if the reason was stored, False if an earlier reason was kept
        """
        if self.escalation_reason is not None:
            return False
        self.escalation_reason = reason
        return True

    def transcript_payload(self) -> List[Dict[str, Any]]:
        """Return the transcript as JSON-ready dictionaries."""
        return [turn.model_dump(mode="json") for turn in self.transcript]

    def to_summary(self) -> Dict[str, Any]:
        """Return the monitoring view of this conversation."""
        return {
            "callSid": self.call_sid,
            "callerPhone": self.caller_phone,
            "startTime": self.start_time.isoformat(),
            "transcript": self.transcript_payload(),
        }


class ConversationStore:
    """
    Registry of conversations keyed by call identifier.

    Entries are never removed, so the store grows for the lifetime of the
    process. Access to the mapping is serialized with a lock so that HTTP
    handlers and relay sessions can share one store.
    """

    def __init__(self):
        """Initialize an empty store."""
        self._conversations: Dict[str, Conversation] = {}
        self._lock = threading.Lock()

    def get(self, call_sid: str) -> Optional[Conversation]:
        """
        Get a conversation by its call identifier.

        Args:
            call_sid: Unique identifier for the call

        Returns:
            The Conversation, or None if the call is unknown
        """
        with self._lock:
            return self._conversations.get(call_sid)

    def get_or_create(
        self, call_sid: str, caller_phone: str = UNKNOWN_CALLER
    ) -> Conversation:
        """
        Return the conversation for a call, creating it if needed.

        Repeated calls with the same identifier return the same instance; the
        caller address of an existing entry is never overwritten.

        Args:
            call_sid: Unique identifier for the call
            caller_phone: Caller address used only when creating the entry
        """
        with self._lock:
            conversation = self._conversations.get(call_sid)
            if conversation is None:
                conversation = Conversation(call_sid=call_sid, caller_phone=caller_phone)
                self._conversations[call_sid] = conversation
            return conversation

    def list(self) -> List[Dict[str, Any]]:
        """Return monitoring summaries of every tracked conversation."""
        with self._lock:
            conversations = list(self._conversations.values())
        return [conversation.to_summary() for conversation in conversations]

    def __len__(self) -> int:
        with self._lock:
            return len(self._conversations)
