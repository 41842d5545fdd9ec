"""
Records conversation turns and derives the summary handed to human agents.
"""

import logging
from typing import Optional

from conversation_relay.config.constants import (
    EMPTY_SUMMARY,
    LOGGER_NAME,
    SPEAKER_CUSTOMER,
    SUMMARY_MAX_LENGTH,
)
from conversation_relay.models.conversation import Conversation, Turn

logger = logging.getLogger(LOGGER_NAME)


class TranscriptRecorder:
    """Appends turns to a conversation's transcript and summarizes it."""

    def __init__(self, summary_max_length: int = SUMMARY_MAX_LENGTH):
        self.summary_max_length = summary_max_length

    def record(self, conversation: Conversation, speaker: str, text: str) -> Turn:
        """
        Append a turn stamped with the current time.

        Args:
            conversation: The conversation to append to
            speaker: "customer" or "agent"
            text: The utterance

        Returns:
            The appended Turn
        """
        turn = Turn(role=speaker, text=text)
        transcript = conversation.transcript
        if transcript and transcript[-1].role == speaker:
            logger.warning(
                f"Consecutive {speaker} turns recorded for call: {conversation.call_sid}"
            )
        transcript.append(turn)
        logger.debug(f"Recorded {speaker} turn for call {conversation.call_sid}: {text[:50]}")
        return turn

    def summarize(self, conversation: Optional[Conversation]) -> str:
        """
        Join the customer's utterances into a single bounded string.

        Returns:
            Customer turn texts joined by single spaces and cut to the first
            ``summary_max_length`` characters, or "No conversation recorded"
            when there is nothing to summarize
        """
        if conversation is None or not conversation.transcript:
            return EMPTY_SUMMARY

        customer_text = " ".join(
            turn.text for turn in conversation.transcript if turn.role == SPEAKER_CUSTOMER
        )
        return customer_text[: self.summary_max_length]


# Shared recorder used by the relay sessions and the HTTP handlers
transcript_recorder = TranscriptRecorder()
