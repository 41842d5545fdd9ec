"""
Dialogue engine for driving the virtual agent with OpenAI chat completions.

The engine owns no per-call state: each relay session keeps its own dialogue
history (seeded by initialize) and passes it to turn, which appends to it in
place, calls the model once and classifies the reply as a spoken response or
an escalation to a human agent.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from conversation_relay.config.constants import (
    DEFAULT_MODEL,
    ESCALATION_MARKER,
    LOGGER_NAME,
    MAX_REPLY_TOKENS,
    TEMPERATURE,
)
from conversation_relay.config.prompts import SYSTEM_PROMPT
from conversation_relay.exceptions import DialogueFailure

logger = logging.getLogger(LOGGER_NAME)

# Get OpenAI configuration from environment variables
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", DEFAULT_MODEL)

Message = Dict[str, str]


@dataclass(frozen=True)
class EscalationDecision:
    """Outcome of one dialogue turn."""

    is_escalation: bool
    reply_text: str
    reason: Optional[str] = None


def classify_reply(reply_text: str) -> EscalationDecision:
    """
    Classify a model reply against the escalation contract.

    A reply containing the marker anywhere is an escalation whose reason is the
    text after the first marker, trimmed. Anything else is a normal reply.
    """
    if ESCALATION_MARKER in reply_text:
        reason = reply_text.split(ESCALATION_MARKER, 1)[1].strip()
        return EscalationDecision(is_escalation=True, reply_text=reply_text, reason=reason)
    return EscalationDecision(is_escalation=False, reply_text=reply_text)


class DialogueEngine:
    """
    Runs dialogue turns against the chat completions API.

    The OpenAI client is created on first use so the engine can be built
    without credentials; tests pass their own client.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = OPENAI_MODEL,
        system_prompt: str = SYSTEM_PROMPT,
        max_tokens: int = MAX_REPLY_TOKENS,
        temperature: float = TEMPERATURE,
    ):
        self._client = client
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.temperature = temperature

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=OPENAI_API_KEY)
        return self._client

    def initialize(self) -> List[Message]:
        """Return a fresh dialogue history holding only the system message."""
        return [{"role": "system", "content": self.system_prompt}]

    async def turn(self, history: List[Message], customer_text: str) -> EscalationDecision:
        """
        Run one dialogue turn.

        The customer's text is appended to ``history`` as a user message, unless
        the history already ends with that same pending user message from a
        failed turn. On success the reply is appended as an assistant message.

        Args:
            history: The session's dialogue history, mutated in place
            customer_text: What the customer said

        Returns:
            The classified reply

        Raises:
            DialogueFailure: If the model call fails or returns no usable text.
                The user message stays in the history.
        """
        last = history[-1] if history else None
        if not (last and last["role"] == "user" and last["content"] == customer_text):
            history.append({"role": "user", "content": customer_text})

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=history,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise DialogueFailure(f"Chat completion failed: {e}") from e

        try:
            reply_text = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise DialogueFailure(f"Malformed chat completion response: {e}") from e
        if not reply_text:
            raise DialogueFailure("Chat completion returned no content")

        history.append({"role": "assistant", "content": reply_text})
        return classify_reply(reply_text)
