"""
Error taxonomy for the conversation relay service.

None of these errors is fatal to the process: each one is scoped to a single
relay session or a single HTTP request and is converted to a logged outcome
at the session or route boundary.
"""


class RelayError(Exception):
    """Base class for conversation relay errors."""


class MalformedEventError(RelayError):
    """An inbound payload could not be parsed as a known protocol event."""

    def __init__(self, message: str, payload=None):
        super().__init__(message)
        self.payload = payload


class DialogueFailure(RelayError):
    """The language model call failed or returned an unusable response."""


class UnknownConversationError(RelayError):
    """No conversation could be resolved for an identifier."""

    def __init__(self, identifier: str):
        super().__init__(f"Conversation not found: {identifier}")
        self.identifier = identifier
