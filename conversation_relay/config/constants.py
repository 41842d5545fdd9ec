"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for protocol names and tuning values.
"""

# Logger name used throughout the application
LOGGER_NAME = "conversation_relay"

# Default chat completion model
DEFAULT_MODEL = "gpt-4o-mini"
MAX_REPLY_TOKENS = 150
TEMPERATURE = 0.7

# Inbound ConversationRelay event types
EVENT_TYPE_SETUP = "setup"
EVENT_TYPE_PROMPT = "prompt"
EVENT_TYPE_INTERRUPT = "interrupt"
EVENT_TYPE_ERROR = "error"
EVENT_TYPE_END = "end"

# Escalation contract
ESCALATION_MARKER = "ESCALATE:"
ESCALATION_ACKNOWLEDGEMENT = (
    "I understand. Let me connect you with a human agent who can better assist you."
)
DEFAULT_ESCALATION_REASON = "Customer requested agent"
HANDOFF_DELAY_SECONDS = 2.0

# Transcript
SPEAKER_CUSTOMER = "customer"
SPEAKER_AGENT = "agent"
SUMMARY_MAX_LENGTH = 500
EMPTY_SUMMARY = "No conversation recorded"
UNKNOWN_CALLER = "unknown"

# TwiML defaults
DEFAULT_VOICE = "en-US-Neural2-F"
DEFAULT_WELCOME_GREETING = "Hello! Thank you for calling. How can I help you today?"
HOLD_MESSAGE = "Please hold while I connect you with an agent."

# TaskRouter task SIDs start with this prefix
TASK_SID_PREFIX = "WT"
