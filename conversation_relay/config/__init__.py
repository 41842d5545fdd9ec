"""
Configuration module for the conversation relay service.

This module provides centralized configuration for the application: protocol
constants, the agent system prompt, and logging setup.

Key components:
- constants: Protocol event names, escalation contract, model parameters and
  other values shared across modules.
- prompts: The behavioral and knowledge-base instructions handed to the
  language model as the system message.
- logging_config: Console and rotating file logging for the service logger.

Usage examples:
```python
from conversation_relay.config.constants import LOGGER_NAME, ESCALATION_MARKER
from conversation_relay.config.logging_config import configure_logging

logger = configure_logging()
logger.info("Application started")
```
"""

# Config module initialization
