import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from conversation_relay.bot.dialogue_engine import DialogueEngine
from conversation_relay.models.conversation import ConversationStore


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


def make_completion(text):
    """Build an object shaped like an OpenAI chat completion response."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))]
    )


@pytest.fixture
def completion():
    return make_completion


@pytest.fixture
def openai_client():
    """OpenAI client double whose replies are set per test."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=make_completion("How can I help?"))
    return client


@pytest.fixture
def dialogue_engine(openai_client):
    return DialogueEngine(client=openai_client, model="test-model", system_prompt="Be helpful.")


@pytest.fixture
def conversation_store():
    return ConversationStore()
