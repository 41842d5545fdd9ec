"""
Resolves TaskRouter task SIDs to the call SID they were created for.

Flex agents open transcripts by task, while conversations are keyed by call.
The task's attributes carry the call SID set by the handoff TwiML.
"""

import asyncio
import json
import logging
import os
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from conversation_relay.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
FLEX_WORKSPACE_SID = os.getenv("FLEX_WORKSPACE_SID")


class TaskLookup:
    """Fetches TaskRouter tasks through the Twilio REST client."""

    def __init__(self, client: Optional[Client] = None, workspace_sid: Optional[str] = FLEX_WORKSPACE_SID):
        self._client = client
        self.workspace_sid = workspace_sid

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = Client(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN)
        return self._client

    def _fetch_call_sid(self, task_sid: str) -> Optional[str]:
        task = self.client.taskrouter.v1.workspaces(self.workspace_sid).tasks(task_sid).fetch()
        attributes = json.loads(task.attributes or "{}")
        return attributes.get("callSid") or attributes.get("call_sid")

    async def resolve_call_sid(self, task_sid: str) -> Optional[str]:
        """
        Look up the call SID recorded on a task.

        Lookup failures are logged and reported as None.

        Args:
            task_sid: TaskRouter task SID (``WT...``)

        Returns:
            The call SID, or None if it cannot be resolved
        """
        logger.info(f"Looking up TaskSid {task_sid} via Twilio API")
        try:
            # The Twilio REST client is blocking
            call_sid = await asyncio.to_thread(self._fetch_call_sid, task_sid)
        except (TwilioException, OSError, ValueError) as e:
            logger.error(f"Error looking up task {task_sid}: {e}")
            return None

        if call_sid:
            logger.info(f"Found callSid {call_sid} for task {task_sid}")
        else:
            logger.warning(f"Task {task_sid} has no callSid attribute")
        return call_sid
