"""
Services module for external API integrations in the conversation relay.

Key components:
- task_lookup: Resolves Twilio TaskRouter task SIDs to call SIDs so transcripts
  can be fetched by the task a Flex agent is working on.

Usage examples:
```python
from conversation_relay.services.task_lookup import TaskLookup

lookup = TaskLookup()
call_sid = await lookup.resolve_call_sid("WTxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx")
```
"""

# Services module initialization
