import threading
import unittest

from conversation_relay.models.conversation import Conversation, ConversationStore, Turn


class TestConversationStore(unittest.TestCase):

    def setUp(self):
        self.store = ConversationStore()
        self.call_sid = "CA1234567890"
        self.caller = "+15551234567"

    def test_get_or_create_creates_empty_conversation(self):
        conversation = self.store.get_or_create(self.call_sid, self.caller)

        self.assertEqual(conversation.call_sid, self.call_sid)
        self.assertEqual(conversation.caller_phone, self.caller)
        self.assertEqual(conversation.transcript, [])
        self.assertIsNone(conversation.escalation_reason)
        self.assertIsNotNone(conversation.start_time)

    def test_get_or_create_returns_same_instance(self):
        first = self.store.get_or_create(self.call_sid, self.caller)
        second = self.store.get_or_create(self.call_sid, "+15550000000")

        self.assertIs(first, second)
        self.assertEqual(second.caller_phone, self.caller)
        self.assertEqual(len(self.store), 1)

    def test_get_or_create_defaults_to_unknown_caller(self):
        conversation = self.store.get_or_create(self.call_sid)

        self.assertEqual(conversation.caller_phone, "unknown")

    def test_get(self):
        created = self.store.get_or_create(self.call_sid, self.caller)

        self.assertIs(self.store.get(self.call_sid), created)

    def test_get_nonexistent_conversation(self):
        self.assertIsNone(self.store.get("CA-missing"))
        self.assertEqual(len(self.store), 0)

    def test_list(self):
        conversation = self.store.get_or_create("CA1", self.caller)
        conversation.transcript.append(Turn(role="customer", text="Hello"))
        self.store.get_or_create("CA2")

        summaries = self.store.list()

        self.assertEqual(len(summaries), 2)
        by_sid = {summary["callSid"]: summary for summary in summaries}
        self.assertEqual(by_sid["CA1"]["callerPhone"], self.caller)
        self.assertEqual(by_sid["CA1"]["transcript"][0]["role"], "customer")
        self.assertEqual(by_sid["CA1"]["transcript"][0]["text"], "Hello")
        self.assertEqual(by_sid["CA2"]["transcript"], [])
        self.assertIn("startTime", by_sid["CA2"])

    def test_concurrent_get_or_create_yields_one_instance(self):
        results = []

        def worker():
            results.append(self.store.get_or_create(self.call_sid, self.caller))

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(self.store), 1)
        self.assertTrue(all(result is results[0] for result in results))


class TestConversation(unittest.TestCase):

    def test_escalation_reason_is_write_once(self):
        conversation = Conversation(call_sid="CA1")

        self.assertTrue(conversation.set_escalation_reason("billing issue"))
        self.assertFalse(conversation.set_escalation_reason("something else"))
        self.assertEqual(conversation.escalation_reason, "billing issue")

    def test_empty_reason_still_counts_as_set(self):
        conversation = Conversation(call_sid="CA1")

        self.assertTrue(conversation.set_escalation_reason(""))
        self.assertFalse(conversation.set_escalation_reason("later"))
        self.assertEqual(conversation.escalation_reason, "")

    def test_transcript_payload_is_json_ready(self):
        conversation = Conversation(call_sid="CA1")
        conversation.transcript.append(Turn(role="customer", text="Hi"))
        conversation.transcript.append(Turn(role="agent", text="Hello!"))

        payload = conversation.transcript_payload()

        self.assertEqual([turn["role"] for turn in payload], ["customer", "agent"])
        self.assertEqual(payload[1]["text"], "Hello!")
        self.assertIsInstance(payload[0]["timestamp"], str)

    def test_turn_is_immutable(self):
        turn = Turn(role="customer", text="Hi")

        with self.assertRaises(Exception):
            turn.text = "changed"


if __name__ == "__main__":
    unittest.main()
