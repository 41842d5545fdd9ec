import unittest

from conversation_relay.handlers.transcript_recorder import TranscriptRecorder
from conversation_relay.models.conversation import Conversation


class TestTranscriptRecorder(unittest.TestCase):

    def setUp(self):
        self.recorder = TranscriptRecorder()
        self.conversation = Conversation(call_sid="CA1", caller_phone="+15551234567")

    def test_record_appends_in_order(self):
        self.recorder.record(self.conversation, "customer", "I need help")
        self.recorder.record(self.conversation, "agent", "Sure, what's wrong?")

        transcript = self.conversation.transcript
        self.assertEqual(len(transcript), 2)
        self.assertEqual(transcript[0].role, "customer")
        self.assertEqual(transcript[0].text, "I need help")
        self.assertEqual(transcript[1].role, "agent")
        self.assertLessEqual(transcript[0].timestamp, transcript[1].timestamp)

    def test_record_tolerates_consecutive_speaker(self):
        self.recorder.record(self.conversation, "customer", "Hello?")
        self.recorder.record(self.conversation, "customer", "Are you there?")

        self.assertEqual(len(self.conversation.transcript), 2)

    def test_summarize_empty_transcript(self):
        self.assertEqual(self.recorder.summarize(self.conversation), "No conversation recorded")

    def test_summarize_absent_conversation(self):
        self.assertEqual(self.recorder.summarize(None), "No conversation recorded")

    def test_summarize_joins_customer_turns(self):
        self.recorder.record(self.conversation, "customer", "I need help")
        self.recorder.record(self.conversation, "agent", "With what?")
        self.recorder.record(self.conversation, "customer", "with my bill")

        self.assertEqual(self.recorder.summarize(self.conversation), "I need help with my bill")

    def test_summarize_with_only_agent_turns(self):
        self.recorder.record(self.conversation, "agent", "Hello!")

        self.assertEqual(self.recorder.summarize(self.conversation), "")

    def test_summarize_truncates_to_500_characters(self):
        self.recorder.record(self.conversation, "customer", "a" * 300)
        self.recorder.record(self.conversation, "customer", "b" * 300)

        summary = self.recorder.summarize(self.conversation)

        self.assertEqual(len(summary), 500)
        self.assertEqual(summary, ("a" * 300 + " " + "b" * 300)[:500])

    def test_summarize_does_not_truncate_short_text(self):
        text = "x" * 500
        self.recorder.record(self.conversation, "customer", text)

        self.assertEqual(self.recorder.summarize(self.conversation), text)


if __name__ == "__main__":
    unittest.main()
