import asyncio
import unittest

from feelix.backend import AsyncConversationSink, LocalStore
from feelix.breathing import find_exercise
from feelix.conversation import ConversationSession


class _FlakyStore:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def create_conversation(self, user_id: str, title: str | None = None) -> dict:
        return {"id": "c-1"}

    async def add_message(self, conversation_id: str, text: str, is_user: bool, mood: str | None = None) -> dict:
        if text == "boom":
            raise ConnectionError("offline")
        self.messages.append(text)
        return {}

    async def add_breathing_session(self, user_id, exercise_type, duration, completed, notes=None) -> dict:
        return {}

    async def add_mood_entry(self, user_id, mood, intensity, notes=None, triggers=None) -> dict:
        return {}


class ConversationSinkTests(unittest.TestCase):
    def test_session_appends_are_mirrored_in_order(self) -> None:
        store = LocalStore(":memory:")
        sink = AsyncConversationSink(store, user_id="u-1", batch_size=10, flush_interval_seconds=0.05)

        async def scenario() -> None:
            await sink.start()
            session = ConversationSession(reply_delay_seconds=0.0, sink=sink)
            await session.submit_user_message("I can't sleep, so tired")
            session.choose_exercise("1")
            await asyncio.sleep(0.12)
            await session.close()
            await sink.close()

        asyncio.run(scenario())

        messages = store.load_messages(sink.conversation_id)
        self.assertEqual(4, len(messages))
        self.assertEqual([False, True, False, False], [m["is_user"] for m in messages])
        self.assertEqual("I can't sleep, so tired", messages[1]["text"])
        row = store.execute("SELECT exercise_type, duration, notes FROM breathing_sessions").fetchone()
        self.assertEqual(("box", 120, "Box Breathing"), tuple(row))
        self.assertEqual(5, sink.written_count)
        self.assertEqual(0, sink.dropped_count)
        store.close()

    def test_close_flushes_pending_items(self) -> None:
        store = LocalStore(":memory:")
        sink = AsyncConversationSink(store, user_id="u-1", flush_interval_seconds=10.0)

        async def scenario() -> None:
            await sink.start()
            sink.exercise_started(find_exercise("2"))
            await sink.close()
            sink.exercise_started(find_exercise("3"))

        asyncio.run(scenario())
        row = store.execute("SELECT COUNT(*) AS c FROM breathing_sessions").fetchone()
        self.assertEqual(1, int(row["c"]))
        store.close()

    def test_failed_writes_are_dropped_not_raised(self) -> None:
        store = _FlakyStore()
        sink = AsyncConversationSink(store, user_id="u-1", conversation_id="c-1", flush_interval_seconds=0.05)

        async def scenario() -> None:
            await sink.start()
            session = ConversationSession(reply_delay_seconds=0.0, sink=sink, greeting="hi")
            await session.submit_user_message("boom")
            await session.close()
            await sink.close()

        asyncio.run(scenario())
        self.assertEqual(1, sink.dropped_count)
        self.assertEqual(2, sink.written_count)
        self.assertEqual("hi", store.messages[0])

    def test_unstarted_sink_drops_queue_on_close(self) -> None:
        store = LocalStore(":memory:")
        sink = AsyncConversationSink(store, user_id="u-1")
        session = ConversationSession(sink=sink)

        asyncio.run(sink.close())
        self.assertIsNone(sink.conversation_id)
        self.assertEqual(0, sink.written_count)
        self.assertEqual(1, len(session.messages))
        store.close()


if __name__ == "__main__":
    unittest.main()
