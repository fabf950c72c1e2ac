from __future__ import annotations

import asyncio

from loguru import logger

from feelix.backend.local_store import ConversationStore
from feelix.breathing import BreathingExercise
from feelix.models import Message

_MESSAGE = "message"
_EXERCISE = "exercise"


class AsyncConversationSink:
    """Mirrors a live conversation into a store without blocking the session.

    Appends are queued and written in batches by a background task. A failed
    write is logged and dropped; the in-memory session stays authoritative.
    """

    def __init__(
        self,
        store: ConversationStore,
        *,
        user_id: str,
        conversation_id: str | None = None,
        title: str | None = None,
        batch_size: int = 50,
        flush_interval_seconds: float = 0.5,
    ):
        self._store = store
        self._user_id = user_id
        self._conversation_id = conversation_id
        self._title = title
        self._batch_size = max(1, batch_size)
        self._flush_interval_seconds = max(0.05, flush_interval_seconds)
        self._queue: asyncio.Queue[tuple[str, Message | BreathingExercise]] = asyncio.Queue()
        self._task: asyncio.Task | None = None
        self._stop = asyncio.Event()
        self._closed = False
        self._written = 0
        self._dropped = 0

    @property
    def conversation_id(self) -> str | None:
        return self._conversation_id

    @property
    def written_count(self) -> int:
        return self._written

    @property
    def dropped_count(self) -> int:
        return self._dropped

    async def start(self) -> None:
        if self._conversation_id is None:
            row = await self._store.create_conversation(self._user_id, self._title)
            self._conversation_id = str(row["id"])
            logger.info(f"Mirroring conversation to store (conversation={self._conversation_id})")
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    def message_appended(self, message: Message) -> None:
        if self._closed:
            return
        self._queue.put_nowait((_MESSAGE, message))

    def exercise_started(self, exercise: BreathingExercise) -> None:
        if self._closed:
            return
        self._queue.put_nowait((_EXERCISE, exercise))

    async def close(self) -> None:
        self._closed = True
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
        await self._flush_all()

    async def _run(self) -> None:
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._flush_interval_seconds)
            except TimeoutError:
                pass
            await self._flush_once()

    async def _flush_all(self) -> None:
        if self._conversation_id is None:
            if not self._queue.empty():
                logger.warning(f"Dropping {self._queue.qsize()} unsent item(s); sink was never started")
            return
        while not self._queue.empty():
            await self._flush_once()

    async def _flush_once(self) -> None:
        items: list[tuple[str, Message | BreathingExercise]] = []
        while len(items) < self._batch_size and not self._queue.empty():
            items.append(self._queue.get_nowait())

        for kind, item in items:
            try:
                await self._write(kind, item)
                self._written += 1
            except Exception as ex:
                self._dropped += 1
                logger.warning(f"Failed to mirror {kind} to store: {ex}")

    async def _write(self, kind: str, item: Message | BreathingExercise) -> None:
        assert self._conversation_id is not None
        if kind == _MESSAGE:
            assert isinstance(item, Message)
            await self._store.add_message(self._conversation_id, item.text, item.is_user, item.mood)
            return
        assert isinstance(item, BreathingExercise)
        await self._store.add_breathing_session(
            self._user_id,
            item.pattern.value,
            item.duration_seconds,
            False,
            notes=item.name,
        )
