from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from enum import Enum
from typing import Protocol, runtime_checkable

from loguru import logger

from feelix.breathing import BreathingExercise, find_exercise, introduction_text, list_exercises
from feelix.errors import InvalidInputError, SessionClosedError
from feelix.models import Author, Message, utc_now
from feelix.responder import RESPONSE_RULES, ResponseRule, select_response

GREETING = "Hello! I'm Felix, your emotional processing companion. How are you feeling today?"


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


@runtime_checkable
class ConversationSink(Protocol):
    def message_appended(self, message: Message) -> None: ...
    def exercise_started(self, exercise: BreathingExercise) -> None: ...


Observer = Callable[["ConversationSession"], None]


class ConversationSession:
    """In-memory conversation with the companion for one screen instance.

    All mutation goes through ``submit_user_message``, ``choose_exercise``,
    ``dismiss_menu`` and ``toggle_menu``. Turns are serialized with a FIFO
    lock, so every user message is immediately followed by its own reply even
    when submissions overlap.
    """

    def __init__(
        self,
        *,
        reply_delay_seconds: float = 1.5,
        exercises: tuple[BreathingExercise, ...] | None = None,
        rules: tuple[ResponseRule, ...] = RESPONSE_RULES,
        sink: ConversationSink | None = None,
        greeting: str = GREETING,
    ):
        self._reply_delay_seconds = max(0.0, reply_delay_seconds)
        self._exercises = exercises if exercises is not None else list_exercises()
        self._rules = rules
        self._sink = sink
        self._messages: list[Message] = []
        self._next_id = 1
        self._pending_replies = 0
        self._menu_visible = False
        self._closed = False
        self._turn_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._observers: list[Observer] = []
        self._append(greeting, Author.COMPANION)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def is_companion_composing(self) -> bool:
        return self._pending_replies > 0

    @property
    def state(self) -> SessionState:
        return SessionState.AWAITING_REPLY if self.is_companion_composing else SessionState.IDLE

    @property
    def exercise_menu_visible(self) -> bool:
        return self._menu_visible

    @property
    def offered_exercises(self) -> tuple[BreathingExercise, ...]:
        return self._exercises if self._menu_visible else ()

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._observers.remove(observer)

        return unsubscribe

    def submit_user_message(self, text: str) -> asyncio.Task[Message | None]:
        """Schedule a turn for ``text`` and return its task without waiting.

        The task resolves to the companion reply once it has been appended.
        On an idle session the user message is appended before this returns;
        a submission made while a reply is pending is appended when its turn
        starts.
        """
        self._ensure_open()
        trimmed = (text or "").strip()
        if not trimmed:
            raise InvalidInputError("Message text must not be empty")

        loop = asyncio.get_running_loop()
        appended = self._pending_replies == 0
        if appended:
            self._append(trimmed, Author.USER)
        self._pending_replies += 1
        task = loop.create_task(self._run_turn(trimmed, appended=appended))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._notify()
        return task

    def choose_exercise(self, exercise_id: str) -> Message:
        self._ensure_open()
        exercise = find_exercise(exercise_id, self._exercises)
        self._menu_visible = False
        message = self._append(introduction_text(exercise), Author.COMPANION)
        if self._sink is not None:
            try:
                self._sink.exercise_started(exercise)
            except Exception as ex:
                logger.warning(f"Conversation sink rejected exercise {exercise.id}: {ex}")
        self._notify()
        return message

    def dismiss_menu(self) -> None:
        if not self._menu_visible:
            return
        self._menu_visible = False
        self._notify()

    def toggle_menu(self) -> bool:
        self._ensure_open()
        self._menu_visible = not self._menu_visible
        self._notify()
        return self._menu_visible

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        # Tasks cancelled before their first step never reach their finally block.
        self._pending_replies = 0
        self._observers.clear()
        logger.debug(f"Conversation closed with {len(self._messages)} message(s)")

    async def _run_turn(self, text: str, *, appended: bool) -> Message | None:
        try:
            async with self._turn_lock:
                if self._closed:
                    return None
                if not appended:
                    self._append(text, Author.USER)
                    self._notify()

                await asyncio.sleep(self._reply_delay_seconds)
                if self._closed:
                    return None

                reply = select_response(text, self._rules)
                message = self._append(reply.text, Author.COMPANION)
                if reply.reveals_exercise_menu:
                    self._menu_visible = True
                return message
        finally:
            self._pending_replies -= 1
            if not self._closed:
                self._notify()

    def _append(self, text: str, author: Author) -> Message:
        message = Message(id=self._next_id, text=text, author=author, created_at=utc_now())
        self._next_id += 1
        self._messages.append(message)
        if self._sink is not None:
            try:
                self._sink.message_appended(message)
            except Exception as ex:
                logger.warning(f"Conversation sink rejected message {message.id}: {ex}")
        return message

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception as ex:
                logger.warning(f"Conversation observer failed: {ex}")

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Conversation session is closed")
