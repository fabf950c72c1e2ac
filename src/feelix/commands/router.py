from __future__ import annotations

from collections.abc import Awaitable, Callable


class CommandRouter:
    def __init__(
        self,
        *,
        on_help: Callable[[], Awaitable[None]],
        on_breathe: Callable[[str], Awaitable[None]],
        on_exercise: Callable[[str], Awaitable[None]],
        on_close: Callable[[], Awaitable[None]],
        on_resources: Callable[[str], Awaitable[None]],
        on_profile: Callable[[str], Awaitable[None]],
        on_mood: Callable[[str], Awaitable[None]],
        on_sign_out: Callable[[], Awaitable[None]],
        on_unknown: Callable[[str], None],
    ) -> None:
        self._on_help = on_help
        self._on_breathe = on_breathe
        self._on_exercise = on_exercise
        self._on_close = on_close
        self._on_resources = on_resources
        self._on_profile = on_profile
        self._on_mood = on_mood
        self._on_sign_out = on_sign_out
        self._on_unknown = on_unknown

    async def try_handle(self, user_message: str) -> bool:
        trimmed = user_message.strip()
        if not trimmed.startswith("/"):
            return False

        command = trimmed.split(maxsplit=1)[0].lower()
        if command == "/help":
            await self._on_help()
            return True
        if command == "/breathe":
            await self._on_breathe(trimmed)
            return True
        if command == "/exercise":
            await self._on_exercise(trimmed)
            return True
        if command == "/close":
            await self._on_close()
            return True
        if command == "/resources":
            await self._on_resources(trimmed)
            return True
        if command == "/profile":
            await self._on_profile(trimmed)
            return True
        if command == "/mood":
            await self._on_mood(trimmed)
            return True
        if command == "/signout":
            await self._on_sign_out()
            return True

        self._on_unknown(trimmed)
        return True
