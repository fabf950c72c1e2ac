from __future__ import annotations

from loguru import logger

from feelix.commands.router import CommandRouter
from feelix.companion_config import CompanionConfig
from feelix.conversation import ConversationSession
from feelix.errors import BackendError, InvalidInputError, NotFoundError
from feelix.models import MAX_MESSAGE_CHARS
from feelix.profile import ProfileEditor
from feelix.resources import ALL, RESOURCE_TYPE_FILTERS, filter_resources
from feelix.services.typing_indicator import TypingIndicator
from feelix.services.transcript import TranscriptFormatter

_SWITCH_VALUES = {"on": True, "true": True, "yes": True, "off": False, "false": False, "no": False}
_PROFILE_FIELD_ALIASES = {
    "name": "name",
    "email": "email",
    "theme": "preferred_color_scheme",
    "notifications": "notifications_enabled",
    "reminders": "breathing_reminders",
    "journal": "journal_prompts",
}


class Companion:
    _LINE_PREFIX = "felix> "
    _USER_PROMPT = "you> "

    def __init__(self, config: CompanionConfig):
        self._config = config
        self._session = ConversationSession(
            reply_delay_seconds=config.reply_delay_seconds,
            sink=config.sink,
        )
        self._formatter = TranscriptFormatter(line_prefix=self._LINE_PREFIX, user_prefix=self._USER_PROMPT)
        self._profile_editor = ProfileEditor(config.auth) if config.auth is not None else None
        self._command_router = CommandRouter(
            on_help=self._on_help,
            on_breathe=self._handle_breathe_command,
            on_exercise=self._handle_exercise_command,
            on_close=self._handle_close_command,
            on_resources=self._handle_resources_command,
            on_profile=self._handle_profile_command,
            on_mood=self._handle_mood_command,
            on_sign_out=self._handle_sign_out_command,
            on_unknown=self._on_unknown_command,
        )

    @property
    def session(self) -> ConversationSession:
        return self._session

    def greet(self) -> None:
        for message in self._session.messages:
            print(self._formatter.format_message(message))

    async def run(self, user_input: str) -> None:
        if await self._command_router.try_handle(user_input):
            return

        text = user_input[:MAX_MESSAGE_CHARS]
        try:
            task = self._session.submit_user_message(text)
        except InvalidInputError:
            return

        if self._config.show_typing:
            with TypingIndicator(prefix=self._LINE_PREFIX):
                reply = await task
        else:
            reply = await task

        if reply is None:
            return
        print(self._formatter.format_message(reply))
        if self._session.exercise_menu_visible:
            for line in self._formatter.format_exercise_menu(self._session.offered_exercises):
                print(line)

    async def shutdown(self) -> None:
        await self._session.close()

    async def _on_help(self) -> None:
        print(f"{self._LINE_PREFIX}Available commands:")
        print(f"{self._LINE_PREFIX}- /help")
        print(f"{self._LINE_PREFIX}- /breathe")
        print(f"{self._LINE_PREFIX}- /exercise <id>")
        print(f"{self._LINE_PREFIX}- /close")
        print(f"{self._LINE_PREFIX}- /resources [mood] [all|video|activity]")
        print(f"{self._LINE_PREFIX}- /mood <mood> [intensity 1-10]")
        if self._profile_editor is not None:
            print(f"{self._LINE_PREFIX}- /profile")
            print(f"{self._LINE_PREFIX}- /profile edit")
            print(f"{self._LINE_PREFIX}- /profile set <name|email|theme|notifications|reminders|journal> <value>")
            print(f"{self._LINE_PREFIX}- /profile save")
            print(f"{self._LINE_PREFIX}- /signout")
        else:
            print(f"{self._LINE_PREFIX}Profile commands require signing in to the hosted backend.")

    def _on_unknown_command(self, trimmed: str) -> None:
        print(f"{self._LINE_PREFIX}Unknown local command: {trimmed}")

    async def _handle_breathe_command(self, command: str) -> None:
        if self._session.toggle_menu():
            for line in self._formatter.format_exercise_menu(self._session.offered_exercises):
                print(line)
        else:
            print(f"{self._LINE_PREFIX}Breathing options closed.")

    async def _handle_exercise_command(self, command: str) -> None:
        parts = command.split()
        if len(parts) != 2:
            print(f"{self._LINE_PREFIX}Usage: /exercise <id>")
            return
        try:
            message = self._session.choose_exercise(parts[1])
        except NotFoundError as ex:
            print(f"{self._LINE_PREFIX}{ex}")
            return
        print(self._formatter.format_message(message))

    async def _handle_close_command(self) -> None:
        self._session.dismiss_menu()
        print(f"{self._LINE_PREFIX}Breathing options closed.")

    async def _handle_resources_command(self, command: str) -> None:
        mood = ALL
        resource_type = ALL
        for arg in command.split()[1:]:
            lowered = arg.lower()
            if lowered in RESOURCE_TYPE_FILTERS and lowered != ALL:
                resource_type = lowered
            else:
                mood = lowered
        try:
            resources = filter_resources(self._config.resources, mood=mood, resource_type=resource_type)
        except InvalidInputError as ex:
            print(f"{self._LINE_PREFIX}{ex}")
            return
        for line in self._formatter.format_resource_list(resources, mood=mood, resource_type=resource_type):
            print(line)

    async def _handle_profile_command(self, command: str) -> None:
        if self._profile_editor is None:
            print(f"{self._LINE_PREFIX}Profile commands require signing in to the hosted backend")
            return

        editor = self._profile_editor
        parts = command.split(maxsplit=3)
        if len(parts) == 1:
            for line in self._formatter.format_profile(editor.draft, is_editing=editor.is_editing):
                print(line)
            return

        action = parts[1].lower()
        if action == "edit":
            state = "on" if editor.toggle_editing() else "off"
            print(f"{self._LINE_PREFIX}Editing {state}.")
            return

        if action == "set" and len(parts) == 4:
            if not editor.is_editing:
                print(f"{self._LINE_PREFIX}Run /profile edit first")
                return
            field = _PROFILE_FIELD_ALIASES.get(parts[2].lower())
            if field is None:
                print(f"{self._LINE_PREFIX}Unknown profile field: {parts[2]}")
                return
            value: object = parts[3]
            if field.endswith(("_enabled", "_reminders", "_prompts")):
                value = _SWITCH_VALUES.get(parts[3].lower(), parts[3])
            try:
                editor.update(field, value)
            except (InvalidInputError, NotFoundError) as ex:
                print(f"{self._LINE_PREFIX}{ex}")
                return
            print(f"{self._LINE_PREFIX}Updated {parts[2].lower()}.")
            return

        if action == "save":
            if not editor.is_editing:
                print(f"{self._LINE_PREFIX}Nothing to save")
                return
            try:
                await editor.save()
            except BackendError as ex:
                logger.error(f"Failed to save profile: {ex}")
                print(f"{self._LINE_PREFIX}Failed to save profile")
                return
            print(f"{self._LINE_PREFIX}Profile saved.")
            return

        print(
            f"{self._LINE_PREFIX}Usage: /profile | /profile edit | "
            "/profile set <field> <value> | /profile save"
        )

    async def _handle_mood_command(self, command: str) -> None:
        store = self._config.store
        if store is None:
            print(f"{self._LINE_PREFIX}Mood tracking requires a store (StoreBackend=local or supabase)")
            return
        parts = command.split()
        if len(parts) not in (2, 3):
            print(f"{self._LINE_PREFIX}Usage: /mood <mood> [intensity 1-10]")
            return
        intensity = 5
        if len(parts) == 3:
            try:
                intensity = int(parts[2])
            except ValueError:
                print(f"{self._LINE_PREFIX}Usage: /mood <mood> [intensity 1-10]")
                return
            if not 1 <= intensity <= 10:
                print(f"{self._LINE_PREFIX}Intensity must be between 1 and 10")
                return
        mood = parts[1].lower()
        try:
            await store.add_mood_entry(self._config.user_id, mood, intensity)
        except BackendError as ex:
            logger.error(f"Failed to record mood: {ex}")
            print(f"{self._LINE_PREFIX}Failed to record mood")
            return
        print(f"{self._LINE_PREFIX}Mood recorded: {mood} ({intensity}/10)")

    async def _handle_sign_out_command(self) -> None:
        auth = self._config.auth
        if auth is None:
            print(f"{self._LINE_PREFIX}Not signed in")
            return
        await auth.sign_out()
        self._profile_editor = None
        print(f"{self._LINE_PREFIX}Signed out.")
