from __future__ import annotations

from feelix.breathing import BreathingExercise
from feelix.models import Author, Message
from feelix.moods import display_mood, mood_emoji
from feelix.profile import ProfileDraft
from feelix.resources import ALL, Resource, ResourceType


class TranscriptFormatter:
    def __init__(self, *, line_prefix: str, user_prefix: str = "you> "):
        self._line_prefix = line_prefix
        self._user_prefix = user_prefix

    @staticmethod
    def format_timestamp(message: Message) -> str:
        return message.created_at.astimezone().strftime("%H:%M")

    def format_message(self, message: Message) -> str:
        prefix = self._user_prefix if message.author is Author.USER else self._line_prefix
        return f"{prefix}{message.text} [{self.format_timestamp(message)}]"

    def format_exercise_menu(self, exercises: tuple[BreathingExercise, ...]) -> list[str]:
        lines = [f"{self._line_prefix}Choose a Breathing Exercise:"]
        for exercise in exercises:
            minutes, seconds = divmod(exercise.duration_seconds, 60)
            length = f"{minutes}:{seconds:02d}"
            lines.append(f"{self._line_prefix}  [{exercise.id}] {exercise.name} ({length}) - {exercise.description}")
        lines.append(f"{self._line_prefix}Pick one with /exercise <id>, or /close to dismiss.")
        return lines

    def format_resource_card(self, resource: Resource) -> list[str]:
        kind = "Video" if resource.type is ResourceType.VIDEO else "Activity"
        duration = f", {resource.duration}" if resource.duration else ""
        moods = " ".join(mood_emoji(m) for m in resource.moods)
        return [
            f"{self._line_prefix}- {resource.title} ({kind}{duration}) {moods}",
            f"{self._line_prefix}  {resource.description}",
        ]

    def format_resource_list(self, resources: list[Resource], *, mood: str = ALL, resource_type: str = ALL) -> list[str]:
        kind = "All" if resource_type == ALL else resource_type.capitalize()
        lines = [f"{self._line_prefix}Resources (mood: {display_mood(mood)}, type: {kind})"]
        if not resources:
            lines.append(f"{self._line_prefix}No resources match these filters.")
            return lines
        for resource in resources:
            lines.extend(self.format_resource_card(resource))
        return lines

    def format_profile(self, draft: ProfileDraft, *, is_editing: bool) -> list[str]:
        def on_off(flag: bool) -> str:
            return "on" if flag else "off"

        lines = [
            f"{self._line_prefix}Profile{' (editing)' if is_editing else ''}:",
            f"{self._line_prefix}- Name: {draft.name}",
            f"{self._line_prefix}- Email: {draft.email}",
            f"{self._line_prefix}- Current mood: {draft.mood_emoji} {draft.mood_description}",
            f"{self._line_prefix}- Color theme: {draft.preferred_color_scheme}",
            f"{self._line_prefix}- Push notifications: {on_off(draft.notifications_enabled)}",
            f"{self._line_prefix}- Breathing reminders: {on_off(draft.breathing_reminders)}",
            f"{self._line_prefix}- Journal prompts: {on_off(draft.journal_prompts)}",
        ]
        return lines
