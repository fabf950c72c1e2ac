from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

from feelix.auth import AuthSession
from feelix.errors import InvalidInputError
from feelix.moods import mood_description, mood_emoji
from feelix.theme import get_color_scheme

_TOGGLE_FIELDS = ("notifications_enabled", "breathing_reminders", "journal_prompts")


@dataclass(frozen=True)
class ProfileDraft:
    name: str
    email: str
    current_mood: str = "calm"
    preferred_color_scheme: str = "default"
    notifications_enabled: bool = True
    breathing_reminders: bool = True
    journal_prompts: bool = False

    @property
    def initial(self) -> str:
        return self.name[:1].upper()

    @property
    def mood_emoji(self) -> str:
        return mood_emoji(self.current_mood)

    @property
    def mood_description(self) -> str:
        return mood_description(self.current_mood)


class ProfileEditor:
    """Editable copy of the signed-in user's profile."""

    def __init__(self, auth: AuthSession):
        self._auth = auth
        self._is_editing = False
        self._draft = self._draft_from_auth()

    @property
    def draft(self) -> ProfileDraft:
        return self._draft

    @property
    def is_editing(self) -> bool:
        return self._is_editing

    def toggle_editing(self) -> bool:
        self._is_editing = not self._is_editing
        return self._is_editing

    def reset(self) -> None:
        self._draft = self._draft_from_auth()
        self._is_editing = False

    def update(self, field: str, value: Any) -> ProfileDraft:
        if field not in ProfileDraft.__dataclass_fields__:
            raise InvalidInputError(f"Unknown profile field: {field!r}")
        if field == "preferred_color_scheme":
            value = get_color_scheme(str(value)).name
        elif field in _TOGGLE_FIELDS:
            if not isinstance(value, bool):
                raise InvalidInputError(f"{field} must be true or false")
        else:
            value = str(value).strip()
            if field == "name" and not value:
                raise InvalidInputError("Name must not be empty")
        self._draft = replace(self._draft, **{field: value})
        return self._draft

    async def save(self) -> None:
        draft = self._draft
        await self._auth.update_profile(
            {
                "name": draft.name,
                "preferredColorScheme": draft.preferred_color_scheme,
                "notificationsEnabled": draft.notifications_enabled,
                "breathingReminders": draft.breathing_reminders,
                "journalPrompts": draft.journal_prompts,
            }
        )
        self._is_editing = False

    def as_dict(self) -> dict[str, Any]:
        return asdict(self._draft)

    def _draft_from_auth(self) -> ProfileDraft:
        profile = self._auth.profile or {}
        user = self._auth.user or {}
        return ProfileDraft(
            name=profile.get("name") or "User",
            email=profile.get("email") or user.get("email") or "",
            preferred_color_scheme=profile.get("preferredColorScheme") or "default",
            notifications_enabled=_bool_or(profile.get("notificationsEnabled"), True),
            breathing_reminders=_bool_or(profile.get("breathingReminders"), True),
            journal_prompts=_bool_or(profile.get("journalPrompts"), False),
        )


def _bool_or(value: Any, default: bool) -> bool:
    return default if value is None else bool(value)
