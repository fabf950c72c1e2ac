import asyncio
import unittest

from feelix.auth import AuthSession
from feelix.errors import InvalidInputError, NotFoundError
from feelix.profile import ProfileDraft, ProfileEditor


class _FakeClient:
    def __init__(self) -> None:
        self._user = {"id": "u-1", "email": "sam@example.com"}
        self.updates: list[dict] = []

    @property
    def user(self) -> dict:
        return self._user

    async def get_current_user(self) -> dict:
        return self._user

    async def get_user_profile(self, user_id: str) -> dict:
        return {
            "id": user_id,
            "name": "Sam",
            "preferredColorScheme": "forest",
            "notificationsEnabled": False,
        }

    async def update_user_profile(self, user_id: str, updates: dict) -> dict:
        self.updates.append(updates)
        return updates


def _signed_in_editor() -> tuple[ProfileEditor, _FakeClient]:
    client = _FakeClient()
    auth = AuthSession(client)
    asyncio.run(auth.initialize())
    return ProfileEditor(auth), client


class ProfileDraftTests(unittest.TestCase):
    def test_derived_fields(self) -> None:
        draft = ProfileDraft(name="sam", email="sam@example.com", current_mood="anxious")
        self.assertEqual("S", draft.initial)
        self.assertEqual("😰", draft.mood_emoji)
        self.assertEqual("Feeling worried or nervous", draft.mood_description)


class ProfileEditorTests(unittest.TestCase):
    def test_draft_seeded_from_profile(self) -> None:
        editor, _ = _signed_in_editor()
        draft = editor.draft
        self.assertEqual("Sam", draft.name)
        self.assertEqual("sam@example.com", draft.email)
        self.assertEqual("forest", draft.preferred_color_scheme)
        self.assertFalse(draft.notifications_enabled)
        self.assertTrue(draft.breathing_reminders)
        self.assertFalse(editor.is_editing)

    def test_update_validates_fields(self) -> None:
        editor, _ = _signed_in_editor()
        with self.assertRaises(InvalidInputError):
            editor.update("shoe_size", 9)
        with self.assertRaises(NotFoundError):
            editor.update("preferred_color_scheme", "neon")
        with self.assertRaises(InvalidInputError):
            editor.update("journal_prompts", "maybe")
        with self.assertRaises(InvalidInputError):
            editor.update("name", "   ")
        self.assertEqual("Sam", editor.draft.name)

    def test_update_and_reset(self) -> None:
        editor, _ = _signed_in_editor()
        editor.toggle_editing()
        editor.update("preferred_color_scheme", "Lavender")
        editor.update("journal_prompts", True)
        self.assertEqual("lavender", editor.as_dict()["preferred_color_scheme"])
        editor.reset()
        self.assertEqual("forest", editor.draft.preferred_color_scheme)
        self.assertFalse(editor.is_editing)

    def test_save_sends_camel_case_updates(self) -> None:
        editor, client = _signed_in_editor()
        editor.toggle_editing()
        editor.update("name", " Sammy ")
        editor.update("breathing_reminders", False)
        asyncio.run(editor.save())
        self.assertFalse(editor.is_editing)
        self.assertEqual(
            {
                "name": "Sammy",
                "preferredColorScheme": "forest",
                "notificationsEnabled": False,
                "breathingReminders": False,
                "journalPrompts": False,
            },
            client.updates[-1],
        )


if __name__ == "__main__":
    unittest.main()
