import asyncio
import unittest

from feelix.auth import ROUTE_LOADING, ROUTE_LOGIN, ROUTE_TABS, AuthSession, default_profile, validate_credentials
from feelix.errors import AuthError, BackendError, InvalidInputError


class FakeIdentityClient:
    def __init__(self, *, profile: dict | None = None, profile_error: bool = False) -> None:
        self._user: dict | None = None
        self._profile = profile
        self._profile_error = profile_error
        self.sign_up_calls: list[tuple] = []
        self.profile_updates: list[tuple[str, dict]] = []

    @property
    def user(self) -> dict | None:
        return self._user

    async def sign_in(self, email: str, password: str) -> dict:
        if password != "secret":
            raise AuthError("Invalid login credentials", status_code=400)
        self._user = {"id": "u-1", "email": email, "user_metadata": {"name": "Sam"}}
        return {"user": self._user}

    async def sign_up(self, email: str, password: str, name: str | None = None) -> dict:
        self.sign_up_calls.append((email, password, name))
        return {"id": "u-2"}

    async def sign_out(self) -> None:
        self._user = None

    async def get_current_user(self) -> dict | None:
        return self._user

    async def get_user_profile(self, user_id: str) -> dict:
        if self._profile_error:
            raise BackendError("users: row not found", status_code=406)
        return dict(self._profile or {"id": user_id, "name": "Sam"})

    async def update_user_profile(self, user_id: str, updates: dict) -> dict:
        self.profile_updates.append((user_id, updates))
        return dict(updates)


class ValidateCredentialsTests(unittest.TestCase):
    def test_missing_fields(self) -> None:
        with self.assertRaisesRegex(InvalidInputError, "fill in all required fields"):
            validate_credentials(" ", "pw", is_login=True)
        with self.assertRaisesRegex(InvalidInputError, "fill in all required fields"):
            validate_credentials("a@b.c", "", is_login=True)

    def test_sign_up_requires_name(self) -> None:
        with self.assertRaisesRegex(InvalidInputError, "enter your name"):
            validate_credentials("a@b.c", "pw", "  ", is_login=False)
        validate_credentials("a@b.c", "pw", is_login=True)

    def test_default_profile(self) -> None:
        profile = default_profile({"id": "u-1", "email": "sam@example.com", "user_metadata": {"name": "Sam"}})
        self.assertEqual("Sam", profile["name"])
        self.assertEqual("default", profile["preferredColorScheme"])
        self.assertTrue(profile["notificationsEnabled"])
        self.assertFalse(profile["journalPrompts"])


class AuthSessionTests(unittest.TestCase):
    def test_initial_route_follows_session_state(self) -> None:
        auth = AuthSession(FakeIdentityClient())
        self.assertEqual(ROUTE_LOADING, auth.initial_route())
        asyncio.run(auth.initialize())
        self.assertFalse(auth.loading)
        self.assertEqual(ROUTE_LOGIN, auth.initial_route())

    def test_sign_in_loads_profile(self) -> None:
        auth = AuthSession(FakeIdentityClient(profile={"id": "u-1", "name": "Sam", "preferredColorScheme": "ocean"}))
        asyncio.run(auth.sign_in(" sam@example.com ", "secret"))
        self.assertEqual(ROUTE_TABS, auth.initial_route())
        self.assertEqual("u-1", auth.user_id)
        self.assertEqual("ocean", auth.profile["preferredColorScheme"])

    def test_sign_in_rejects_bad_password(self) -> None:
        auth = AuthSession(FakeIdentityClient())
        with self.assertRaises(AuthError):
            asyncio.run(auth.sign_in("sam@example.com", "wrong"))
        self.assertIsNone(auth.user)

    def test_missing_profile_creates_default(self) -> None:
        client = FakeIdentityClient(profile_error=True)
        auth = AuthSession(client)
        asyncio.run(auth.sign_in("sam@example.com", "secret"))
        self.assertEqual(1, len(client.profile_updates))
        user_id, created = client.profile_updates[0]
        self.assertEqual("u-1", user_id)
        self.assertEqual("Sam", created["name"])
        self.assertEqual("Sam", auth.profile["name"])

    def test_sign_up_does_not_sign_in(self) -> None:
        client = FakeIdentityClient()
        auth = AuthSession(client)
        asyncio.run(auth.sign_up("new@example.com", "pw", " Alex "))
        self.assertEqual([("new@example.com", "pw", "Alex")], client.sign_up_calls)
        self.assertIsNone(auth.user)

    def test_sign_out_clears_user_and_profile(self) -> None:
        auth = AuthSession(FakeIdentityClient())

        async def scenario() -> None:
            await auth.sign_in("sam@example.com", "secret")
            await auth.sign_out()

        asyncio.run(scenario())
        self.assertIsNone(auth.user)
        self.assertIsNone(auth.profile)
        self.assertEqual(ROUTE_LOGIN, auth.initial_route())

    def test_update_profile_requires_user(self) -> None:
        auth = AuthSession(FakeIdentityClient())
        with self.assertRaisesRegex(AuthError, "No user logged in"):
            asyncio.run(auth.update_profile({"name": "X"}))

    def test_update_profile_merges_and_rejects_unknown_fields(self) -> None:
        client = FakeIdentityClient()
        auth = AuthSession(client)

        async def scenario() -> dict:
            await auth.sign_in("sam@example.com", "secret")
            with self.assertRaises(InvalidInputError):
                await auth.update_profile({"favouriteColour": "teal"})
            return await auth.update_profile({"journalPrompts": True})

        profile = asyncio.run(scenario())
        self.assertTrue(profile["journalPrompts"])
        self.assertEqual("Sam", profile["name"])
        self.assertEqual([("u-1", {"journalPrompts": True})], client.profile_updates)


if __name__ == "__main__":
    unittest.main()
