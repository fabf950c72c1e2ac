from __future__ import annotations

from typing import Any, Protocol

from loguru import logger

from feelix.errors import AuthError, BackendError, InvalidInputError

ROUTE_LOADING = "loading"
ROUTE_LOGIN = "login"
ROUTE_TABS = "tabs"

PROFILE_FIELDS = (
    "id",
    "email",
    "name",
    "avatar",
    "preferredColorScheme",
    "notificationsEnabled",
    "breathingReminders",
    "journalPrompts",
    "createdAt",
    "updatedAt",
)


class IdentityClient(Protocol):
    @property
    def user(self) -> dict | None: ...

    async def sign_in(self, email: str, password: str) -> dict: ...
    async def sign_up(self, email: str, password: str, name: str | None = None) -> dict: ...
    async def sign_out(self) -> None: ...
    async def get_current_user(self) -> dict | None: ...
    async def get_user_profile(self, user_id: str) -> dict: ...
    async def update_user_profile(self, user_id: str, updates: dict) -> dict: ...


def validate_credentials(email: str, password: str, name: str = "", *, is_login: bool) -> None:
    if not email.strip() or not password:
        raise InvalidInputError("Please fill in all required fields")
    if not is_login and not name.strip():
        raise InvalidInputError("Please enter your name")


def default_profile(user: dict) -> dict[str, Any]:
    metadata = user.get("user_metadata") or {}
    return {
        "id": user["id"],
        "email": user.get("email") or "",
        "name": metadata.get("name") or "",
        "preferredColorScheme": "default",
        "notificationsEnabled": True,
        "breathingReminders": True,
        "journalPrompts": False,
    }


class AuthSession:
    """Signed-in user and profile state shared by the screens."""

    def __init__(self, client: IdentityClient):
        self._client = client
        self._user: dict | None = None
        self._profile: dict | None = None
        self._loading = True

    @property
    def user(self) -> dict | None:
        return self._user

    @property
    def user_id(self) -> str | None:
        return str(self._user["id"]) if self._user else None

    @property
    def profile(self) -> dict | None:
        return self._profile

    @property
    def loading(self) -> bool:
        return self._loading

    def initial_route(self) -> str:
        if self._loading:
            return ROUTE_LOADING
        return ROUTE_TABS if self._user is not None else ROUTE_LOGIN

    async def initialize(self) -> None:
        """Restore the session the client already holds, if any."""
        try:
            user = self._client.user or await self._client.get_current_user()
        except AuthError as ex:
            logger.warning(f"Could not restore session: {ex}")
            user = None
        await self._on_auth_state_change(user)

    async def sign_in(self, email: str, password: str) -> None:
        validate_credentials(email, password, is_login=True)
        await self._client.sign_in(email.strip(), password)
        await self._on_auth_state_change(self._client.user)

    async def sign_up(self, email: str, password: str, name: str) -> None:
        """Register a new account. The user must confirm their email before signing in."""
        validate_credentials(email, password, name, is_login=False)
        await self._client.sign_up(email.strip(), password, name.strip())

    async def sign_out(self) -> None:
        await self._client.sign_out()
        await self._on_auth_state_change(None)

    async def update_profile(self, updates: dict[str, Any]) -> dict:
        if self._user is None:
            raise AuthError("No user logged in")
        unknown = sorted(set(updates) - set(PROFILE_FIELDS))
        if unknown:
            raise InvalidInputError(f"Unknown profile field(s): {', '.join(unknown)}")

        await self._client.update_user_profile(str(self._user["id"]), updates)
        if self._profile is not None:
            self._profile = {**self._profile, **updates}
        return self._profile or {}

    async def _on_auth_state_change(self, user: dict | None) -> None:
        self._user = user
        if user is None:
            self._profile = None
            self._loading = False
            return
        try:
            await self._load_profile(str(user["id"]))
        finally:
            self._loading = False

    async def _load_profile(self, user_id: str) -> None:
        try:
            self._profile = await self._client.get_user_profile(user_id)
        except BackendError as ex:
            logger.warning(f"Error loading user profile: {ex}")
            await self._create_default_profile(user_id)

    async def _create_default_profile(self, user_id: str) -> None:
        user = self._user
        if user is None or str(user.get("id")) != user_id:
            return
        try:
            self._profile = await self._client.update_user_profile(user_id, default_profile(user))
        except BackendError as ex:
            logger.error(f"Error creating default profile: {ex}")
