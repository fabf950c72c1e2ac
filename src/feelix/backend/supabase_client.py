from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from feelix.errors import AuthError, BackendError

_SINGLE_ROW = "application/vnd.pgrst.object+json"
_RETURN_ROW = "return=representation"


class TransientBackendError(BackendError):
    """Rate limiting or a server-side failure worth retrying."""


def _on_retry(retry_state) -> None:
    attempt = retry_state.attempt_number
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    reason = type(exc).__name__ if exc else "Unknown"
    logger.warning(f"{reason}. Retrying backend request in {wait:.1f}s (attempt {attempt}/4)...")


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or response.reason_phrase


class SupabaseClient:
    """Async REST client for the hosted auth (GoTrue) and data (PostgREST) APIs."""

    def __init__(
        self,
        url: str,
        key: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not url or not key:
            raise ValueError("Supabase url and key are required")
        self._key = key
        self._access_token: str | None = None
        self._user: dict | None = None
        self._client = httpx.AsyncClient(
            base_url=url.rstrip("/"),
            headers={"apikey": key, "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def user(self) -> dict | None:
        return self._user

    @property
    def access_token(self) -> str | None:
        return self._access_token

    async def close(self) -> None:
        await self._client.aclose()

    # -- auth --

    async def sign_up(self, email: str, password: str, name: str | None = None) -> dict:
        data = await self._auth_request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": {"name": name or ""}},
        )
        self._store_session(data)
        return data

    async def sign_in(self, email: str, password: str) -> dict:
        data = await self._auth_request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        self._store_session(data)
        logger.info(f"Signed in as {email}")
        return data

    async def sign_out(self) -> None:
        if self._access_token is not None:
            await self._auth_request("POST", "/auth/v1/logout")
        self._access_token = None
        self._user = None

    async def get_current_user(self) -> dict | None:
        if self._access_token is None:
            return None
        self._user = await self._auth_request("GET", "/auth/v1/user")
        return self._user

    async def reset_password(self, email: str) -> None:
        await self._auth_request("POST", "/auth/v1/recover", json={"email": email})

    # -- users --

    async def get_user_profile(self, user_id: str) -> dict:
        return await self._select_one("users", {"id": f"eq.{user_id}"})

    async def update_user_profile(self, user_id: str, updates: dict) -> dict:
        return await self._rest(
            "PATCH",
            "users",
            params={"id": f"eq.{user_id}"},
            json=updates,
            single=True,
        )

    # -- conversations --

    async def get_conversations(self, user_id: str) -> list[dict]:
        return await self._rest(
            "GET",
            "conversations",
            params={"select": "*,messages(*)", "user_id": f"eq.{user_id}", "order": "created_at.desc"},
        )

    async def create_conversation(self, user_id: str, title: str | None = None) -> dict:
        return await self._rest(
            "POST",
            "conversations",
            json={"user_id": user_id, "title": title or "New Conversation"},
            single=True,
        )

    async def add_message(
        self,
        conversation_id: str,
        text: str,
        is_user: bool,
        mood: str | None = None,
    ) -> dict:
        return await self._rest(
            "POST",
            "messages",
            json={"conversation_id": conversation_id, "text": text, "is_user": is_user, "mood": mood},
            single=True,
        )

    # -- mood tracking --

    async def add_mood_entry(
        self,
        user_id: str,
        mood: str,
        intensity: int,
        notes: str | None = None,
        triggers: list[str] | None = None,
    ) -> dict:
        return await self._rest(
            "POST",
            "mood_entries",
            json={
                "user_id": user_id,
                "mood": mood,
                "intensity": intensity,
                "notes": notes,
                "triggers": triggers or [],
            },
            single=True,
        )

    async def get_mood_entries(self, user_id: str, limit: int = 30) -> list[dict]:
        return await self._rest(
            "GET",
            "mood_entries",
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
                "limit": str(max(1, limit)),
            },
        )

    # -- resources --

    async def get_resources(
        self,
        mood_tags: list[str] | None = None,
        resource_type: str | None = None,
    ) -> list[dict]:
        params = {"select": "*", "is_active": "eq.true"}
        if mood_tags:
            params["mood_tags"] = "ov.{" + ",".join(mood_tags) + "}"
        if resource_type:
            params["type"] = f"eq.{resource_type}"
        params["order"] = "created_at.desc"
        return await self._rest("GET", "resources", params=params)

    async def get_user_resources(self, user_id: str) -> list[dict]:
        return await self._rest(
            "GET",
            "user_resources",
            params={"select": "*,resources(*)", "user_id": f"eq.{user_id}", "order": "created_at.desc"},
        )

    async def mark_resource_complete(
        self,
        user_id: str,
        resource_id: str,
        rating: int | None = None,
        notes: str | None = None,
    ) -> dict:
        return await self._rest(
            "POST",
            "user_resources",
            json={
                "user_id": user_id,
                "resource_id": resource_id,
                "completed": True,
                "rating": rating,
                "notes": notes,
                "completed_at": datetime.now(UTC).isoformat(),
            },
            single=True,
            upsert=True,
        )

    # -- journal --

    async def get_journal_entries(self, user_id: str, limit: int = 50) -> list[dict]:
        return await self._rest(
            "GET",
            "journal_entries",
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "is_private": "eq.true",
                "order": "created_at.desc",
                "limit": str(max(1, limit)),
            },
        )

    async def create_journal_entry(
        self,
        user_id: str,
        title: str,
        content: str,
        mood: str | None = None,
        tags: list[str] | None = None,
    ) -> dict:
        return await self._rest(
            "POST",
            "journal_entries",
            json={"user_id": user_id, "title": title, "content": content, "mood": mood, "tags": tags or []},
            single=True,
        )

    # -- breathing sessions and stats --

    async def add_breathing_session(
        self,
        user_id: str,
        exercise_type: str,
        duration: int,
        completed: bool,
        notes: str | None = None,
    ) -> dict:
        return await self._rest(
            "POST",
            "breathing_sessions",
            json={
                "user_id": user_id,
                "exercise_type": exercise_type,
                "duration": duration,
                "completed": completed,
                "notes": notes,
            },
            single=True,
        )

    async def get_user_stats(self, user_id: str) -> dict:
        return await self._select_one("user_stats", {"user_id": f"eq.{user_id}"})

    async def update_user_stats(self, user_id: str, updates: dict) -> dict:
        return await self._rest(
            "POST",
            "user_stats",
            json={"user_id": user_id, **updates, "updated_at": datetime.now(UTC).isoformat()},
            single=True,
            upsert=True,
        )

    # -- plumbing --

    def _store_session(self, data: dict) -> None:
        token = data.get("access_token")
        if token:
            self._access_token = token
        user = data.get("user")
        if isinstance(user, dict):
            self._user = user
        elif token is None and "id" in data:
            # Sign-up with email confirmation pending returns the bare user.
            self._user = data

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._access_token or self._key}"}
        if extra:
            headers.update(extra)
        return headers

    async def _select_one(self, table: str, filters: dict[str, str]) -> dict:
        return await self._rest("GET", table, params={"select": "*", **filters}, single=True)

    async def _rest(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        single: bool = False,
        upsert: bool = False,
    ) -> Any:
        extra: dict[str, str] = {}
        if single:
            extra["Accept"] = _SINGLE_ROW
        if method != "GET":
            extra["Prefer"] = f"resolution=merge-duplicates,{_RETURN_ROW}" if upsert else _RETURN_ROW
        response = await self._request(method, f"/rest/v1/{table}", params=params, json=json, headers=extra)
        if response.status_code >= 400:
            raise BackendError(f"{table}: {_error_message(response)}", status_code=response.status_code)
        if not response.content:
            return {} if single else []
        return response.json()

    async def _auth_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> dict:
        try:
            response = await self._request(method, path, params=params, json=json)
        except TransientBackendError as ex:
            raise AuthError(ex.message, status_code=ex.status_code) from ex
        except httpx.TransportError as ex:
            raise AuthError(f"Auth service unreachable: {ex}") from ex
        if response.status_code >= 400:
            raise AuthError(_error_message(response), status_code=response.status_code)
        if not response.content:
            return {}
        return response.json()

    @retry(
        retry=retry_if_exception_type((httpx.TransportError, TransientBackendError)),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        stop=stop_after_attempt(4),
        before_sleep=_on_retry,
        reraise=True,
    )
    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        response = await self._client.request(
            method,
            path,
            params=params,
            json=json,
            headers=self._headers(headers),
        )
        if response.status_code == 429 or response.status_code >= 500:
            raise TransientBackendError(_error_message(response), status_code=response.status_code)
        return response
