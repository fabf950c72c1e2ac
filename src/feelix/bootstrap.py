from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from feelix.app_config import AppConfig, RuntimeEnv
from feelix.auth import ROUTE_TABS, AuthSession
from feelix.backend.local_store import ConversationStore, LocalStore
from feelix.backend.sink import AsyncConversationSink
from feelix.backend.supabase_client import SupabaseClient
from feelix.companion import Companion
from feelix.companion_config import CompanionConfig
from feelix.errors import AuthError
from feelix.logging_config import setup_logging
from feelix.theme import ColorScheme, get_color_scheme


@dataclass
class AppRuntime:
    companion: Companion
    client: SupabaseClient | None
    auth: AuthSession | None
    local_store: LocalStore | None
    sink: AsyncConversationSink | None
    color_scheme: ColorScheme
    log_descriptions: list[str]

    async def close(self) -> None:
        await self.companion.shutdown()
        if self.sink is not None:
            await self.sink.close()
        if self.local_store is not None:
            self.local_store.close()
        if self.client is not None:
            await self.client.close()


async def bootstrap_runtime(app: AppConfig, env: RuntimeEnv) -> AppRuntime:
    log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers)
    color_scheme = get_color_scheme(app.preferred_color_scheme)

    client: SupabaseClient | None = None
    auth: AuthSession | None = None
    user_id = "local"

    if env.has_supabase:
        client = SupabaseClient(env.supabase_url or "", env.supabase_key or "", timeout=app.request_timeout_seconds)
        auth = AuthSession(client)
        if env.user_email and env.user_password:
            try:
                await auth.sign_in(env.user_email, env.user_password)
            except AuthError as ex:
                logger.error(f"Sign-in failed: {ex}")
                await auth.initialize()
        else:
            await auth.initialize()
        if auth.initial_route() == ROUTE_TABS and auth.user_id is not None:
            user_id = auth.user_id
        else:
            auth = None

    store: ConversationStore | None = None
    local_store: LocalStore | None = None
    if app.store_backend == "supabase":
        if client is None or auth is None:
            if client is not None:
                await client.close()
            raise ValueError(
                "StoreBackend=supabase requires SUPABASE_URL, SUPABASE_KEY and a signed-in user "
                "(FEELIX_EMAIL / FEELIX_PASSWORD)"
            )
        store = client
    elif app.store_backend == "local":
        db_path = Path(app.local_db_path)
        if not db_path.is_absolute():
            db_path = Path.cwd() / db_path
        local_store = LocalStore(str(db_path))
        store = local_store

    sink: AsyncConversationSink | None = None
    if store is not None:
        sink = AsyncConversationSink(
            store,
            user_id=user_id,
            batch_size=app.sink_batch_size,
            flush_interval_seconds=app.sink_flush_interval_seconds,
        )
        await sink.start()

    companion = Companion(
        CompanionConfig(
            reply_delay_seconds=app.reply_delay_seconds,
            show_typing=True,
            sink=sink,
            store=store,
            user_id=user_id,
            auth=auth,
        )
    )

    return AppRuntime(
        companion=companion,
        client=client,
        auth=auth,
        local_store=local_store,
        sink=sink,
        color_scheme=color_scheme,
        log_descriptions=log_descriptions,
    )
