from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

STORE_BACKENDS = ("none", "local", "supabase")


@dataclass
class RuntimeEnv:
    supabase_url: str | None
    supabase_key: str | None
    user_email: str | None
    user_password: str | None

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


@dataclass
class AppConfig:
    reply_delay_seconds: float
    store_backend: str
    local_db_path: str
    preferred_color_scheme: str
    sink_batch_size: int
    sink_flush_interval_seconds: float
    request_timeout_seconds: float
    log_level: str
    log_consumers: list | None


def load_json_config(path: str | Path | None = None) -> dict:
    config_path = Path(path) if path is not None else Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            return json.load(f)
    return {}


def _to_bool(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return bool(value)


def parse_app_config(config: dict) -> AppConfig:
    store_backend = str(config.get("StoreBackend", "local")).strip().lower()
    if not _to_bool(config.get("PersistenceEnabled", True), default=True):
        store_backend = "none"
    if store_backend not in STORE_BACKENDS:
        raise ValueError(
            f"Unknown store backend: {store_backend!r}. Supported: {', '.join(STORE_BACKENDS)}"
        )
    return AppConfig(
        reply_delay_seconds=float(config.get("ReplyDelaySeconds", 1.5)),
        store_backend=store_backend,
        local_db_path=str(config.get("LocalDbPath", ".feelix/feelix.db")),
        preferred_color_scheme=str(config.get("ColorScheme", "default")).strip().lower(),
        sink_batch_size=int(config.get("SinkBatchSize", 50)),
        sink_flush_interval_seconds=float(config.get("SinkFlushIntervalSeconds", 0.5)),
        request_timeout_seconds=float(config.get("RequestTimeoutSeconds", 30.0)),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env() -> RuntimeEnv:
    return RuntimeEnv(
        supabase_url=os.environ.get("EXPO_PUBLIC_SUPABASE_URL") or os.environ.get("SUPABASE_URL"),
        supabase_key=os.environ.get("EXPO_PUBLIC_SUPABASE_KEY") or os.environ.get("SUPABASE_KEY"),
        user_email=os.environ.get("FEELIX_EMAIL"),
        user_password=os.environ.get("FEELIX_PASSWORD"),
    )
