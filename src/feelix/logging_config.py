import re
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loguru import logger

_EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
_BEARER = re.compile(r"(Bearer\s+)[\w.\-]+", re.IGNORECASE)

DEFAULT_LOG_DIR = ".feelix"


def redact(text: str) -> str:
    """Mask email addresses and bearer tokens before a message is written anywhere."""
    text = _BEARER.sub(r"\1***", text)
    return _EMAIL.sub("<email>", text)


def _redacting_patcher(record: dict) -> None:
    record["message"] = redact(record["message"])


@runtime_checkable
class LogConsumer(Protocol):
    def register(self, level: str) -> None: ...
    def describe(self, level: str) -> str: ...


class ConsoleLogConsumer:
    """Short stderr lines; the chat itself owns stdout."""

    def register(self, level: str) -> None:
        logger.add(sys.stderr, level=level, format="<level>[{level}]</level> {message}")

    def describe(self, level: str) -> str:
        return f"console ({level})"


class FileLogConsumer:
    def __init__(
        self,
        path: str = f"{DEFAULT_LOG_DIR}/feelix.log",
        rotation: str = "5 MB",
        retention: int = 3,
        serialize: bool = False,
    ):
        self._path = Path(path)
        self._rotation = rotation
        self._retention = retention
        self._serialize = serialize

    def register(self, level: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self._path),
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} {level:<7} {name}:{line} {message}",
            rotation=self._rotation,
            retention=self._retention,
            serialize=self._serialize,
        )

    def describe(self, level: str) -> str:
        kind = "jsonl" if self._serialize else "file"
        return f"{kind} ({self._path}, {level})"


_CONSUMER_TYPES: dict[str, Callable[..., LogConsumer]] = {
    "console": ConsoleLogConsumer,
    "file": FileLogConsumer,
    "jsonl": lambda **kwargs: FileLogConsumer(serialize=True, **kwargs),
}

_DEFAULT_CONSUMERS: list[dict[str, Any]] = [
    {"type": "console", "level": "WARNING"},
    {"type": "file"},
]


def setup_logging(level: str = "INFO", consumers: list[dict[str, Any]] | None = None) -> list[str]:
    """Replace loguru's sinks with the configured consumers.

    Every record passes through ``redact`` first. Returns one description per
    consumer that was registered; unknown types are reported and skipped.
    """
    logger.remove()
    logger.configure(patcher=_redacting_patcher)

    descriptions: list[str] = []
    skipped: list[str] = []
    for config in consumers if consumers is not None else _DEFAULT_CONSUMERS:
        factory = _CONSUMER_TYPES.get(config.get("type", ""))
        if factory is None:
            skipped.append(repr(config.get("type")))
            continue
        options = {k: v for k, v in config.items() if k not in ("type", "level")}
        consumer_level = str(config.get("level", level)).upper()
        consumer = factory(**options)
        consumer.register(consumer_level)
        descriptions.append(consumer.describe(consumer_level))

    for name in skipped:
        logger.warning(f"Unknown log consumer type: {name}")
    return descriptions
