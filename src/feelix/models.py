from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

MAX_MESSAGE_CHARS = 500


class Author(str, Enum):
    USER = "user"
    COMPANION = "companion"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Message:
    id: int
    text: str
    author: Author
    created_at: datetime
    mood: str | None = None

    @property
    def is_user(self) -> bool:
        return self.author is Author.USER
