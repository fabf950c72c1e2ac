from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol, runtime_checkable
from uuid import uuid4


def utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


@runtime_checkable
class ConversationStore(Protocol):
    async def create_conversation(self, user_id: str, title: str | None = None) -> dict: ...

    async def add_message(
        self,
        conversation_id: str,
        text: str,
        is_user: bool,
        mood: str | None = None,
    ) -> dict: ...

    async def add_breathing_session(
        self,
        user_id: str,
        exercise_type: str,
        duration: int,
        completed: bool,
        notes: str | None = None,
    ) -> dict: ...

    async def add_mood_entry(
        self,
        user_id: str,
        mood: str,
        intensity: int,
        notes: str | None = None,
        triggers: list[str] | None = None,
    ) -> dict: ...


class LocalStore:
    """SQLite-backed stand-in for the hosted store, used offline."""

    def __init__(self, db_path: str):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._initialize_schema()

    def close(self) -> None:
        self._conn.close()

    def execute(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        return self._conn.execute(query, params)

    def commit(self) -> None:
        self._conn.commit()

    async def create_conversation(self, user_id: str, title: str | None = None) -> dict:
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "title": title or "New Conversation",
            "created_at": utc_now(),
        }
        self._conn.execute(
            "INSERT INTO conversations (id, user_id, title, created_at) VALUES (?, ?, ?, ?)",
            (row["id"], row["user_id"], row["title"], row["created_at"]),
        )
        self._conn.commit()
        return row

    async def add_message(
        self,
        conversation_id: str,
        text: str,
        is_user: bool,
        mood: str | None = None,
    ) -> dict:
        next_seq = self._next_seq(conversation_id)
        row = {
            "id": str(uuid4()),
            "conversation_id": conversation_id,
            "seq": next_seq,
            "text": text,
            "is_user": is_user,
            "mood": mood,
            "created_at": utc_now(),
        }
        self._conn.execute(
            """
            INSERT INTO messages (id, conversation_id, seq, text, is_user, mood, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (row["id"], conversation_id, next_seq, text, 1 if is_user else 0, mood, row["created_at"]),
        )
        self._conn.commit()
        return row

    async def add_breathing_session(
        self,
        user_id: str,
        exercise_type: str,
        duration: int,
        completed: bool,
        notes: str | None = None,
    ) -> dict:
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "exercise_type": exercise_type,
            "duration": duration,
            "completed": completed,
            "notes": notes,
            "created_at": utc_now(),
        }
        self._conn.execute(
            """
            INSERT INTO breathing_sessions (id, user_id, exercise_type, duration, completed, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (row["id"], user_id, exercise_type, duration, 1 if completed else 0, notes, row["created_at"]),
        )
        self._conn.commit()
        return row

    async def add_mood_entry(
        self,
        user_id: str,
        mood: str,
        intensity: int,
        notes: str | None = None,
        triggers: list[str] | None = None,
    ) -> dict:
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "mood": mood,
            "intensity": intensity,
            "notes": notes,
            "triggers": list(triggers or []),
            "created_at": utc_now(),
        }
        self._conn.execute(
            """
            INSERT INTO mood_entries (id, user_id, mood, intensity, notes, triggers_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                row["id"],
                user_id,
                mood,
                intensity,
                notes,
                json.dumps(row["triggers"], ensure_ascii=True),
                row["created_at"],
            ),
        )
        self._conn.commit()
        return row

    async def get_mood_entries(self, user_id: str, limit: int = 30) -> list[dict]:
        rows = self._conn.execute(
            """
            SELECT id, user_id, mood, intensity, notes, triggers_json, created_at
            FROM mood_entries
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (user_id, max(1, limit)),
        ).fetchall()
        results: list[dict] = []
        for row in rows:
            entry = dict(row)
            entry["triggers"] = json.loads(entry.pop("triggers_json") or "[]")
            results.append(entry)
        return results

    def load_messages(self, conversation_id: str) -> list[dict]:
        rows = self._conn.execute(
            """
            SELECT id, seq, text, is_user, mood, created_at
            FROM messages
            WHERE conversation_id = ?
            ORDER BY seq ASC
            """,
            (conversation_id,),
        ).fetchall()
        return [{**dict(row), "is_user": bool(row["is_user"])} for row in rows]

    def list_conversations(self, user_id: str, *, limit: int = 20) -> list[dict]:
        rows = self._conn.execute(
            """
            SELECT c.id, c.title, c.created_at, COUNT(m.id) AS message_count
            FROM conversations c
            LEFT JOIN messages m ON m.conversation_id = c.id
            WHERE c.user_id = ?
            GROUP BY c.id
            ORDER BY c.created_at DESC, c.rowid DESC
            LIMIT ?
            """,
            (user_id, max(1, limit)),
        ).fetchall()
        return [dict(row) for row in rows]

    def _next_seq(self, conversation_id: str) -> int:
        row = self._conn.execute(
            "SELECT COALESCE(MAX(seq), 0) AS max_seq FROM messages WHERE conversation_id = ?",
            (conversation_id,),
        ).fetchone()
        return int(row["max_seq"]) + 1

    def _initialize_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                title TEXT NOT NULL,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                conversation_id TEXT NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
                seq INTEGER NOT NULL,
                text TEXT NOT NULL,
                is_user INTEGER NOT NULL CHECK (is_user IN (0, 1)),
                mood TEXT NULL,
                created_at TEXT NOT NULL,
                UNIQUE(conversation_id, seq)
            );

            CREATE TABLE IF NOT EXISTS breathing_sessions (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                exercise_type TEXT NOT NULL,
                duration INTEGER NOT NULL,
                completed INTEGER NOT NULL CHECK (completed IN (0, 1)),
                notes TEXT NULL,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS mood_entries (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                mood TEXT NOT NULL,
                intensity INTEGER NOT NULL,
                notes TEXT NULL,
                triggers_json TEXT NOT NULL DEFAULT '[]',
                created_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_messages_conversation_seq
                ON messages(conversation_id, seq);
            CREATE INDEX IF NOT EXISTS idx_conversations_user_created
                ON conversations(user_id, created_at);
            CREATE INDEX IF NOT EXISTS idx_mood_entries_user_created
                ON mood_entries(user_id, created_at);
            """
        )
        self._conn.commit()
