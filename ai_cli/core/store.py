"""Conversation persistence backed by a local SQLite file."""

from __future__ import annotations

import logging
import os
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .errors import StorageError

logger = logging.getLogger(__name__)

ROLES = ("system", "user", "assistant")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS conversations (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL REFERENCES conversations(id),
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS messages_by_conversation
    ON messages (conversation_id, created_at);

CREATE TABLE IF NOT EXISTS current_conversation (
    slot INTEGER PRIMARY KEY CHECK (slot = 1),
    conversation_id TEXT NOT NULL REFERENCES conversations(id),
    updated_at TEXT NOT NULL
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Message:
    id: str
    conversation_id: str
    role: str
    content: str
    created_at: str


@dataclass(frozen=True)
class ConversationSummary:
    id: str
    updated_at: str


class ConversationStore:
    """Append-only message log grouped by conversation, plus a current pointer.

    The pointer lives in a single-slot table: setting it replaces the one row
    instead of adding a new one, so the table never grows.
    """

    DB_FILENAME = "conversations.db"
    DATA_DIR = Path(os.getenv("AI_CLI_HOME", str(Path.home() / ".ai-cli")))

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else self.DATA_DIR / self.DB_FILENAME
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.path))
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open conversation store at {self.path}: {exc}") from exc
        logger.debug("Opened conversation store %s", self.path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "ConversationStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_conversation(self) -> str:
        conversation_id = _new_id()
        now = _now()
        with self._write():
            self._conn.execute(
                "INSERT INTO conversations (id, created_at, updated_at) VALUES (?, ?, ?)",
                (conversation_id, now, now),
            )
        logger.debug("Created conversation %s", conversation_id)
        return conversation_id

    def append_message(
        self,
        conversation_id: Optional[str],
        role: str,
        content: str,
        create_new: bool = False,
    ) -> str:
        """Append a message and make its conversation the current one.

        A conversation is created first when *create_new* is set or no id is
        given. Returns the id of the conversation the message landed in.
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")

        if create_new or not conversation_id:
            conversation_id = self.create_conversation()

        now = _now()
        with self._write():
            cur = self._conn.execute(
                "UPDATE conversations SET updated_at = ? WHERE id = ?",
                (now, conversation_id),
            )
            if cur.rowcount == 0:
                raise StorageError(f"Conversation '{conversation_id}' does not exist.")
            self._replace_pointer(conversation_id, now)
            self._conn.execute(
                "INSERT INTO messages (id, conversation_id, role, content, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (_new_id(), conversation_id, role, content, now),
            )
        return conversation_id

    def set_current_conversation(self, conversation_id: str) -> None:
        with self._write():
            row = self._conn.execute(
                "SELECT 1 FROM conversations WHERE id = ?", (conversation_id,)
            ).fetchone()
            if row is None:
                raise StorageError(f"Conversation '{conversation_id}' does not exist.")
            self._replace_pointer(conversation_id, _now())

    def _replace_pointer(self, conversation_id: str, now: str) -> None:
        self._conn.execute("DELETE FROM current_conversation")
        self._conn.execute(
            "INSERT INTO current_conversation (slot, conversation_id, updated_at) VALUES (1, ?, ?)",
            (conversation_id, now),
        )

    def _write(self) -> "_StorageGuard":
        return _StorageGuard(self._conn)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_current_conversation_id(self) -> Optional[str]:
        row = self._conn.execute(
            "SELECT conversation_id FROM current_conversation WHERE slot = 1"
        ).fetchone()
        return row["conversation_id"] if row else None

    def get_conversation_messages(self, conversation_id: str) -> List[Message]:
        rows = self._conn.execute(
            "SELECT id, conversation_id, role, content, created_at FROM messages "
            "WHERE conversation_id = ? ORDER BY created_at ASC, rowid ASC",
            (conversation_id,),
        ).fetchall()
        return [Message(**dict(row)) for row in rows]

    def list_conversations(self) -> List[ConversationSummary]:
        rows = self._conn.execute(
            "SELECT id, updated_at FROM conversations ORDER BY updated_at DESC, rowid DESC"
        ).fetchall()
        return [ConversationSummary(**dict(row)) for row in rows]


class _StorageGuard:
    """Transaction scope that reports SQLite failures as :class:`StorageError`."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def __enter__(self) -> sqlite3.Connection:
        return self._conn.__enter__()

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._conn.__exit__(exc_type, exc, tb)
        if isinstance(exc, sqlite3.Error):
            raise StorageError(f"Conversation store error: {exc}") from exc
        return False
