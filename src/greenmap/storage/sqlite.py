"""SQLite conversation store.

Persists transcripts in a SQLite database file using aiosqlite.
"""

from datetime import datetime
from pathlib import Path

import aiosqlite

from ..chat.models import ChatMessage, Conversation, Sender
from .base import ConversationStore


class SQLiteConversationStore(ConversationStore):
    """SQLite-backed conversation store.

    One row per conversation plus one row per message; ``position``
    keeps insertion order.
    """

    def __init__(self, path: str | Path = "./greenmap_conversations.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

    async def _create_schema(self) -> None:
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                conversation_id TEXT PRIMARY KEY,
                updated_at TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                conversation_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                message_id TEXT NOT NULL,
                sender TEXT NOT NULL,
                text TEXT NOT NULL,
                is_typing INTEGER NOT NULL DEFAULT 0,
                timestamp TEXT NOT NULL,
                PRIMARY KEY (conversation_id, position),
                FOREIGN KEY (conversation_id)
                    REFERENCES conversations(conversation_id) ON DELETE CASCADE
            )
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLiteConversationStore is not connected")
        return self._connection

    async def save(self, conversation: Conversation) -> None:
        conn = self._require_connection()
        cid = conversation.conversation_id

        await conn.execute("""
            INSERT INTO conversations (conversation_id, updated_at)
            VALUES (?, ?)
            ON CONFLICT(conversation_id) DO UPDATE SET updated_at = excluded.updated_at
        """, (cid, datetime.now().isoformat()))

        await conn.execute("DELETE FROM messages WHERE conversation_id = ?", (cid,))
        await conn.executemany("""
            INSERT INTO messages
            (conversation_id, position, message_id, sender, text, is_typing, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, [
            (cid, position, msg.id, msg.sender.value, msg.text, int(msg.is_typing), msg.timestamp.isoformat())
            for position, msg in enumerate(conversation.messages)
        ])

        await conn.commit()

    async def get(self, conversation_id: str) -> Conversation | None:
        conn = self._require_connection()

        async with conn.execute(
            "SELECT 1 FROM conversations WHERE conversation_id = ?",
            (conversation_id,)
        ) as cursor:
            if await cursor.fetchone() is None:
                return None

        async with conn.execute(
            """
            SELECT message_id, sender, text, is_typing, timestamp
            FROM messages
            WHERE conversation_id = ?
            ORDER BY position ASC
            """,
            (conversation_id,)
        ) as cursor:
            rows = await cursor.fetchall()

        messages = [
            ChatMessage(
                id=message_id,
                sender=Sender(sender),
                text=text,
                is_typing=bool(is_typing),
                timestamp=datetime.fromisoformat(ts),
            )
            for message_id, sender, text, is_typing, ts in rows
        ]
        return Conversation(messages, conversation_id=conversation_id)

    async def list_ids(self) -> list[str]:
        conn = self._require_connection()
        async with conn.execute(
            "SELECT conversation_id FROM conversations ORDER BY updated_at DESC"
        ) as cursor:
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def delete(self, conversation_id: str) -> bool:
        conn = self._require_connection()
        cursor = await conn.execute(
            "DELETE FROM conversations WHERE conversation_id = ?",
            (conversation_id,)
        )
        await conn.commit()
        return cursor.rowcount > 0

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
