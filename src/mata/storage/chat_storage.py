"""Read access to persisted chat transcripts, used to rebuild the chat index."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol

from mata.errors import ValidationError
from mata.rag.chat_index import ChatIndex
from mata.rag.models import ChatMessage

logger = logging.getLogger(__name__)


class ChatStorage(Protocol):
    """Source of committed chat messages."""

    def list_chats(self) -> list[str]:
        """Return the ids of all stored chats."""
        ...

    def list_all_messages(self, chat_id: str) -> list[ChatMessage]:
        """Return every message of a chat, oldest first."""
        ...


class SqliteChatStorage:
    """Read-only view of the desktop app's chats.db.

    Expects the app schema: chats(id, title, modelId, lastUpdated, createdAt)
    and messages(id, chatId, role, content, timestamp, modelId).
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

        if not self.db_path.exists():
            raise FileNotFoundError(f"Chat database not found at {self.db_path}")

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def list_chats(self) -> list[str]:
        with self.get_connection() as conn:
            rows = conn.execute("SELECT id FROM chats ORDER BY createdAt").fetchall()
        return [row["id"] for row in rows]

    def list_all_messages(self, chat_id: str) -> list[ChatMessage]:
        with self.get_connection() as conn:
            rows = conn.execute(
                "SELECT id, chatId, role, content, timestamp, modelId "
                "FROM messages WHERE chatId = ? ORDER BY timestamp",
                (chat_id,),
            ).fetchall()
        return [
            ChatMessage(
                id=row["id"],
                chat_id=row["chatId"],
                role=row["role"],
                content=row["content"],
                timestamp=row["timestamp"],
                model_id=row["modelId"],
            )
            for row in rows
        ]


def rebuild_index(index: ChatIndex, storage: ChatStorage) -> int:
    """Replace the index contents with every message in storage.

    Messages whose role cannot be indexed are skipped.

    Returns:
        int: Number of messages indexed
    """
    index.clear_all()
    indexed = 0
    for chat_id in storage.list_chats():
        for message in storage.list_all_messages(chat_id):
            try:
                index.add_to_index(message)
            except ValidationError as e:
                logger.debug(f"Skipping message: {e}")
                continue
            indexed += 1

    logger.info(f"📚 Rebuilt chat index with {indexed} messages")
    return indexed
