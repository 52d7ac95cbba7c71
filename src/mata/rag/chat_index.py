"""TF-IDF full-text index over chat messages."""

import logging
import math
import re
import threading
from collections import Counter
from typing import Any

from mata.constants import DEFAULT_CHAT_SEARCH_LIMIT, INDEXABLE_ROLES
from mata.errors import ValidationError
from mata.rag.models import ChatMessage, IndexEntry, MessageSearchResult

logger = logging.getLogger(__name__)

NON_WORD_PATTERN = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    """Lowercase text, turn punctuation into spaces and split on whitespace."""
    return NON_WORD_PATTERN.sub(" ", text.lower()).split()


class ChatIndex:
    """Searchable index of chat messages.

    Document frequencies are computed from the live entries on every search
    instead of being kept in an inverted index. Each search therefore costs
    O(entries x query tokens), which is fine for a personal chat history
    but will not scale to large corpora.
    """

    def __init__(self) -> None:
        self._entries: dict[str, IndexEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def add_to_index(self, message: ChatMessage) -> IndexEntry:
        """Tokenize a message and store it, replacing any entry with the same id.

        Raises:
            ValidationError: If the message role cannot be indexed
        """
        if message.role not in INDEXABLE_ROLES:
            raise ValidationError(
                f"Cannot index message {message.id} with role '{message.role}'"
            )
        entry = IndexEntry(
            id=message.id,
            chat_id=message.chat_id,
            content=message.content,
            timestamp=message.timestamp,
            role=message.role,
            tokens=tokenize(message.content),
        )
        with self._lock:
            self._entries[message.id] = entry
        return entry

    def remove_from_index(self, message_id: str) -> bool:
        with self._lock:
            return self._entries.pop(message_id, None) is not None

    def clear_chat(self, chat_id: str) -> int:
        """Remove every entry of a chat. Returns the number removed."""
        with self._lock:
            doomed = [mid for mid, entry in self._entries.items() if entry.chat_id == chat_id]
            for message_id in doomed:
                del self._entries[message_id]
        logger.debug(f"Removed {len(doomed)} index entries for chat {chat_id}")
        return len(doomed)

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def search(
        self, query: str, limit: int = DEFAULT_CHAT_SEARCH_LIMIT
    ) -> list[MessageSearchResult]:
        """Rank messages against a query by TF-IDF.

        score(entry) = sum over query tokens of tf(token) * ln(N / df(token)),
        where tokens that no entry contains contribute nothing. A token found
        in every entry has idf 0, so an index holding a single entry never
        returns a hit.

        Returns:
            list[MessageSearchResult]: Entries scoring above zero, best first

        Raises:
            ValidationError: If limit is negative
        """
        if limit < 0:
            raise ValidationError(f"limit must not be negative, got {limit}")

        query_tokens = tokenize(query)
        with self._lock:
            entries = list(self._entries.values())

        corpus_size = len(entries)
        if not query_tokens or corpus_size == 0:
            return []

        token_sets = [set(entry.tokens) for entry in entries]
        idf = {}
        for token in set(query_tokens):
            df = sum(1 for tokens in token_sets if token in tokens)
            idf[token] = math.log(corpus_size / df) if df > 0 else 0.0

        results = []
        for entry in entries:
            tf = Counter(entry.tokens)
            score = sum(tf[token] * idf[token] for token in query_tokens)
            if score > 0:
                results.append(MessageSearchResult(message=entry.to_message(), score=score))

        results.sort(key=lambda result: result.score, reverse=True)
        return results[:limit]

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "total_documents": len(self._entries),
                "total_tokens": sum(len(entry.tokens) for entry in self._entries.values()),
            }
