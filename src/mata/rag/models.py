"""Data models for documents, search results and chat index entries."""

import time
import uuid
from dataclasses import dataclass, field, fields, replace
from typing import Any, Literal

DocumentType = Literal["text", "markdown", "code"]
MessageRole = Literal["user", "assistant", "error"]

DOCUMENT_TYPES: tuple[str, ...] = ("text", "markdown", "code")


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class DocumentMetadata:
    """Descriptive fields attached to every chunk.

    Attributes:
        source: Where the text came from (filename, URL, ...)
        type: Which chunker produced the document
        title: Optional human-readable title of the source
        page_number: Optional page the chunk was taken from
        created_at: Creation time in epoch milliseconds
        chunk_index: Position of the chunk within its source
    """

    source: str = "unknown"
    type: DocumentType = "text"
    title: str | None = None
    page_number: int | None = None
    created_at: int = field(default_factory=now_ms)
    chunk_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "type": self.type,
            "title": self.title,
            "page_number": self.page_number,
            "created_at": self.created_at,
            "chunk_index": self.chunk_index,
        }


@dataclass(frozen=True)
class MetadataFilter:
    """Exact-match filter over DocumentMetadata.

    Only fields that are set take part in matching; all of them must match.
    """

    source: str | None = None
    type: DocumentType | None = None
    title: str | None = None
    page_number: int | None = None
    chunk_index: int | None = None
    created_at: int | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def matches(self, metadata: DocumentMetadata) -> bool:
        for f in fields(self):
            expected = getattr(self, f.name)
            if expected is not None and getattr(metadata, f.name) != expected:
                return False
        return True


@dataclass(frozen=True)
class Document:
    """A retrievable chunk of text.

    Documents are immutable; attaching an embedding returns a new instance
    with the same id.

    Attributes:
        content: Text of the chunk
        metadata: Source information for the chunk
        id: Unique identifier, generated at creation
        embedding: Vector for the content, present only after embedding succeeds
    """

    content: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    embedding: list[float] | None = None

    def with_embedding(self, embedding: list[float]) -> "Document":
        return replace(self, embedding=list(embedding))

    def to_dict(self, include_embedding: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "metadata": self.metadata.to_dict(),
        }
        if include_embedding:
            data["embedding"] = self.embedding
        return data


@dataclass(frozen=True)
class SearchResult:
    """A vector store hit."""

    document: Document
    score: float


@dataclass(frozen=True)
class EmbeddingOutcome:
    """Result of embedding one document in a batch.

    A successful outcome carries the embedded document; a failed one carries
    the original, embedding-less document and the error message.
    """

    document: Document
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class IngestionResult:
    """Result of adding one piece of content to the knowledge base.

    Attributes:
        outcomes: Per-chunk embedding outcomes, in chunk order
        stored: Number of chunks accepted by the vector store
    """

    outcomes: list[EmbeddingOutcome]
    stored: int = 0

    @property
    def documents(self) -> list[Document]:
        return [outcome.document for outcome in self.outcomes]

    @property
    def embedded(self) -> list[Document]:
        return [outcome.document for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> list[EmbeddingOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def rejected(self) -> int:
        """Chunks that embedded but were refused by the store, e.g. on a dimension mismatch."""
        return len(self.embedded) - self.stored


@dataclass(frozen=True)
class RAGResult:
    """Ranked retrieval result; documents and scores are parallel lists."""

    documents: list[Document] = field(default_factory=list)
    scores: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class ChatMessage:
    """A message committed to chat storage."""

    id: str
    chat_id: str
    role: str
    content: str
    timestamp: int
    model_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
            "model_id": self.model_id,
        }


@dataclass(frozen=True)
class IndexEntry:
    """A tokenized chat message held by the chat index."""

    id: str
    chat_id: str
    content: str
    timestamp: int
    role: MessageRole
    tokens: list[str]

    def to_message(self) -> ChatMessage:
        return ChatMessage(
            id=self.id,
            chat_id=self.chat_id,
            role=self.role,
            content=self.content,
            timestamp=self.timestamp,
        )


@dataclass(frozen=True)
class MessageSearchResult:
    """A chat index hit."""

    message: ChatMessage
    score: float
