"""Document chunking for text, markdown and source code."""

import logging
import re

from mata.config import ProcessingOptions
from mata.rag.models import Document, DocumentMetadata, DocumentType

logger = logging.getLogger(__name__)

# A sentence is a run of non-terminators followed by terminators, or the
# unterminated tail of the text.
SENTENCE_PATTERN = re.compile(r"[^.!?]+(?:[.!?]+|$)")
BLANK_LINE_PATTERN = re.compile(r"\n\s*\n")

MARKDOWN_CLEANUP = (
    (re.compile(r"```[\s\S]*?```"), ""),  # fenced code blocks
    (re.compile(r"`.*?`"), ""),  # inline code
    (re.compile(r"\[.*?\]\(.*?\)"), ""),  # links
    (re.compile(r"[#*_~]"), ""),  # emphasis and heading markers
)

# Checked in order; the first matching language wins.
LANGUAGE_SIGNATURES: tuple[tuple[str, re.Pattern], ...] = (
    (
        "python",
        re.compile(
            r"^\s*def \w+\(.*\)\s*(->\s*[^:]+)?:"
            r"|^\s*from [\w.]+ import "
            r"|if __name__ == ['\"]__main__['\"]",
            re.MULTILINE,
        ),
    ),
    (
        "typescript",
        re.compile(
            r"\binterface \w+\s*\{"
            r"|:\s*(string|number|boolean)\b"
            r"|^\s*(export )?type \w+\s*=",
            re.MULTILINE,
        ),
    ),
    (
        "javascript",
        re.compile(r"\b(const|let|var) \w+\s*=|\bfunction\s*\w*\s*\(|=>|\brequire\("),
    ),
    (
        "java",
        re.compile(r"\bpublic (static )?(class|void|final)\b|System\.out\."),
    ),
    (
        "rust",
        re.compile(r"\bfn \w+\s*[(<]|\blet mut\b|\bimpl\b[^{]*\{"),
    ),
    (
        "go",
        re.compile(r"\bfunc (\(\w+ \*?\w+\) )?\w+\(|^package \w+", re.MULTILINE),
    ),
)


def split_sentences(text: str) -> list[str]:
    """Split text on '.', '!' and '?' terminators.

    Returns the whole text as a single sentence when it has no terminator.
    Empty or whitespace-only text yields no sentences.
    """
    if not text.strip():
        return []
    sentences = [s.strip() for s in SENTENCE_PATTERN.findall(text)]
    sentences = [s for s in sentences if s]
    return sentences or [text.strip()]


def split_into_chunks(text: str, chunk_size: int, overlap: int) -> list[str]:
    """Greedily pack sentences into chunks of at most chunk_size characters.

    When the next sentence does not fit, the current chunk is closed and the
    next one starts with the last `overlap` characters of the closed chunk.
    Sentences are never split, so a single sentence longer than chunk_size
    becomes an oversized chunk of its own.
    """
    chunks: list[str] = []
    current = ""

    for sentence in split_sentences(text):
        if current and len(current) + len(sentence) > chunk_size:
            chunks.append(current.strip())
            current = sentence
            if overlap > 0:
                current = f"{chunks[-1][-overlap:]} {sentence}"
        else:
            current = f"{current} {sentence}" if current else sentence

    if current.strip():
        chunks.append(current.strip())

    return chunks


class DocumentProcessor:
    """Turns raw content into Documents ready for embedding.

    Prose (text and markdown) is split into overlapping, sentence-aligned
    chunks. Source code is split on blank lines, one block per Document.
    """

    def __init__(self, options: ProcessingOptions | None = None) -> None:
        self.options = options or ProcessingOptions()

    def _build_metadata(
        self,
        metadata: DocumentMetadata | None,
        doc_type: DocumentType,
        chunk_index: int,
        options: ProcessingOptions,
    ) -> DocumentMetadata:
        base = metadata or DocumentMetadata()
        return DocumentMetadata(
            source=base.source or "unknown",
            type=doc_type,
            title=base.title if options.include_metadata else None,
            page_number=base.page_number if options.include_metadata else None,
            chunk_index=chunk_index,
        )

    def process_text(
        self,
        text: str,
        metadata: DocumentMetadata | None = None,
        options: ProcessingOptions | None = None,
    ) -> list[Document]:
        """Split prose into sentence-aligned, overlapping chunks.

        Args:
            text: The text to chunk
            metadata: Source metadata; its type is kept (default "text")
            options: Chunking options (default: the processor's options)

        Returns:
            list[Document]: One Document per chunk, chunk_index starting at 0
        """
        opts = options or self.options
        doc_type: DocumentType = metadata.type if metadata else "text"
        chunks = split_into_chunks(text, opts.chunk_size, opts.chunk_overlap)
        logger.debug(f"Split {len(text)} characters into {len(chunks)} {doc_type} chunks")

        return [
            Document(content=chunk, metadata=self._build_metadata(metadata, doc_type, i, opts))
            for i, chunk in enumerate(chunks)
        ]

    def process_markdown(
        self,
        markdown: str,
        metadata: DocumentMetadata | None = None,
        options: ProcessingOptions | None = None,
    ) -> list[Document]:
        """Strip markdown syntax, then chunk the remaining prose as type "markdown"."""
        clean_text = markdown
        for pattern, replacement in MARKDOWN_CLEANUP:
            clean_text = pattern.sub(replacement, clean_text)

        base = metadata or DocumentMetadata()
        markdown_metadata = DocumentMetadata(
            source=base.source,
            type="markdown",
            title=base.title,
            page_number=base.page_number,
        )
        return self.process_text(clean_text, markdown_metadata, options)

    def process_source_code(
        self,
        code: str,
        metadata: DocumentMetadata | None = None,
        options: ProcessingOptions | None = None,
    ) -> list[Document]:
        """Split code on blank lines into one Document per block.

        Blocks are not size-bounded and carry no overlap.
        """
        opts = options or self.options
        blocks = [block.strip() for block in BLANK_LINE_PATTERN.split(code)]
        blocks = [block for block in blocks if block]
        logger.debug(f"Split source code into {len(blocks)} blocks")

        return [
            Document(content=block, metadata=self._build_metadata(metadata, "code", i, opts))
            for i, block in enumerate(blocks)
        ]

    def detect_language(self, text: str) -> str:
        """Best-effort guess of the programming language of text.

        Returns:
            str: A language name, or "text" when no signature matches
        """
        for language, pattern in LANGUAGE_SIGNATURES:
            if pattern.search(text):
                return language
        return "text"
