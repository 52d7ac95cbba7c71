"""Turn files on disk into add_document payloads."""

import logging
from pathlib import Path
from typing import Any

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {".md", ".markdown"}
TEXT_EXTENSIONS = {".txt", ".text", ".rst", ".log"}
CODE_EXTENSIONS = {
    ".py", ".js", ".jsx", ".ts", ".tsx", ".java", ".go", ".rs",
    ".c", ".h", ".cpp", ".hpp", ".cs", ".rb", ".php", ".swift", ".kt", ".sh",
}
PDF_EXTENSIONS = {".pdf"}

SUPPORTED_EXTENSIONS = MARKDOWN_EXTENSIONS | TEXT_EXTENSIONS | CODE_EXTENSIONS | PDF_EXTENSIONS


def classify_file(path: Path) -> str | None:
    """Map a file to the document type used to chunk it.

    Returns:
        "markdown", "code", "text" or "pdf"; None for unsupported files
    """
    suffix = path.suffix.lower()
    if suffix in MARKDOWN_EXTENSIONS:
        return "markdown"
    if suffix in CODE_EXTENSIONS:
        return "code"
    if suffix in TEXT_EXTENSIONS:
        return "text"
    if suffix in PDF_EXTENSIONS:
        return "pdf"
    return None


def extract_pages_from_pdf(pdf_path: Path) -> list[str]:
    """Extract the text of every page of a PDF file.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        list[str]: Page texts in page order
    """
    doc = fitz.open(pdf_path)
    try:
        return [page.get_text() for page in doc]
    finally:
        doc.close()


def load_document_payloads(path: Path, source: str | None = None) -> list[dict[str, Any]]:
    """Read a file and build the payloads to send to the add_document tool.

    PDFs produce one "text" payload per non-empty page, with page_number set
    (1-based). Other files produce a single payload.

    Args:
        path: File to read
        source: Source name stored with the chunks (default: the file name)

    Returns:
        list[dict]: Payloads with content, source, doc_type, title and page_number

    Raises:
        ValueError: If the file type is not supported
    """
    kind = classify_file(path)
    if kind is None:
        raise ValueError(f"Unsupported file type: {path.suffix or path.name}")

    source = source or path.name
    title = path.stem

    if kind == "pdf":
        pages = extract_pages_from_pdf(path)
        payloads = [
            {
                "content": text,
                "source": source,
                "doc_type": "text",
                "title": title,
                "page_number": number,
            }
            for number, text in enumerate(pages, start=1)
            if text.strip()
        ]
        logger.info(f"📄 Extracted {len(payloads)} pages from {path.name}")
        return payloads

    content = path.read_text(encoding="utf-8", errors="replace")
    return [
        {
            "content": content,
            "source": source,
            "doc_type": kind,
            "title": title,
            "page_number": None,
        }
    ]
