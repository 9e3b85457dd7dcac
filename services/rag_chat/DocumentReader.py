"""Turns uploaded file bytes into plain text."""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from shared.errors import DocumentReadError

LOGGER = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


def is_pdf(data: bytes, source_name: str = "") -> bool:
    return data.startswith(PDF_MAGIC) or source_name.lower().endswith(".pdf")


def read_pdf_text(data: bytes) -> str:
    """Extract the text of every page, pages separated by a newline."""
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError, OSError) as exc:
        raise DocumentReadError(f"Could not read PDF: {exc}") from exc
    return "\n".join(pages)


def read_document_text(data: bytes, source_name: str = "") -> str:
    """Return the text content of an uploaded file.

    PDFs (by magic bytes or .pdf extension) are parsed with pypdf; anything
    else is decoded as UTF-8.

    Raises:
        DocumentReadError: If the bytes are neither a readable PDF nor UTF-8 text.
    """
    if is_pdf(data, source_name):
        text = read_pdf_text(data)
        LOGGER.debug("Extracted %d characters from PDF %r.", len(text), source_name)
        return text
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DocumentReadError(f"File {source_name!r} is neither a PDF nor UTF-8 text.") from exc
