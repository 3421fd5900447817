"""PDF text extraction with PyMuPDF."""

import asyncio
from pathlib import Path
from typing import Optional, Union

import fitz  # PyMuPDF

from ...modules.common.exceptions import ExtractionError
from ..logging import get_logger

logger = get_logger()

PDF_MIME_TYPES = frozenset({"application/pdf", "application/x-pdf"})
PDF_MAGIC = b"%PDF-"

# Two blank lines: the segmenter treats this as a block boundary.
PAGE_SEPARATOR = "\n\n\n"


def is_valid_pdf(content_type: Optional[str], header: bytes) -> bool:
    """Check the declared MIME type and the ``%PDF-`` signature."""
    if content_type is not None and content_type.split(";")[0].strip().lower() not in PDF_MIME_TYPES:
        return False
    return header.lstrip()[: len(PDF_MAGIC)] == PDF_MAGIC


def extract_text_sync(path: Union[str, Path]) -> str:
    """Extract the text of every page, pages separated by a paragraph gap.

    Raises:
        ExtractionError: If the file is missing or cannot be parsed as a PDF.
    """
    pdf_path = Path(path)
    if not pdf_path.is_file():
        raise ExtractionError(f"File not found: {pdf_path}")

    try:
        with fitz.open(pdf_path) as doc:
            pages = [page.get_text("text") for page in doc]
    except Exception as exc:
        raise ExtractionError(f"Could not read PDF {pdf_path.name}: {exc}") from exc

    logger.debug("Extracted PDF text", extra={"file": pdf_path.name, "pdf_pages": len(pages)})
    return PAGE_SEPARATOR.join(pages)


async def extract_text(path: Union[str, Path]) -> str:
    """Async wrapper running :func:`extract_text_sync` in a worker thread."""
    return await asyncio.to_thread(extract_text_sync, path)
