"""Derivation of a document's terminal status from its embedding outcome."""

from typing import Optional

from ..document.models import DocumentStatus


def classify(chunk_count: int, error_count: int) -> DocumentStatus:
    """Terminal status for a run that produced ``chunk_count`` chunks.

    A run with no chunks has nothing left to embed and counts as completed.
    """
    if chunk_count < 0 or error_count < 0 or error_count > chunk_count:
        raise ValueError(f"Invalid counts: {error_count} errors for {chunk_count} chunks")

    if error_count == 0:
        return DocumentStatus.COMPLETED
    if error_count < chunk_count:
        return DocumentStatus.PARTIAL
    return DocumentStatus.FAILED


def describe_outcome(chunk_count: int, error_count: int) -> Optional[str]:
    """Processing error message for a run, ``None`` when every chunk was embedded."""
    if error_count == 0:
        return None
    return f"{chunk_count - error_count} of {chunk_count} pages embedded"
