"""Text extraction from uploaded files."""

from .pdf import extract_text, extract_text_sync, is_valid_pdf

__all__ = ["extract_text", "extract_text_sync", "is_valid_pdf"]
