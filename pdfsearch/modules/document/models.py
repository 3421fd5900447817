"""SQLAlchemy models for document entities."""

from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class DocumentStatus(str, Enum):
    """Processing state of a document.

    ``processing`` is the only non-terminal state; a run ends in exactly one
    of the other three.
    """

    PROCESSING = "processing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


class Document(Base, TimestampMixin):
    """An uploaded PDF and the outcome of its latest ingestion run.

    ``status`` and ``processing_error`` are only written by the ingestion
    pipeline; ``total_pages`` is the number of chunks the last run produced.
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    title: Mapped[str] = mapped_column(String(255), index=True)
    original_filename: Mapped[str] = mapped_column(String(255))
    file_path: Mapped[str] = mapped_column(String(1024))
    file_size: Mapped[int] = mapped_column(BigInteger)
    mime_type: Mapped[str] = mapped_column(String(100), default="application/pdf")
    total_pages: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default=DocumentStatus.PROCESSING.value, index=True)
    processing_error: Mapped[Optional[str]] = mapped_column(Text, default=None, nullable=True)
    extra_metadata: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, default=None)
