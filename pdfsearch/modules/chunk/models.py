"""SQLAlchemy models for chunk entities."""

from datetime import datetime
from typing import List, Optional

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.config.settings import settings
from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Chunk(Base, TimestampMixin):
    """A bounded segment ("page") of a document's extracted text.

    Chunks are written only through an upsert keyed on
    ``(document_id, sequence_number)``, which makes ingestion retries
    idempotent. ``has_embedding`` is true exactly when ``embedding`` and
    ``embedding_generated_at`` are both set.
    """

    __tablename__ = "chunks"
    __table_args__ = (
        UniqueConstraint("document_id", "sequence_number", name="uq_chunks_document_sequence"),
        Index(
            "ix_chunks_embedding_hnsw",
            "embedding",
            postgresql_using="hnsw",
            postgresql_with={"m": 16, "ef_construction": 64},
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    document_id: Mapped[int] = mapped_column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), index=True)
    sequence_number: Mapped[int] = mapped_column(Integer)
    content: Mapped[str] = mapped_column(Text)
    content_preview: Mapped[str] = mapped_column(Text)
    word_count: Mapped[int] = mapped_column(Integer, default=0)
    keywords: Mapped[List[str]] = mapped_column(JSON, default_factory=list)
    has_embedding: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    embedding: Mapped[Optional[List[float]]] = mapped_column(
        Vector(settings.EMBEDDING_DIMENSION), default=None, nullable=True
    )
    embedding_generated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=None, nullable=True
    )
