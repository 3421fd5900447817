"""PostgreSQL + pgvector implementation of the storage interfaces."""

from datetime import UTC, datetime
from typing import Any, List, Optional

from sqlalchemy import Text, cast, delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...modules.chunk.models import Chunk
from ...modules.document.models import Document, DocumentStatus
from ..logging import get_logger
from .base import ChunkDraft, ChunkMatch, CorpusStats, DocumentRecord, DocumentStore, VectorStore

logger = get_logger()


def escape_like(value: str) -> str:
    """Escape ``%``, ``_`` and ``\\`` so ``value`` matches literally in LIKE."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLAlchemyStore(VectorStore, DocumentStore):
    """Store backed by the ``documents`` and ``chunks`` tables.

    Each operation opens its own session from ``session_factory`` and commits
    before returning, so background ingestion runs never share a session with
    HTTP requests or with each other.

    Similarity uses pgvector's cosine distance operator (``<=>``), which the
    HNSW ``vector_cosine_ops`` index on ``chunks.embedding`` serves.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_document(self, document_id: int) -> Optional[DocumentRecord]:
        async with self._session_factory() as session:
            document = await session.get(Document, document_id)
            if document is None:
                return None
            return DocumentRecord(
                id=document.id,
                title=document.title,
                original_filename=document.original_filename,
                file_path=document.file_path,
                status=document.status,
                total_pages=document.total_pages,
                processing_error=document.processing_error,
            )

    async def update_document_status(
        self,
        document_id: int,
        status: str,
        error: Optional[str] = None,
        total_pages: Optional[int] = None,
    ) -> None:
        values: dict[str, Any] = {
            "status": status,
            "processing_error": error,
            "updated_at": datetime.now(UTC),
        }
        if total_pages is not None:
            values["total_pages"] = total_pages

        async with self._session_factory() as session:
            await session.execute(update(Document).where(Document.id == document_id).values(**values))
            await session.commit()

    async def upsert_chunk(self, draft: ChunkDraft) -> int:
        now = datetime.now(UTC)
        content_values = {
            "content": draft.content,
            "content_preview": draft.content_preview,
            "word_count": draft.word_count,
            "keywords": draft.keywords,
            "has_embedding": False,
            "embedding": None,
            "embedding_generated_at": None,
        }
        stmt = pg_insert(Chunk).values(
            document_id=draft.document_id,
            sequence_number=draft.sequence_number,
            created_at=now,
            updated_at=now,
            **content_values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Chunk.document_id, Chunk.sequence_number],
            set_={**content_values, "updated_at": now},
        ).returning(Chunk.id)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            chunk_id = result.scalar_one()
            await session.commit()
        return chunk_id

    async def store_embedding(self, chunk_id: int, vector: List[float], generated_at: datetime) -> None:
        stmt = (
            update(Chunk)
            .where(Chunk.id == chunk_id)
            .values(
                embedding=vector,
                has_embedding=True,
                embedding_generated_at=generated_at,
                updated_at=datetime.now(UTC),
            )
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()

    async def prune_chunks(self, document_id: int, keep: int) -> int:
        stmt = delete(Chunk).where(Chunk.document_id == document_id, Chunk.sequence_number > keep)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
        removed = result.rowcount or 0
        if removed:
            logger.debug(f"Pruned {removed} stale chunks of document {document_id} beyond sequence {keep}")
        return removed

    async def nearest(self, vector: List[float], limit: int, threshold: float) -> List[ChunkMatch]:
        distance = Chunk.embedding.cosine_distance(vector)
        stmt = (
            select(Chunk, Document.title, Document.original_filename, distance.label("distance"))
            .join(Document, Document.id == Chunk.document_id)
            .where(Chunk.has_embedding.is_(True))
            .where(1 - distance > threshold)
            .order_by(distance)
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()

        return [self._to_match(row.Chunk, row.title, row.original_filename, 1 - float(row.distance)) for row in rows]

    async def lexical(self, query: str, limit: int) -> List[ChunkMatch]:
        pattern = f"%{escape_like(query)}%"
        stmt = (
            select(Chunk, Document.title, Document.original_filename)
            .join(Document, Document.id == Chunk.document_id)
            .where(
                or_(
                    Chunk.content.ilike(pattern, escape="\\"),
                    cast(Chunk.keywords, Text).ilike(pattern, escape="\\"),
                )
            )
            .order_by(Chunk.created_at.desc(), Chunk.id.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()

        return [self._to_match(row.Chunk, row.title, row.original_filename) for row in rows]

    async def list_sequence_numbers(self, document_id: int) -> List[int]:
        stmt = select(Chunk.sequence_number).where(Chunk.document_id == document_id).order_by(Chunk.sequence_number)
        async with self._session_factory() as session:
            return list((await session.execute(stmt)).scalars().all())

    async def stats(self) -> CorpusStats:
        document_stmt = select(
            func.count(Document.id),
            func.count(Document.id).filter(Document.status == DocumentStatus.PROCESSING.value),
            func.count(Document.id).filter(Document.status == DocumentStatus.FAILED.value),
        )
        chunk_stmt = select(
            func.count(Chunk.id),
            func.count(Chunk.id).filter(Chunk.has_embedding.is_(True)),
            func.coalesce(func.sum(Chunk.word_count), 0),
            func.coalesce(func.avg(Chunk.word_count), 0),
        )
        async with self._session_factory() as session:
            total_documents, processing, failed = (await session.execute(document_stmt)).one()
            total_pages, embedded, total_words, avg_words = (await session.execute(chunk_stmt)).one()

        return CorpusStats(
            total_documents=total_documents,
            total_pages=total_pages,
            pages_with_embeddings=embedded,
            processing_documents=processing,
            failed_documents=failed,
            total_words=int(total_words),
            avg_words_per_page=round(float(avg_words), 2),
        )

    @staticmethod
    def _to_match(chunk: Chunk, title: str, filename: str, similarity: Optional[float] = None) -> ChunkMatch:
        return ChunkMatch(
            chunk_id=chunk.id,
            document_id=chunk.document_id,
            document_title=title,
            document_filename=filename,
            sequence_number=chunk.sequence_number,
            content=chunk.content,
            content_preview=chunk.content_preview,
            word_count=chunk.word_count,
            keywords=list(chunk.keywords or []),
            created_at=chunk.created_at,
            similarity=similarity,
        )
