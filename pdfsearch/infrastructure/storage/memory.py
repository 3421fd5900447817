"""In-memory store with brute-force cosine similarity.

Implements both storage interfaces over plain dictionaries. Vectors are kept
in their bracketed text encoding, as a text column would hold them. Search
compares the query against every embedded chunk, so results are exact; it is
meant for tests and small embedded deployments, not large corpora.
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Dict, List, Optional, Tuple

from ...modules.document.models import DocumentStatus
from ..embedding.vectors import cosine_similarity, format_vector, parse_vector
from .base import ChunkDraft, ChunkMatch, CorpusStats, DocumentRecord, DocumentStore, VectorStore


@dataclass
class _StoredChunk:
    id: int
    draft: ChunkDraft
    created_at: datetime
    embedding: Optional[str] = None
    embedding_generated_at: Optional[datetime] = None

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None and self.embedding_generated_at is not None


@dataclass
class _StoredDocument:
    record: DocumentRecord
    chunk_ids: Dict[int, int] = field(default_factory=dict)


class InMemoryStore(VectorStore, DocumentStore):
    """Dictionary-backed :class:`VectorStore` and :class:`DocumentStore`."""

    def __init__(self):
        self._documents: Dict[int, _StoredDocument] = {}
        self._chunks: Dict[int, _StoredChunk] = {}
        self._document_ids = itertools.count(1)
        self._chunk_ids = itertools.count(1)
        self._lock = asyncio.Lock()

    def add_document(
        self,
        title: str,
        file_path: str = "",
        original_filename: Optional[str] = None,
        status: str = DocumentStatus.PROCESSING.value,
    ) -> DocumentRecord:
        """Register a document and return its record."""
        record = DocumentRecord(
            id=next(self._document_ids),
            title=title,
            original_filename=original_filename or f"{title}.pdf",
            file_path=file_path,
            status=status,
        )
        self._documents[record.id] = _StoredDocument(record=record)
        return record

    def get_chunk_embedding(self, chunk_id: int) -> Optional[List[float]]:
        encoded = self._chunks[chunk_id].embedding
        return parse_vector(encoded) if encoded is not None else None

    async def get_document(self, document_id: int) -> Optional[DocumentRecord]:
        stored = self._documents.get(document_id)
        return stored.record if stored else None

    async def update_document_status(
        self,
        document_id: int,
        status: str,
        error: Optional[str] = None,
        total_pages: Optional[int] = None,
    ) -> None:
        stored = self._documents.get(document_id)
        if stored is None:
            return
        stored.record.status = status
        stored.record.processing_error = error
        if total_pages is not None:
            stored.record.total_pages = total_pages

    async def upsert_chunk(self, draft: ChunkDraft) -> int:
        async with self._lock:
            document = self._documents[draft.document_id]
            chunk_id = document.chunk_ids.get(draft.sequence_number)
            if chunk_id is None:
                chunk_id = next(self._chunk_ids)
                document.chunk_ids[draft.sequence_number] = chunk_id
                self._chunks[chunk_id] = _StoredChunk(id=chunk_id, draft=draft, created_at=datetime.now(UTC))
            else:
                stored = self._chunks[chunk_id]
                stored.draft = draft
                stored.embedding = None
                stored.embedding_generated_at = None
            return chunk_id

    async def store_embedding(self, chunk_id: int, vector: List[float], generated_at: datetime) -> None:
        stored = self._chunks[chunk_id]
        stored.embedding = format_vector(vector)
        stored.embedding_generated_at = generated_at

    async def prune_chunks(self, document_id: int, keep: int) -> int:
        async with self._lock:
            document = self._documents[document_id]
            stale = [seq for seq in document.chunk_ids if seq > keep]
            for seq in stale:
                del self._chunks[document.chunk_ids.pop(seq)]
            return len(stale)

    async def nearest(self, vector: List[float], limit: int, threshold: float) -> List[ChunkMatch]:
        scored: List[Tuple[float, _StoredChunk]] = []
        for stored in self._chunks.values():
            if not stored.has_embedding:
                continue
            similarity = cosine_similarity(vector, parse_vector(stored.embedding or "[]"))
            if similarity > threshold:
                scored.append((similarity, stored))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [self._to_match(stored, similarity) for similarity, stored in scored[:limit]]

    async def lexical(self, query: str, limit: int) -> List[ChunkMatch]:
        needle = query.lower()
        matches = [
            stored
            for stored in self._chunks.values()
            if needle in stored.draft.content.lower() or any(needle in keyword for keyword in stored.draft.keywords)
        ]
        matches.sort(key=lambda stored: (stored.created_at, stored.id), reverse=True)
        return [self._to_match(stored) for stored in matches[:limit]]

    async def list_sequence_numbers(self, document_id: int) -> List[int]:
        stored = self._documents.get(document_id)
        return sorted(stored.chunk_ids) if stored else []

    async def stats(self) -> CorpusStats:
        chunks = list(self._chunks.values())
        total_words = sum(stored.draft.word_count for stored in chunks)
        statuses = [stored.record.status for stored in self._documents.values()]
        return CorpusStats(
            total_documents=len(self._documents),
            total_pages=len(chunks),
            pages_with_embeddings=sum(1 for stored in chunks if stored.has_embedding),
            processing_documents=statuses.count(DocumentStatus.PROCESSING.value),
            failed_documents=statuses.count(DocumentStatus.FAILED.value),
            total_words=total_words,
            avg_words_per_page=round(total_words / len(chunks), 2) if chunks else 0.0,
        )

    def _to_match(self, stored: _StoredChunk, similarity: Optional[float] = None) -> ChunkMatch:
        document = self._documents[stored.draft.document_id].record
        return ChunkMatch(
            chunk_id=stored.id,
            document_id=document.id,
            document_title=document.title,
            document_filename=document.original_filename,
            sequence_number=stored.draft.sequence_number,
            content=stored.draft.content,
            content_preview=stored.draft.content_preview,
            word_count=stored.draft.word_count,
            keywords=list(stored.draft.keywords),
            created_at=stored.created_at,
            similarity=similarity,
        )
