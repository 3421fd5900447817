"""Storage capability interfaces used by ingestion and retrieval."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class ChunkDraft:
    """Content of a chunk about to be upserted, before any embedding."""

    document_id: int
    sequence_number: int
    content: str
    content_preview: str
    word_count: int
    keywords: List[str] = field(default_factory=list)


@dataclass
class ChunkMatch:
    """A chunk returned by a store query, joined with its document.

    ``similarity`` is ``1 - cosine distance`` for nearest-neighbour queries
    and ``None`` for lexical ones.
    """

    chunk_id: int
    document_id: int
    document_title: str
    document_filename: str
    sequence_number: int
    content: str
    content_preview: str
    word_count: int
    keywords: List[str]
    created_at: datetime
    similarity: Optional[float] = None


@dataclass
class DocumentRecord:
    """The document fields the ingestion pipeline needs."""

    id: int
    title: str
    original_filename: str
    file_path: str
    status: str
    total_pages: int = 0
    processing_error: Optional[str] = None


@dataclass
class CorpusStats:
    """Aggregate counts over all documents and chunks."""

    total_documents: int = 0
    total_pages: int = 0
    pages_with_embeddings: int = 0
    processing_documents: int = 0
    failed_documents: int = 0
    total_words: int = 0
    avg_words_per_page: float = 0.0

    @property
    def processing_progress(self) -> float:
        """Percentage of chunks that have an embedding, rounded to 2 decimals."""
        if self.total_pages == 0:
            return 0.0
        return round(self.pages_with_embeddings / self.total_pages * 100, 2)


class VectorStore(ABC):
    """Chunk persistence plus the similarity and lexical queries over it.

    ``upsert_chunk`` is the only way chunks are created or rewritten, keyed
    by ``(document_id, sequence_number)``.
    """

    @abstractmethod
    async def upsert_chunk(self, draft: ChunkDraft) -> int:
        """Insert or overwrite the chunk for the draft's key and return its id.

        Overwriting clears any stored embedding, leaving ``has_embedding``
        false until :meth:`store_embedding` runs again.
        """
        pass

    @abstractmethod
    async def store_embedding(self, chunk_id: int, vector: List[float], generated_at: datetime) -> None:
        """Attach a vector to a chunk and mark it as embedded."""
        pass

    @abstractmethod
    async def prune_chunks(self, document_id: int, keep: int) -> int:
        """Delete the document's chunks numbered above ``keep``; return how many."""
        pass

    @abstractmethod
    async def nearest(self, vector: List[float], limit: int, threshold: float) -> List[ChunkMatch]:
        """Embedded chunks with similarity above ``threshold``, closest first."""
        pass

    @abstractmethod
    async def lexical(self, query: str, limit: int) -> List[ChunkMatch]:
        """Chunks whose content or keywords contain ``query`` (case-insensitive), newest first."""
        pass

    @abstractmethod
    async def list_sequence_numbers(self, document_id: int) -> List[int]:
        """Sequence numbers stored for a document, ascending."""
        pass

    @abstractmethod
    async def stats(self) -> CorpusStats:
        """Aggregate document and chunk counts."""
        pass


class DocumentStore(ABC):
    """Document lookups and status transitions for the ingestion pipeline."""

    @abstractmethod
    async def get_document(self, document_id: int) -> Optional[DocumentRecord]:
        pass

    @abstractmethod
    async def update_document_status(
        self,
        document_id: int,
        status: str,
        error: Optional[str] = None,
        total_pages: Optional[int] = None,
    ) -> None:
        """Set status and error together, and the chunk count when given."""
        pass
