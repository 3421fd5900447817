"""Ingestion pipeline: extraction, segmentation, per-chunk embedding, status."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Awaitable, Callable, List, Optional

import anyio

from ...infrastructure.embedding import EmbeddingClient
from ...infrastructure.extraction import extract_text
from ...infrastructure.jobs import DocumentLockRegistry
from ...infrastructure.logging import document_context, get_logger
from ...infrastructure.storage import ChunkDraft, DocumentStore, VectorStore
from ..common.exceptions import DocumentNotFoundError, ExtractionError
from ..document.models import DocumentStatus
from .keywords import extract_keywords
from .segmenter import TextSegmenter
from .status import classify, describe_outcome

logger = get_logger()

Extractor = Callable[[str], Awaitable[str]]

TERMINAL_FAILURE_PREFIX = "Processing failed after multiple attempts"


@dataclass
class IngestionReport:
    """Summary of one completed ingestion run."""

    document_id: int
    status: DocumentStatus
    chunk_count: int
    error_count: int
    pruned_count: int = 0

    @property
    def embedded_count(self) -> int:
        return self.chunk_count - self.error_count


class IngestionPipeline:
    """Turns a stored PDF into embedded chunks and a terminal document status.

    A run holds the document's lock from start to finish and walks through:

    1. load the document and check its file exists
    2. extract the raw text
    3. segment it, then for each segment upsert the chunk and embed it
    4. prune chunks left over from a longer previous run
    5. classify the run and write status, error and chunk count together

    Embedding failures are counted per chunk and never abort the run. Any
    other exception marks the document ``failed`` and is re-raised for the
    job runner to retry. Chunk writes go through the store's upsert keyed on
    ``(document_id, sequence_number)``, so repeating a run is safe.

    With ``concurrency`` above 1, up to that many chunks are upserted and
    embedded at once. If one chunk write raises, the remaining chunk tasks are
    cancelled before the lock is released.
    """

    def __init__(
        self,
        documents: DocumentStore,
        store: VectorStore,
        embedding_client: EmbeddingClient,
        lock_registry: DocumentLockRegistry,
        extractor: Extractor = extract_text,
        segmenter: Optional[TextSegmenter] = None,
        preview_chars: int = 200,
        keyword_limit: int = 20,
        concurrency: int = 1,
    ):
        self.documents = documents
        self.store = store
        self.embedding_client = embedding_client
        self.lock_registry = lock_registry
        self.extractor = extractor
        self.segmenter = segmenter or TextSegmenter()
        self.preview_chars = preview_chars
        self.keyword_limit = keyword_limit
        self.concurrency = max(1, concurrency)

    async def run(self, document_id: int) -> IngestionReport:
        """Process one document end to end.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            ExtractionError: If the file is missing or unreadable.
        """
        async with self.lock_registry.hold(document_id):
            with document_context(document_id):
                try:
                    return await self._run_locked(document_id)
                except Exception as exc:
                    logger.error(
                        f"Ingestion of document {document_id} failed: {exc}",
                        extra={"error_type": type(exc).__name__},
                    )
                    await self.documents.update_document_status(
                        document_id, DocumentStatus.FAILED.value, error=str(exc)
                    )
                    raise

    async def handle_terminal_failure(self, document_id: int, exc: BaseException) -> None:
        """Mark the document failed once every retry has been used up."""
        with document_context(document_id):
            logger.error(
                f"Ingestion of document {document_id} exhausted its retries",
                extra={"error_type": type(exc).__name__},
            )
            await self.documents.update_document_status(
                document_id, DocumentStatus.FAILED.value, error=f"{TERMINAL_FAILURE_PREFIX}: {exc}"
            )

    async def _run_locked(self, document_id: int) -> IngestionReport:
        document = await self.documents.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        logger.info(f"Ingestion started for '{document.title}'", extra={"file": document.original_filename})
        await self.documents.update_document_status(document_id, DocumentStatus.PROCESSING.value)

        if not await anyio.Path(document.file_path).is_file():
            raise ExtractionError(f"File not found: {document.file_path}")

        raw_text = await self.extractor(document.file_path)
        segments = self.segmenter.segment(raw_text)
        error_count = await self._process_segments(document_id, segments)
        pruned = await self.store.prune_chunks(document_id, keep=len(segments))

        status = classify(len(segments), error_count)
        await self.documents.update_document_status(
            document_id,
            status.value,
            error=describe_outcome(len(segments), error_count),
            total_pages=len(segments),
        )

        logger.info(
            f"Ingestion finished with status {status.value}",
            extra={"chunks": len(segments), "embedding_errors": error_count, "pruned": pruned},
        )
        return IngestionReport(
            document_id=document_id,
            status=status,
            chunk_count=len(segments),
            error_count=error_count,
            pruned_count=pruned,
        )

    async def _process_segments(self, document_id: int, segments: List[str]) -> int:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(sequence_number: int, content: str) -> bool:
            async with semaphore:
                return await self._process_segment(document_id, sequence_number, content)

        # A failing chunk cancels its siblings and waits for them, so no write
        # outlives the run that holds the document lock.
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(bounded(sequence_number, content))
                    for sequence_number, content in enumerate(segments, start=1)
                ]
        except ExceptionGroup as errors:
            raise errors.exceptions[0] from None

        return [task.result() for task in tasks].count(False)

    async def _process_segment(self, document_id: int, sequence_number: int, content: str) -> bool:
        """Upsert one chunk and try to embed it; return whether it was embedded."""
        chunk_id = await self.store.upsert_chunk(
            ChunkDraft(
                document_id=document_id,
                sequence_number=sequence_number,
                content=content,
                content_preview=content[: self.preview_chars],
                word_count=len(content.split()),
                keywords=extract_keywords(content, limit=self.keyword_limit),
            )
        )

        result = await self.embedding_client.embed(content)
        if not result.success:
            logger.warning(
                f"Embedding failed for page {sequence_number}: {result.error}",
                extra={"sequence_number": sequence_number, "error_type": type(result.error).__name__},
            )
            return False

        await self.store.store_embedding(chunk_id, result.unwrap(), datetime.now(UTC))
        return True
