"""Search service shaping engine results for API consumers."""

import time

from ...infrastructure.logging import get_logger
from ..common.schemas import OperationResult
from .engine import RetrievalEngine, ScoredResult, SearchMode
from .highlight import highlight_terms
from .schemas import SearchMetadata, SearchRequest, SearchResponse, SearchResultRead, StatsRead

logger = get_logger()


class SearchService:
    """Runs searches and statistics through a :class:`RetrievalEngine`.

    Engine errors propagate; the API layer renders them as failure envelopes.
    """

    def __init__(self, engine: RetrievalEngine, preview_chars: int = 200):
        self.engine = engine
        self.preview_chars = preview_chars

    async def search(self, request: SearchRequest) -> OperationResult[SearchResponse]:
        started = time.perf_counter()
        results = await self.engine.search(
            request.query,
            limit=request.limit,
            threshold=request.threshold,
            mode=request.search_type,
        )
        elapsed = time.perf_counter() - started

        logger.info(
            f"Search returned {len(results)} results",
            extra={"search_type": request.search_type.value, "limit": request.limit, "elapsed": round(elapsed, 4)},
        )
        response = SearchResponse(
            query=request.query,
            search_type=request.search_type,
            total_results=len(results),
            results=[self.format_result(result, request.query) for result in results],
            metadata=SearchMetadata(limit=request.limit, threshold=request.threshold, execution_time=elapsed),
        )
        return OperationResult.ok(response, message="Search completed")

    async def stats(self) -> OperationResult[StatsRead]:
        stats = await self.engine.stats()
        return OperationResult.ok(
            StatsRead(
                total_documents=stats.total_documents,
                total_pages=stats.total_pages,
                pages_with_embeddings=stats.pages_with_embeddings,
                processing_documents=stats.processing_documents,
                failed_documents=stats.failed_documents,
                avg_words_per_page=stats.avg_words_per_page,
                total_words=stats.total_words,
                processing_progress=stats.processing_progress,
            ),
            message="Statistics retrieved",
        )

    def format_result(self, result: ScoredResult, query: str) -> SearchResultRead:
        match = result.match
        preview = match.content_preview or match.content[: self.preview_chars]
        return SearchResultRead(
            id=match.chunk_id,
            document_id=match.document_id,
            document_title=match.document_title,
            document_filename=match.document_filename,
            sequence_number=match.sequence_number,
            content_preview=highlight_terms(preview, query),
            word_count=match.word_count,
            keywords=match.keywords,
            similarity_score=round(result.score, 4),
            search_method=SearchMode(result.search_method),
        )
