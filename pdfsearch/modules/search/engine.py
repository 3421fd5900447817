"""Semantic, full-text and hybrid retrieval over stored chunks."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, List, Set, TypeVar

from ...infrastructure.embedding import EmbeddingClient
from ...infrastructure.logging import get_logger
from ...infrastructure.storage import ChunkMatch, CorpusStats, VectorStore
from ..common.exceptions import SearchTimeoutError, ValidationError

logger = get_logger()

T = TypeVar("T")

FULLTEXT_SATURATION = 10


class SearchMode(str, Enum):
    SEMANTIC = "semantic"
    FULLTEXT = "fulltext"
    HYBRID = "hybrid"


@dataclass
class ScoredResult:
    """A chunk match with its score and the strategy that found it."""

    match: ChunkMatch
    score: float
    search_method: SearchMode

    @property
    def chunk_id(self) -> int:
        return self.match.chunk_id


def fulltext_score(content: str, query: str) -> float:
    """Occurrences of ``query`` in ``content`` over ten, capped at 1.0."""
    if not query:
        return 0.0
    occurrences = content.lower().count(query.lower())
    return min(occurrences / FULLTEXT_SATURATION, 1.0)


class RetrievalEngine:
    """Answers queries against a :class:`VectorStore`.

    Three strategies are available:

    - **semantic**: embed the query and return the nearest embedded chunks
      whose similarity is above the threshold. Fails if the query cannot be
      embedded.
    - **fulltext**: case-insensitive substring match on content or keywords,
      scored by occurrence count, newest first among equal scores.
    - **hybrid**: semantic with a relaxed threshold, topped up with fulltext
      matches not already found, sorted by score. If the semantic half
      fails the fulltext results are returned on their own.

    Every store query is bounded by ``query_timeout`` seconds.
    """

    def __init__(
        self,
        store: VectorStore,
        embedding_client: EmbeddingClient,
        query_timeout: float = 10.0,
        hybrid_threshold_factor: float = 0.8,
        max_limit: int = 20,
    ):
        self.store = store
        self.embedding_client = embedding_client
        self.query_timeout = query_timeout
        self.hybrid_threshold_factor = hybrid_threshold_factor
        self.max_limit = max_limit

    async def search(
        self,
        query: str,
        limit: int = 10,
        threshold: float = 0.7,
        mode: SearchMode = SearchMode.HYBRID,
    ) -> List[ScoredResult]:
        """Run a query with the chosen strategy.

        Raises:
            ValidationError: If the query is blank, or limit or threshold are out of range.
            EmbeddingError: If semantic mode cannot embed the query.
            SearchTimeoutError: If the store does not answer in time.
        """
        query = query.strip()
        if not query:
            raise ValidationError("Query must not be empty")
        if not 1 <= limit <= self.max_limit:
            raise ValidationError(f"Limit must be between 1 and {self.max_limit}")
        if not 0.0 <= threshold <= 1.0:
            raise ValidationError("Threshold must be between 0 and 1")

        mode = SearchMode(mode)
        if mode == SearchMode.SEMANTIC:
            return await self.semantic(query, limit, threshold)
        if mode == SearchMode.FULLTEXT:
            return await self.fulltext(query, limit)
        return await self.hybrid(query, limit, threshold)

    async def semantic(self, query: str, limit: int, threshold: float) -> List[ScoredResult]:
        result = await self.embedding_client.embed(query)
        vector = result.unwrap()

        matches = await self._bounded(self.store.nearest(vector, limit, threshold))
        return [ScoredResult(match, match.similarity or 0.0, SearchMode.SEMANTIC) for match in matches]

    async def fulltext(self, query: str, limit: int) -> List[ScoredResult]:
        matches = await self._bounded(self.store.lexical(query, limit))
        results = [ScoredResult(match, fulltext_score(match.content, query), SearchMode.FULLTEXT) for match in matches]
        # Stable: the store's recency order survives among equal scores.
        results.sort(key=lambda result: result.score, reverse=True)
        return results

    async def hybrid(self, query: str, limit: int, threshold: float) -> List[ScoredResult]:
        try:
            semantic = await self.semantic(query, limit, threshold * self.hybrid_threshold_factor)
        except Exception as exc:
            logger.warning(
                f"Semantic search failed, falling back to full-text: {exc}",
                extra={"error_type": type(exc).__name__},
            )
            return await self.fulltext(query, limit)

        fulltext = await self.fulltext(query, limit)
        return merge_results(semantic, fulltext, limit)

    async def stats(self) -> CorpusStats:
        return await self._bounded(self.store.stats())

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.query_timeout)
        except asyncio.TimeoutError as exc:
            raise SearchTimeoutError(f"Search query timed out after {self.query_timeout}s") from exc


def merge_results(semantic: List[ScoredResult], fulltext: List[ScoredResult], limit: int) -> List[ScoredResult]:
    """Merge two result lists, semantic first, deduplicated by chunk id.

    Fulltext results are only appended while there is room under ``limit``.
    The merged list is then ordered by score, keeping insertion order on ties.
    """
    merged: List[ScoredResult] = []
    seen: Set[int] = set()

    for result in semantic:
        if result.chunk_id not in seen:
            merged.append(ScoredResult(result.match, result.score, SearchMode.SEMANTIC))
            seen.add(result.chunk_id)

    for result in fulltext:
        if len(merged) >= limit:
            break
        if result.chunk_id not in seen:
            merged.append(ScoredResult(result.match, result.score, SearchMode.FULLTEXT))
            seen.add(result.chunk_id)

    merged.sort(key=lambda result: result.score, reverse=True)
    return merged[:limit]
