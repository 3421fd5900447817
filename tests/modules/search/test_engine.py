"""Tests for the retrieval engine over the in-memory store."""

import asyncio
from datetime import UTC, datetime

import pytest
import pytest_asyncio

from pdfsearch.infrastructure.storage import ChunkDraft, ChunkMatch, InMemoryStore
from pdfsearch.modules.common.exceptions import EmbeddingError, SearchTimeoutError, ValidationError
from pdfsearch.modules.ingestion import extract_keywords
from pdfsearch.modules.search import RetrievalEngine, ScoredResult, SearchMode, fulltext_score, merge_results

NEURAL_TEXT = "Machine learning with neural networks."
MIXED_TEXT = "Machine learning, cooking recipe, garden history; cooking recipe garden history."
COOKING_TEXT = "Cooking recipe for a garden party."


async def add_chunk(store, embedder, document, sequence_number, content, keywords=None, embed=True) -> int:
    chunk_id = await store.upsert_chunk(
        ChunkDraft(
            document_id=document.id,
            sequence_number=sequence_number,
            content=content,
            content_preview=content[:200],
            word_count=len(content.split()),
            keywords=keywords if keywords is not None else extract_keywords(content),
        )
    )
    if embed:
        await store.store_embedding(chunk_id, embedder.vector_for(content), datetime.now(UTC))
    return chunk_id


@pytest_asyncio.fixture
async def corpus(memory_store, embedder):
    """Three embedded chunks plus one keyword-only chunk, inserted in order."""
    document = memory_store.add_document("Field Notes")
    ids = {
        "neural": await add_chunk(memory_store, embedder, document, 1, NEURAL_TEXT),
        "mixed": await add_chunk(memory_store, embedder, document, 2, MIXED_TEXT),
        "cooking": await add_chunk(memory_store, embedder, document, 3, COOKING_TEXT),
        "planting": await add_chunk(
            memory_store, embedder, document, 4, "Seasonal planting calendar.", keywords=["gardening"], embed=False
        ),
    }
    return ids


@pytest.fixture
def engine(memory_store, embedding_client) -> RetrievalEngine:
    return RetrievalEngine(memory_store, embedding_client, query_timeout=1.0)


def make_result(chunk_id: int, score: float, mode: SearchMode) -> ScoredResult:
    match = ChunkMatch(
        chunk_id=chunk_id,
        document_id=1,
        document_title="Doc",
        document_filename="doc.pdf",
        sequence_number=chunk_id,
        content=f"chunk {chunk_id}",
        content_preview=f"chunk {chunk_id}",
        word_count=2,
        keywords=[],
        created_at=datetime.now(UTC),
    )
    return ScoredResult(match, score, mode)


class TestFulltextScore:
    """Test fulltext_score."""

    def test_counts_case_insensitive_occurrences(self):
        assert fulltext_score("Garden, garden and GARDEN", "garden") == pytest.approx(0.3)

    def test_saturates_at_one(self):
        assert fulltext_score("tree " * 25, "tree") == 1.0

    def test_no_occurrence_scores_zero(self):
        assert fulltext_score("Seasonal planting calendar.", "garden") == 0.0


class TestRetrievalEngine:
    """Test RetrievalEngine strategies."""

    @pytest.mark.asyncio
    async def test_semantic_returns_matches_above_threshold(self, engine, corpus):
        """Test that semantic search keeps only chunks above the threshold."""
        results = await engine.search("machine learning", limit=10, threshold=0.7, mode=SearchMode.SEMANTIC)

        assert [result.chunk_id for result in results] == [corpus["neural"]]
        assert results[0].score == pytest.approx(0.7071, abs=1e-4)
        assert results[0].search_method == SearchMode.SEMANTIC

    @pytest.mark.asyncio
    async def test_semantic_skips_chunks_without_embedding(self, engine, corpus):
        """Test that chunks never embedded are invisible to semantic search."""
        results = await engine.search("garden", limit=10, threshold=0.0, mode=SearchMode.SEMANTIC)

        assert corpus["planting"] not in [result.chunk_id for result in results]

    @pytest.mark.asyncio
    async def test_fulltext_scores_and_orders(self, engine, corpus):
        """Test full-text matching on content and keywords."""
        results = await engine.search("garden", limit=10, mode=SearchMode.FULLTEXT)

        by_id = {result.chunk_id: result for result in results}
        assert set(by_id) == {corpus["mixed"], corpus["cooking"], corpus["planting"]}
        assert by_id[corpus["mixed"]].score == pytest.approx(0.2)
        assert by_id[corpus["cooking"]].score == pytest.approx(0.1)
        # Matched through its keywords only.
        assert by_id[corpus["planting"]].score == 0.0
        assert [result.score for result in results] == sorted((r.score for r in results), reverse=True)
        assert all(result.search_method == SearchMode.FULLTEXT for result in results)

    @pytest.mark.asyncio
    async def test_fulltext_ties_keep_newest_first(self, engine, corpus):
        """Test that equal scores keep the store's recency order."""
        results = await engine.search("machine learning", limit=10, mode=SearchMode.FULLTEXT)

        assert [result.chunk_id for result in results] == [corpus["mixed"], corpus["neural"]]

    @pytest.mark.asyncio
    async def test_hybrid_merges_semantic_and_fulltext(self, engine, corpus):
        """Test that hybrid adds full-text hits the semantic half missed."""
        results = await engine.search("machine learning", limit=10, threshold=0.7)

        assert [(result.chunk_id, result.search_method) for result in results] == [
            (corpus["neural"], SearchMode.SEMANTIC),
            (corpus["mixed"], SearchMode.FULLTEXT),
        ]
        assert results[1].score == pytest.approx(0.1)

    @pytest.mark.asyncio
    async def test_hybrid_respects_limit(self, engine, corpus):
        """Test that hybrid never returns more than ``limit`` results."""
        results = await engine.search("machine learning", limit=1, threshold=0.7)

        assert [result.chunk_id for result in results] == [corpus["neural"]]

    @pytest.mark.asyncio
    async def test_hybrid_has_no_duplicates(self, engine, corpus):
        """Test that a chunk found by both strategies appears once."""
        results = await engine.search("garden", limit=20, threshold=0.1)

        ids = [result.chunk_id for result in results]
        assert len(ids) == len(set(ids))
        assert len(ids) <= 20

    @pytest.mark.asyncio
    async def test_hybrid_falls_back_to_fulltext(self, engine, embedder, corpus):
        """Test that hybrid returns plain full-text results when embedding fails."""
        embedder.fail_on = ["machine"]

        hybrid = await engine.search("machine learning", limit=10, threshold=0.7, mode=SearchMode.HYBRID)
        fulltext = await engine.search("machine learning", limit=10, mode=SearchMode.FULLTEXT)

        assert [(r.chunk_id, r.score, r.search_method) for r in hybrid] == [
            (r.chunk_id, r.score, r.search_method) for r in fulltext
        ]

    @pytest.mark.asyncio
    async def test_semantic_embedding_failure_propagates(self, engine, embedder, corpus):
        """Test that semantic mode surfaces the embedding error."""
        embedder.fail_on = ["machine"]

        with pytest.raises(EmbeddingError):
            await engine.search("machine learning", mode=SearchMode.SEMANTIC)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "query,limit,threshold",
        [("   ", 10, 0.7), ("garden", 0, 0.7), ("garden", 21, 0.7), ("garden", 10, 1.5), ("garden", 10, -0.1)],
    )
    async def test_rejects_invalid_parameters(self, engine, query, limit, threshold):
        """Test parameter validation."""
        with pytest.raises(ValidationError):
            await engine.search(query, limit=limit, threshold=threshold)

    @pytest.mark.asyncio
    async def test_store_timeout(self, embedding_client):
        """Test that a slow store query raises SearchTimeoutError."""

        class SlowStore(InMemoryStore):
            async def lexical(self, query, limit):
                await asyncio.sleep(1)
                return []

        engine = RetrievalEngine(SlowStore(), embedding_client, query_timeout=0.01)

        with pytest.raises(SearchTimeoutError):
            await engine.search("garden", mode=SearchMode.FULLTEXT)

    @pytest.mark.asyncio
    async def test_stats(self, engine, corpus):
        """Test corpus statistics through the engine."""
        stats = await engine.stats()

        assert stats.total_documents == 1
        assert stats.total_pages == 4
        assert stats.pages_with_embeddings == 3
        assert stats.processing_progress == 75.0


class TestMergeResults:
    """Test merge_results."""

    def test_semantic_results_fill_limit_first(self):
        """Test the "machine learning" example: semantic hits win when they fill the limit."""
        semantic = [make_result(1, 0.91, SearchMode.SEMANTIC), make_result(2, 0.85, SearchMode.SEMANTIC)]
        fulltext = [make_result(2, 0.4, SearchMode.FULLTEXT), make_result(3, 0.3, SearchMode.FULLTEXT)]

        merged = merge_results(semantic, fulltext, limit=2)

        assert [(r.chunk_id, r.search_method, r.score) for r in merged] == [
            (1, SearchMode.SEMANTIC, 0.91),
            (2, SearchMode.SEMANTIC, 0.85),
        ]

    def test_deduplicates_keeping_semantic(self):
        semantic = [make_result(1, 0.9, SearchMode.SEMANTIC)]
        fulltext = [make_result(1, 0.1, SearchMode.FULLTEXT), make_result(2, 0.3, SearchMode.FULLTEXT)]

        merged = merge_results(semantic, fulltext, limit=10)

        assert [(r.chunk_id, r.score, r.search_method) for r in merged] == [
            (1, 0.9, SearchMode.SEMANTIC),
            (2, 0.3, SearchMode.FULLTEXT),
        ]

    def test_fulltext_only_fills_remaining_room(self):
        semantic = [make_result(1, 0.6, SearchMode.SEMANTIC), make_result(2, 0.5, SearchMode.SEMANTIC)]
        fulltext = [make_result(3, 1.0, SearchMode.FULLTEXT)]

        merged = merge_results(semantic, fulltext, limit=2)

        assert [r.chunk_id for r in merged] == [1, 2]

    def test_sorted_by_score_with_stable_ties(self):
        semantic = [make_result(1, 0.2, SearchMode.SEMANTIC)]
        fulltext = [make_result(2, 0.5, SearchMode.FULLTEXT), make_result(3, 0.2, SearchMode.FULLTEXT)]

        merged = merge_results(semantic, fulltext, limit=10)

        assert [r.chunk_id for r in merged] == [2, 1, 3]

    def test_empty_inputs(self):
        assert merge_results([], [], limit=5) == []
