"""Tests for SearchService result shaping."""

from datetime import UTC, datetime

import pydantic
import pytest
import pytest_asyncio

from pdfsearch.infrastructure.storage import ChunkDraft
from pdfsearch.modules.search import RetrievalEngine, SearchMode, SearchService
from pdfsearch.modules.search.schemas import SearchRequest


@pytest.fixture
def service(memory_store, embedding_client) -> SearchService:
    return SearchService(RetrievalEngine(memory_store, embedding_client))


@pytest_asyncio.fixture
async def indexed_chunk(memory_store, embedder):
    document = memory_store.add_document("ML Primer", original_filename="primer.pdf")
    content = "Machine learning with neural networks."
    chunk_id = await memory_store.upsert_chunk(
        ChunkDraft(
            document_id=document.id,
            sequence_number=1,
            content=content,
            content_preview=content,
            word_count=5,
            keywords=["machine", "learning", "neural", "networks"],
        )
    )
    await memory_store.store_embedding(chunk_id, embedder.vector_for(content), datetime.now(UTC))
    return chunk_id


class TestSearchRequest:
    """Test SearchRequest validation."""

    def test_defaults(self):
        request = SearchRequest(query="neural networks")

        assert request.limit == 10
        assert request.threshold == 0.7
        assert request.search_type == SearchMode.HYBRID

    def test_accepts_similarity_threshold_alias(self):
        request = SearchRequest.model_validate({"query": "neural networks", "similarity_threshold": 0.4})
        assert request.threshold == 0.4

    @pytest.mark.parametrize(
        "payload",
        [
            {"query": "ab"},
            {"query": "x" * 501},
            {"query": "neural", "limit": 0},
            {"query": "neural", "limit": 21},
            {"query": "neural", "threshold": 1.1},
            {"query": "neural", "search_type": "fuzzy"},
        ],
    )
    def test_rejects_invalid_payloads(self, payload):
        with pytest.raises(pydantic.ValidationError):
            SearchRequest.model_validate(payload)


class TestSearchService:
    """Test SearchService.search and SearchService.stats."""

    @pytest.mark.asyncio
    async def test_search_response_shape(self, service, indexed_chunk):
        """Test the envelope, metadata and highlighted preview."""
        request = SearchRequest(query="machine learning", threshold=0.7, search_type=SearchMode.SEMANTIC)

        result = await service.search(request)

        assert result.success is True
        assert result.message == "Search completed"
        response = result.data
        assert response.query == "machine learning"
        assert response.search_type == SearchMode.SEMANTIC
        assert response.total_results == 1
        assert response.metadata.limit == 10
        assert response.metadata.threshold == 0.7
        assert response.metadata.execution_time >= 0

        [hit] = response.results
        assert hit.id == indexed_chunk
        assert hit.document_title == "ML Primer"
        assert hit.document_filename == "primer.pdf"
        assert hit.sequence_number == 1
        assert hit.similarity_score == 0.7071
        assert hit.search_method == SearchMode.SEMANTIC
        assert hit.content_preview == "<mark>Machine</mark> <mark>learning</mark> with neural networks."

    @pytest.mark.asyncio
    async def test_search_without_matches(self, service, indexed_chunk):
        result = await service.search(SearchRequest(query="sourdough", search_type=SearchMode.FULLTEXT))

        assert result.success is True
        assert result.data.total_results == 0
        assert result.data.results == []

    @pytest.mark.asyncio
    async def test_stats(self, service, indexed_chunk):
        result = await service.stats()

        assert result.message == "Statistics retrieved"
        assert result.data.total_documents == 1
        assert result.data.total_pages == 1
        assert result.data.pages_with_embeddings == 1
        assert result.data.total_words == 5
        assert result.data.avg_words_per_page == 5.0
        assert result.data.processing_progress == 100.0
