"""API tests for search, statistics and health endpoints."""

import asyncio
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pdfsearch.infrastructure.storage import ChunkDraft, InMemoryStore
from pdfsearch.interfaces.api.dependencies import get_search_service
from pdfsearch.interfaces.main import app
from pdfsearch.modules.search import RetrievalEngine, SearchService

NEURAL_TEXT = "Machine learning with neural networks."
MIXED_TEXT = "Machine learning, cooking recipe, garden history; cooking recipe garden history."


async def seed(store, embedder):
    document = store.add_document("Field Notes", original_filename="notes.pdf")
    ids = []
    for sequence_number, content in enumerate([NEURAL_TEXT, MIXED_TEXT], start=1):
        chunk_id = await store.upsert_chunk(
            ChunkDraft(
                document_id=document.id,
                sequence_number=sequence_number,
                content=content,
                content_preview=content,
                word_count=len(content.split()),
                keywords=[],
            )
        )
        await store.store_embedding(chunk_id, embedder.vector_for(content), datetime.now(UTC))
        ids.append(chunk_id)
    return ids


@pytest_asyncio.fixture
async def search_client(memory_store, embedding_client):
    """Client whose search service runs over the in-memory store."""
    engine = RetrievalEngine(memory_store, embedding_client, query_timeout=1.0)
    app.dependency_overrides[get_search_service] = lambda: SearchService(engine)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


class TestSearchAPI:
    """API tests for search endpoints."""

    @pytest.mark.asyncio
    async def test_hybrid_search(self, search_client: AsyncClient, memory_store, embedder):
        neural_id, mixed_id = await seed(memory_store, embedder)

        response = await search_client.post("/api/v1/search", json={"query": "machine learning"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Search completed"
        data = body["data"]
        assert data["search_type"] == "hybrid"
        assert data["total_results"] == 2
        assert [hit["id"] for hit in data["results"]] == [neural_id, mixed_id]
        assert [hit["search_method"] for hit in data["results"]] == ["semantic", "fulltext"]
        assert data["results"][0]["content_preview"].startswith("<mark>Machine</mark> <mark>learning</mark>")
        assert data["results"][0]["document_filename"] == "notes.pdf"
        assert data["metadata"]["limit"] == 10
        assert data["metadata"]["threshold"] == 0.7

    @pytest.mark.asyncio
    async def test_fulltext_search_with_alias(self, search_client: AsyncClient, memory_store, embedder):
        await seed(memory_store, embedder)

        response = await search_client.post(
            "/api/v1/search",
            json={"query": "garden", "search_type": "fulltext", "similarity_threshold": 0.2, "limit": 5},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["metadata"]["threshold"] == 0.2
        assert data["total_results"] == 1
        assert data["results"][0]["similarity_score"] == 0.2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"query": "ab"},
            {"query": "machine", "limit": 50},
            {"query": "machine", "threshold": 2},
            {"query": "machine", "search_type": "fuzzy"},
            {},
        ],
    )
    async def test_invalid_request(self, search_client: AsyncClient, payload):
        response = await search_client.post("/api/v1/search", json=payload)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_semantic_provider_failure(self, search_client: AsyncClient, memory_store, embedder):
        await seed(memory_store, embedder)
        embedder.fail_on = ["machine"]

        response = await search_client.post(
            "/api/v1/search", json={"query": "machine learning", "search_type": "semantic"}
        )

        assert response.status_code == 502
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Embedding provider unavailable"
        assert "provider rejected input" in body["error"]

    @pytest.mark.asyncio
    async def test_hybrid_survives_provider_failure(self, search_client: AsyncClient, memory_store, embedder):
        await seed(memory_store, embedder)
        embedder.fail_on = ["machine"]

        response = await search_client.post("/api/v1/search", json={"query": "machine learning"})

        assert response.status_code == 200
        results = response.json()["data"]["results"]
        assert results
        assert all(hit["search_method"] == "fulltext" for hit in results)

    @pytest.mark.asyncio
    async def test_search_timeout(self, embedding_client):
        class SlowStore(InMemoryStore):
            async def lexical(self, query, limit):
                await asyncio.sleep(1)
                return []

        engine = RetrievalEngine(SlowStore(), embedding_client, query_timeout=0.01)
        app.dependency_overrides[get_search_service] = lambda: SearchService(engine)
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
                response = await ac.post("/api/v1/search", json={"query": "garden", "search_type": "fulltext"})
        finally:
            app.dependency_overrides = {}

        assert response.status_code == 504
        assert response.json()["message"] == "Search timed out"

    @pytest.mark.asyncio
    async def test_stats(self, search_client: AsyncClient, memory_store, embedder):
        await seed(memory_store, embedder)

        response = await search_client.get("/api/v1/search/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Statistics retrieved"
        assert body["data"]["total_pages"] == 2
        assert body["data"]["pages_with_embeddings"] == 2
        assert body["data"]["processing_progress"] == 100.0

    @pytest.mark.asyncio
    async def test_health_and_correlation_header(self, search_client: AsyncClient):
        response = await search_client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "message": "PDF Search API is running"}
        assert response.headers["X-Request-ID"] == "req-123"
