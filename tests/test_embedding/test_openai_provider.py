"""Tests for the OpenAI embedding provider with a fake SDK client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from pdfsearch.infrastructure.embedding.openai_provider import OpenAIEmbedder
from pdfsearch.modules.common.exceptions import ProviderError

EMBEDDINGS_URL = "https://api.openai.com/v1/embeddings"


def make_response(*vectors):
    """Build an embeddings response with items deliberately out of order."""
    data = [SimpleNamespace(index=i, embedding=vector) for i, vector in enumerate(vectors)]
    return SimpleNamespace(data=list(reversed(data)), usage=SimpleNamespace(total_tokens=7))


@pytest.fixture
def fake_client():
    client = MagicMock()
    client.embeddings.create = AsyncMock()
    return client


@pytest.fixture
def embedder(fake_client) -> OpenAIEmbedder:
    return OpenAIEmbedder(
        api_key="sk-test",
        dimension=3,
        max_retries=3,
        retry_min_wait=0,
        retry_max_wait=0,
        client=fake_client,
    )


class TestOpenAIEmbedder:
    """Test OpenAIEmbedder.embed."""

    def test_defaults(self):
        embedder = OpenAIEmbedder(api_key="sk-test")

        assert embedder.model_name == "text-embedding-3-small"
        assert embedder.dimension == 1536
        assert embedder.provider_name == "openai"

    @pytest.mark.asyncio
    async def test_returns_vectors_in_input_order(self, embedder, fake_client):
        fake_client.embeddings.create.return_value = make_response([0.1, 0.2, 0.3], [0.4, 0.5, 0.6])

        vectors = await embedder.embed(["first", "second"])

        assert vectors == [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]
        fake_client.embeddings.create.assert_awaited_once_with(
            model="text-embedding-3-small", input=["first", "second"]
        )

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self, embedder, fake_client):
        """Test that a connection error is retried and the next attempt succeeds."""
        fake_client.embeddings.create.side_effect = [
            openai.APIConnectionError(request=httpx.Request("POST", EMBEDDINGS_URL)),
            make_response([0.1, 0.2, 0.3]),
        ]

        vectors = await embedder.embed(["text"])

        assert vectors == [[0.1, 0.2, 0.3]]
        assert fake_client.embeddings.create.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, embedder, fake_client):
        fake_client.embeddings.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", EMBEDDINGS_URL)
        )

        with pytest.raises(ProviderError) as exc_info:
            await embedder.embed(["text"])

        assert exc_info.value.provider_name == "openai"
        assert fake_client.embeddings.create.await_count == 3

    @pytest.mark.asyncio
    async def test_non_transient_error_fails_fast(self, embedder, fake_client):
        fake_client.embeddings.create.side_effect = openai.APIError(
            "invalid model", request=httpx.Request("POST", EMBEDDINGS_URL), body=None
        )

        with pytest.raises(ProviderError, match="invalid model"):
            await embedder.embed(["text"])

        assert fake_client.embeddings.create.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        embedder = OpenAIEmbedder(api_key="")

        with pytest.raises(ProviderError, match="OPENAI_API_KEY"):
            await embedder.embed(["text"])

    @pytest.mark.asyncio
    async def test_empty_batch_skips_request(self, embedder, fake_client):
        assert await embedder.embed([]) == []
        fake_client.embeddings.create.assert_not_awaited()
