"""OpenAI-compatible embedding provider."""

from typing import Any, List, Optional, Sequence

import openai
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...modules.common.exceptions import ProviderError
from ..logging import get_logger
from .base import Embedder

logger = get_logger()

# Transient failures worth another attempt; everything else fails fast.
TRANSIENT_ERRORS = (openai.APIConnectionError, openai.APITimeoutError, openai.RateLimitError)


class OpenAIEmbedder(Embedder):
    """Embedder backed by the OpenAI embeddings API.

    Uses ``text-embedding-3-small`` (1536 dimensions) by default. Setting
    ``base_url`` points the client at any OpenAI-compatible endpoint.
    Transient transport errors are retried with exponential backoff; the
    last error is re-raised as :class:`ProviderError`.

    The SDK client is created on first use, so a missing API key surfaces as
    a provider failure instead of breaking application startup.
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        dimension: int = 1536,
        base_url: Optional[str] = None,
        max_retries: int = 3,
        retry_min_wait: float = 1.0,
        retry_max_wait: float = 10.0,
        client: Optional[Any] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._dimension = dimension
        self._base_url = base_url or None
        self._max_retries = max(1, max_retries)
        self._retry_min_wait = retry_min_wait
        self._retry_max_wait = retry_max_wait
        self._client = client

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def dimension(self) -> int:
        return self._dimension

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise ProviderError("OPENAI_API_KEY is not configured", provider_name=self.provider_name)
            # Retries are handled below, not inside the SDK.
            self._client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url, max_retries=0)
        return self._client

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []

        client = self._get_client()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=1, min=self._retry_min_wait, max=self._retry_max_wait),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    response = await client.embeddings.create(model=self._model, input=list(texts))
        except openai.OpenAIError as exc:
            raise ProviderError(str(exc), provider_name=self.provider_name) from exc

        usage = getattr(response, "usage", None)
        logger.debug(
            "OpenAI embedding batch completed",
            extra={
                "model": self._model,
                "batch_size": len(texts),
                "tokens": getattr(usage, "total_tokens", None),
            },
        )

        return [list(item.embedding) for item in sorted(response.data, key=lambda item: item.index)]
