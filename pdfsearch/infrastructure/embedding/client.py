"""Embedding client: the single entry point for turning text into vectors.

Wraps an :class:`Embedder` with the guarantees every caller relies on:

- newlines and whitespace runs are collapsed and the text trimmed
- empty input fails with ``EmptyInputError`` without calling the provider
- input longer than ``max_input_chars`` is truncated (the tail is dropped)
- the provider call is bounded by ``timeout`` seconds
- any vector whose size differs from the declared dimension fails with
  ``DimensionMismatchError``
- provider and transport failures come back as ``ProviderError``

Failures are returned inside :class:`EmbeddingResult`, never raised, so the
ingestion pipeline can count them per chunk. Callers that need a vector or
nothing use :meth:`EmbeddingResult.unwrap`.
"""

import asyncio
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Sequence

from ...modules.common.exceptions import (
    DimensionMismatchError,
    EmbeddingError,
    EmptyInputError,
    ProviderError,
)
from ..config.settings import get_settings
from ..logging import get_logger
from .base import Embedder

logger = get_logger()

_NEWLINES = re.compile(r"\n+")
_WHITESPACE = re.compile(r"\s+")


@dataclass
class EmbeddingResult:
    """Outcome of embedding one text.

    ``index`` is the position of the text in the batch given to
    :meth:`EmbeddingClient.embed_batch`; ``None`` for single calls.
    """

    vector: Optional[List[float]] = None
    dims: int = 0
    model: Optional[str] = None
    index: Optional[int] = None
    error: Optional[EmbeddingError] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.vector is not None

    @classmethod
    def ok(cls, vector: List[float], model: str, index: Optional[int] = None) -> "EmbeddingResult":
        return cls(vector=vector, dims=len(vector), model=model, index=index)

    @classmethod
    def fail(cls, error: EmbeddingError, index: Optional[int] = None) -> "EmbeddingResult":
        return cls(error=error, index=index)

    def unwrap(self) -> List[float]:
        """Return the vector, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        if self.vector is None:
            raise EmbeddingError("Embedding result carries no vector")
        return self.vector


class EmbeddingClient:
    """Normalizing, validating front for an embedding provider."""

    def __init__(self, embedder: Embedder, max_input_chars: int = 8000, timeout: float = 30.0):
        self.embedder = embedder
        self.max_input_chars = max_input_chars
        self.timeout = timeout

    @property
    def dimension(self) -> int:
        return self.embedder.dimension

    @property
    def model_name(self) -> str:
        return self.embedder.model_name

    def prepare_text(self, text: str) -> str:
        """Collapse whitespace, trim, and truncate to ``max_input_chars``."""
        prepared = _WHITESPACE.sub(" ", _NEWLINES.sub(" ", text)).strip()
        if len(prepared) > self.max_input_chars:
            logger.debug(
                "Truncating embedding input",
                extra={"original_chars": len(prepared), "max_chars": self.max_input_chars},
            )
            prepared = prepared[: self.max_input_chars]
        return prepared

    async def embed(self, text: str) -> EmbeddingResult:
        """Embed a single text."""
        prepared = self.prepare_text(text)
        if not prepared:
            return EmbeddingResult.fail(EmptyInputError("Text is empty after normalization"))

        try:
            vectors = await self._call_provider([prepared])
        except EmbeddingError as exc:
            return EmbeddingResult.fail(exc)

        return self._validate(vectors[0])

    async def embed_batch(self, texts: Sequence[str]) -> List[EmbeddingResult]:
        """Embed several texts with one provider call.

        Texts empty after normalization are dropped; each returned result
        carries the ``index`` of its text in ``texts``.
        """
        surviving = [(index, prepared) for index, prepared in enumerate(map(self.prepare_text, texts)) if prepared]
        if not surviving:
            return []

        try:
            vectors = await self._call_provider([prepared for _, prepared in surviving])
        except EmbeddingError as exc:
            return [EmbeddingResult.fail(exc, index=index) for index, _ in surviving]

        return [self._validate(vector, index=index) for (index, _), vector in zip(surviving, vectors)]

    async def _call_provider(self, texts: List[str]) -> List[List[float]]:
        provider = self.embedder.provider_name
        try:
            vectors = await asyncio.wait_for(self.embedder.embed(texts), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Embedding provider timed out", extra={"provider": provider, "timeout": self.timeout})
            raise ProviderError(f"Embedding request timed out after {self.timeout}s", provider_name=provider) from exc
        except EmbeddingError as exc:
            logger.warning(f"Embedding provider failed: {exc}", extra={"provider": provider})
            raise
        except Exception as exc:
            logger.warning(f"Embedding provider failed: {exc}", extra={"provider": provider})
            raise ProviderError(str(exc), provider_name=provider) from exc

        if len(vectors) != len(texts):
            raise ProviderError(
                f"Provider returned {len(vectors)} vectors for {len(texts)} inputs", provider_name=provider
            )
        return vectors

    def _validate(self, vector: List[float], index: Optional[int] = None) -> EmbeddingResult:
        if len(vector) != self.dimension:
            logger.warning(
                "Embedding dimension mismatch",
                extra={"expected": self.dimension, "actual": len(vector), "model": self.model_name},
            )
            return EmbeddingResult.fail(DimensionMismatchError(self.dimension, len(vector)), index=index)
        return EmbeddingResult.ok(vector, model=self.model_name, index=index)


def build_embedder() -> Embedder:
    """Create the provider selected by ``EMBEDDING_PROVIDER``."""
    settings = get_settings()
    provider = settings.EMBEDDING_PROVIDER.lower()

    if provider == "openai":
        from .openai_provider import OpenAIEmbedder

        return OpenAIEmbedder(
            api_key=settings.OPENAI_API_KEY,
            model=settings.EMBEDDING_MODEL,
            dimension=settings.EMBEDDING_DIMENSION,
            base_url=settings.OPENAI_BASE_URL,
            max_retries=settings.EMBEDDING_MAX_RETRIES,
        )
    if provider == "local":
        from .local import SentenceTransformerEmbedder

        return SentenceTransformerEmbedder(
            model_name=settings.LOCAL_EMBEDDING_MODEL,
            dimension=settings.EMBEDDING_DIMENSION,
        )

    raise ValueError(f"Unknown embedding provider: {settings.EMBEDDING_PROVIDER}. Available: openai, local")


@lru_cache()
def get_embedding_client() -> EmbeddingClient:
    """Get the singleton embedding client built from settings."""
    settings = get_settings()
    return EmbeddingClient(
        embedder=build_embedder(),
        max_input_chars=settings.EMBEDDING_MAX_INPUT_CHARS,
        timeout=settings.EMBEDDING_TIMEOUT,
    )
