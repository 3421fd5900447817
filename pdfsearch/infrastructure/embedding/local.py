"""Local embedding provider using sentence-transformers.

Selected with ``EMBEDDING_PROVIDER=local``. Requires the ``local`` extra.
``EMBEDDING_DIMENSION`` must match the model (768 for ``all-mpnet-base-v2``)
and the chunk vector column.
"""

import asyncio
from typing import List, Optional, Sequence, cast

from sentence_transformers import SentenceTransformer

from .base import Embedder


class SentenceTransformerEmbedder(Embedder):
    """Embedder running a sentence-transformers model in a worker thread.

    Features:
    - Lazy model loading for faster startup
    - Concurrency-safe single load behind an ``asyncio.Lock``
    - Normalized vectors, so cosine distance equals 1 - dot product
    """

    provider_name = "sentence-transformers"

    def __init__(self, model_name: str = "all-mpnet-base-v2", dimension: int = 768, batch_size: int = 32):
        self._model_name = model_name
        self._dimension = dimension
        self.batch_size = batch_size
        self._model: Optional[SentenceTransformer] = None
        self._model_lock = asyncio.Lock()

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimension(self) -> int:
        return self._dimension

    async def _get_model(self) -> SentenceTransformer:
        """Get the model instance, loading it once on first use."""
        if self._model is None:
            async with self._model_lock:
                if self._model is None:
                    self._model = cast(SentenceTransformer, await asyncio.to_thread(SentenceTransformer, self._model_name))
        if self._model is None:
            raise RuntimeError("Model failed to load")
        return self._model

    async def is_loaded(self) -> bool:
        return self._model is not None

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []

        model = await self._get_model()
        embeddings = await asyncio.to_thread(
            model.encode,
            list(texts),
            convert_to_tensor=False,
            normalize_embeddings=True,
            batch_size=self.batch_size,
        )

        if hasattr(embeddings, "tolist"):
            return cast(List[List[float]], embeddings.tolist())
        return [emb.tolist() for emb in embeddings]
