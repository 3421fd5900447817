"""Embedding provider capability interface."""

from abc import ABC, abstractmethod
from typing import List, Sequence


class Embedder(ABC):
    """A provider turning texts into fixed-dimension float vectors.

    Implementations only talk to the provider. Normalization, truncation,
    timeouts and dimension validation live in ``EmbeddingClient``, so the
    same guarantees hold for every provider.
    """

    provider_name: str = "embedder"

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier of the model producing the vectors."""
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Declared dimensionality of the vectors this provider returns."""
        pass

    @abstractmethod
    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed ``texts``, returning one vector per input in input order.

        Raises:
            ProviderError: If the provider call fails.
        """
        pass
