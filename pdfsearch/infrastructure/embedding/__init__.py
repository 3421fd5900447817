"""Embedding infrastructure for text-to-vector conversion."""

from .base import Embedder
from .client import EmbeddingClient, EmbeddingResult, build_embedder, get_embedding_client
from .vectors import cosine_similarity, format_vector, parse_vector

__all__ = [
    "Embedder",
    "EmbeddingClient",
    "EmbeddingResult",
    "build_embedder",
    "cosine_similarity",
    "format_vector",
    "get_embedding_client",
    "parse_vector",
]
