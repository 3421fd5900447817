"""Chunk and document storage behind capability interfaces."""

from .base import ChunkDraft, ChunkMatch, CorpusStats, DocumentRecord, DocumentStore, VectorStore
from .memory import InMemoryStore

__all__ = [
    "ChunkDraft",
    "ChunkMatch",
    "CorpusStats",
    "DocumentRecord",
    "DocumentStore",
    "InMemoryStore",
    "VectorStore",
]
