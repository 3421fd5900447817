"""FastAPI dependencies for use in API endpoints."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.config.settings import get_settings
from ...infrastructure.database import async_session, local_session
from ...infrastructure.embedding import get_embedding_client
from ...infrastructure.jobs import document_locks, job_runner
from ...infrastructure.storage.postgres import SQLAlchemyStore
from ...modules.chunk.services import ChunkService
from ...modules.document.services import DocumentService
from ...modules.ingestion import IngestionPipeline, IngestionService, TextSegmenter
from ...modules.search import RetrievalEngine, SearchService

DbSession = Annotated[AsyncSession, Depends(async_session)]


@lru_cache()
def get_store() -> SQLAlchemyStore:
    """Dependency for providing the shared PostgreSQL store."""
    return SQLAlchemyStore(local_session)


@lru_cache()
def get_ingestion_pipeline() -> IngestionPipeline:
    """Dependency for providing the ingestion pipeline wired from settings."""
    settings = get_settings()
    store = get_store()
    return IngestionPipeline(
        documents=store,
        store=store,
        embedding_client=get_embedding_client(),
        lock_registry=document_locks,
        segmenter=TextSegmenter(
            max_chars=settings.CHUNK_MAX_CHARS,
            min_chars=settings.CHUNK_MIN_CHARS,
            split_oversized=settings.CHUNK_SPLIT_OVERSIZED,
        ),
        preview_chars=settings.CHUNK_PREVIEW_CHARS,
        keyword_limit=settings.KEYWORD_LIMIT,
        concurrency=settings.INGESTION_CONCURRENCY,
    )


def get_ingestion_service() -> IngestionService:
    """Dependency for providing an IngestionService instance."""
    settings = get_settings()
    return IngestionService(
        pipeline=get_ingestion_pipeline(),
        runner=job_runner,
        timeout=settings.INGESTION_TIMEOUT,
        max_attempts=settings.INGESTION_MAX_ATTEMPTS,
    )


def get_search_service() -> SearchService:
    """Dependency for providing a SearchService instance."""
    settings = get_settings()
    engine = RetrievalEngine(
        store=get_store(),
        embedding_client=get_embedding_client(),
        query_timeout=settings.SEARCH_QUERY_TIMEOUT,
        hybrid_threshold_factor=settings.SEARCH_HYBRID_THRESHOLD_FACTOR,
        max_limit=settings.SEARCH_MAX_LIMIT,
    )
    return SearchService(engine, preview_chars=settings.SEARCH_PREVIEW_CHARS)


def get_document_service() -> DocumentService:
    """Dependency for providing a DocumentService instance."""
    return DocumentService()


def get_chunk_service() -> ChunkService:
    """Dependency for providing a ChunkService instance."""
    return ChunkService()
