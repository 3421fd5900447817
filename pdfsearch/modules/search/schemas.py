"""Pydantic schemas for search requests and results."""

from typing import Annotated, List

from pydantic import AliasChoices, BaseModel, Field

from ...infrastructure.config.settings import settings
from .engine import SearchMode


class SearchRequest(BaseModel):
    """Schema for a search query."""

    query: Annotated[str, Field(min_length=3, max_length=500, description="Natural-language query")]
    limit: int = Field(default=settings.SEARCH_DEFAULT_LIMIT, ge=1, le=20, description="Maximum number of results")
    threshold: float = Field(
        default=settings.SEARCH_DEFAULT_THRESHOLD,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("threshold", "similarity_threshold"),
        description="Minimum cosine similarity for semantic matches",
    )
    search_type: SearchMode = Field(default=SearchMode.HYBRID, description="Retrieval strategy")


class SearchResultRead(BaseModel):
    """Schema for one search hit."""

    id: int
    document_id: int
    document_title: str
    document_filename: str
    sequence_number: int
    content_preview: str = Field(description="Preview with query words wrapped in <mark>")
    word_count: int
    keywords: List[str]
    similarity_score: float
    search_method: SearchMode


class SearchMetadata(BaseModel):
    limit: int
    threshold: float
    execution_time: float = Field(description="Seconds spent answering the query")


class SearchResponse(BaseModel):
    """Schema for the results of a search."""

    query: str
    search_type: SearchMode
    total_results: int
    results: List[SearchResultRead]
    metadata: SearchMetadata


class StatsRead(BaseModel):
    """Schema for corpus statistics."""

    total_documents: int
    total_pages: int
    pages_with_embeddings: int
    processing_documents: int
    failed_documents: int
    avg_words_per_page: float
    total_words: int
    processing_progress: float = Field(description="Percentage of pages with an embedding")
