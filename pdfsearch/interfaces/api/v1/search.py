"""Search API endpoints."""

from fastapi import APIRouter, Depends

from ....modules.common.schemas import OperationResult
from ....modules.search import SearchService
from ....modules.search.schemas import SearchRequest, SearchResponse, StatsRead
from ..dependencies import get_search_service

router = APIRouter(prefix="/search", tags=["Search"])


@router.post(
    "",
    summary="Search Documents",
    description="""
    Searches the pages of all ingested documents.

    - **query**: Natural-language query (3 to 500 characters)
    - **limit**: Maximum number of results (1 to 20, default: 10)
    - **threshold**: Minimum cosine similarity for semantic matches (0 to 1, default: 0.7)
    - **search_type**: `semantic`, `fulltext` or `hybrid` (default)

    Hybrid search relaxes the threshold for its semantic half and falls back
    to full-text matching if the query cannot be embedded. Query words in
    each preview are wrapped in `<mark>` tags.
    """,
    responses={
        200: {"description": "Ranked search results"},
        422: {"description": "Invalid query parameters"},
        502: {"description": "Embedding provider failed (semantic search)"},
        504: {"description": "Search timed out"},
    },
)
async def search(
    request: SearchRequest,
    search_service: SearchService = Depends(get_search_service),
) -> OperationResult[SearchResponse]:
    """Run a semantic, full-text or hybrid search."""
    return await search_service.search(request)


@router.get(
    "/stats",
    summary="Corpus Statistics",
    description="Document, page, word and embedding counts across the whole corpus.",
    responses={200: {"description": "Corpus statistics"}},
)
async def get_stats(
    search_service: SearchService = Depends(get_search_service),
) -> OperationResult[StatsRead]:
    """Get corpus statistics."""
    return await search_service.stats()
