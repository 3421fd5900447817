from ..infrastructure.app_factory import create_application
from ..infrastructure.config.settings import get_settings
from ..interfaces.api import router as api_router

settings = get_settings()

app = create_application(
    router=api_router,
    settings=settings,
    summary="Hybrid semantic and full-text search over PDF documents",
    description="""
    # PDF Search API

    Upload PDF documents and search them in natural language.

    * **Ingestion**: uploads are split into pages and embedded in the background
    * **Semantic search**: cosine similarity over page embeddings (pgvector)
    * **Full-text search**: case-insensitive matching on page text and keywords
    * **Hybrid search**: both, merged and ranked, with full-text fallback

    ## Features

    - Document upload, listing, reprocessing and deletion
    - Per-document processing status and embedding progress
    - Highlighted previews of matching pages
    - Corpus statistics
    """,
)
