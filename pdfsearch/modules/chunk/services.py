"""Read access to the pages (chunks) of a document."""

from typing import Any

from fastcrud.core.pagination import paginated_response
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import ChunkNotFoundError, DocumentNotFoundError
from ..document.crud import document_crud
from .crud import chunk_crud
from .schemas import PageRead, PageSummary


class ChunkService:
    """Service for browsing the pages ingestion produced for a document.

    Pages are only written by the ingestion pipeline, so this service is
    read-only and always returns pages in ascending sequence order.
    """

    async def get_pages(
        self,
        document_id: int,
        db: AsyncSession,
        page: int = 1,
        items_per_page: int = 50,
    ) -> dict[str, Any]:
        """Get a document's pages with pagination.

        Args:
            document_id: Document whose pages to list
            db: Database session
            page: Page number of the listing (1-indexed)
            items_per_page: Number of pages per listing page

        Returns:
            Paginated response with page summaries

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        if not await document_crud.exists(db=db, id=document_id):
            raise DocumentNotFoundError(f"Document {document_id} not found")

        result = await chunk_crud.get_multi(
            db=db,
            offset=(page - 1) * items_per_page,
            limit=items_per_page,
            schema_to_select=PageSummary,
            sort_columns="sequence_number",
            sort_orders="asc",
            document_id=document_id,
        )
        return paginated_response(result, page, items_per_page)

    async def get_page(self, document_id: int, sequence_number: int, db: AsyncSession) -> PageRead:
        """Get the full content of one page by its sequence number."""
        if not await document_crud.exists(db=db, id=document_id):
            raise DocumentNotFoundError(f"Document {document_id} not found")

        page = await chunk_crud.get(
            db=db,
            schema_to_select=PageRead,
            document_id=document_id,
            sequence_number=sequence_number,
        )
        if page is None:
            raise ChunkNotFoundError(f"Page {sequence_number} of document {document_id} not found")

        return PageRead(**page)
