"""Document management: upload storage, listing, reprocessing and deletion."""

import uuid
from pathlib import PurePath
from typing import Any, Dict, Optional, cast

import anyio
from fastcrud.core.pagination import paginated_response
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.config.settings import settings
from ...infrastructure.extraction import is_valid_pdf
from ...infrastructure.logging import get_logger
from ..chunk.models import Chunk
from ..common.exceptions import DocumentNotFoundError, ValidationError
from .crud import document_crud
from .models import Document, DocumentStatus
from .schemas import DocumentCreateInternal, DocumentRead

logger = get_logger()


class DocumentService:
    """Service for managing uploaded PDF documents.

    Stores accepted uploads under ``storage_dir`` and records them in
    ``processing`` state; scheduling their ingestion is the caller's job.
    Reads report how many of a document's pages have embeddings.
    """

    def __init__(self, storage_dir: Optional[str] = None, max_upload_bytes: Optional[int] = None):
        self.storage_dir = anyio.Path(storage_dir or settings.STORAGE_DIR)
        self.max_upload_bytes = max_upload_bytes or settings.UPLOAD_MAX_BYTES

    async def create_document(
        self,
        filename: str,
        content_type: Optional[str],
        content: bytes,
        db: AsyncSession,
        title: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> DocumentRead:
        """Validate and store an uploaded PDF, then record it.

        Args:
            filename: Name of the file as uploaded
            content_type: Declared MIME type of the upload
            content: File bytes
            db: Database session
            title: Document title, defaults to the file name without extension
            metadata: Optional additional metadata

        Returns:
            The created document, in ``processing`` state

        Raises:
            ValidationError: If the file is empty, too large or not a PDF
        """
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > self.max_upload_bytes:
            raise ValidationError(f"File exceeds the maximum size of {self.max_upload_bytes} bytes")
        if not is_valid_pdf(content_type, content[:1024]):
            raise ValidationError("Only PDF files are accepted")

        original_filename = PurePath(filename or "document.pdf").name
        await self.storage_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.storage_dir / f"{uuid.uuid4().hex}.pdf"
        await file_path.write_bytes(content)

        document_internal = DocumentCreateInternal(
            title=title or PurePath(original_filename).stem,
            original_filename=original_filename,
            file_path=str(file_path),
            file_size=len(content),
            extra_metadata=metadata,
        )
        created = cast(Any, await document_crud.create(db=db, object=document_internal))

        logger.info(
            f"Stored upload '{original_filename}' as document {created.id}",
            extra={"document_id": created.id, "file_size": len(content)},
        )
        return await self.get_document(created.id, db)

    async def get_document(self, document_id: int, db: AsyncSession) -> DocumentRead:
        """Get a document with its page and embedding counts.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        stmt = await document_crud.select(id=document_id)
        stmt = self._with_page_counts(stmt)

        row = (await db.execute(stmt)).first()
        if not row:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        return self._to_read(row)

    async def get_documents(
        self,
        db: AsyncSession,
        page: int = 1,
        items_per_page: int = 20,
    ) -> dict[str, Any]:
        """Get all documents, newest first, with pagination and counts."""
        stmt = await document_crud.select(sort_columns="created_at", sort_orders="desc")
        stmt = self._with_page_counts(stmt).offset((page - 1) * items_per_page).limit(items_per_page)

        rows = (await db.execute(stmt)).fetchall()
        total_count = await document_crud.count(db=db)

        documents = [self._to_read(row).model_dump() for row in rows]
        return paginated_response({"data": documents, "total_count": total_count}, page, items_per_page)

    async def mark_for_reprocessing(self, document_id: int, db: AsyncSession) -> DocumentRead:
        """Put a document back into ``processing`` and clear its last error."""
        if not await document_crud.exists(db=db, id=document_id):
            raise DocumentNotFoundError(f"Document {document_id} not found")

        await document_crud.update(
            db=db,
            id=document_id,
            object={"status": DocumentStatus.PROCESSING.value, "processing_error": None},
        )
        return await self.get_document(document_id, db)

    async def delete_document(self, document_id: int, db: AsyncSession) -> None:
        """Delete a document, its pages and its stored file."""
        document = await document_crud.get(db=db, id=document_id, schema_to_select=DocumentCreateInternal)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        await document_crud.delete(db=db, id=document_id)

        stored_file = anyio.Path(document["file_path"])
        await stored_file.unlink(missing_ok=True)
        logger.info(f"Deleted document {document_id}", extra={"document_id": document_id})

    @staticmethod
    def _with_page_counts(stmt):
        return (
            stmt.add_columns(
                func.count(Chunk.id).label("page_count"),
                func.count(Chunk.id).filter(Chunk.has_embedding.is_(True)).label("embedded_count"),
            )
            .outerjoin(Chunk, Document.id == Chunk.document_id)
            .group_by(Document.id)
        )

    @staticmethod
    def _to_read(row) -> DocumentRead:
        progress = round(row.embedded_count / row.page_count * 100, 2) if row.page_count else 0.0
        return DocumentRead(
            id=row.id,
            title=row.title,
            original_filename=row.original_filename,
            file_size=row.file_size,
            mime_type=row.mime_type,
            status=row.status,
            processing_error=row.processing_error,
            total_pages=row.total_pages,
            pages_with_embeddings=row.embedded_count,
            processing_progress=progress,
            metadata=row.extra_metadata or {},
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
