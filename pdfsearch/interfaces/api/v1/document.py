"""Document API endpoints."""

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ....infrastructure.config.settings import settings
from ....modules.chunk.schemas import PageRead
from ....modules.chunk.services import ChunkService
from ....modules.common.schemas import OperationResult
from ....modules.document.schemas import DocumentRead
from ....modules.document.services import DocumentService
from ....modules.ingestion import IngestionService
from ..dependencies import DbSession, get_chunk_service, get_document_service, get_ingestion_service

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Upload PDF Document",
    description="""
    Uploads a PDF and queues it for ingestion.

    The document is created in `processing` state. Text extraction, page
    segmentation and embedding run in the background; poll the document to
    follow its `status` and `processing_progress`.

    - **file**: The PDF file (max size set by `UPLOAD_MAX_BYTES`)
    - **title**: Optional title, defaults to the file name
    """,
    responses={
        201: {"description": "Document stored and ingestion queued"},
        422: {"description": "File is empty, too large or not a PDF"},
    },
)
async def upload_document(
    db: DbSession,
    file: Annotated[UploadFile, File(description="PDF file to ingest")],
    title: Annotated[Optional[str], Form(max_length=255)] = None,
    document_service: DocumentService = Depends(get_document_service),
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> OperationResult[DocumentRead]:
    """Store an uploaded PDF and schedule its ingestion."""
    content = await file.read(settings.UPLOAD_MAX_BYTES + 1)
    document = await document_service.create_document(
        filename=file.filename or "document.pdf",
        content_type=file.content_type,
        content=content,
        db=db,
        title=title,
    )
    ingestion_service.ingest(document.id)
    return OperationResult.ok(document, message="Document uploaded, processing started")


@router.get(
    "/",
    summary="List Documents",
    description="""
    Retrieves a paginated list of documents, newest first.

    - **page**: Page number (1-indexed, default: 1)
    - **items_per_page**: Number of documents per page (default: 20, max: 100)
    """,
    responses={200: {"description": "Paginated list of documents"}},
)
async def get_documents(
    db: DbSession,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    items_per_page: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 20,
    document_service: DocumentService = Depends(get_document_service),
) -> OperationResult[dict[str, Any]]:
    """Get documents with pagination."""
    documents = await document_service.get_documents(db, page, items_per_page)
    return OperationResult.ok(documents, message="Documents retrieved")


@router.get(
    "/{document_id}",
    summary="Get Document Details",
    description="Retrieves a document with its status and the share of its pages that have embeddings.",
    responses={
        200: {"description": "Document details"},
        404: {"description": "Document not found"},
    },
)
async def get_document(
    document_id: int,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
) -> OperationResult[DocumentRead]:
    """Get a specific document by ID."""
    document = await document_service.get_document(document_id, db)
    return OperationResult.ok(document, message="Document retrieved")


@router.get(
    "/{document_id}/pages",
    summary="List Document Pages",
    description="Retrieves the pages ingestion produced for a document, in sequence order.",
    responses={
        200: {"description": "Paginated list of pages"},
        404: {"description": "Document not found"},
    },
)
async def get_document_pages(
    document_id: int,
    db: DbSession,
    page: Annotated[int, Query(ge=1, description="Page number of the listing (1-indexed)")] = 1,
    items_per_page: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 50,
    chunk_service: ChunkService = Depends(get_chunk_service),
) -> OperationResult[dict[str, Any]]:
    """Get a document's pages with pagination."""
    pages = await chunk_service.get_pages(document_id, db, page, items_per_page)
    return OperationResult.ok(pages, message="Pages retrieved")


@router.get(
    "/{document_id}/pages/{sequence_number}",
    summary="Get Page Content",
    description="Retrieves the full content and keywords of one page.",
    responses={
        200: {"description": "Page content"},
        404: {"description": "Document or page not found"},
    },
)
async def get_document_page(
    document_id: int,
    sequence_number: int,
    db: DbSession,
    chunk_service: ChunkService = Depends(get_chunk_service),
) -> OperationResult[PageRead]:
    """Get one page of a document."""
    page = await chunk_service.get_page(document_id, sequence_number, db)
    return OperationResult.ok(page, message="Page retrieved")


@router.post(
    "/{document_id}/reprocess",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Reprocess Document",
    description="""
    Resets a document to `processing` and queues ingestion again.

    Pages are rewritten in place, so reprocessing never duplicates them.
    A request for a document whose ingestion is still queued is acknowledged
    without scheduling a second run.
    """,
    responses={
        202: {"description": "Reprocessing queued"},
        404: {"description": "Document not found"},
    },
)
async def reprocess_document(
    document_id: int,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> OperationResult[DocumentRead]:
    """Queue a document for ingestion again."""
    document = await document_service.mark_for_reprocessing(document_id, db)
    queued = ingestion_service.ingest(document_id)
    return OperationResult.ok(document, message=queued.message)


@router.delete(
    "/{document_id}",
    summary="Delete Document",
    description="""Delete a document, its pages and its stored file.

    This action cannot be undone.
    """,
    responses={
        200: {"description": "Document deleted"},
        404: {"description": "Document not found"},
    },
)
async def delete_document(
    document_id: int,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
) -> OperationResult[None]:
    """Delete a document and all its pages."""
    await document_service.delete_document(document_id, db)
    return OperationResult.ok(message="Document deleted")
