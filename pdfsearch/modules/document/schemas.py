"""Pydantic schemas for document entities."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..common.schemas import TimestampSchema
from .models import DocumentStatus


class DocumentCreateInternal(BaseModel):
    """Columns written when an upload is accepted."""

    title: str
    original_filename: str
    file_path: str
    file_size: int
    mime_type: str = "application/pdf"
    status: str = DocumentStatus.PROCESSING.value
    extra_metadata: Optional[Dict[str, Any]] = None


class DocumentRead(TimestampSchema):
    """Schema for reading document data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    original_filename: str
    file_size: int
    mime_type: str
    status: DocumentStatus
    processing_error: Optional[str] = None
    total_pages: int = Field(default=0, description="Number of pages produced by the last ingestion run")
    pages_with_embeddings: int = Field(default=0, description="Pages that currently have an embedding")
    processing_progress: float = Field(default=0.0, description="Percentage of pages with an embedding")
    metadata: Optional[Dict[str, Any]] = Field(default_factory=dict, description="Additional document metadata")
