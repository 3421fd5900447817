"""Pydantic schemas for chunk (page) entities."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PageSummary(BaseModel):
    """Schema for a page in a document's page list."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    sequence_number: int
    content_preview: str
    word_count: int
    has_embedding: bool


class PageRead(PageSummary):
    """Schema for the full content of a page."""

    document_id: int
    content: str
    keywords: List[str] = Field(default_factory=list)
    embedding_generated_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
