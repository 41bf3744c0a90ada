"""
Pydantic schemas for Note.
"""

from datetime import datetime

from pydantic import Field

from notesaas.schemas.common import BaseSchema, SuccessResponse


class NoteBase(BaseSchema):
    """Base note schema."""

    title: str = Field(..., min_length=1, max_length=200, description="Note title")
    content: str = Field(..., min_length=1, max_length=10_000, description="Note body")


class NoteCreate(NoteBase):
    """Schema for creating a note."""
    pass


class NoteUpdate(NoteBase):
    """Schema for updating a note (full replacement)."""
    pass


class NoteRead(NoteBase):
    """Schema for reading note data."""

    id: str
    tenant_id: str
    author_id: str | None
    created_at: datetime
    updated_at: datetime


class NoteResponse(SuccessResponse):
    note: NoteRead


class NoteListResponse(SuccessResponse):
    notes: list[NoteRead]
    total: int = Field(..., description="Total notes in the tenant")
    skip: int
    limit: int
