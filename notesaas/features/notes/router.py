"""
Note endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.database import get_db
from notesaas.features.auth.identity import CurrentPrincipal
from notesaas.features.notes.service import note_service
from notesaas.schemas.common import MessageResponse, PaginationParams
from notesaas.schemas.note import (
    NoteCreate,
    NoteListResponse,
    NoteRead,
    NoteResponse,
    NoteUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["Notes"])


@router.get("", response_model=NoteListResponse)
async def list_notes(
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: Annotated[PaginationParams, Query()],
) -> NoteListResponse:
    """List all notes in the caller's tenant, newest first."""
    notes, total = await note_service.list_notes(db, principal, skip=page.skip, limit=page.limit)

    return NoteListResponse(
        notes=[NoteRead.model_validate(note) for note in notes],
        total=total,
        skip=page.skip,
        limit=page.limit,
    )


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    note_data: NoteCreate,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NoteResponse:
    """
    Create a note.

    - Free tenants are limited to 3 notes (403 quota_exceeded)
    - Members create notes; admins only when enabled by configuration
    """
    note = await note_service.create_note(db, principal, note_data)
    return NoteResponse(note=NoteRead.model_validate(note))


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: str,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NoteResponse:
    note = await note_service.get_note(db, principal, note_id)
    return NoteResponse(note=NoteRead.model_validate(note))


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str,
    note_data: NoteUpdate,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NoteResponse:
    """Replace a note's title and content (author or admin)."""
    note = await note_service.update_note(db, principal, note_id, note_data)
    return NoteResponse(note=NoteRead.model_validate(note))


@router.delete("/{note_id}", response_model=MessageResponse)
async def delete_note(
    note_id: str,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Delete a note (author or admin)."""
    await note_service.delete_note(db, principal, note_id)
    return MessageResponse(message="Note deleted successfully")
