"""
Note business logic.

Creation order is fixed: input validation (pydantic, before we get here),
then the quota check under the tenant row lock, then authorization, then
the insert in the same transaction.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.exceptions import AuthenticationError
from notesaas.core.metrics import notes_created_total, notes_deleted_total
from notesaas.core.performance import PerformanceMonitor
from notesaas.core.tenant import get_in_tenant_or_404, get_tenant_scoped_query, lock_tenant
from notesaas.features.auth.identity import INVALID_CREDENTIALS, Principal
from notesaas.features.auth.policy import Action, authorize
from notesaas.features.notes.quota import check_note_quota
from notesaas.models.note import Note
from notesaas.models.tenant import TenantPlan
from notesaas.schemas.note import NoteCreate, NoteUpdate

logger = logging.getLogger(__name__)


class NoteService:
    """Tenant-scoped note operations."""

    @staticmethod
    async def create_note(
        db: AsyncSession,
        principal: Principal,
        note_data: NoteCreate,
    ) -> Note:
        """
        Create a note in the caller's tenant.

        Raises:
            QuotaExceededError: Free plan limit reached
            AuthorizationError: role may not create notes
            AuthenticationError: the caller's user no longer exists
        """
        async with PerformanceMonitor("create_note", tenant_id=principal.tenant_id):
            tenant = await lock_tenant(db, principal.tenant_id)
            await check_note_quota(db, tenant, principal.user_id, principal.user_plan)

            authorize(principal, Action.NOTE_CREATE)

            note = Note(
                title=note_data.title,
                content=note_data.content,
                tenant_id=tenant.id,
                author_id=principal.user_id,
            )
            db.add(note)
            try:
                await db.commit()
            except IntegrityError:
                # A token-mode principal can outlive its user row
                await db.rollback()
                logger.warning(f"Note insert rejected for missing author {principal.user_id}")
                raise AuthenticationError(INVALID_CREDENTIALS)
            await db.refresh(note)

        notes_created_total.labels(plan=TenantPlan(tenant.plan).value).inc()
        logger.info(f"Note created: {note.id} in tenant {tenant.id}")
        return note

    @staticmethod
    async def list_notes(
        db: AsyncSession,
        principal: Principal,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Note], int]:
        """All notes of the tenant, newest first."""
        async with PerformanceMonitor("list_notes", tenant_id=principal.tenant_id):
            total_result = await db.execute(
                select(func.count(Note.id)).where(Note.tenant_id == principal.tenant_id)
            )
            total = total_result.scalar_one()

            query = (
                get_tenant_scoped_query(Note, principal.tenant_id)
                .order_by(Note.created_at.desc(), Note.id.desc())
                .offset(skip)
                .limit(limit)
            )
            result = await db.execute(query)
            return list(result.scalars().all()), total

    @staticmethod
    async def get_note(db: AsyncSession, principal: Principal, note_id: str) -> Note:
        note = await get_in_tenant_or_404(db, Note, note_id, principal.tenant_id)
        authorize(principal, Action.NOTE_READ, note)
        return note

    @staticmethod
    async def update_note(
        db: AsyncSession,
        principal: Principal,
        note_id: str,
        note_data: NoteUpdate,
    ) -> Note:
        """Replace title and content. Author or admin only."""
        note = await get_in_tenant_or_404(db, Note, note_id, principal.tenant_id)
        authorize(principal, Action.NOTE_UPDATE, note)

        note.title = note_data.title
        note.content = note_data.content
        await db.commit()
        await db.refresh(note)

        logger.info(f"Note updated: {note.id} by {principal.user_id}")
        return note

    @staticmethod
    async def delete_note(db: AsyncSession, principal: Principal, note_id: str) -> None:
        note = await get_in_tenant_or_404(db, Note, note_id, principal.tenant_id)
        authorize(principal, Action.NOTE_DELETE, note)

        await db.delete(note)
        await db.commit()

        notes_deleted_total.inc()
        logger.info(f"Note deleted: {note_id} by {principal.user_id}")


# Singleton instance
note_service = NoteService()
