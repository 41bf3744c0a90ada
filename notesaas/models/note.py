"""
Note model.
"""

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notesaas.models.base import BaseModel, TenantScoped


class Note(TenantScoped, BaseModel):
    """A short text note owned by a tenant and authored by one of its users."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Note title"
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Note body"
    )

    # Nulled when the author is removed from the tenant
    author_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Authoring user ID"
    )

    __table_args__ = (
        Index("idx_note_tenant_created", "tenant_id", "created_at"),
        Index("idx_note_tenant_author", "tenant_id", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title})>"
