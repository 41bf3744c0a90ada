"""
Invitation model.

Lifecycle: pending -> accepted | expired. Both end states are terminal;
a fresh invite must be issued instead.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from notesaas.core.security import as_utc, utcnow
from notesaas.models.base import BaseModel, TenantScoped


class InviteStatus(str, Enum):
    """Invitation status."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class Invite(TenantScoped, BaseModel):
    """Single-use, time-limited invitation into a tenant."""

    __tablename__ = "invites"

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Invitee email (lowercased)"
    )

    token: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
        index=True,
        comment="Unguessable invitation token"
    )

    status: Mapped[InviteStatus] = mapped_column(
        String(20),
        nullable=False,
        default=InviteStatus.PENDING,
        comment="pending / accepted / expired"
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Invitation expiry timestamp (UTC)"
    )

    invited_by_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Admin who issued the invite"
    )

    __table_args__ = (
        # At most one pending invite per (email, tenant), enforced by the store
        Index(
            "uq_invite_pending_email_tenant",
            "email",
            "tenant_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check if the invite has passed its expiry time."""
        return as_utc(self.expires_at) <= (now or utcnow())

    @property
    def is_pending(self) -> bool:
        return self.status == InviteStatus.PENDING

    def __repr__(self) -> str:
        return f"<Invite(id={self.id}, email={self.email}, status={self.status})>"
