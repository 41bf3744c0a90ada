"""
Upgrade request model.
"""

from enum import Enum

from sqlalchemy import ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from notesaas.models.base import BaseModel, TenantScoped


class UpgradeRequestStatus(str, Enum):
    """Review status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UpgradeRequest(TenantScoped, BaseModel):
    """A member's request that their tenant move to the Pro plan."""

    __tablename__ = "upgrade_requests"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Requesting user"
    )

    status: Mapped[UpgradeRequestStatus] = mapped_column(
        String(20),
        nullable=False,
        default=UpgradeRequestStatus.PENDING,
        comment="pending / approved / rejected"
    )

    reviewed_by_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Admin who approved or rejected the request"
    )

    __table_args__ = (
        # One outstanding request per user
        Index(
            "uq_upgrade_request_pending_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<UpgradeRequest(id={self.id}, user_id={self.user_id}, status={self.status})>"
