"""
User model for authentication and authorization.
"""

from enum import Enum

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notesaas.models.base import BaseModel, TenantScoped
from notesaas.models.tenant import TenantPlan


class UserRole(str, Enum):
    """Role within the owning tenant."""
    ADMIN = "Admin"
    MEMBER = "Member"


class User(TenantScoped, BaseModel):
    """User account model."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address (unique, lowercased)"
    )

    hashed_password: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Bcrypt hashed password"
    )

    full_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="User's full name"
    )

    role: Mapped[UserRole] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.MEMBER,
        index=True,
        comment="Admin or Member"
    )

    # Optional tightening of the tenant plan for this user only.
    plan: Mapped[TenantPlan | None] = mapped_column(
        String(20),
        nullable=True,
        comment="Per-user plan override (can only restrict)"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Account active status"
    )

    # Immutable after creation
    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
