"""
Tenant model for multi-tenancy.

Each tenant represents an organization using the platform. The billing
plan lives here and gates the note quota.
"""

from enum import Enum

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from notesaas.models.base import BaseModel


class TenantPlan(str, Enum):
    """Billing plan."""
    FREE = "Free"
    PRO = "Pro"


class Tenant(BaseModel):
    """Tenant (organization) model."""

    __tablename__ = "tenants"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Organization name"
    )

    slug: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
        comment="URL-friendly identifier (e.g., 'acme')"
    )

    plan: Mapped[TenantPlan] = mapped_column(
        String(20),
        nullable=False,
        default=TenantPlan.FREE,
        comment="Billing plan (Free/Pro)"
    )

    max_notes: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=3,
        comment="Note ceiling for the current plan"
    )

    @property
    def is_pro(self) -> bool:
        return self.plan == TenantPlan.PRO

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, slug={self.slug}, plan={self.plan})>"
