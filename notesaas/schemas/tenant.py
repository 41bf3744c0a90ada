"""
Pydantic schemas for Tenant.
"""

from datetime import datetime

from pydantic import Field

from notesaas.models.tenant import TenantPlan
from notesaas.schemas.common import BaseSchema, SuccessResponse


class TenantBase(BaseSchema):
    """Base tenant schema with common fields."""

    name: str = Field(..., min_length=1, max_length=255, description="Organization name")
    slug: str = Field(
        ...,
        min_length=2,
        max_length=100,
        pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
        description="URL-friendly identifier",
    )


class TenantRead(TenantBase):
    """Schema for reading tenant data."""

    id: str
    plan: TenantPlan
    max_notes: int
    created_at: datetime


class TenantUsage(TenantRead):
    """Tenant with usage statistics."""

    note_count: int = 0
    user_count: int = 0


class PlanChangeRequest(BaseSchema):
    """Target plan for a tenant-wide plan change."""

    plan: TenantPlan


class TenantResponse(SuccessResponse):
    tenant: TenantRead


class TenantUsageResponse(SuccessResponse):
    tenant: TenantUsage
