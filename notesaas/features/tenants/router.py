"""
Tenant endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.database import get_db
from notesaas.features.auth.identity import CurrentPrincipal
from notesaas.features.auth.policy import TenantAdmin
from notesaas.features.tenants.service import tenant_service
from notesaas.schemas.tenant import (
    PlanChangeRequest,
    TenantRead,
    TenantResponse,
    TenantUsageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.get("/me", response_model=TenantUsageResponse)
async def get_my_tenant(
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TenantUsageResponse:
    """
    Get current user's tenant information.

    Any authenticated user can access their own tenant.
    """
    usage = await tenant_service.get_usage(db, principal)
    return TenantUsageResponse(tenant=usage)


@router.post("/{slug}/upgrade", response_model=TenantResponse)
async def change_tenant_plan(
    body: PlanChangeRequest,
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TenantResponse:
    """
    Change the tenant plan (admin only).

    Pro lifts the note limit. Moving back to Free is refused while the
    tenant holds more notes than Free allows.
    """
    tenant = await tenant_service.change_plan(db, principal, body.plan)
    return TenantResponse(tenant=TenantRead.model_validate(tenant))
