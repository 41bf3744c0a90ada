"""
Upgrade request endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.database import get_db
from notesaas.features.auth.identity import CurrentPrincipal
from notesaas.features.auth.policy import TenantAdmin
from notesaas.features.upgrades.service import upgrade_request_service
from notesaas.models.upgrade_request import UpgradeRequestStatus
from notesaas.schemas.upgrade_request import (
    UpgradeRequestListResponse,
    UpgradeRequestRead,
    UpgradeRequestResponse,
    UpgradeRequestReview,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upgrade requests"])


@router.post(
    "/upgrade-requests",
    response_model=UpgradeRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_upgrade(
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UpgradeRequestResponse:
    """Ask the tenant admins to move the tenant to Pro."""
    request = await upgrade_request_service.create_request(db, principal)
    return UpgradeRequestResponse(request=UpgradeRequestRead.model_validate(request))


@router.get("/tenants/{slug}/upgrade-requests", response_model=UpgradeRequestListResponse)
async def list_upgrade_requests(
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UpgradeRequestListResponse:
    """Pending requests awaiting review (admin only)."""
    requests = await upgrade_request_service.list_pending(db, principal)
    return UpgradeRequestListResponse(
        requests=[UpgradeRequestRead.model_validate(r) for r in requests]
    )


@router.patch(
    "/tenants/{slug}/upgrade-requests/{request_id}",
    response_model=UpgradeRequestResponse,
)
async def review_upgrade_request(
    request_id: str,
    body: UpgradeRequestReview,
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UpgradeRequestResponse:
    """Approve (tenant becomes Pro) or reject a request (admin only)."""
    request = await upgrade_request_service.review(
        db, principal, request_id, UpgradeRequestStatus(body.status)
    )
    return UpgradeRequestResponse(request=UpgradeRequestRead.model_validate(request))
