"""
Invitation endpoints.

Admin routes live under /tenants/{slug}/invites; validation and signup
are public and authenticated by the invitation token itself.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.database import get_db
from notesaas.core.rate_limit import rate_limit
from notesaas.features.auth.policy import TenantAdmin
from notesaas.features.invites.service import invite_service
from notesaas.schemas.common import MessageResponse
from notesaas.schemas.invite import (
    InviteCreate,
    InviteIssuedResponse,
    InviteListResponse,
    InviteRead,
    InviteValidateRequest,
    InviteValidateResponse,
    SignupRequest,
    SignupResponse,
)
from notesaas.schemas.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants/{slug}/invites", tags=["Invitations"])
public_router = APIRouter(tags=["Invitations"])


@router.post(
    "",
    response_model=InviteIssuedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("invite"))],
)
async def issue_invite(
    invite_data: InviteCreate,
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> InviteIssuedResponse:
    """
    Invite a user by email (admin only).

    The invitation email is queued in the background; the link is also
    returned so admins can share it directly.
    """
    invite, invite_link = await invite_service.issue_invite(db, principal, invite_data.email)

    return InviteIssuedResponse(
        invite=InviteRead.model_validate(invite),
        invite_link=invite_link,
    )


@router.get("", response_model=InviteListResponse)
async def list_invites(
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> InviteListResponse:
    invites = await invite_service.list_invites(db, principal)
    return InviteListResponse(invites=[InviteRead.model_validate(i) for i in invites])


@router.delete("/{invite_id}", response_model=MessageResponse)
async def revoke_invite(
    invite_id: str,
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Revoke a pending invitation (admin only)."""
    await invite_service.revoke_invite(db, principal, invite_id)
    return MessageResponse(message="Invitation revoked")


@public_router.post(
    "/invites/validate",
    response_model=InviteValidateResponse,
    dependencies=[Depends(rate_limit("signup"))],
)
async def validate_invite(
    body: InviteValidateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> InviteValidateResponse:
    """Check an invitation token before showing the signup form."""
    invite, tenant = await invite_service.validate_invite(db, body.token)

    return InviteValidateResponse(
        email=invite.email,
        tenant_name=tenant.name,
        expires_at=invite.expires_at,
    )


@public_router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("signup"))],
)
async def signup(
    signup_data: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SignupResponse:
    """Redeem an invitation: create the account and sign in."""
    user, _tenant, access_token = await invite_service.redeem_invite(db, signup_data)

    return SignupResponse(
        access_token=access_token,
        user=UserRead.model_validate(user),
    )
