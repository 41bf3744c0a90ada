"""
User management endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.database import get_db
from notesaas.features.auth.identity import CurrentPrincipal
from notesaas.features.auth.policy import TenantAdmin
from notesaas.features.users.service import user_service
from notesaas.schemas.common import MessageResponse
from notesaas.schemas.user import (
    NotesCountResponse,
    RoleUpdate,
    UserListResponse,
    UserPlanUpdate,
    UserRead,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants/{slug}/users", tags=["Users"])
stats_router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserListResponse:
    """List users of the tenant (admin only)."""
    users = await user_service.list_users(db, principal)
    return UserListResponse(users=[UserRead.model_validate(u) for u in users])


@router.patch("/{user_id}/role", response_model=UserResponse)
async def change_role(
    user_id: str,
    body: RoleUpdate,
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    """
    Change a user's role (admin only).

    - Admins cannot change their own role
    - The last admin of a tenant cannot be demoted
    """
    user = await user_service.change_role(db, principal, user_id, body.role)
    return UserResponse(user=UserRead.model_validate(user))


@router.patch("/{user_id}/plan", response_model=UserResponse)
async def change_plan(
    user_id: str,
    body: UserPlanUpdate,
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    """Set a per-user plan override (admin only). Returns a new token for self-updates."""
    user, access_token = await user_service.change_plan(db, principal, user_id, body.plan)
    return UserResponse(user=UserRead.model_validate(user), access_token=access_token)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    principal: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Remove a user from the tenant (admin only)."""
    await user_service.delete_user(db, principal, user_id)
    return MessageResponse(message="User deleted successfully")


@stats_router.get("/{user_id}/notes-count", response_model=NotesCountResponse)
async def get_notes_count(
    user_id: str,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NotesCountResponse:
    count = await user_service.get_notes_count(db, principal, user_id)
    return NotesCountResponse(user_id=user_id, count=count)
