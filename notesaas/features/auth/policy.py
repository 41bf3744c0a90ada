"""
Authorization policy.

``authorize(principal, action, target)`` either returns or raises:

- ``ResourceNotFoundError`` when the target lives in another tenant
- ``AuthorizationError`` when the role or ownership rule fails

Last-admin protection needs the store, so it lives in the async
``ensure_not_last_admin`` helper.
"""

from enum import Enum
from typing import Annotated, Any

import structlog
from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.config import settings
from notesaas.core.exceptions import (
    AuthorizationError,
    LastAdminProtectedError,
    ResourceNotFoundError,
)
from notesaas.features.auth.identity import CurrentPrincipal, Principal
from notesaas.models.user import User, UserRole

logger = structlog.get_logger(__name__)


class Action(str, Enum):
    # Notes
    NOTE_READ = "note:read"
    NOTE_CREATE = "note:create"
    NOTE_UPDATE = "note:update"
    NOTE_DELETE = "note:delete"
    NOTE_COUNT_VIEW = "note:count"

    # Tenant administration
    INVITE_MANAGE = "invite:manage"
    USER_LIST = "user:list"
    USER_ROLE_CHANGE = "user:role"
    USER_PLAN_CHANGE = "user:plan"
    USER_DELETE = "user:delete"
    TENANT_PLAN_CHANGE = "tenant:plan"
    UPGRADE_REVIEW = "upgrade:review"

    UPGRADE_REQUEST = "upgrade:request"


ADMIN_ONLY_ACTIONS = frozenset({
    Action.INVITE_MANAGE,
    Action.USER_LIST,
    Action.USER_ROLE_CHANGE,
    Action.USER_PLAN_CHANGE,
    Action.USER_DELETE,
    Action.TENANT_PLAN_CHANGE,
    Action.UPGRADE_REVIEW,
})


def _deny(principal: Principal, action: Action, message: str) -> None:
    logger.info(
        "authorization_denied",
        action=action.value,
        role=principal.role.value,
        reason=message,
    )
    raise AuthorizationError(message)


def authorize(principal: Principal, action: Action, target: Any = None) -> None:
    """
    Check whether ``principal`` may perform ``action`` on ``target``.

    ``target`` is an ORM row (Note, User, Invite, ...) or ``None``.
    """
    target_tenant = getattr(target, "tenant_id", None)
    if target is not None and target_tenant is not None and target_tenant != principal.tenant_id:
        # Never reveal that the row exists elsewhere
        raise ResourceNotFoundError(f"{type(target).__name__} not found")

    if action in ADMIN_ONLY_ACTIONS and not principal.is_admin:
        _deny(principal, action, "Admin access required")

    if action == Action.NOTE_CREATE:
        if principal.is_admin and not settings.admins_can_create_notes:
            _deny(principal, action, "Admins cannot create notes")

    elif action in (Action.NOTE_UPDATE, Action.NOTE_DELETE):
        if not principal.is_admin and getattr(target, "author_id", None) != principal.user_id:
            _deny(principal, action, "Only the author or an admin can modify this note")

    elif action == Action.NOTE_COUNT_VIEW:
        if not principal.is_admin and getattr(target, "id", None) != principal.user_id:
            _deny(principal, action, "Not allowed to view this user's note count")

    elif action == Action.USER_ROLE_CHANGE:
        if getattr(target, "id", None) == principal.user_id:
            _deny(principal, action, "You cannot change your own role")


def require_tenant_slug(principal: Principal, slug: str) -> None:
    """Routes under /tenants/{slug} are only reachable for the caller's own tenant."""
    if slug != principal.tenant_slug:
        logger.warning(
            "tenant_slug_mismatch",
            requested_slug=slug,
            tenant_slug=principal.tenant_slug,
        )
        raise AuthorizationError("Access denied to this tenant")


async def count_admins(db: AsyncSession, tenant_id: str) -> int:
    result = await db.execute(
        select(func.count(User.id)).where(
            User.tenant_id == tenant_id,
            User.role == UserRole.ADMIN,
        )
    )
    return result.scalar_one()


async def ensure_not_last_admin(db: AsyncSession, user: User) -> None:
    """
    Refuse to demote or remove the only Admin of a tenant.

    Callers should hold the tenant row lock so two concurrent demotions
    cannot both observe two admins.
    """
    if user.role != UserRole.ADMIN:
        return

    if await count_admins(db, user.tenant_id) <= 1:
        logger.info("last_admin_protected", target_user_id=user.id)
        raise LastAdminProtectedError("A tenant must keep at least one admin")


async def get_tenant_principal(slug: str, principal: CurrentPrincipal) -> Principal:
    """Dependency: caller is authenticated and addressing their own tenant."""
    require_tenant_slug(principal, slug)
    return principal


async def get_tenant_admin(
    principal: Annotated[Principal, Depends(get_tenant_principal)],
) -> Principal:
    """Dependency: caller is an Admin of the tenant named in the path."""
    if not principal.is_admin:
        logger.info("authorization_denied", reason="admin_required", role=principal.role.value)
        raise AuthorizationError("Admin access required")
    return principal


TenantAdmin = Annotated[Principal, Depends(get_tenant_admin)]
