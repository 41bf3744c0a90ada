"""
Tenant user management.

Role changes and deletions run under the tenant row lock so the
last-admin check cannot be raced by a concurrent demotion.
"""

import logging

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.tenant import get_in_tenant_or_404, get_tenant_scoped_query, lock_tenant
from notesaas.features.auth.identity import Principal, issue_token
from notesaas.features.auth.policy import Action, authorize, ensure_not_last_admin
from notesaas.features.notes.quota import count_user_notes
from notesaas.models.note import Note
from notesaas.models.tenant import Tenant, TenantPlan
from notesaas.models.upgrade_request import UpgradeRequest, UpgradeRequestStatus
from notesaas.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Admin operations on users of a tenant."""

    @staticmethod
    async def list_users(db: AsyncSession, principal: Principal) -> list[User]:
        authorize(principal, Action.USER_LIST)
        result = await db.execute(
            get_tenant_scoped_query(User, principal.tenant_id)
            .order_by(User.created_at, User.email)
        )
        return list(result.scalars().all())

    @staticmethod
    async def change_role(
        db: AsyncSession,
        principal: Principal,
        user_id: str,
        role: UserRole,
    ) -> User:
        """
        Set a user's role.

        Raises:
            AuthorizationError: caller targets themselves
            LastAdminProtectedError: demoting the only admin
        """
        await lock_tenant(db, principal.tenant_id)
        user = await get_in_tenant_or_404(db, User, user_id, principal.tenant_id)
        authorize(principal, Action.USER_ROLE_CHANGE, user)

        if user.role == UserRole.ADMIN and role != UserRole.ADMIN:
            await ensure_not_last_admin(db, user)

        user.role = role
        await db.commit()
        await db.refresh(user)

        logger.info(f"Role changed: user {user.id} -> {role.value} by {principal.user_id}")
        return user

    @staticmethod
    async def change_plan(
        db: AsyncSession,
        principal: Principal,
        user_id: str,
        plan: TenantPlan | None,
    ) -> tuple[User, str | None]:
        """
        Set or clear a user's plan override.

        Returns:
            The user and, when the caller changed their own plan, a
            re-issued token carrying the new claim
        """
        user = await get_in_tenant_or_404(db, User, user_id, principal.tenant_id)
        authorize(principal, Action.USER_PLAN_CHANGE, user)

        user.plan = plan
        await db.commit()
        await db.refresh(user)

        logger.info(
            f"User plan changed: user {user.id} -> "
            f"{plan.value if plan else 'tenant default'} by {principal.user_id}"
        )

        if user.id != principal.user_id:
            return user, None

        tenant = await db.get(Tenant, principal.tenant_id)
        return user, issue_token(user, tenant)

    @staticmethod
    async def delete_user(db: AsyncSession, principal: Principal, user_id: str) -> None:
        """
        Remove a user from the tenant.

        Their notes stay in the tenant with no author. Pending upgrade
        requests are withdrawn here; reviewed ones go with the user row
        through the foreign key cascade.
        """
        await lock_tenant(db, principal.tenant_id)
        user = await get_in_tenant_or_404(db, User, user_id, principal.tenant_id)
        authorize(principal, Action.USER_DELETE, user)

        await ensure_not_last_admin(db, user)

        await db.execute(
            update(Note)
            .where(Note.tenant_id == principal.tenant_id, Note.author_id == user.id)
            .values(author_id=None)
            .execution_options(synchronize_session="fetch")
        )
        await db.execute(
            delete(UpgradeRequest)
            .where(
                UpgradeRequest.user_id == user.id,
                UpgradeRequest.status == UpgradeRequestStatus.PENDING,
            )
            .execution_options(synchronize_session="fetch")
        )
        await db.delete(user)
        await db.commit()

        logger.info(f"User deleted: {user_id} by {principal.user_id}")

    @staticmethod
    async def get_notes_count(db: AsyncSession, principal: Principal, user_id: str) -> int:
        """Number of notes authored by a user (self or admin)."""
        user = await get_in_tenant_or_404(db, User, user_id, principal.tenant_id)
        authorize(principal, Action.NOTE_COUNT_VIEW, user)
        return await count_user_notes(db, principal.tenant_id, user.id)


# Singleton instance
user_service = UserService()
