"""
Tenant information and plan changes.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.exceptions import ResourceNotFoundError
from notesaas.core.tenant import lock_tenant
from notesaas.features.auth.identity import Principal
from notesaas.features.auth.policy import Action, authorize
from notesaas.features.notes.quota import (
    count_tenant_notes,
    ensure_can_downgrade,
    max_notes_for_plan,
)
from notesaas.models.tenant import Tenant, TenantPlan
from notesaas.models.user import User
from notesaas.schemas.tenant import TenantRead, TenantUsage

logger = logging.getLogger(__name__)


class TenantService:

    @staticmethod
    async def get_usage(db: AsyncSession, principal: Principal) -> TenantUsage:
        """Caller's tenant with note and user counts."""
        tenant = await db.get(Tenant, principal.tenant_id)
        if tenant is None:
            raise ResourceNotFoundError("Tenant not found")

        note_count = await count_tenant_notes(db, tenant.id)
        user_result = await db.execute(
            select(func.count(User.id)).where(User.tenant_id == tenant.id)
        )

        return TenantUsage(
            **TenantRead.model_validate(tenant).model_dump(),
            note_count=note_count,
            user_count=user_result.scalar_one(),
        )

    @staticmethod
    async def change_plan(
        db: AsyncSession,
        principal: Principal,
        plan: TenantPlan,
    ) -> Tenant:
        """
        Move the tenant to ``plan`` and reset its note ceiling.

        Raises:
            QuotaExceededError: downgrading while holding too many notes
        """
        authorize(principal, Action.TENANT_PLAN_CHANGE)

        tenant = await lock_tenant(db, principal.tenant_id)
        ensure_can_downgrade(await count_tenant_notes(db, tenant.id), plan)

        previous = TenantPlan(tenant.plan)
        tenant.plan = plan
        tenant.max_notes = max_notes_for_plan(plan)
        await db.commit()
        await db.refresh(tenant)

        logger.info(
            f"Tenant {tenant.slug} plan changed: {previous.value} -> {plan.value} "
            f"by {principal.user_id}"
        )
        return tenant


# Singleton instance
tenant_service = TenantService()
