"""
Tenant quota policy.

Free tenants hold at most ``FREE_PLAN_MAX_NOTES`` notes; Pro tenants are
unlimited. The pure decision (``can_create_note``) is kept separate from
the counting so it can be reasoned about on its own. Callers count while
holding the tenant row lock (see ``notesaas.core.tenant.lock_tenant``) and
insert in the same transaction.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.config import settings
from notesaas.core.exceptions import QuotaExceededError
from notesaas.core.metrics import quota_rejections_total
from notesaas.models.note import Note
from notesaas.models.tenant import Tenant, TenantPlan

logger = logging.getLogger(__name__)


def max_notes_for_plan(plan: TenantPlan) -> int:
    """Note ceiling stored on the tenant for a given plan."""
    if plan == TenantPlan.PRO:
        return settings.pro_plan_max_notes
    return settings.free_plan_max_notes


def can_create_note(plan: TenantPlan, max_notes: int, current_count: int) -> bool:
    """
    Decide whether one more note fits.

    Pro always allows; Free allows while ``current_count < max_notes``.
    """
    if plan == TenantPlan.PRO:
        return True
    return current_count < max_notes


def ensure_can_create_note(plan: TenantPlan, max_notes: int, current_count: int) -> None:
    """Raise ``QuotaExceededError`` if one more note does not fit."""
    if not can_create_note(plan, max_notes, current_count):
        quota_rejections_total.labels(operation="create_note", plan=TenantPlan(plan).value).inc()
        logger.info(
            f"Note quota reached: plan={TenantPlan(plan).value} "
            f"count={current_count} max={max_notes}"
        )
        raise QuotaExceededError(
            "Note limit reached for the Free plan. Upgrade to Pro for unlimited notes.",
            details={"limit": max_notes, "current": current_count},
        )


def ensure_can_downgrade(current_count: int, target_plan: TenantPlan) -> None:
    """Refuse a move to Free while the tenant holds more notes than Free allows."""
    if target_plan != TenantPlan.FREE:
        return

    limit = settings.free_plan_max_notes
    if current_count > limit:
        quota_rejections_total.labels(operation="downgrade", plan=TenantPlan.FREE.value).inc()
        raise QuotaExceededError(
            f"Cannot downgrade to Free with {current_count} notes (limit {limit}). "
            "Delete notes first.",
            details={"limit": limit, "current": current_count},
        )


async def count_tenant_notes(db: AsyncSession, tenant_id: str) -> int:
    result = await db.execute(
        select(func.count(Note.id)).where(Note.tenant_id == tenant_id)
    )
    return result.scalar_one()


async def count_user_notes(db: AsyncSession, tenant_id: str, user_id: str) -> int:
    result = await db.execute(
        select(func.count(Note.id)).where(
            Note.tenant_id == tenant_id,
            Note.author_id == user_id,
        )
    )
    return result.scalar_one()


async def check_note_quota(
    db: AsyncSession,
    tenant: Tenant,
    user_id: str,
    user_plan: TenantPlan | None,
) -> None:
    """
    Enforce the tenant quota and any per-user Free override.

    ``tenant`` must be the row locked by the current transaction.
    """
    tenant_count = await count_tenant_notes(db, tenant.id)
    ensure_can_create_note(TenantPlan(tenant.plan), tenant.max_notes, tenant_count)

    if user_plan == TenantPlan.FREE and tenant.plan != TenantPlan.FREE:
        user_count = await count_user_notes(db, tenant.id, user_id)
        ensure_can_create_note(TenantPlan.FREE, settings.free_plan_max_notes, user_count)
