"""
Upgrade requests: members ask, admins approve or reject.

Approval moves the tenant to Pro in the same transaction as the status
change.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.exceptions import AuthenticationError, ConflictError, ValidationError
from notesaas.core.metrics import upgrade_requests_total
from notesaas.core.tenant import get_in_tenant_or_404, get_tenant_scoped_query, lock_tenant
from notesaas.features.auth.identity import INVALID_CREDENTIALS, Principal
from notesaas.features.auth.policy import Action, authorize
from notesaas.features.notes.quota import max_notes_for_plan
from notesaas.features.notifications import dispatch
from notesaas.models.tenant import Tenant, TenantPlan
from notesaas.models.upgrade_request import UpgradeRequest, UpgradeRequestStatus
from notesaas.models.user import User, UserRole

logger = structlog.get_logger(__name__)

PENDING_EXISTS = "You already have a pending upgrade request"


class UpgradeRequestService:

    @staticmethod
    async def create_request(db: AsyncSession, principal: Principal) -> UpgradeRequest:
        """
        File an upgrade request for the caller's tenant and notify its admins.

        Raises:
            AuthenticationError: the caller's user no longer exists
            ValidationError: tenant is already on Pro
            ConflictError: caller already has a pending request
        """
        authorize(principal, Action.UPGRADE_REQUEST)

        # Token-mode principals can outlive their user row
        if await db.get(User, principal.user_id) is None:
            raise AuthenticationError(INVALID_CREDENTIALS)

        tenant = await db.get(Tenant, principal.tenant_id)
        if tenant.plan == TenantPlan.PRO:
            raise ValidationError("Tenant is already on the Pro plan")

        existing = await db.execute(
            select(UpgradeRequest.id).where(
                UpgradeRequest.user_id == principal.user_id,
                UpgradeRequest.status == UpgradeRequestStatus.PENDING,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(PENDING_EXISTS)

        request = UpgradeRequest(
            user_id=principal.user_id,
            tenant_id=principal.tenant_id,
            status=UpgradeRequestStatus.PENDING,
        )
        db.add(request)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(PENDING_EXISTS)

        await db.refresh(request)
        upgrade_requests_total.labels(status=UpgradeRequestStatus.PENDING.value).inc()
        logger.info("upgrade_requested", request_id=request.id)

        admins = await db.execute(
            select(User.email).where(
                User.tenant_id == principal.tenant_id,
                User.role == UserRole.ADMIN,
                User.is_active.is_(True),
            )
        )
        dispatch.notify_upgrade_request(
            admin_emails=list(admins.scalars().all()),
            tenant_name=tenant.name,
            requesting_user_email=principal.email,
        )

        return request

    @staticmethod
    async def list_pending(db: AsyncSession, principal: Principal) -> list[UpgradeRequest]:
        authorize(principal, Action.UPGRADE_REVIEW)
        result = await db.execute(
            get_tenant_scoped_query(UpgradeRequest, principal.tenant_id)
            .where(UpgradeRequest.status == UpgradeRequestStatus.PENDING)
            .order_by(UpgradeRequest.created_at, UpgradeRequest.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def review(
        db: AsyncSession,
        principal: Principal,
        request_id: str,
        status: UpgradeRequestStatus,
    ) -> UpgradeRequest:
        """Approve or reject a pending request of the caller's tenant."""
        tenant = await lock_tenant(db, principal.tenant_id)
        request = await get_in_tenant_or_404(db, UpgradeRequest, request_id, principal.tenant_id)
        authorize(principal, Action.UPGRADE_REVIEW, request)

        if request.status != UpgradeRequestStatus.PENDING:
            raise ConflictError(
                f"Upgrade request is already {UpgradeRequestStatus(request.status).value}"
            )

        request.status = status
        request.reviewed_by_id = principal.user_id

        if status == UpgradeRequestStatus.APPROVED:
            tenant.plan = TenantPlan.PRO
            tenant.max_notes = max_notes_for_plan(TenantPlan.PRO)

        await db.commit()
        await db.refresh(request)

        upgrade_requests_total.labels(status=status.value).inc()
        logger.info("upgrade_reviewed", request_id=request.id, status=status.value)
        return request


# Singleton instance
upgrade_request_service = UpgradeRequestService()
