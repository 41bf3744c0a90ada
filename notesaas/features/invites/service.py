"""
Invitation lifecycle.

    pending --redeem--> accepted
    pending --lapse---> expired

Both end states are terminal. At most one pending invite exists per
(email, tenant); the partial unique index enforces it even under races.
"""

from datetime import timedelta

import structlog
from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.config import settings
from notesaas.core.exceptions import (
    ConflictError,
    InvalidOrExpiredTokenError,
    ValidationError,
)
from notesaas.core.metrics import invitations_total
from notesaas.core.security import generate_invite_token, hash_password, utcnow
from notesaas.core.tenant import get_in_tenant_or_404, get_tenant_scoped_query
from notesaas.features.auth.identity import Principal, issue_token
from notesaas.features.auth.policy import Action, authorize
from notesaas.features.notifications import dispatch
from notesaas.models.invite import Invite, InviteStatus
from notesaas.models.tenant import Tenant
from notesaas.models.user import User, UserRole
from notesaas.schemas.invite import SignupRequest

logger = structlog.get_logger(__name__)

INVALID_INVITE = "Invalid or expired invitation"


def build_invite_link(token: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/signup?token={token}"


class InviteService:
    """Issue, validate, redeem, revoke and list invitations."""

    @staticmethod
    async def issue_invite(
        db: AsyncSession,
        principal: Principal,
        email: str,
    ) -> tuple[Invite, str]:
        """
        Invite ``email`` into the caller's tenant.

        Returns:
            The pending invite and its signup link

        Raises:
            ConflictError: the email already has an account, or a live
                pending invite exists for this tenant
        """
        authorize(principal, Action.INVITE_MANAGE)
        email = email.lower()

        existing_user = await db.execute(select(User.id).where(User.email == email))
        if existing_user.scalar_one_or_none() is not None:
            raise ConflictError("A user with this email already exists")

        now = utcnow()

        # Clear out dead invites for the same pair before checking for a live one
        await db.execute(
            delete(Invite).where(
                Invite.email == email,
                Invite.tenant_id == principal.tenant_id,
                or_(
                    Invite.status == InviteStatus.EXPIRED,
                    (Invite.status == InviteStatus.PENDING) & (Invite.expires_at <= now),
                ),
            )
            .execution_options(synchronize_session="fetch")
        )

        live = await db.execute(
            select(Invite.id).where(
                Invite.email == email,
                Invite.tenant_id == principal.tenant_id,
                Invite.status == InviteStatus.PENDING,
            )
        )
        if live.scalar_one_or_none() is not None:
            raise ConflictError("A pending invitation already exists for this email")

        invite = Invite(
            email=email,
            token=generate_invite_token(),
            status=InviteStatus.PENDING,
            expires_at=now + timedelta(hours=settings.invite_ttl_hours),
            tenant_id=principal.tenant_id,
            invited_by_id=principal.user_id,
        )
        db.add(invite)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info("invite_conflict", email=email)
            raise ConflictError("A pending invitation already exists for this email")

        await db.refresh(invite)

        tenant = await db.get(Tenant, principal.tenant_id)
        invite_link = build_invite_link(invite.token)

        invitations_total.labels(event="issued").inc()
        logger.info("invite_issued", invite_id=invite.id, email=email)

        dispatch.notify_invitation(
            email=email,
            invite_link=invite_link,
            tenant_name=tenant.name,
            role=UserRole.MEMBER.value,
        )

        return invite, invite_link

    @staticmethod
    async def validate_invite(
        db: AsyncSession,
        token: str,
        *,
        for_update: bool = False,
    ) -> tuple[Invite, Tenant]:
        """
        Resolve a pending, unexpired invite by token.

        A lapsed invite is durably flipped to ``expired`` before the error
        is raised.

        Raises:
            InvalidOrExpiredTokenError: unknown, used, or lapsed token
        """
        query = select(Invite).where(Invite.token == token)
        if for_update:
            query = query.with_for_update()

        result = await db.execute(query)
        invite = result.scalar_one_or_none()

        if invite is None or invite.status != InviteStatus.PENDING:
            logger.info("invite_rejected", reason="unknown_or_used")
            raise InvalidOrExpiredTokenError(INVALID_INVITE)

        if invite.is_expired():
            invite.status = InviteStatus.EXPIRED
            await db.commit()
            invitations_total.labels(event="expired").inc()
            logger.info("invite_rejected", reason="expired", invite_id=invite.id)
            raise InvalidOrExpiredTokenError(INVALID_INVITE)

        tenant = await db.get(Tenant, invite.tenant_id)
        return invite, tenant

    @staticmethod
    async def redeem_invite(
        db: AsyncSession,
        signup: SignupRequest,
    ) -> tuple[User, Tenant, str]:
        """
        Create a Member from a valid invite and mark the invite accepted.

        User creation and the status flip commit together.

        Returns:
            The new user, their tenant and a fresh access token
        """
        invite, tenant = await InviteService.validate_invite(db, signup.token, for_update=True)

        if signup.email is not None and signup.email.lower() != invite.email:
            raise ValidationError("Email does not match the invitation")

        result = await db.execute(select(User).where(User.email == invite.email))
        existing = result.scalar_one_or_none()
        if existing is not None:
            if existing.tenant_id == invite.tenant_id:
                # Account was created some other way; the invite is spent
                invite.status = InviteStatus.ACCEPTED
                await db.commit()
            raise ConflictError("A user with this email already exists")

        user = User(
            email=invite.email,
            hashed_password=hash_password(signup.password),
            full_name=signup.full_name,
            role=UserRole.MEMBER,
            tenant_id=invite.tenant_id,
            is_active=True,
        )
        db.add(user)
        invite.status = InviteStatus.ACCEPTED

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("A user with this email already exists")

        await db.refresh(user)

        invitations_total.labels(event="accepted").inc()
        logger.info("invite_redeemed", invite_id=invite.id, user_id=user.id)

        return user, tenant, issue_token(user, tenant)

    @staticmethod
    async def revoke_invite(db: AsyncSession, principal: Principal, invite_id: str) -> None:
        """Delete a pending invite of the caller's tenant."""
        invite = await get_in_tenant_or_404(db, Invite, invite_id, principal.tenant_id)
        authorize(principal, Action.INVITE_MANAGE, invite)

        if invite.status != InviteStatus.PENDING:
            raise ConflictError(f"Invitation is already {InviteStatus(invite.status).value}")

        await db.delete(invite)
        await db.commit()

        invitations_total.labels(event="revoked").inc()
        logger.info("invite_revoked", invite_id=invite_id)

    @staticmethod
    async def list_invites(db: AsyncSession, principal: Principal) -> list[Invite]:
        """Tenant invites, newest first. Lapsed pending invites are marked expired."""
        authorize(principal, Action.INVITE_MANAGE)

        lapsed = await db.execute(
            update(Invite)
            .where(
                Invite.tenant_id == principal.tenant_id,
                Invite.status == InviteStatus.PENDING,
                Invite.expires_at <= utcnow(),
            )
            .values(status=InviteStatus.EXPIRED)
            .execution_options(synchronize_session="fetch")
        )
        if lapsed.rowcount:
            invitations_total.labels(event="expired").inc(lapsed.rowcount)
            await db.commit()

        result = await db.execute(
            get_tenant_scoped_query(Invite, principal.tenant_id)
            .order_by(Invite.created_at.desc(), Invite.id)
        )
        return list(result.scalars().all())


# Singleton instance
invite_service = InviteService()
