"""
Authentication business logic.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.config import settings
from notesaas.core.exceptions import AuthenticationError, ConflictError
from notesaas.core.security import hash_password, verify_password
from notesaas.features.auth.identity import INVALID_CREDENTIALS, Principal, issue_token
from notesaas.features.auth.schemas import RegisterRequest, TokenResponse
from notesaas.features.notes.quota import max_notes_for_plan
from notesaas.models.tenant import Tenant, TenantPlan
from notesaas.models.user import User, UserRole
from notesaas.schemas.tenant import TenantRead
from notesaas.schemas.user import UserRead

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service with business logic."""

    @staticmethod
    async def authenticate_user(
        db: AsyncSession,
        email: str,
        password: str,
    ) -> tuple[User, Tenant] | None:
        """
        Authenticate user by email and password.

        Returns:
            (user, tenant) if authenticated, None otherwise
        """
        email = email.lower()
        result = await db.execute(
            select(User, Tenant)
            .join(Tenant, Tenant.id == User.tenant_id)
            .where(User.email == email)
        )
        row = result.one_or_none()

        if row is None:
            logger.warning(f"Login attempt for non-existent user: {email}")
            return None

        user, tenant = row

        if not verify_password(password, user.hashed_password):
            logger.warning(f"Failed login attempt for user: {email}")
            return None

        if not user.is_active:
            logger.warning(f"Login attempt for inactive user: {email}")
            return None

        logger.info(f"User authenticated successfully: {email}")
        return user, tenant

    @staticmethod
    async def login(db: AsyncSession, email: str, password: str) -> TokenResponse:
        """Authenticate and issue a token, or raise ``AuthenticationError``."""
        authenticated = await AuthService.authenticate_user(db, email, password)
        if authenticated is None:
            raise AuthenticationError(INVALID_CREDENTIALS)

        user, tenant = authenticated
        return AuthService.generate_token(user, tenant)

    @staticmethod
    async def register_tenant(db: AsyncSession, data: RegisterRequest) -> TokenResponse:
        """
        Create a Free tenant and its first Admin.

        Raises:
            ConflictError: slug or email already taken
        """
        slug_taken = await db.execute(select(Tenant.id).where(Tenant.slug == data.tenant_slug))
        if slug_taken.scalar_one_or_none() is not None:
            raise ConflictError("Tenant slug is already taken")

        email_taken = await db.execute(select(User.id).where(User.email == data.email))
        if email_taken.scalar_one_or_none() is not None:
            raise ConflictError("A user with this email already exists")

        tenant = Tenant(
            name=data.tenant_name,
            slug=data.tenant_slug,
            plan=TenantPlan.FREE,
            max_notes=max_notes_for_plan(TenantPlan.FREE),
        )
        db.add(tenant)
        await db.flush()

        user = User(
            email=data.email,
            hashed_password=hash_password(data.password),
            full_name=data.full_name,
            role=UserRole.ADMIN,
            tenant_id=tenant.id,
            is_active=True,
        )
        db.add(user)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Tenant slug or email is already taken")

        await db.refresh(tenant)
        await db.refresh(user)

        logger.info(f"Tenant registered: {tenant.slug} (admin {user.email})")
        return AuthService.generate_token(user, tenant)

    @staticmethod
    async def get_profile(db: AsyncSession, principal: Principal) -> tuple[User, Tenant]:
        """Current user and tenant rows for the principal."""
        result = await db.execute(
            select(User, Tenant)
            .join(Tenant, Tenant.id == User.tenant_id)
            .where(User.id == principal.user_id)
        )
        row = result.one_or_none()
        if row is None:
            raise AuthenticationError(INVALID_CREDENTIALS)
        return row[0], row[1]

    @staticmethod
    def generate_token(user: User, tenant: Tenant) -> TokenResponse:
        """
        Generate an access token for a user.

        Args:
            user: Authenticated user
            tenant: The user's tenant (claims carry slug and plan)
        """
        return TokenResponse(
            access_token=issue_token(user, tenant),
            token_type="bearer",
            expires_in=settings.access_token_expire_minutes * 60,
            user=UserRead.model_validate(user),
            tenant=TenantRead.model_validate(tenant),
        )


# Singleton instance
auth_service = AuthService()
