"""
Identity verification.

Turns a bearer credential into a ``Principal`` or raises
``AuthenticationError``. Two interchangeable verifiers exist and the
``IDENTITY_VERIFIER`` setting picks one:

- ``token``: stateless, trusts the signed claims until the token expires
- ``database``: validates the signature, then re-reads user and tenant so
  role/plan changes and deletions take effect immediately

Every failure surfaces as the same message; the reason is only logged.
"""

from dataclasses import dataclass
from typing import Annotated, Any

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.config import settings
from notesaas.core.context import bind_identity
from notesaas.core.database import get_db
from notesaas.core.exceptions import AuthenticationError
from notesaas.core.security import create_access_token, decode_token
from notesaas.models.tenant import Tenant, TenantPlan
from notesaas.models.user import User, UserRole

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid or missing credentials"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated identity extracted from a request."""

    user_id: str
    email: str
    role: UserRole
    tenant_id: str
    tenant_slug: str
    plan: TenantPlan
    user_plan: TenantPlan | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def effective_plan(self) -> TenantPlan:
        """A per-user override can only tighten the tenant plan."""
        if self.user_plan == TenantPlan.FREE:
            return TenantPlan.FREE
        return self.plan

    @classmethod
    def from_models(cls, user: User, tenant: Tenant) -> "Principal":
        return cls(
            user_id=user.id,
            email=user.email,
            role=UserRole(user.role),
            tenant_id=tenant.id,
            tenant_slug=tenant.slug,
            plan=TenantPlan(tenant.plan),
            user_plan=TenantPlan(user.plan) if user.plan else None,
        )

    def to_claims(self) -> dict[str, Any]:
        return {
            "sub": self.user_id,
            "email": self.email,
            "role": self.role.value,
            "tenant_id": self.tenant_id,
            "tenant_slug": self.tenant_slug,
            "plan": self.plan.value,
            "user_plan": self.user_plan.value if self.user_plan else None,
        }


def issue_token(user: User, tenant: Tenant) -> str:
    """Sign a fresh access token carrying the current claims."""
    return create_access_token(Principal.from_models(user, tenant).to_claims())


def _decode_access_token(token: str) -> dict[str, Any]:
    try:
        payload = decode_token(token)
    except JWTError:
        raise AuthenticationError(INVALID_CREDENTIALS)

    if payload.get("type") != "access":
        logger.info("credential_rejected", reason="wrong_token_type")
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not payload.get("sub"):
        logger.info("credential_rejected", reason="missing_subject")
        raise AuthenticationError(INVALID_CREDENTIALS)

    return payload


class IdentityVerifier:
    """Interface: ``verify(credential) -> Principal``."""

    name = "base"

    async def verify(self, credential: str, db: AsyncSession) -> Principal:
        raise NotImplementedError


class TokenIdentityVerifier(IdentityVerifier):
    """Builds the principal from signed claims alone. No storage access."""

    name = "token"

    async def verify(self, credential: str, db: AsyncSession) -> Principal:
        payload = _decode_access_token(credential)

        try:
            return Principal(
                user_id=payload["sub"],
                email=payload["email"],
                role=UserRole(payload["role"]),
                tenant_id=payload["tenant_id"],
                tenant_slug=payload["tenant_slug"],
                plan=TenantPlan(payload["plan"]),
                user_plan=TenantPlan(payload["user_plan"]) if payload.get("user_plan") else None,
            )
        except (KeyError, ValueError) as e:
            logger.info("credential_rejected", reason="malformed_claims", error=str(e))
            raise AuthenticationError(INVALID_CREDENTIALS)


class DatabaseIdentityVerifier(IdentityVerifier):
    """Validates the token, then loads live user and tenant state."""

    name = "database"

    async def verify(self, credential: str, db: AsyncSession) -> Principal:
        payload = _decode_access_token(credential)

        result = await db.execute(
            select(User, Tenant)
            .join(Tenant, Tenant.id == User.tenant_id)
            .where(User.id == payload["sub"])
        )
        row = result.one_or_none()

        if row is None:
            logger.info("credential_rejected", reason="unknown_user", user_id=payload["sub"])
            raise AuthenticationError(INVALID_CREDENTIALS)

        user, tenant = row
        if not user.is_active:
            logger.info("credential_rejected", reason="inactive_user", user_id=user.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        return Principal.from_models(user, tenant)


_VERIFIERS: dict[str, IdentityVerifier] = {
    TokenIdentityVerifier.name: TokenIdentityVerifier(),
    DatabaseIdentityVerifier.name: DatabaseIdentityVerifier(),
}


def get_identity_verifier() -> IdentityVerifier:
    """Verifier selected by configuration."""
    return _VERIFIERS[settings.identity_verifier]


async def get_current_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Principal:
    """
    FastAPI dependency: authenticate the request.

    Sets tenant context on request state and in the logging contextvars.
    """
    if not credentials or not credentials.credentials:
        logger.info("credential_rejected", reason="missing_credentials", path=request.url.path)
        raise AuthenticationError(INVALID_CREDENTIALS)

    principal = await get_identity_verifier().verify(credentials.credentials, db)

    request.state.user_id = principal.user_id
    request.state.tenant_id = principal.tenant_id
    bind_identity(
        principal.user_id,
        principal.tenant_id,
        tenant_slug=principal.tenant_slug,
        role=principal.role.value,
    )

    return principal


# Type alias for route signatures
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
