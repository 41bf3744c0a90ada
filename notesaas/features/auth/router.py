"""
Authentication endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.database import get_db
from notesaas.core.rate_limit import rate_limit
from notesaas.features.auth.identity import CurrentPrincipal
from notesaas.features.auth.schemas import (
    LoginRequest,
    MeResponse,
    RegisterRequest,
    TokenResponse,
)
from notesaas.features.auth.service import auth_service
from notesaas.schemas.common import MessageResponse
from notesaas.schemas.tenant import TenantRead
from notesaas.schemas.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=TokenResponse,
    dependencies=[Depends(rate_limit("auth"))],
)
async def login(
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Login with a JSON body. Returns an access token plus user and tenant."""
    return await auth_service.login(db, login_data.email, login_data.password)


@router.post(
    "/token",
    response_model=TokenResponse,
    dependencies=[Depends(rate_limit("auth"))],
)
async def login_form(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """
    OAuth2 compatible token login.

    Uses OAuth2PasswordRequestForm (username/password from form data).
    We treat 'username' as email.
    """
    return await auth_service.login(db, form_data.username, form_data.password)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("signup"))],
)
async def register(
    register_data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """
    Register a new organization.

    Creates a Free tenant and makes the caller its first Admin.
    """
    return await auth_service.register_tenant(db, register_data)


@router.get("/me", response_model=MeResponse)
async def get_current_user_info(
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MeResponse:
    """Get the authenticated user and their tenant."""
    user, tenant = await auth_service.get_profile(db, principal)
    return MeResponse(
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(principal: CurrentPrincipal) -> MessageResponse:
    """
    Logout endpoint.

    Tokens are stateless; the client discards its token.
    """
    logger.info(f"User logged out: {principal.email}")
    return MessageResponse(message="Successfully logged out")
