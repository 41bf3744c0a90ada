"""
Authentication-specific schemas.
"""

from pydantic import EmailStr, Field, field_validator

from notesaas.schemas.common import BaseSchema, SuccessResponse
from notesaas.schemas.tenant import TenantRead
from notesaas.schemas.user import PasswordMixin, UserRead


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=1, description="User password")


class RegisterRequest(PasswordMixin):
    """Create a new tenant together with its first admin."""

    tenant_name: str = Field(..., min_length=1, max_length=255, description="Organization name")
    tenant_slug: str = Field(
        ...,
        min_length=2,
        max_length=100,
        pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
        description="URL-friendly identifier",
    )
    email: EmailStr = Field(..., description="Admin email")
    full_name: str | None = Field(None, max_length=255)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class TokenResponse(SuccessResponse):
    """Token response schema."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration in seconds")
    user: UserRead
    tenant: TenantRead


class MeResponse(SuccessResponse):
    user: UserRead
    tenant: TenantRead
