"""
Pydantic schemas for User.
"""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from notesaas.models.tenant import TenantPlan
from notesaas.models.user import UserRole
from notesaas.schemas.common import BaseSchema, SuccessResponse


def validate_password_strength(v: str) -> str:
    """
    Validate password strength.

    Requirements:
    - At least 8 characters (enforced by the field)
    - Contains uppercase and lowercase
    - Contains at least one digit
    """
    if not any(char.isupper() for char in v):
        raise ValueError('Password must contain at least one uppercase letter')
    if not any(char.islower() for char in v):
        raise ValueError('Password must contain at least one lowercase letter')
    if not any(char.isdigit() for char in v):
        raise ValueError('Password must contain at least one digit')
    return v


class PasswordMixin(BaseSchema):
    """Adds a validated password field."""

    password: str = Field(..., min_length=8, max_length=100, description="User password")

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UserBase(BaseSchema):
    """Base user schema."""

    email: EmailStr = Field(..., description="User email address")
    full_name: str | None = Field(None, max_length=255, description="User's full name")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserRead(UserBase):
    """Schema for reading user data."""

    id: str
    role: UserRole
    plan: TenantPlan | None = None
    is_active: bool
    tenant_id: str
    created_at: datetime


class RoleUpdate(BaseSchema):
    """Role change request."""

    role: UserRole


class UserPlanUpdate(BaseSchema):
    """Per-user plan override. ``None`` clears the override."""

    plan: TenantPlan | None = None


class UserResponse(SuccessResponse):
    user: UserRead
    # Set when the caller changed their own claims
    access_token: str | None = None


class UserListResponse(SuccessResponse):
    users: list[UserRead]


class NotesCountResponse(SuccessResponse):
    user_id: str
    count: int
