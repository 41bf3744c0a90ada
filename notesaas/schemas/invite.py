"""
Pydantic schemas for invitations and invite-based signup.
"""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from notesaas.models.invite import InviteStatus
from notesaas.schemas.common import BaseSchema, SuccessResponse
from notesaas.schemas.user import PasswordMixin, UserRead


class InviteCreate(BaseSchema):
    """Invite a user by email."""

    email: EmailStr

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class InviteRead(BaseSchema):
    """Invite as shown to admins. The token is never listed."""

    id: str
    email: str
    status: InviteStatus
    tenant_id: str
    invited_by_id: str | None
    expires_at: datetime
    created_at: datetime


class InviteIssuedResponse(SuccessResponse):
    invite: InviteRead
    invite_link: str


class InviteListResponse(SuccessResponse):
    invites: list[InviteRead]


class InviteValidateRequest(BaseSchema):
    token: str = Field(..., min_length=1, max_length=128)


class InviteValidateResponse(SuccessResponse):
    email: str
    tenant_name: str
    expires_at: datetime


class SignupRequest(PasswordMixin):
    """Redeem an invitation."""

    token: str = Field(..., min_length=1, max_length=128)
    email: EmailStr | None = Field(None, description="Must match the invited address if given")
    full_name: str | None = Field(None, max_length=255)


class SignupResponse(SuccessResponse):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
