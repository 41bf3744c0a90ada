"""
Pydantic schemas package.
"""

from notesaas.schemas.common import (
    BaseSchema,
    ErrorResponse,
    MessageResponse,
    PaginationParams,
    SuccessResponse,
)
from notesaas.schemas.invite import (
    InviteCreate,
    InviteIssuedResponse,
    InviteListResponse,
    InviteRead,
    InviteValidateRequest,
    InviteValidateResponse,
    SignupRequest,
    SignupResponse,
)
from notesaas.schemas.note import (
    NoteCreate,
    NoteListResponse,
    NoteRead,
    NoteResponse,
    NoteUpdate,
)
from notesaas.schemas.tenant import (
    PlanChangeRequest,
    TenantRead,
    TenantResponse,
    TenantUsage,
    TenantUsageResponse,
)
from notesaas.schemas.upgrade_request import (
    UpgradeRequestListResponse,
    UpgradeRequestRead,
    UpgradeRequestResponse,
    UpgradeRequestReview,
)
from notesaas.schemas.user import (
    NotesCountResponse,
    RoleUpdate,
    UserListResponse,
    UserPlanUpdate,
    UserRead,
    UserResponse,
)

__all__ = [
    "BaseSchema",
    "ErrorResponse",
    "MessageResponse",
    "PaginationParams",
    "SuccessResponse",
    "InviteCreate",
    "InviteIssuedResponse",
    "InviteListResponse",
    "InviteRead",
    "InviteValidateRequest",
    "InviteValidateResponse",
    "SignupRequest",
    "SignupResponse",
    "NoteCreate",
    "NoteListResponse",
    "NoteRead",
    "NoteResponse",
    "NoteUpdate",
    "PlanChangeRequest",
    "TenantRead",
    "TenantResponse",
    "TenantUsage",
    "TenantUsageResponse",
    "UpgradeRequestListResponse",
    "UpgradeRequestRead",
    "UpgradeRequestResponse",
    "UpgradeRequestReview",
    "NotesCountResponse",
    "RoleUpdate",
    "UserListResponse",
    "UserPlanUpdate",
    "UserRead",
    "UserResponse",
]
