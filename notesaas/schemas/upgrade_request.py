"""
Pydantic schemas for upgrade requests.
"""

from datetime import datetime
from typing import Literal

from notesaas.models.upgrade_request import UpgradeRequestStatus
from notesaas.schemas.common import BaseSchema, SuccessResponse


class UpgradeRequestRead(BaseSchema):
    id: str
    user_id: str
    tenant_id: str
    status: UpgradeRequestStatus
    reviewed_by_id: str | None
    created_at: datetime


class UpgradeRequestReview(BaseSchema):
    """Admin decision on a pending request."""

    status: Literal["approved", "rejected"]


class UpgradeRequestResponse(SuccessResponse):
    request: UpgradeRequestRead


class UpgradeRequestListResponse(SuccessResponse):
    requests: list[UpgradeRequestRead]
