"""
Database models package.
"""

from notesaas.core.database import Base
from notesaas.models.base import BaseModel
from notesaas.models.tenant import Tenant, TenantPlan
from notesaas.models.user import User, UserRole
from notesaas.models.note import Note
from notesaas.models.invite import Invite, InviteStatus
from notesaas.models.upgrade_request import UpgradeRequest, UpgradeRequestStatus

__all__ = [
    "Base",
    "BaseModel",
    "Tenant",
    "TenantPlan",
    "User",
    "UserRole",
    "Note",
    "Invite",
    "InviteStatus",
    "UpgradeRequest",
    "UpgradeRequestStatus",
]
