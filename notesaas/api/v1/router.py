"""
API v1 router aggregator.

All v1 routes are registered here.
"""

from fastapi import APIRouter

from notesaas.features.auth.router import router as auth_router
from notesaas.features.invites.router import public_router as public_invites_router
from notesaas.features.invites.router import router as invites_router
from notesaas.features.notes.router import router as notes_router
from notesaas.features.tenants.router import router as tenants_router
from notesaas.features.upgrades.router import router as upgrades_router
from notesaas.features.users.router import router as users_router
from notesaas.features.users.router import stats_router as user_stats_router
from notesaas.schemas.common import COMMON_ERROR_RESPONSES

v1_router = APIRouter(prefix="/v1", responses=COMMON_ERROR_RESPONSES)

v1_router.include_router(auth_router)
v1_router.include_router(notes_router)
v1_router.include_router(tenants_router)
v1_router.include_router(users_router)
v1_router.include_router(user_stats_router)
v1_router.include_router(invites_router)
v1_router.include_router(public_invites_router)
v1_router.include_router(upgrades_router)
