"""
Unit tests for the authorization policy.
"""

from types import SimpleNamespace

import pytest

from notesaas.config import settings
from notesaas.core.exceptions import AuthorizationError, ResourceNotFoundError
from notesaas.features.auth.identity import Principal
from notesaas.features.auth.policy import (
    ADMIN_ONLY_ACTIONS,
    Action,
    authorize,
    require_tenant_slug,
)
from notesaas.models.tenant import TenantPlan
from notesaas.models.user import UserRole


def make_principal(role: UserRole = UserRole.MEMBER, **overrides) -> Principal:
    fields = {
        "user_id": "user-1",
        "email": "user@acme.com",
        "role": role,
        "tenant_id": "tenant-acme",
        "tenant_slug": "acme",
        "plan": TenantPlan.FREE,
    }
    fields.update(overrides)
    return Principal(**fields)


def note(author_id: str | None = "user-1", tenant_id: str = "tenant-acme"):
    return SimpleNamespace(id="note-1", author_id=author_id, tenant_id=tenant_id)


@pytest.mark.unit
class TestTenantIsolation:

    def test_cross_tenant_target_is_not_found(self):
        admin = make_principal(UserRole.ADMIN)

        with pytest.raises(ResourceNotFoundError):
            authorize(admin, Action.NOTE_READ, note(tenant_id="tenant-globex"))

    def test_slug_mismatch_forbidden(self):
        with pytest.raises(AuthorizationError):
            require_tenant_slug(make_principal(UserRole.ADMIN), "globex")

    def test_own_slug_allowed(self):
        require_tenant_slug(make_principal(), "acme")


@pytest.mark.unit
class TestNoteRules:

    def test_member_may_create(self):
        authorize(make_principal(), Action.NOTE_CREATE)

    def test_admin_may_not_create_by_default(self):
        with pytest.raises(AuthorizationError):
            authorize(make_principal(UserRole.ADMIN), Action.NOTE_CREATE)

    def test_admin_may_create_when_enabled(self, monkeypatch):
        monkeypatch.setattr(settings, "admins_can_create_notes", True)
        authorize(make_principal(UserRole.ADMIN), Action.NOTE_CREATE)

    def test_author_may_update_and_delete(self):
        member = make_principal()
        authorize(member, Action.NOTE_UPDATE, note(author_id="user-1"))
        authorize(member, Action.NOTE_DELETE, note(author_id="user-1"))

    def test_other_member_may_not_update(self):
        member = make_principal(user_id="user-2")

        with pytest.raises(AuthorizationError):
            authorize(member, Action.NOTE_UPDATE, note(author_id="user-1"))

    def test_member_may_not_touch_orphaned_note(self):
        with pytest.raises(AuthorizationError):
            authorize(make_principal(), Action.NOTE_DELETE, note(author_id=None))

    def test_admin_may_update_any_note(self):
        admin = make_principal(UserRole.ADMIN, user_id="admin-1")
        authorize(admin, Action.NOTE_UPDATE, note(author_id="user-1"))
        authorize(admin, Action.NOTE_DELETE, note(author_id=None))

    def test_any_member_may_read(self):
        authorize(make_principal(user_id="user-9"), Action.NOTE_READ, note(author_id="user-1"))


@pytest.mark.unit
class TestAdminActions:

    @pytest.mark.parametrize("action", sorted(ADMIN_ONLY_ACTIONS, key=lambda a: a.value))
    def test_member_denied(self, action):
        with pytest.raises(AuthorizationError):
            authorize(make_principal(), action)

    def test_admin_cannot_change_own_role(self):
        admin = make_principal(UserRole.ADMIN)
        target = SimpleNamespace(id="user-1", tenant_id="tenant-acme")

        with pytest.raises(AuthorizationError):
            authorize(admin, Action.USER_ROLE_CHANGE, target)

    def test_admin_can_change_other_role(self):
        admin = make_principal(UserRole.ADMIN)
        target = SimpleNamespace(id="user-2", tenant_id="tenant-acme")
        authorize(admin, Action.USER_ROLE_CHANGE, target)

    def test_note_count_self_or_admin(self):
        target = SimpleNamespace(id="user-2", tenant_id="tenant-acme")

        authorize(make_principal(user_id="user-2"), Action.NOTE_COUNT_VIEW, target)
        authorize(make_principal(UserRole.ADMIN), Action.NOTE_COUNT_VIEW, target)
        with pytest.raises(AuthorizationError):
            authorize(make_principal(user_id="user-3"), Action.NOTE_COUNT_VIEW, target)


@pytest.mark.unit
class TestEffectivePlan:

    def test_user_override_tightens(self):
        principal = make_principal(plan=TenantPlan.PRO, user_plan=TenantPlan.FREE)
        assert principal.effective_plan == TenantPlan.FREE

    def test_user_override_cannot_loosen(self):
        principal = make_principal(plan=TenantPlan.FREE, user_plan=TenantPlan.PRO)
        assert principal.effective_plan == TenantPlan.FREE

    def test_no_override_uses_tenant_plan(self):
        assert make_principal(plan=TenantPlan.PRO).effective_plan == TenantPlan.PRO
