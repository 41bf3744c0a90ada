"""
Unit tests for the tenant quota policy.
"""

import pytest

from notesaas.core.exceptions import QuotaExceededError
from notesaas.features.notes.quota import (
    can_create_note,
    ensure_can_create_note,
    ensure_can_downgrade,
    max_notes_for_plan,
)
from notesaas.models.tenant import TenantPlan


@pytest.mark.unit
class TestCanCreateNote:

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_free_below_limit_allows(self, count):
        assert can_create_note(TenantPlan.FREE, 3, count) is True

    @pytest.mark.parametrize("count", [3, 4, 50])
    def test_free_at_or_over_limit_denies(self, count):
        assert can_create_note(TenantPlan.FREE, 3, count) is False

    def test_pro_always_allows(self):
        assert can_create_note(TenantPlan.PRO, 1_000_000, 1003) is True
        assert can_create_note(TenantPlan.PRO, 3, 5_000_000) is True

    def test_plan_given_as_stored_string(self):
        assert can_create_note("Free", 3, 3) is False
        assert can_create_note("Pro", 3, 3) is True


@pytest.mark.unit
class TestEnsureCanCreateNote:

    def test_raises_with_details(self):
        with pytest.raises(QuotaExceededError) as exc_info:
            ensure_can_create_note(TenantPlan.FREE, 3, 3)

        assert exc_info.value.error_code == "quota_exceeded"
        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"limit": 3, "current": 3}

    def test_passes_below_limit(self):
        ensure_can_create_note(TenantPlan.FREE, 3, 2)


@pytest.mark.unit
class TestDowngradeGuard:

    def test_downgrade_with_too_many_notes_refused(self):
        with pytest.raises(QuotaExceededError):
            ensure_can_downgrade(4, TenantPlan.FREE)

    def test_downgrade_at_limit_allowed(self):
        ensure_can_downgrade(3, TenantPlan.FREE)

    def test_upgrade_never_refused(self):
        ensure_can_downgrade(10_000, TenantPlan.PRO)


@pytest.mark.unit
def test_max_notes_for_plan():
    assert max_notes_for_plan(TenantPlan.FREE) == 3
    assert max_notes_for_plan(TenantPlan.PRO) == 1_000_000
