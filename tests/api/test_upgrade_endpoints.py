"""
API tests for upgrade requests.
"""

import pytest
from sqlalchemy import func, select

from notesaas.models import Tenant, TenantPlan, UpgradeRequest, UpgradeRequestStatus
from tests.factories import UpgradeRequestFactory, auth_headers

REQUESTS = "/api/v1/tenants/acme/upgrade-requests"


@pytest.mark.api
class TestCreateUpgradeRequest:

    async def test_member_requests_upgrade(
        self, client, acme, acme_admin, acme_member, sent_notifications
    ):
        response = await client.post(
            "/api/v1/upgrade-requests", headers=auth_headers(acme_member, acme)
        )

        assert response.status_code == 201
        assert response.json()["request"]["status"] == "pending"

        name, kwargs = sent_notifications[0]
        assert name == "send_upgrade_request_email"
        assert kwargs["admin_emails"] == ["admin@acme.com"]
        assert kwargs["requesting_user_email"] == "user@acme.com"

    async def test_duplicate_pending_request(self, client, acme, acme_member):
        headers = auth_headers(acme_member, acme)
        await client.post("/api/v1/upgrade-requests", headers=headers)

        response = await client.post("/api/v1/upgrade-requests", headers=headers)

        assert response.status_code == 409

    async def test_pro_tenant_rejected(self, client, globex, globex_member):
        response = await client.post(
            "/api/v1/upgrade-requests", headers=auth_headers(globex_member, globex)
        )

        assert response.status_code == 400


@pytest.mark.api
class TestReviewUpgradeRequest:

    async def test_list_pending(self, client, db_session, acme, acme_admin, acme_member):
        request = await UpgradeRequestFactory.create(db_session, acme_member)

        response = await client.get(REQUESTS, headers=auth_headers(acme_admin, acme))

        assert response.status_code == 200
        assert [r["id"] for r in response.json()["requests"]] == [request.id]

    async def test_approve_moves_tenant_to_pro(
        self, client, db_session, session_factory, acme, acme_admin, acme_member
    ):
        request = await UpgradeRequestFactory.create(db_session, acme_member)

        response = await client.patch(
            f"{REQUESTS}/{request.id}",
            json={"status": "approved"},
            headers=auth_headers(acme_admin, acme),
        )

        assert response.status_code == 200
        assert response.json()["request"]["status"] == "approved"
        assert response.json()["request"]["reviewed_by_id"] == acme_admin.id

        async with session_factory() as fresh:
            tenant = await fresh.get(Tenant, acme.id)
        assert tenant.plan == TenantPlan.PRO

    async def test_reject_keeps_plan(
        self, client, db_session, session_factory, acme, acme_admin, acme_member
    ):
        request = await UpgradeRequestFactory.create(db_session, acme_member)

        response = await client.patch(
            f"{REQUESTS}/{request.id}",
            json={"status": "rejected"},
            headers=auth_headers(acme_admin, acme),
        )

        assert response.status_code == 200
        async with session_factory() as fresh:
            tenant = await fresh.get(Tenant, acme.id)
        assert tenant.plan == TenantPlan.FREE

    async def test_already_reviewed(self, client, db_session, acme, acme_admin, acme_member):
        request = await UpgradeRequestFactory.create(
            db_session, acme_member, status=UpgradeRequestStatus.REJECTED
        )

        response = await client.patch(
            f"{REQUESTS}/{request.id}",
            json={"status": "approved"},
            headers=auth_headers(acme_admin, acme),
        )

        assert response.status_code == 409

    async def test_member_cannot_review(self, client, db_session, acme, acme_member):
        request = await UpgradeRequestFactory.create(db_session, acme_member)

        response = await client.patch(
            f"{REQUESTS}/{request.id}",
            json={"status": "approved"},
            headers=auth_headers(acme_member, acme),
        )

        assert response.status_code == 403

    async def test_invalid_status(self, client, db_session, acme, acme_admin, acme_member):
        request = await UpgradeRequestFactory.create(db_session, acme_member)

        response = await client.patch(
            f"{REQUESTS}/{request.id}",
            json={"status": "pending"},
            headers=auth_headers(acme_admin, acme),
        )

        assert response.status_code == 400


@pytest.mark.api
class TestUpgradeRequestEdgeCases:

    async def test_deleted_requester_in_token_mode(
        self, client, db_session, session_factory, monkeypatch, acme, acme_member
    ):
        from notesaas.config import settings

        monkeypatch.setattr(settings, "identity_verifier", "token")
        headers = auth_headers(acme_member, acme)
        await db_session.delete(acme_member)
        await db_session.commit()

        response = await client.post("/api/v1/upgrade-requests", headers=headers)

        assert response.status_code == 401
        async with session_factory() as fresh:
            stored = await fresh.execute(select(func.count(UpgradeRequest.id)))
        assert stored.scalar_one() == 0

    async def test_request_kept_when_broker_is_down(
        self, client, session_factory, acme, acme_admin, acme_member, broker_down
    ):
        response = await client.post(
            "/api/v1/upgrade-requests", headers=auth_headers(acme_member, acme)
        )

        assert response.status_code == 201
        async with session_factory() as fresh:
            stored = await fresh.get(UpgradeRequest, response.json()["request"]["id"])
        assert stored is not None
        assert stored.status == UpgradeRequestStatus.PENDING
