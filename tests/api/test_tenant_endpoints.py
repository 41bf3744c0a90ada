"""
API tests for tenant endpoints.
"""

import pytest

from notesaas.models import Tenant
from tests.factories import NoteFactory, auth_headers


@pytest.mark.api
class TestTenantUsage:

    async def test_me(self, client, db_session, acme, acme_admin, acme_member):
        await NoteFactory.create_batch(db_session, acme, acme_member, count=2)

        response = await client.get("/api/v1/tenants/me", headers=auth_headers(acme_member, acme))

        assert response.status_code == 200
        tenant = response.json()["tenant"]
        assert tenant["slug"] == "acme"
        assert tenant["plan"] == "Free"
        assert tenant["max_notes"] == 3
        assert tenant["note_count"] == 2
        assert tenant["user_count"] == 2


@pytest.mark.api
class TestPlanChange:

    async def test_upgrade_lifts_limit(
        self, client, db_session, session_factory, acme, acme_admin, acme_member
    ):
        await NoteFactory.create_batch(db_session, acme, acme_member, count=3)

        upgraded = await client.post(
            "/api/v1/tenants/acme/upgrade",
            json={"plan": "Pro"},
            headers=auth_headers(acme_admin, acme),
        )

        assert upgraded.status_code == 200
        assert upgraded.json()["tenant"]["plan"] == "Pro"

        async with session_factory() as fresh:
            tenant = await fresh.get(Tenant, acme.id)
        created = await client.post(
            "/api/v1/notes",
            json={"title": "Fourth", "content": "..."},
            headers=auth_headers(acme_member, tenant),
        )
        assert created.status_code == 201

    async def test_member_cannot_upgrade(self, client, acme, acme_member):
        response = await client.post(
            "/api/v1/tenants/acme/upgrade",
            json={"plan": "Pro"},
            headers=auth_headers(acme_member, acme),
        )

        assert response.status_code == 403

    async def test_other_tenant_slug_forbidden(self, client, globex, globex_admin, acme):
        response = await client.post(
            "/api/v1/tenants/acme/upgrade",
            json={"plan": "Pro"},
            headers=auth_headers(globex_admin, globex),
        )

        assert response.status_code == 403

    async def test_downgrade_refused_over_limit(
        self, client, db_session, globex, globex_admin, globex_member
    ):
        await NoteFactory.create_batch(db_session, globex, globex_member, count=4)

        response = await client.post(
            "/api/v1/tenants/globex/upgrade",
            json={"plan": "Free"},
            headers=auth_headers(globex_admin, globex),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "quota_exceeded"

    async def test_downgrade_allowed_within_limit(self, client, globex, globex_admin):
        response = await client.post(
            "/api/v1/tenants/globex/upgrade",
            json={"plan": "Free"},
            headers=auth_headers(globex_admin, globex),
        )

        assert response.status_code == 200
        assert response.json()["tenant"]["max_notes"] == 3
