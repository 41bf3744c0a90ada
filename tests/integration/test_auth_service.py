"""
Integration tests for the authentication service.
"""

import pytest
from sqlalchemy import select

from notesaas.core.exceptions import AuthenticationError, ConflictError
from notesaas.features.auth.identity import DatabaseIdentityVerifier
from notesaas.features.auth.schemas import RegisterRequest
from notesaas.features.auth.service import auth_service
from notesaas.models import Tenant, TenantPlan, User, UserRole
from tests.factories import DEFAULT_PASSWORD


def register_request(**overrides) -> RegisterRequest:
    data = {
        "tenant_name": "Initech",
        "tenant_slug": "initech",
        "email": "Founder@Initech.com",
        "password": "Password123",
        "full_name": "Bill Lumbergh",
    }
    data.update(overrides)
    return RegisterRequest(**data)


@pytest.mark.integration
class TestAuthenticate:

    async def test_valid_credentials(self, db_session, acme_admin, acme):
        authenticated = await auth_service.authenticate_user(
            db_session, "admin@acme.com", DEFAULT_PASSWORD
        )

        assert authenticated is not None
        user, tenant = authenticated
        assert user.id == acme_admin.id
        assert tenant.slug == "acme"

    async def test_email_is_case_insensitive(self, db_session, acme_admin):
        assert await auth_service.authenticate_user(
            db_session, "ADMIN@acme.com", DEFAULT_PASSWORD
        ) is not None

    async def test_wrong_password(self, db_session, acme_admin):
        assert await auth_service.authenticate_user(
            db_session, "admin@acme.com", "WrongPassword1"
        ) is None

    async def test_unknown_user(self, db_session):
        assert await auth_service.authenticate_user(
            db_session, "ghost@acme.com", DEFAULT_PASSWORD
        ) is None

    async def test_inactive_user(self, db_session, acme_member):
        acme_member.is_active = False
        await db_session.commit()

        assert await auth_service.authenticate_user(
            db_session, "user@acme.com", DEFAULT_PASSWORD
        ) is None

    async def test_login_failure_is_generic(self, db_session, acme_admin):
        with pytest.raises(AuthenticationError) as wrong_password:
            await auth_service.login(db_session, "admin@acme.com", "WrongPassword1")
        with pytest.raises(AuthenticationError) as unknown_user:
            await auth_service.login(db_session, "ghost@acme.com", "WrongPassword1")

        assert wrong_password.value.message == unknown_user.value.message


@pytest.mark.integration
class TestRegisterTenant:

    async def test_creates_free_tenant_and_admin(self, db_session, session_factory):
        response = await auth_service.register_tenant(db_session, register_request())

        assert response.access_token
        assert response.user.role == UserRole.ADMIN
        assert response.user.email == "founder@initech.com"
        assert response.tenant.plan == TenantPlan.FREE
        assert response.tenant.max_notes == 3

        async with session_factory() as fresh:
            tenant = (await fresh.execute(
                select(Tenant).where(Tenant.slug == "initech")
            )).scalar_one()
            users = (await fresh.execute(
                select(User).where(User.tenant_id == tenant.id)
            )).scalars().all()

        assert len(users) == 1
        assert users[0].role == UserRole.ADMIN

    async def test_token_verifies_against_database(self, db_session):
        response = await auth_service.register_tenant(db_session, register_request())

        principal = await DatabaseIdentityVerifier().verify(response.access_token, db_session)

        assert principal.is_admin
        assert principal.tenant_slug == "initech"

    async def test_duplicate_slug(self, db_session, acme):
        with pytest.raises(ConflictError):
            await auth_service.register_tenant(db_session, register_request(tenant_slug="acme"))

    async def test_duplicate_email(self, db_session, acme_admin):
        with pytest.raises(ConflictError):
            await auth_service.register_tenant(
                db_session, register_request(email="admin@acme.com")
            )
