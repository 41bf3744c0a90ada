"""
Integration tests for database models.

Tests model creation, relationships and store-level constraints.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from notesaas.core.security import utcnow
from notesaas.models import Invite, InviteStatus, Note, Tenant, TenantPlan, User, UserRole
from tests.factories import InviteFactory, NoteFactory, UpgradeRequestFactory


@pytest.mark.integration
class TestTenantModel:

    async def test_create_tenant_defaults(self, db_session):
        tenant = Tenant(name="Initech", slug="initech")
        db_session.add(tenant)
        await db_session.commit()
        await db_session.refresh(tenant)

        assert tenant.id is not None
        assert tenant.plan == TenantPlan.FREE
        assert tenant.max_notes == 3
        assert tenant.is_pro is False
        assert tenant.created_at is not None

    async def test_slug_unique(self, db_session, acme):
        db_session.add(Tenant(name="Another Acme", slug="acme"))

        with pytest.raises(IntegrityError):
            await db_session.commit()


@pytest.mark.integration
class TestUserModel:

    async def test_create_user(self, db_session, acme):
        user = User(
            email="someone@acme.com",
            hashed_password="hashed",
            tenant_id=acme.id,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)

        assert user.role == UserRole.MEMBER
        assert user.is_admin is False
        assert user.is_active is True
        assert user.plan is None

    async def test_email_globally_unique(self, db_session, acme_admin, globex):
        db_session.add(User(email="admin@acme.com", hashed_password="x", tenant_id=globex.id))

        with pytest.raises(IntegrityError):
            await db_session.commit()


@pytest.mark.integration
class TestNoteModel:

    async def test_note_belongs_to_tenant(self, db_session, acme, acme_member):
        note = await NoteFactory.create(db_session, acme, acme_member, title="Hello")

        result = await db_session.execute(select(Note).where(Note.tenant_id == acme.id))
        notes = result.scalars().all()

        assert [n.id for n in notes] == [note.id]
        assert notes[0].author_id == acme_member.id
        assert notes[0].dict()["title"] == "Hello"


@pytest.mark.integration
class TestInviteModel:

    async def test_second_pending_invite_rejected(self, db_session, acme):
        await InviteFactory.create(db_session, acme, email="dup@acme.com")

        with pytest.raises(IntegrityError):
            await InviteFactory.create(db_session, acme, email="dup@acme.com")

    async def test_accepted_and_pending_coexist(self, db_session, acme):
        await InviteFactory.create(
            db_session, acme, email="again@acme.com", status=InviteStatus.ACCEPTED
        )
        pending = await InviteFactory.create(db_session, acme, email="again@acme.com")

        assert pending.status == InviteStatus.PENDING

    async def test_same_email_other_tenant(self, db_session, acme, globex):
        await InviteFactory.create(db_session, acme, email="both@acme.com")
        await InviteFactory.create(db_session, globex, email="both@acme.com")

    async def test_is_expired(self, db_session, acme):
        live = await InviteFactory.create(db_session, acme)
        lapsed = await InviteFactory.create(
            db_session, acme, expires_at=utcnow() - timedelta(minutes=1)
        )

        assert live.is_expired() is False
        assert live.is_pending is True
        assert lapsed.is_expired() is True

    def test_is_expired_handles_naive_timestamps(self):
        invite = Invite(
            email="x@acme.com",
            token="t",
            status=InviteStatus.PENDING,
            expires_at=datetime(2000, 1, 1),
            tenant_id="t",
        )
        assert invite.is_expired() is True


@pytest.mark.integration
class TestUpgradeRequestModel:

    async def test_one_pending_request_per_user(self, db_session, acme_member):
        await UpgradeRequestFactory.create(db_session, acme_member)

        with pytest.raises(IntegrityError):
            await UpgradeRequestFactory.create(db_session, acme_member)
