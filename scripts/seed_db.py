"""
Seed database with demo tenants and users.

    python scripts/seed_db.py

Creates the tables if needed, then two tenants:
- Acme (Free, 3-note limit)
- Globex (Pro, unlimited)
each with one Admin and one Member.
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from notesaas.core.database import db_manager
from notesaas.core.security import hash_password
from notesaas.features.notes.quota import max_notes_for_plan
from notesaas.models.tenant import Tenant, TenantPlan
from notesaas.models.user import User, UserRole

DEMO_PASSWORD = "Password123"

TENANTS = [
    {"name": "Acme Corp", "slug": "acme", "plan": TenantPlan.FREE},
    {"name": "Globex Corporation", "slug": "globex", "plan": TenantPlan.PRO},
]

USERS = [
    {"email": "admin@acme.com", "full_name": "John Admin", "role": UserRole.ADMIN, "tenant": "acme"},
    {"email": "user@acme.com", "full_name": "Jane Member", "role": UserRole.MEMBER, "tenant": "acme"},
    {"email": "admin@globex.com", "full_name": "Bob Admin", "role": UserRole.ADMIN, "tenant": "globex"},
    {"email": "user@globex.com", "full_name": "Alice Member", "role": UserRole.MEMBER, "tenant": "globex"},
]


async def _seed(db) -> bool:
    result = await db.execute(select(Tenant))
    if result.first():
        return False

    tenants: dict[str, Tenant] = {}
    for spec in TENANTS:
        tenant = Tenant(
            name=spec["name"],
            slug=spec["slug"],
            plan=spec["plan"],
            max_notes=max_notes_for_plan(spec["plan"]),
        )
        db.add(tenant)
        tenants[tenant.slug] = tenant
    await db.flush()

    hashed = hash_password(DEMO_PASSWORD)
    for spec in USERS:
        db.add(User(
            email=spec["email"],
            hashed_password=hashed,
            full_name=spec["full_name"],
            role=spec["role"],
            tenant_id=tenants[spec["tenant"]].id,
            is_active=True,
        ))

    for spec in TENANTS:
        print(f"Created tenant: {spec['name']} ({spec['slug']}, {spec['plan'].value})")
    for spec in USERS:
        print(f"Created {spec['role'].value}: {spec['email']} (password: {DEMO_PASSWORD})")
    return True


async def seed_data() -> None:
    """Create initial demo data."""
    print("Seeding database...")

    db_manager.init()
    try:
        await db_manager.create_tables()
        async with db_manager.session() as db:
            seeded = await _seed(db)
    finally:
        await db_manager.close()

    print("Seeding complete!" if seeded else "Database already contains data. Skipping seed.")


if __name__ == "__main__":
    asyncio.run(seed_data())
