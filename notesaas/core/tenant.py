"""
Tenant isolation utilities.

Every tenant-owned lookup goes through these helpers so that a row living
in another tenant is indistinguishable from a row that does not exist.
"""

import logging
from typing import Type, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from notesaas.core.exceptions import ResourceNotFoundError
from notesaas.models.base import TenantScoped
from notesaas.models.tenant import Tenant

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=TenantScoped)


def get_tenant_scoped_query(
    model: Type[T],
    tenant_id: str,
) -> Select:
    """
    Create a query scoped to a single tenant.

    Usage:
        query = get_tenant_scoped_query(Note, principal.tenant_id)
        result = await db.execute(query.order_by(Note.created_at.desc()))

    Args:
        model: a ``TenantScoped`` model class
        tenant_id: Tenant to scope to

    Returns:
        SQLAlchemy select statement scoped to tenant
    """
    if not issubclass(model, TenantScoped):
        raise TypeError(f"Model {model.__name__} is not tenant-owned")

    return select(model).where(model.tenant_id == tenant_id)


async def get_in_tenant_or_404(
    db: AsyncSession,
    model: Type[T],
    resource_id: str,
    tenant_id: str,
    *,
    for_update: bool = False,
) -> T:
    """
    Fetch a tenant-owned resource by ID.

    Raises:
        ResourceNotFoundError: if the row is missing or owned by another tenant
    """
    query = get_tenant_scoped_query(model, tenant_id).where(model.id == resource_id)
    if for_update:
        query = query.with_for_update()

    result = await db.execute(query)
    resource = result.scalar_one_or_none()

    if resource is None:
        logger.info(
            f"{model.__name__} {resource_id} not found in tenant {tenant_id}"
        )
        raise ResourceNotFoundError(f"{model.__name__} not found")

    return resource


async def lock_tenant(db: AsyncSession, tenant_id: str) -> Tenant:
    """
    Load the tenant row with ``SELECT ... FOR UPDATE``.

    Serializes quota checks and admin-count checks per tenant for the rest
    of the transaction. SQLite ignores the lock clause.
    """
    result = await db.execute(
        select(Tenant)
        .where(Tenant.id == tenant_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    tenant = result.scalar_one_or_none()

    if tenant is None:
        raise ResourceNotFoundError("Tenant not found")

    return tenant
