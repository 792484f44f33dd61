"""
Capacity Checks

Plan-limit enforcement for countable resources (products, users, tables).

CONCURRENCY: callers run enforce_capacity() and the INSERT inside one
atomic() block. The tenant row is locked first (SELECT ... FOR UPDATE), so
two concurrent creations for the same tenant serialise on PostgreSQL and
the second one sees the first one's row when it counts. SQLite ignores
FOR UPDATE but only allows one writer at a time.
"""
from typing import Type

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from bizsuite.core.exceptions import CapacityExceededError, NotFoundError
from bizsuite.core.limits import LimitKey, resolve_limit
from bizsuite.models.tenant import Tenant
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)


def lock_tenant(db: Session, tenant_id: str) -> Tenant:
    """Load the tenant row with a write lock held until the transaction ends."""
    tenant = (
        db.query(Tenant)
        .options(joinedload(Tenant.plan))
        .filter(Tenant.id == tenant_id)
        .with_for_update(of=Tenant)
        .first()
    )
    if tenant is None:
        raise NotFoundError("Tenant")
    return tenant


def count_for_tenant(db: Session, model: Type, tenant_id: str) -> int:
    return db.query(func.count(model.id)).filter(model.tenant_id == tenant_id).scalar() or 0


def enforce_capacity(
    db: Session,
    tenant_id: str,
    key: LimitKey,
    model: Type,
    resource: str,
) -> None:
    """
    Refuse to create one more ``model`` row when the tenant is at its limit.

    Unlimited limits short-circuit before counting. A limit missing from
    both the plan and the tenant override raises LimitNotConfiguredError.
    """
    tenant = lock_tenant(db, tenant_id)
    limit = resolve_limit(tenant, key)
    if limit.is_unlimited:
        return

    current = count_for_tenant(db, model, tenant_id)
    if not limit.allows(current):
        logger.info(
            f"Capacity reached for {resource}: {current}/{limit.bound}",
            extra={"tenant_id": tenant_id}
        )
        raise CapacityExceededError(resource, tenant.plan.display_name, limit.bound)
