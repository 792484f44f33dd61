"""
Admin Tenant Management

Cross-tenant reads and status changes. This module (with the rest of
services/admin) is the only code that queries tenants without a tenant
context; every mutation writes an audit entry in the same transaction.

Status transitions:
    any -> suspended            suspend(reason)
    suspended/expired -> active activate()
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from bizsuite.core.context import AdminContext
from bizsuite.core.exceptions import ConflictError, NotFoundError
from bizsuite.core.limits import effective_limits
from bizsuite.database import atomic
from bizsuite.models.expense import Expense
from bizsuite.models.hotel import HotelTable
from bizsuite.models.inventory import Product
from bizsuite.models.module import TenantModule
from bizsuite.models.tenant import Tenant, TenantStatus
from bizsuite.models.user import User, UserRole
from bizsuite.services.admin.audit import record
from bizsuite.services.common import paginate
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)

ACTIVATABLE = (TenantStatus.SUSPENDED, TenantStatus.EXPIRED)


def _counts(db: Session, model, tenant_ids: List[str]) -> Dict[str, int]:
    if not tenant_ids:
        return {}
    rows = (
        db.query(model.tenant_id, func.count(model.id))
        .filter(model.tenant_id.in_(tenant_ids))
        .group_by(model.tenant_id)
        .all()
    )
    return dict(rows)


def _row(tenant: Tenant, users: Dict, products: Dict, tables: Dict, expenses: Dict) -> Dict[str, Any]:
    return {
        "id": tenant.id,
        "name": tenant.name,
        "slug": tenant.slug,
        "business_type": tenant.business_type,
        "status": tenant.status,
        "plan": tenant.plan,
        "trial_end_date": tenant.trial_end_date,
        "created_at": tenant.created_at,
        "user_count": users.get(tenant.id, 0),
        "product_count": products.get(tenant.id, 0),
        "table_count": tables.get(tenant.id, 0),
        "expense_count": expenses.get(tenant.id, 0),
    }


def list_tenants(
    db: Session,
    page: int,
    limit: int,
    search: Optional[str] = None,
    status: Optional[TenantStatus] = None,
) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """
    All tenants, newest first, with resource counts.

    ``search`` matches name, slug or the owner's email.
    """
    query = db.query(Tenant).options(joinedload(Tenant.plan))
    if search:
        pattern = f"%{search}%"
        owner_match = db.query(User.tenant_id).filter(
            User.role == UserRole.OWNER,
            User.email.ilike(pattern)
        )
        query = query.filter(or_(
            Tenant.name.ilike(pattern),
            Tenant.slug.ilike(pattern),
            Tenant.id.in_(owner_match),
        ))
    if status:
        query = query.filter(Tenant.status == status)

    tenants, pagination = paginate(query.order_by(Tenant.created_at.desc()), page, limit)

    ids = [tenant.id for tenant in tenants]
    users = _counts(db, User, ids)
    products = _counts(db, Product, ids)
    tables = _counts(db, HotelTable, ids)
    expenses = _counts(db, Expense, ids)

    return [_row(tenant, users, products, tables, expenses) for tenant in tenants], pagination


def _load(db: Session, tenant_id: str) -> Tenant:
    tenant = (
        db.query(Tenant)
        .options(joinedload(Tenant.plan))
        .filter(Tenant.id == tenant_id)
        .first()
    )
    if tenant is None:
        raise NotFoundError("Tenant")
    return tenant


def get_tenant(db: Session, tenant_id: str) -> Dict[str, Any]:
    """Tenant with users, modules and effective limits."""
    tenant = _load(db, tenant_id)
    ids = [tenant.id]
    detail = _row(
        tenant,
        _counts(db, User, ids),
        _counts(db, Product, ids),
        _counts(db, HotelTable, ids),
        _counts(db, Expense, ids),
    )

    modules = (
        db.query(TenantModule)
        .options(joinedload(TenantModule.module))
        .filter(TenantModule.tenant_id == tenant.id)
        .all()
    )
    detail.update({
        "trial_start_date": tenant.trial_start_date,
        "trial_converted": tenant.trial_converted,
        "custom_limits": tenant.custom_limits,
        "limits": effective_limits(tenant).to_dict(),
        "users": db.query(User).filter(User.tenant_id == tenant.id).order_by(User.created_at).all(),
        "modules": [
            {
                "name": tm.module.name,
                "display_name": tm.module.display_name,
                "is_enabled": tm.is_enabled,
            }
            for tm in modules
        ],
    })
    return detail


def suspend_tenant(db: Session, admin: AdminContext, tenant_id: str, reason: Optional[str] = None) -> Tenant:
    """
    Suspend a tenant from any state.

    Takes effect on the tenant's next request: sessions are re-validated
    against the tenant row every time.
    """
    tenant = _load(db, tenant_id)
    previous = tenant.status
    with atomic(db):
        tenant.status = TenantStatus.SUSPENDED
        record(db, admin, "suspend_tenant", "tenant", tenant.id, {
            "reason": reason,
            "previous_status": previous.value,
        })
    logger.warning(f"Tenant suspended: {tenant.slug}", extra={"tenant_id": tenant.id, "admin_id": admin.admin_id})
    return tenant


def activate_tenant(db: Session, admin: AdminContext, tenant_id: str) -> Tenant:
    """Reactivate a suspended or expired tenant."""
    tenant = _load(db, tenant_id)
    if tenant.status not in ACTIVATABLE:
        raise ConflictError(f"Tenant is {tenant.status.value} and cannot be activated")

    previous = tenant.status
    with atomic(db):
        tenant.status = TenantStatus.ACTIVE
        record(db, admin, "activate_tenant", "tenant", tenant.id, {"previous_status": previous.value})
    logger.info(f"Tenant activated: {tenant.slug}", extra={"tenant_id": tenant.id, "admin_id": admin.admin_id})
    return tenant


def set_custom_limits(
    db: Session,
    admin: AdminContext,
    tenant_id: str,
    custom_limits: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """Replace the tenant's override map (already validated)."""
    tenant = _load(db, tenant_id)
    previous = tenant.custom_limits
    with atomic(db):
        tenant.custom_limits = custom_limits or None
        record(db, admin, "update_tenant_limits", "tenant", tenant.id, {
            "previous": previous,
            "custom_limits": custom_limits,
        })
    return get_tenant(db, tenant.id)
