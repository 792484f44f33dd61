"""
Tenant Service

Operations a tenant performs on its own account: read details and
effective limits, rename, upgrade the plan, dashboard stats.
"""
from datetime import date, datetime
from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from bizsuite.core.context import TenantContext
from bizsuite.core.exceptions import NotFoundError, PermissionDenied
from bizsuite.core.limits import effective_limits
from bizsuite.core.permissions import OWNER_ONLY, require_roles
from bizsuite.database import atomic
from bizsuite.models.expense import Expense
from bizsuite.models.hotel import HotelTable
from bizsuite.models.inventory import Product
from bizsuite.models.plan import Plan
from bizsuite.models.tenant import Tenant, TenantStatus
from bizsuite.models.user import User
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)


def tenant_payload(tenant: Tenant, now: datetime = None) -> Dict[str, Any]:
    """Tenant details with resolved limits, shaped for TenantDetail."""
    now = now or datetime.utcnow()
    return {
        "id": tenant.id,
        "name": tenant.name,
        "slug": tenant.slug,
        "business_type": tenant.business_type,
        "status": tenant.status,
        "plan": tenant.plan,
        "trial_start_date": tenant.trial_start_date,
        "trial_end_date": tenant.trial_end_date,
        "trial_converted": tenant.trial_converted,
        "custom_limits": tenant.custom_limits,
        "limits": effective_limits(tenant).to_dict(),
        "days_remaining": tenant.days_remaining(now),
        "created_at": tenant.created_at,
    }


def load_tenant(db: Session, tenant_id: str) -> Tenant:
    tenant = (
        db.query(Tenant)
        .options(joinedload(Tenant.plan))
        .filter(Tenant.id == tenant_id)
        .first()
    )
    if tenant is None:
        raise NotFoundError("Tenant")
    return tenant


def get_current_tenant(db: Session, ctx: TenantContext) -> Dict[str, Any]:
    return tenant_payload(load_tenant(db, ctx.tenant_id))


def update_tenant(db: Session, ctx: TenantContext, name: str) -> Dict[str, Any]:
    require_roles(ctx.role, OWNER_ONLY)
    tenant = load_tenant(db, ctx.tenant_id)
    with atomic(db):
        tenant.name = name
    logger.info(f"Tenant renamed by {ctx.user_id}", extra={"tenant_id": ctx.tenant_id})
    return tenant_payload(tenant)


def upgrade_plan(db: Session, ctx: TenantContext, plan_id: str) -> Dict[str, Any]:
    """
    Move the tenant onto another plan.

    Converts a trial into a paying tenant (status active, trial_converted
    set). Suspended and expired tenants cannot upgrade themselves.
    """
    require_roles(ctx.role, OWNER_ONLY)
    tenant = load_tenant(db, ctx.tenant_id)
    if tenant.status in (TenantStatus.SUSPENDED, TenantStatus.EXPIRED):
        raise PermissionDenied(f"Cannot change plan while tenant is {tenant.status.value}")

    plan = db.query(Plan).filter(Plan.id == plan_id).first()
    if plan is None:
        raise NotFoundError("Plan")

    with atomic(db):
        if tenant.status == TenantStatus.TRIAL:
            tenant.trial_converted = True
        tenant.plan = plan
        tenant.status = TenantStatus.ACTIVE

    logger.info(f"Tenant upgraded to plan {plan.name}", extra={"tenant_id": ctx.tenant_id})
    return tenant_payload(tenant)


def tenant_stats(db: Session, ctx: TenantContext) -> Dict[str, Any]:
    tenant_id = ctx.tenant_id
    month_start = date.today().replace(day=1)

    def count(model) -> int:
        return db.query(func.count(model.id)).filter(model.tenant_id == tenant_id).scalar() or 0

    month_total = db.query(func.coalesce(func.sum(Expense.amount), 0)).filter(
        Expense.tenant_id == tenant_id,
        Expense.date >= month_start
    ).scalar()

    return {
        "users": count(User),
        "products": count(Product),
        "tables": count(HotelTable),
        "expenses": count(Expense),
        "current_month_expense_total": float(month_total or 0),
    }
