"""
Admin Analytics

Platform-wide dashboard numbers. MRR is an estimate: the monthly price of
every active tenant's plan, with yearly plans spread over twelve months.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from bizsuite.models.plan import BillingCycle, Plan
from bizsuite.models.tenant import Tenant, TenantStatus
from bizsuite.models.user import User
from bizsuite.services.expenses import months_back

GROWTH_MONTHS = 6


def overview(db: Session, today: date = None) -> Dict[str, Any]:
    today = today or date.today()
    month_start = datetime(today.year, today.month, 1)

    by_status = dict(
        db.query(Tenant.status, func.count(Tenant.id)).group_by(Tenant.status).all()
    )
    revenue_rows = (
        db.query(Plan.price, Plan.billing_cycle)
        .join(Tenant, Tenant.plan_id == Plan.id)
        .filter(Tenant.status == TenantStatus.ACTIVE)
        .all()
    )
    mrr = Decimal("0")
    for price, cycle in revenue_rows:
        price = Decimal(str(price or 0))
        mrr += price / 12 if cycle == BillingCycle.YEARLY else price

    return {
        "total_tenants": sum(by_status.values()),
        "new_tenants_this_month": db.query(func.count(Tenant.id)).filter(
            Tenant.created_at >= month_start
        ).scalar() or 0,
        "active_tenants": by_status.get(TenantStatus.ACTIVE, 0),
        "trial_tenants": by_status.get(TenantStatus.TRIAL, 0),
        "suspended_tenants": by_status.get(TenantStatus.SUSPENDED, 0),
        "expired_tenants": by_status.get(TenantStatus.EXPIRED, 0),
        "total_users": db.query(func.count(User.id)).scalar() or 0,
        "mrr": float(round(mrr, 2)),
    }


def tenant_growth(db: Session, today: date = None) -> List[Dict[str, Any]]:
    """New tenants per month for the last six months, oldest first."""
    today = today or date.today()
    first = months_back(today, GROWTH_MONTHS)
    since = datetime(first.year, first.month, 1)
    months = []
    for offset in range(GROWTH_MONTHS):
        index = first.year * 12 + first.month - 1 + offset
        months.append((index // 12, index % 12 + 1))

    buckets = {month: 0 for month in months}
    for (created_at,) in db.query(Tenant.created_at).filter(Tenant.created_at >= since).all():
        key = (created_at.year, created_at.month)
        if key in buckets:
            buckets[key] += 1

    return [
        {"month": f"{year:04d}-{month:02d}", "count": count}
        for (year, month), count in buckets.items()
    ]


def plan_distribution(db: Session) -> List[Dict[str, Any]]:
    rows = (
        db.query(Plan.display_name, func.count(Tenant.id))
        .outerjoin(Tenant, Tenant.plan_id == Plan.id)
        .group_by(Plan.id, Plan.display_name, Plan.price)
        .order_by(Plan.price.asc())
        .all()
    )
    return [{"plan": name, "count": count} for name, count in rows]
