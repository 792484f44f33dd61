"""
Admin Plan Management

Plan CRUD. A plan with tenants on it cannot be deleted.
"""
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from bizsuite.core.context import AdminContext
from bizsuite.core.exceptions import ConflictError, DependencyExistsError, NotFoundError
from bizsuite.database import atomic
from bizsuite.models.plan import Plan
from bizsuite.models.tenant import Tenant
from bizsuite.schemas.plan import PlanCreate, PlanUpdate
from bizsuite.services.admin.audit import record
from bizsuite.services.common import apply_updates


def _tenant_count(db: Session, plan_id: str) -> int:
    return db.query(func.count(Tenant.id)).filter(Tenant.plan_id == plan_id).scalar() or 0


def _with_usage(plan: Plan, tenant_count: int) -> Dict[str, Any]:
    return {
        "id": plan.id,
        "name": plan.name,
        "display_name": plan.display_name,
        "price": plan.price,
        "billing_cycle": plan.billing_cycle,
        "features": plan.features,
        "tenant_count": tenant_count,
        "created_at": plan.created_at,
    }


def _get(db: Session, plan_id: str) -> Plan:
    plan = db.query(Plan).filter(Plan.id == plan_id).first()
    if plan is None:
        raise NotFoundError("Plan")
    return plan


def list_plans(db: Session) -> List[Dict[str, Any]]:
    """Every plan, cheapest first, with its tenant count."""
    counts = dict(
        db.query(Tenant.plan_id, func.count(Tenant.id)).group_by(Tenant.plan_id).all()
    )
    plans = db.query(Plan).order_by(Plan.price.asc(), Plan.name.asc()).all()
    return [_with_usage(plan, counts.get(plan.id, 0)) for plan in plans]


def create_plan(db: Session, admin: AdminContext, data: PlanCreate) -> Dict[str, Any]:
    if db.query(Plan.id).filter(Plan.name == data.name).first():
        raise ConflictError("Plan with this name already exists")

    with atomic(db):
        plan = Plan(**data.model_dump())
        db.add(plan)
        db.flush()
        record(db, admin, "create_plan", "plan", plan.id, {"name": plan.name})
    return _with_usage(plan, 0)


def update_plan(db: Session, admin: AdminContext, plan_id: str, data: PlanUpdate) -> Dict[str, Any]:
    plan = _get(db, plan_id)
    changes = data.model_dump(exclude_unset=True)
    with atomic(db):
        apply_updates(plan, changes)
        record(db, admin, "update_plan", "plan", plan.id, {"fields": sorted(changes)})
    return _with_usage(plan, _tenant_count(db, plan.id))


def delete_plan(db: Session, admin: AdminContext, plan_id: str) -> None:
    plan = _get(db, plan_id)
    if _tenant_count(db, plan.id) > 0:
        raise DependencyExistsError("plan", "tenants")

    with atomic(db):
        record(db, admin, "delete_plan", "plan", plan.id, {"name": plan.name})
        db.delete(plan)
