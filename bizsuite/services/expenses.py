"""
Expense Service

Categorised business expenses with a summary view.
"""
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from bizsuite.core.context import TenantContext
from bizsuite.database import atomic
from bizsuite.models.expense import Expense
from bizsuite.schemas.expense import ExpenseCreate, ExpenseUpdate
from bizsuite.services.common import apply_updates, get_owned, paginate
from bizsuite.utils.logging import get_logger

logger = get_logger(__name__)

TREND_MONTHS = 6


def _scoped(db: Session, tenant_id: str, start: Optional[date] = None, end: Optional[date] = None):
    query = db.query(Expense).filter(Expense.tenant_id == tenant_id)
    if start:
        query = query.filter(Expense.date >= start)
    if end:
        query = query.filter(Expense.date <= end)
    return query


def months_back(today: date, months: int) -> date:
    """First day of the month ``months - 1`` months before ``today``'s month."""
    index = today.year * 12 + (today.month - 1) - (months - 1)
    return date(index // 12, index % 12 + 1, 1)


def create_expense(db: Session, ctx: TenantContext, data: ExpenseCreate) -> Expense:
    with atomic(db):
        expense = Expense(tenant_id=ctx.tenant_id, created_by=ctx.user_id, **data.model_dump())
        db.add(expense)
    logger.info(f"Expense recorded: {expense.id}", extra={"tenant_id": ctx.tenant_id})
    return expense


def list_expenses(
    db: Session,
    ctx: TenantContext,
    page: int,
    limit: int,
    category: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> Tuple[List[Expense], Dict[str, Any]]:
    query = _scoped(db, ctx.tenant_id, start, end)
    if category:
        query = query.filter(Expense.category == category)
    return paginate(query.order_by(Expense.date.desc(), Expense.created_at.desc()), page, limit)


def get_expense(db: Session, ctx: TenantContext, expense_id: str) -> Expense:
    return get_owned(db, Expense, ctx.tenant_id, expense_id, "Expense")


def update_expense(db: Session, ctx: TenantContext, expense_id: str, data: ExpenseUpdate) -> Expense:
    expense = get_owned(db, Expense, ctx.tenant_id, expense_id, "Expense")
    with atomic(db):
        apply_updates(expense, data.model_dump(exclude_unset=True))
    return expense


def delete_expense(db: Session, ctx: TenantContext, expense_id: str) -> None:
    expense = get_owned(db, Expense, ctx.tenant_id, expense_id, "Expense")
    with atomic(db):
        db.delete(expense)


def expense_summary(
    db: Session,
    ctx: TenantContext,
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Totals for the (optional) date range plus a monthly trend.

    The trend always covers the last six calendar months, newest first,
    and is bucketed in Python so it runs on any database.
    """
    total, count = _scoped(db, ctx.tenant_id, start, end).with_entities(
        func.coalesce(func.sum(Expense.amount), 0),
        func.count(Expense.id)
    ).one()

    by_category = (
        _scoped(db, ctx.tenant_id, start, end)
        .with_entities(Expense.category, func.sum(Expense.amount), func.count(Expense.id))
        .group_by(Expense.category)
        .order_by(Expense.category)
        .all()
    )

    since = months_back(today or date.today(), TREND_MONTHS)
    monthly: Dict[str, Decimal] = defaultdict(Decimal)
    rows = db.query(Expense.date, Expense.amount).filter(
        Expense.tenant_id == ctx.tenant_id,
        Expense.date >= since
    ).all()
    for day, amount in rows:
        monthly[day.strftime("%Y-%m")] += Decimal(str(amount))

    return {
        "total_amount": float(total or 0),
        "total_count": count,
        "by_category": [
            {"category": category, "total": float(amount or 0), "count": n}
            for category, amount, n in by_category
        ],
        "monthly_trend": [
            {"month": month, "total": float(monthly[month])}
            for month in sorted(monthly, reverse=True)
        ],
    }


def expense_categories(db: Session, ctx: TenantContext) -> List[str]:
    rows = db.query(Expense.category).filter(
        Expense.tenant_id == ctx.tenant_id
    ).distinct().order_by(Expense.category).all()
    return [category for (category,) in rows]
