"""
Tenant Schemas

The caller's own tenant: details, effective limits, plan upgrades, stats.
"""
from pydantic import Field
from typing import Any, Dict, Optional
from datetime import datetime

from bizsuite.models.tenant import BusinessType, TenantStatus
from bizsuite.schemas.common import CamelModel
from bizsuite.schemas.plan import PlanResponse


class TenantSummary(CamelModel):
    id: str
    name: str
    slug: str
    business_type: BusinessType
    status: TenantStatus
    trial_end_date: Optional[datetime] = None
    plan: Optional[PlanResponse] = None


class TenantDetail(TenantSummary):
    trial_start_date: Optional[datetime] = None
    trial_converted: bool = False
    custom_limits: Optional[Dict[str, Any]] = None
    limits: Dict[str, Optional[int]]
    days_remaining: Optional[int] = None
    created_at: datetime


class TenantUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)


class UpgradePlanRequest(CamelModel):
    plan_id: str = Field(..., min_length=1)


class TenantStats(CamelModel):
    users: int
    products: int
    tables: int
    expenses: int
    current_month_expense_total: float
