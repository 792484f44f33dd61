"""
Plan Schemas

Plans are read by tenants (current plan, upgrade targets) and managed by
platform admins.
"""
from pydantic import Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime

from bizsuite.core.limits import validate_limit_map
from bizsuite.models.plan import BillingCycle
from bizsuite.schemas.common import CamelModel


class PlanResponse(CamelModel):
    id: str
    name: str
    display_name: str
    price: float
    billing_cycle: BillingCycle
    features: Dict[str, Any]


class PlanWithUsage(PlanResponse):
    """Admin view of a plan with the number of tenants on it."""
    tenant_count: int = 0
    created_at: datetime


class PlanCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50, pattern="^[a-z0-9_-]+$")
    display_name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(0, ge=0)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    features: Dict[str, Any]

    @field_validator("features")
    @classmethod
    def check_features(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        # Every recognised limit must be present on a new plan
        return validate_limit_map(value, require_all=True)


class PlanUpdate(CamelModel):
    """All fields optional."""
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    billing_cycle: Optional[BillingCycle] = None
    features: Optional[Dict[str, Any]] = None

    @field_validator("features")
    @classmethod
    def check_features(cls, value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if value is None:
            return value
        return validate_limit_map(value, require_all=True)
