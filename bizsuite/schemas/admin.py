"""
Admin Schemas

Platform-admin panel: admin login, tenant management, audit log,
system health and analytics.
"""
from pydantic import EmailStr, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from bizsuite.core.limits import validate_limit_map
from bizsuite.models.tenant import BusinessType, TenantStatus
from bizsuite.models.user import UserRole
from bizsuite.schemas.common import CamelModel
from bizsuite.schemas.plan import PlanResponse


class AdminLoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AdminProfile(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    created_at: datetime


class AdminAuthPayload(CamelModel):
    token: str
    token_type: str = "bearer"
    admin: AdminProfile


# Tenants

class AdminTenantRow(CamelModel):
    """One line of the admin tenant list."""
    id: str
    name: str
    slug: str
    business_type: BusinessType
    status: TenantStatus
    plan: Optional[PlanResponse] = None
    trial_end_date: Optional[datetime] = None
    created_at: datetime
    user_count: int = 0
    product_count: int = 0
    table_count: int = 0
    expense_count: int = 0


class TenantUserRow(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime


class TenantModuleRow(CamelModel):
    name: str
    display_name: str
    is_enabled: bool


class AdminTenantDetail(AdminTenantRow):
    trial_start_date: Optional[datetime] = None
    trial_converted: bool = False
    custom_limits: Optional[Dict[str, Any]] = None
    limits: Dict[str, Optional[int]]
    users: List[TenantUserRow] = []
    modules: List[TenantModuleRow] = []


class SuspendRequest(CamelModel):
    reason: Optional[str] = Field(None, max_length=500)


class CustomLimitsUpdate(CamelModel):
    """
    Sparse override map, e.g. ``{"maxProducts": 500}``.

    An empty map or null clears every override.
    """
    custom_limits: Optional[Dict[str, Any]] = None

    @field_validator("custom_limits")
    @classmethod
    def check_limits(cls, value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if not value:
            return None
        return validate_limit_map(value, allow_extra=False)


# Audit log

class AuditAdminRef(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class AuditLogEntry(CamelModel):
    id: str
    admin_id: str
    admin: Optional[AuditAdminRef] = None
    action: str
    target_type: str
    target_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime


# System

class DatabaseHealth(CamelModel):
    status: str
    latency_ms: float


class HostInfo(CamelModel):
    platform: str
    python_version: str
    cpus: int
    memory_usage_mb: float = Field(..., alias="memoryUsageMB")
    total_memory_mb: float = Field(..., alias="totalMemoryMB")
    free_memory_mb: float = Field(..., alias="freeMemoryMB")


class SystemHealth(CamelModel):
    status: str
    uptime: int
    timestamp: datetime
    database: DatabaseHealth
    system: HostInfo


# Analytics

class OverviewStats(CamelModel):
    total_tenants: int
    new_tenants_this_month: int
    active_tenants: int
    trial_tenants: int
    suspended_tenants: int
    expired_tenants: int
    total_users: int
    mrr: float


class GrowthPoint(CamelModel):
    month: str
    count: int


class PlanShare(CamelModel):
    plan: str
    count: int
