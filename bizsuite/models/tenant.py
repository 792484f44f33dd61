"""
Tenant Model

The tenant is the primary isolation boundary. Each tenant represents a
separate business with its own users, catalog, tables and expenses.

ARCHITECTURAL DECISION: shared database, shared schema with a tenant_id
column on every tenant-owned table.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from bizsuite.database import Base, enum_values
import math
import uuid
import enum


class TenantStatus(str, enum.Enum):
    """
    Tenant lifecycle.

    trial -> active -> suspended -> active
    trial -> expired (detected lazily when a user signs in)
    """
    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    EXPIRED = "expired"


class BusinessType(str, enum.Enum):
    INVENTORY = "inventory"
    HOTEL = "hotel"
    LANDING = "landing"
    EXPENSE = "expense"
    ECOMMERCE = "ecommerce"


class Tenant(Base):
    __tablename__ = "tenants"

    # UUIDs avoid enumeration attacks
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    business_type = Column(
        SQLEnum(BusinessType, name="business_type", values_callable=enum_values),
        nullable=False
    )

    status = Column(
        SQLEnum(TenantStatus, name="tenant_status", values_callable=enum_values),
        default=TenantStatus.TRIAL,
        nullable=False,
        index=True
    )

    plan_id = Column(
        String(36),
        ForeignKey("plans.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Sparse override of the plan's limits, e.g. {"maxProducts": 500}
    # Keys absent here fall back to the plan
    custom_limits = Column(JSON, nullable=True)

    trial_start_date = Column(DateTime, nullable=True)
    trial_end_date = Column(DateTime, nullable=True)
    trial_converted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    plan = relationship("Plan", back_populates="tenants")
    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")
    tenant_modules = relationship("TenantModule", back_populates="tenant", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_tenant_status_created', 'status', 'created_at'),
    )

    def __repr__(self):
        return f"<Tenant {self.slug} ({self.status})>"

    def trial_has_ended(self, now: datetime) -> bool:
        return (
            self.status == TenantStatus.TRIAL
            and self.trial_end_date is not None
            and now > self.trial_end_date
        )

    def days_remaining(self, now: datetime):
        """Whole days left in the trial, or None outside a trial."""
        if self.status != TenantStatus.TRIAL or self.trial_end_date is None:
            return None
        seconds = (self.trial_end_date - now).total_seconds()
        return math.ceil(seconds / 86400)
