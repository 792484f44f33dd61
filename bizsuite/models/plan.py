"""
Plan Model

A plan is a pricing tier. Its ``features`` column is an open JSON map
holding the default limits (maxProducts, maxUsers, maxTables,
maxStorageMB) plus descriptive entries. -1 means unlimited.

NOTE: a plan referenced by any tenant cannot be deleted.
"""
from sqlalchemy import Column, String, DateTime, Numeric, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from bizsuite.database import Base, enum_values
import uuid
import enum


class BillingCycle(str, enum.Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    TRIAL = "trial"


class Plan(Base):
    __tablename__ = "plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    billing_cycle = Column(
        SQLEnum(BillingCycle, name="billing_cycle", values_callable=enum_values),
        nullable=False,
        default=BillingCycle.MONTHLY
    )
    features = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    tenants = relationship("Tenant", back_populates="plan")

    def __repr__(self):
        return f"<Plan {self.name}>"
