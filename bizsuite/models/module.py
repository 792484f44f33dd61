"""
Module Models

Modules are the product areas a tenant can use (inventory, hotel,
expenses, landing, ecommerce). Registration enables every module for
the new tenant.
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from bizsuite.database import Base
import uuid


class Module(Base):
    __tablename__ = "modules"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), unique=True, nullable=False)
    display_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Module {self.name}>"


class TenantModule(Base):
    __tablename__ = "tenant_modules"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    module_id = Column(
        String(36),
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False
    )
    is_enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    tenant = relationship("Tenant", back_populates="tenant_modules")
    module = relationship("Module")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'module_id', name='uq_tenant_module'),
    )
