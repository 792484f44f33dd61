"""
User Model

Users belong to a tenant and have role-based access control.

IMPORTANT: tenant_id is the critical field for data isolation.
Every query MUST filter by tenant_id to prevent cross-tenant data leaks.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from bizsuite.database import Base, enum_values
import uuid
import enum


class UserRole(str, enum.Enum):
    """
    User roles for RBAC.

    OWNER: Created with the tenant, exactly one per tenant; manages billing
    ADMIN: Manages users, catalog and coupons
    STAFF: Day-to-day operations (stock, tables, reservations, expenses)
    """
    OWNER = "owner"
    ADMIN = "admin"
    STAFF = "staff"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # CRITICAL: Tenant foreign key for data isolation
    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Emails are unique platform-wide so login needs no tenant hint
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    role = Column(
        SQLEnum(UserRole, name="user_role", values_callable=enum_values),
        default=UserRole.STAFF,
        nullable=False,
        index=True
    )

    # Deleting a user only deactivates it
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    tenant = relationship("Tenant", back_populates="users")

    __table_args__ = (
        Index('idx_user_tenant_active', 'tenant_id', 'is_active'),
        Index('idx_user_tenant_role', 'tenant_id', 'role'),
    )

    def __repr__(self):
        return f"<User {self.email} (tenant={self.tenant_id})>"

    @property
    def is_owner(self) -> bool:
        return self.role == UserRole.OWNER
