"""
Platform Admin Models

Platform admins are operators of the whole platform. They are NOT tenant
users: separate table, separate token secret, separate login.

AdminAuditLog is append-only. Nothing in the codebase updates or deletes
its rows.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from bizsuite.database import Base
import uuid


class PlatformAdmin(Base):
    __tablename__ = "platform_admins"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(String(50), default="super_admin", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<PlatformAdmin {self.email}>"


class AdminAuditLog(Base):
    __tablename__ = "admin_audit_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    admin_id = Column(
        String(36),
        ForeignKey("platform_admins.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    action = Column(String(100), nullable=False)
    target_type = Column(String(50), nullable=False)  # tenant, plan, system
    target_id = Column(String(36), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    admin = relationship("PlatformAdmin")

    __table_args__ = (
        Index('idx_audit_target', 'target_type', 'created_at'),
    )

    def __repr__(self):
        return f"<AdminAuditLog {self.action} {self.target_type}:{self.target_id}>"
