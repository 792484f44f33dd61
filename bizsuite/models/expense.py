"""
Expense Model

Free-form categorised business expenses.
"""
from sqlalchemy import Column, String, Text, Numeric, Date, DateTime, ForeignKey, Index
from datetime import datetime
from bizsuite.database import Base
import uuid


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    category = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    receipt_url = Column(String(512), nullable=True)

    created_by = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_expense_tenant_date', 'tenant_id', 'date'),
        Index('idx_expense_tenant_category', 'tenant_id', 'category'),
    )

    def __repr__(self):
        return f"<Expense {self.category} {self.amount} (tenant={self.tenant_id})>"
