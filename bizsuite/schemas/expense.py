"""
Expense Schemas
"""
from pydantic import Field
from typing import List, Optional
import datetime as dt

from bizsuite.schemas.common import CamelModel


class ExpenseCreate(CamelModel):
    category: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., gt=0)
    description: Optional[str] = None
    date: dt.date
    receipt_url: Optional[str] = Field(None, max_length=512)


class ExpenseUpdate(CamelModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[float] = Field(None, gt=0)
    description: Optional[str] = None
    date: Optional[dt.date] = None
    receipt_url: Optional[str] = Field(None, max_length=512)


class ExpenseResponse(CamelModel):
    id: str
    category: str
    amount: float
    description: Optional[str] = None
    date: dt.date
    receipt_url: Optional[str] = None
    created_by: Optional[str] = None
    created_at: dt.datetime


class CategoryTotal(CamelModel):
    category: str
    total: float
    count: int


class MonthTotal(CamelModel):
    month: str
    total: float


class ExpenseSummary(CamelModel):
    total_amount: float
    total_count: int
    by_category: List[CategoryTotal]
    monthly_trend: List[MonthTotal]
