"""
Inventory Schemas

Request/response models for products and stock movements.
"""
from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime

from bizsuite.models.inventory import MovementType
from bizsuite.schemas.common import CamelModel


class ProductBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    low_stock_threshold: int = Field(10, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=512)


class ProductCreate(ProductBase):
    stock_quantity: int = Field(0, ge=0)


class ProductUpdate(CamelModel):
    """Stock is changed through adjustments, never through updates."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=512)


class ProductResponse(ProductBase):
    id: str
    tenant_id: str
    stock_quantity: int
    is_low_stock: bool
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class StockAdjustment(CamelModel):
    """Signed quantity: positive adds stock, negative removes it."""
    quantity: int
    movement_type: MovementType
    notes: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def non_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("Quantity must not be zero")
        return value


class ProductRef(CamelModel):
    id: str
    name: str
    sku: Optional[str] = None


class StockMovementResponse(CamelModel):
    id: str
    product_id: str
    quantity: int
    movement_type: MovementType
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    product: Optional[ProductRef] = None


class StockAdjustmentResult(CamelModel):
    product: ProductResponse
    movement: StockMovementResponse


class CategoryCount(CamelModel):
    category: str
    count: int


class InventoryStats(CamelModel):
    total_products: int
    low_stock_count: int
    total_stock_units: int
    category_counts: List[CategoryCount]
