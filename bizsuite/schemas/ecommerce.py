"""
E-commerce Schemas

Request/response models for the storefront: categories, products, cart,
coupons and orders.
"""
from pydantic import Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime

from bizsuite.models.ecommerce import CartStatus, DiscountType, OrderStatus
from bizsuite.schemas.common import CamelModel
from bizsuite.schemas.hotel import naive_utc

SLUG_PATTERN = "^[a-z0-9]+(?:-[a-z0-9]+)*$"


# Categories

class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=512)
    is_active: bool = True
    sort_order: int = 0


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=512)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CategoryResponse(CamelModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    sort_order: int
    created_at: datetime


class CategoryLeaf(CategoryResponse):
    pass


class CategoryBranch(CategoryResponse):
    children: List[CategoryLeaf] = []


class CategoryNode(CategoryResponse):
    """A root category with two levels of children."""
    children: List[CategoryBranch] = []


class CategoryOrder(CamelModel):
    id: str
    sort_order: int


class CategoryReorder(CamelModel):
    items: List[CategoryOrder] = Field(..., min_length=1)


# Products

class StoreProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    category_id: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = Field(None, max_length=500)
    sku: Optional[str] = Field(None, max_length=100)
    price: float = Field(..., ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock_quantity: int = Field(0, ge=0)
    low_stock_threshold: int = Field(5, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    is_active: bool = True
    is_featured: bool = False
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = Field(None, max_length=500)


class StoreProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    category_id: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = Field(None, max_length=500)
    sku: Optional[str] = Field(None, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = Field(None, max_length=500)


class StockSet(CamelModel):
    quantity: int = Field(..., ge=0)


class CategoryRef(CamelModel):
    id: str
    name: str
    slug: str


class StoreProductResponse(CamelModel):
    id: str
    name: str
    slug: str
    category_id: Optional[str] = None
    category: Optional[CategoryRef] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    sku: Optional[str] = None
    price: float
    compare_at_price: Optional[float] = None
    cost_price: Optional[float] = None
    stock_quantity: int
    low_stock_threshold: int
    weight: Optional[float] = None
    is_active: bool
    is_featured: bool
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# Cart

class CartItemAdd(CamelModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class CartItemQuantity(CamelModel):
    """Zero or less removes the item."""
    quantity: int


class CartProductRef(CamelModel):
    id: str
    name: str
    slug: str
    price: float
    stock_quantity: int


class CartItemResponse(CamelModel):
    id: str
    product_id: str
    quantity: int
    unit_price: float
    product: Optional[CartProductRef] = None


class CartResponse(CamelModel):
    id: str
    status: CartStatus
    expires_at: Optional[datetime] = None
    items: List[CartItemResponse] = []


class CartTotals(CamelModel):
    subtotal: float
    item_count: int


# Coupons

class CouponCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: float = Field(..., gt=0)
    min_order_amount: Optional[float] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=1)
    is_active: bool = True
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("starts_at", "expires_at")
    @classmethod
    def normalise_time(cls, value):
        return naive_utc(value)

    @model_validator(mode="after")
    def check_coupon(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        if self.starts_at and self.expires_at and self.expires_at <= self.starts_at:
            raise ValueError("expiresAt must be after startsAt")
        return self


class CouponUpdate(CamelModel):
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, gt=0)
    min_order_amount: Optional[float] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def upper_code(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value is not None else value

    @field_validator("starts_at", "expires_at")
    @classmethod
    def normalise_time(cls, value):
        return naive_utc(value)


class CouponResponse(CamelModel):
    id: str
    code: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: float
    min_order_amount: Optional[float] = None
    max_uses: Optional[int] = None
    uses_count: int
    is_active: bool
    starts_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime


class CouponValidateRequest(CamelModel):
    code: str = Field(..., min_length=1)
    order_total: float = Field(..., ge=0)


class CouponRef(CamelModel):
    id: str
    code: str
    discount_type: DiscountType
    discount_value: float


class CouponValidation(CamelModel):
    """Either ``valid`` with a discount or not valid with a reason."""
    valid: bool
    error: Optional[str] = None
    coupon: Optional[CouponRef] = None
    discount_amount: Optional[float] = None


# Orders

class CheckoutRequest(CamelModel):
    shipping_name: str = Field(..., min_length=1, max_length=255)
    shipping_address_line1: str = Field(..., min_length=1, max_length=255)
    shipping_address_line2: Optional[str] = Field(None, max_length=255)
    shipping_city: str = Field(..., min_length=1, max_length=100)
    shipping_state: str = Field(..., min_length=1, max_length=100)
    shipping_postal_code: str = Field(..., min_length=1, max_length=20)
    shipping_country: str = Field(..., min_length=1, max_length=100)
    shipping_phone: Optional[str] = Field(None, max_length=50)
    billing_name: Optional[str] = Field(None, max_length=255)
    billing_address_line1: Optional[str] = Field(None, max_length=255)
    billing_address_line2: Optional[str] = Field(None, max_length=255)
    billing_city: Optional[str] = Field(None, max_length=100)
    billing_state: Optional[str] = Field(None, max_length=100)
    billing_postal_code: Optional[str] = Field(None, max_length=20)
    billing_country: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    coupon_code: Optional[str] = None


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


class OrderItemResponse(CamelModel):
    id: str
    product_id: Optional[str] = None
    product_name: str
    sku: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float


class OrderResponse(CamelModel):
    id: str
    order_number: str
    customer_id: Optional[str] = None
    status: OrderStatus
    subtotal: float
    tax_amount: float
    shipping_amount: float
    discount_amount: float
    total: float
    coupon_id: Optional[str] = None
    shipping_name: str
    shipping_address_line1: str
    shipping_address_line2: Optional[str] = None
    shipping_city: str
    shipping_state: str
    shipping_postal_code: str
    shipping_country: str
    shipping_phone: Optional[str] = None
    billing_name: Optional[str] = None
    billing_address_line1: Optional[str] = None
    billing_address_line2: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_postal_code: Optional[str] = None
    billing_country: Optional[str] = None
    notes: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime
    items: List[OrderItemResponse] = []


class StatusCount(CamelModel):
    status: OrderStatus
    count: int


class SalesSummary(CamelModel):
    total_orders: int
    total_revenue: float
    average_order_value: float
    orders_by_status: List[StatusCount]


class TopProduct(CamelModel):
    product_id: Optional[str] = None
    product_name: str
    quantity_sold: int
    revenue: float
