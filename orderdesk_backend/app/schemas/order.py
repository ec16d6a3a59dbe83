"""
Order schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from app.models.order import OrderStatus
from app.models.shipping import ShippingCarrier
from app.schemas.customer import CustomerCreate, CustomerResponse
from app.schemas.shipping import ShippingResponse


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    # Unit price; defaults to the product's current price
    price: Optional[float] = Field(None, ge=0)


class OrderCreate(BaseModel):
    customer: CustomerCreate
    items: List[OrderItemCreate] = Field(..., min_length=1)
    shipping_cost: float = Field(0, ge=0)
    carrier: ShippingCarrier = ShippingCarrier.OTHER
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: float
    subtotal: float

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    order_number: str
    customer_id: int
    order_date: datetime
    status: str
    subtotal: float
    shipping_cost: float
    total: float
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    customer: Optional[CustomerResponse] = None
    items: List[OrderItemResponse] = []
    shipping: Optional[ShippingResponse] = None

    class Config:
        from_attributes = True


class OrderSummary(BaseModel):
    """List row: order without items."""
    id: int
    order_number: str
    customer_id: int
    order_date: datetime
    status: str
    total: float
    customer: Optional[CustomerResponse] = None

    class Config:
        from_attributes = True


class OrderList(BaseModel):
    orders: List[OrderSummary]
    total: int
    page: int
    limit: int
