"""
Product and inventory schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from app.models.inventory_history import InventoryChangeType


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    weight_grams: Optional[int] = Field(None, ge=0)


class ProductCreate(ProductBase):
    sku: str = Field(..., min_length=1, max_length=50)
    stock: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    """Stock is changed only through adjust-stock so every change is recorded."""
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    weight_grams: Optional[int] = Field(None, ge=0)

    @field_validator("name", "price")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class ProductResponse(ProductBase):
    id: int
    sku: str
    stock: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductList(BaseModel):
    products: List[ProductResponse]
    total: int


class StockAdjustmentRequest(BaseModel):
    type: InventoryChangeType
    quantity: int = Field(..., ge=0)
    note: Optional[str] = Field(None, max_length=500)


class InventoryHistoryResponse(BaseModel):
    id: int
    product_id: int
    type: str
    quantity: int
    previous_stock: int
    new_stock: int
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
