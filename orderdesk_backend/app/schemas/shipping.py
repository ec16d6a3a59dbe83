"""
Shipping schemas

Request bodies for the carrier routes mirror the canonical ShipmentRequest
and FeeRequest (grams and centimeters).
"""
from datetime import datetime
from typing import Optional, List, Any
from pydantic import BaseModel, Field, field_validator

from app.models.shipping import ShippingCarrier


class ShippingResponse(BaseModel):
    id: int
    order_id: int
    carrier: ShippingCarrier
    tracking_number: Optional[str] = None
    shipping_date: Optional[datetime] = None
    expected_delivery: Optional[datetime] = None
    status: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ShippingUpdate(BaseModel):
    carrier: Optional[ShippingCarrier] = None
    tracking_number: Optional[str] = Field(None, max_length=100)
    shipping_date: Optional[datetime] = None
    expected_delivery: Optional[datetime] = None
    status: Optional[str] = Field(None, max_length=100)

    @field_validator("carrier")
    @classmethod
    def carrier_not_null(cls, v):
        if v is None:
            raise ValueError("Carrier cannot be null")
        return v


class RecipientIn(BaseModel):
    name: str
    phone: str
    address: str
    ward: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None


class LineItemIn(BaseModel):
    name: str
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(0, ge=0)
    sku: Optional[str] = None
    weight_grams: Optional[float] = Field(None, ge=0)


class ParcelIn(BaseModel):
    weight_grams: Optional[float] = Field(None, ge=0)
    length_cm: Optional[float] = Field(None, ge=0)
    width_cm: Optional[float] = Field(None, ge=0)
    height_cm: Optional[float] = Field(None, ge=0)
    declared_value: Optional[float] = Field(None, ge=0)


class ShipmentCreateRequest(BaseModel):
    """
    Either an order_id (shipment built from the stored order, tracking
    number saved back on success) or an explicit shipment.
    """
    order_id: Optional[int] = None
    order_number: Optional[str] = None
    recipient: Optional[RecipientIn] = None
    items: List[LineItemIn] = []
    parcel: Optional[ParcelIn] = None
    cod_amount: Optional[float] = Field(None, ge=0)
    note: Optional[str] = None
    service_id: Optional[int] = None
    service_type_id: Optional[int] = None


class CancelShipmentRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class FeeQuoteRequest(BaseModel):
    weight_grams: Optional[float] = Field(None, ge=0)
    length_cm: Optional[float] = Field(None, ge=0)
    width_cm: Optional[float] = Field(None, ge=0)
    height_cm: Optional[float] = Field(None, ge=0)
    declared_value: Optional[float] = Field(None, ge=0)
    cod_amount: Optional[float] = Field(None, ge=0)
    from_province: Optional[str] = None
    from_district: Optional[str] = None
    to_province: Optional[str] = None
    to_district: Optional[str] = None
    to_ward: Optional[str] = None
    from_province_id: Optional[int] = None
    from_district_id: Optional[int] = None
    to_province_id: Optional[int] = None
    to_district_id: Optional[int] = None
    to_ward_code: Optional[str] = None
    service_id: Optional[int] = None
    coupon: Optional[str] = None


class OperationResultResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[Any] = None


class CarrierInfo(BaseModel):
    id: str
    name: str
    api_connected: bool
    native_tracking: bool
    tracking_available: bool
