"""
Shipping record model

One row per order, created together with the order and deleted with it.
`status` is free text as reported by the carrier.
"""
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship

from app.core.database import Base


class ShippingCarrier(str, enum.Enum):
    """Carrier ids accepted on orders. OTHER has no live integration."""
    GHN = "ghn"
    GHTK = "ghtk"
    VIETTEL_POST = "viettel_post"
    JT_EXPRESS = "jt_express"
    OTHER = "other"

    @classmethod
    def values(cls):
        return [carrier.value for carrier in cls]


class ShippingRecord(Base):
    __tablename__ = "shipping"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)

    carrier = Column(
        SQLEnum(ShippingCarrier, name="shipping_carrier", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    tracking_number = Column(String(100), nullable=True, index=True)
    shipping_date = Column(DateTime(timezone=True), nullable=True)
    expected_delivery = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    order = relationship("Order", back_populates="shipping")
