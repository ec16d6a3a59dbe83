"""
Customer model

Phone number is the natural key used to reuse an existing customer when an
order is placed for a returning buyer.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from app.core.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False, index=True)
    address = Column(String(500), nullable=False)
    email = Column(String(255), nullable=True)

    # Administrative subdivisions used by carrier payloads
    ward = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    orders = relationship("Order", back_populates="customer")

    def __repr__(self):
        return f"<Customer {self.id}: {self.name} ({self.phone})>"
