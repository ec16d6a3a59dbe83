"""
Product model

Stock is never negative: subtraction is clamped at zero by the inventory
service and the check constraint backs that up at the database level.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(500), nullable=False, index=True)
    description = Column(Text)

    price = Column(Numeric(14, 2), nullable=False)

    # Inventory
    stock = Column(Integer, default=0, nullable=False)

    # Shipping weight in grams; carriers fall back to a default when missing
    weight_grams = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    order_items = relationship("OrderItem", back_populates="product")
    inventory_history = relationship("InventoryHistory", back_populates="product")

    __table_args__ = (
        CheckConstraint("stock >= 0", name="chk_products_stock_non_negative"),
    )

    def __repr__(self):
        return f"<Product {self.id}: {self.sku} stock={self.stock}>"
