"""
Inventory history model - append-only ledger of stock changes

Rows are written by manual adjustments and by the automatic deduction that
runs when an order is confirmed. Rows are never updated or deleted.
"""
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class InventoryChangeType(str, enum.Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


class InventoryHistory(Base):
    """Audit trail for inventory stock changes"""
    __tablename__ = "inventory_history"

    id = Column(Integer, primary_key=True, index=True)

    product_id = Column(
        Integer,
        ForeignKey("products.id"),
        nullable=False,
        index=True
    )

    type = Column(String(20), nullable=False)
    quantity = Column(Integer, nullable=False)  # as requested, before clamping
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)

    note = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True
    )

    product = relationship("Product", back_populates="inventory_history")

    __table_args__ = (
        CheckConstraint(
            "type IN ('add', 'subtract', 'set')",
            name="chk_inventory_history_type"
        ),
        Index("ix_inventory_history_product_created", product_id, created_at.desc()),
    )

    def __repr__(self):
        return f"<InventoryHistory {self.id}: {self.type} {self.quantity} on product {self.product_id}>"
