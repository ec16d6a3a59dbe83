"""
InventoryService - stock mutations with an append-only ledger

Every stock change goes through apply_change(), which writes the new stock
and appends exactly one InventoryHistory row. Subtraction is clamped at 0.
Callers own the transaction; adjust_stock() is the manual entry point and
commits on its own.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidAdjustmentError, ProductNotFoundError
from app.models import InventoryChangeType, InventoryHistory, Product

logger = logging.getLogger(__name__)


def compute_new_stock(current_stock: int, change_type: InventoryChangeType, quantity: int) -> int:
    """New stock level for a change; never below zero."""
    if change_type == InventoryChangeType.ADD:
        return current_stock + quantity
    if change_type == InventoryChangeType.SUBTRACT:
        return max(0, current_stock - quantity)
    return max(0, quantity)


class InventoryService:
    """Stock adjustment and ledger queries."""

    @staticmethod
    def parse_change_type(value: Union[str, InventoryChangeType]) -> InventoryChangeType:
        try:
            return InventoryChangeType(value)
        except ValueError:
            raise InvalidAdjustmentError(
                f"Invalid adjustment type: {value}. Must be one of: add, subtract, set",
                details={"type": str(value)},
            )

    @staticmethod
    def apply_change(
        db: AsyncSession,
        product: Product,
        change_type: InventoryChangeType,
        quantity: int,
        note: Optional[str] = None,
    ) -> InventoryHistory:
        """
        Mutate product.stock and append the matching ledger row.

        The product row should already be locked by the caller.
        """
        previous_stock = product.stock or 0
        new_stock = compute_new_stock(previous_stock, change_type, quantity)

        product.stock = new_stock
        product.updated_at = datetime.now(timezone.utc)

        entry = InventoryHistory(
            product_id=product.id,
            type=change_type.value,
            quantity=quantity,
            previous_stock=previous_stock,
            new_stock=new_stock,
            note=note,
        )
        db.add(entry)

        logger.info(
            f"Stock {change_type.value} for product {product.id}: "
            f"{previous_stock} -> {new_stock} (qty {quantity})"
        )
        return entry

    @staticmethod
    async def adjust_stock(
        db: AsyncSession,
        product_id: int,
        change_type: Union[str, InventoryChangeType],
        quantity: int,
        note: Optional[str] = None,
    ) -> InventoryHistory:
        """Manual adjustment: add, subtract (clamped at 0) or set."""
        change_type = InventoryService.parse_change_type(change_type)
        if quantity is None or quantity < 0:
            raise InvalidAdjustmentError(
                "Quantity must be zero or greater",
                details={"quantity": quantity},
            )

        try:
            result = await db.execute(
                select(Product).where(Product.id == product_id).with_for_update()
            )
            product = result.scalar_one_or_none()
            if not product:
                raise ProductNotFoundError(f"Product {product_id} not found", product_id=product_id)

            entry = InventoryService.apply_change(db, product, change_type, quantity, note)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return entry

    @staticmethod
    async def list_history(db: AsyncSession, product_id: int, limit: int = 50) -> List[InventoryHistory]:
        """Ledger rows for a product, newest first."""
        result = await db.execute(
            select(InventoryHistory)
            .where(InventoryHistory.product_id == product_id)
            .order_by(InventoryHistory.created_at.desc(), InventoryHistory.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
