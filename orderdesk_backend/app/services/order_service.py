"""
OrderService - order lifecycle and fulfillment

- create_order: customer upsert by phone, order, items and shipping record
  in one transaction
- set_status: status write plus the stock deduction for the edge into
  CONFIRMED, committed (or rolled back) as one unit with the order row and
  the affected product rows locked
- delete_order: shipping -> items -> order in one transaction
"""
import uuid
import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import (
    InvalidOrderStatusError,
    OrderNotFoundError,
    OrderValidationError,
    ProductNotFoundError,
)
from app.models import (
    Customer,
    InventoryChangeType,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ShippingRecord,
)
from app.schemas.order import OrderCreate
from app.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

SHIPPING_STATUS_PENDING = "pending"

SHIPPING_UPDATABLE_FIELDS = ("carrier", "tracking_number", "shipping_date", "expected_delivery", "status")


def _full_order_query():
    return select(Order).options(
        selectinload(Order.customer),
        selectinload(Order.items).selectinload(OrderItem.product),
        selectinload(Order.shipping),
    )


class OrderService:
    """Order creation, queries, status transitions and deletion."""

    @staticmethod
    def generate_order_number() -> str:
        """Order number in format ORD-YYYY-XXXXXX."""
        year = datetime.now(timezone.utc).year
        return f"{settings.ORDER_NUMBER_PREFIX}-{year}-{uuid.uuid4().hex[:6].upper()}"

    @staticmethod
    def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
        try:
            return OrderStatus(value)
        except ValueError:
            raise InvalidOrderStatusError(
                f"Invalid status: {value}. Must be one of: {', '.join(OrderStatus.values())}",
                details={"status": str(value)},
            )

    # =========================================================================
    # Creation
    # =========================================================================

    @staticmethod
    async def _upsert_customer(db: AsyncSession, data) -> Customer:
        """Reuse the customer with this phone number, refreshing contact details."""
        result = await db.execute(select(Customer).where(Customer.phone == data.phone))
        customer = result.scalars().first()

        fields = data.model_dump()
        if customer is None:
            customer = Customer(**fields)
            db.add(customer)
            return customer

        for key, value in fields.items():
            if value:
                setattr(customer, key, value)
        return customer

    @staticmethod
    async def create_order(db: AsyncSession, data: OrderCreate) -> Order:
        """Create a pending order with its items and shipping record."""
        if not data.items:
            raise OrderValidationError("Order must contain at least one item")

        try:
            customer = await OrderService._upsert_customer(db, data.customer)

            product_ids = {item.product_id for item in data.items}
            result = await db.execute(select(Product).where(Product.id.in_(product_ids)))
            products = {product.id: product for product in result.scalars().all()}
            missing = product_ids - set(products)
            if missing:
                first = min(missing)
                raise ProductNotFoundError(f"Product {first} not found", product_id=first)

            subtotal = Decimal("0")
            items = []
            for item in data.items:
                product = products[item.product_id]
                price = Decimal(str(item.price)) if item.price is not None else Decimal(str(product.price))
                line_total = price * item.quantity
                subtotal += line_total
                items.append(OrderItem(
                    product_id=product.id,
                    quantity=item.quantity,
                    price=price,
                    subtotal=line_total,
                ))

            shipping_cost = Decimal(str(data.shipping_cost))
            order = Order(
                order_number=OrderService.generate_order_number(),
                customer=customer,
                status=OrderStatus.PENDING.value,
                subtotal=subtotal,
                shipping_cost=shipping_cost,
                total=subtotal + shipping_cost,
                notes=data.notes,
                items=items,
                shipping=ShippingRecord(carrier=data.carrier, status=SHIPPING_STATUS_PENDING),
            )
            db.add(order)
            await db.flush()
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            f"Order {order.order_number} created for customer {customer.phone}: "
            f"{len(items)} items, total {order.total}"
        )
        return order

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Order:
        result = await db.execute(_full_order_query().where(Order.id == order_id))
        order = result.scalar_one_or_none()
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found", order_id=order_id)
        return order

    @staticmethod
    async def get_order_by_number(db: AsyncSession, order_number: str) -> Order:
        result = await db.execute(_full_order_query().where(Order.order_number == order_number))
        order = result.scalar_one_or_none()
        if not order:
            raise OrderNotFoundError(f"Order {order_number} not found")
        return order

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        search: Optional[str] = None,
        customer_id: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Order], int]:
        """
        Filtered, paginated order list, newest first.

        date_to is inclusive (whole day). search matches order number,
        customer name and customer phone.
        """
        query = select(Order).join(Order.customer)

        if status:
            query = query.where(Order.status == OrderService.parse_status(status).value)
        if customer_id is not None:
            query = query.where(Order.customer_id == customer_id)
        if date_from:
            query = query.where(Order.order_date >= datetime.combine(date_from, time.min, tzinfo=timezone.utc))
        if date_to:
            end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=timezone.utc)
            query = query.where(Order.order_date < end)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                Order.order_number.ilike(pattern),
                Customer.name.ilike(pattern),
                Customer.phone.ilike(pattern),
            ))

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        result = await db.execute(
            query.options(selectinload(Order.customer))
            .order_by(Order.order_date.desc(), Order.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    # =========================================================================
    # Status transitions
    # =========================================================================

    @staticmethod
    async def set_status(db: AsyncSession, order_id: int, status: Union[str, OrderStatus]) -> Order:
        """
        Move an order to `status`.

        Stock is deducted only on the edge into CONFIRMED from any other
        status; re-confirming deducts nothing. Transitions are not
        otherwise restricted, and leaving CONFIRMED does not restock.
        """
        new_status = OrderService.parse_status(status)

        try:
            result = await db.execute(
                select(Order)
                .options(selectinload(Order.items))
                .where(Order.id == order_id)
                .with_for_update()
            )
            order = result.scalar_one_or_none()
            if not order:
                raise OrderNotFoundError(f"Order {order_id} not found", order_id=order_id)

            previous_status = order.status
            order.status = new_status.value
            order.updated_at = datetime.now(timezone.utc)

            if new_status == OrderStatus.CONFIRMED and previous_status != OrderStatus.CONFIRMED.value:
                await OrderService._deduct_stock(db, order)

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Order {order.order_number} status {previous_status} -> {new_status.value}")
        return order

    @staticmethod
    async def _deduct_stock(db: AsyncSession, order: Order) -> None:
        """Subtract every line item from stock, one ledger row per item."""
        items = sorted(order.items, key=lambda item: (item.product_id, item.id or 0))
        if not items:
            return

        # Lock in id order so concurrent confirmations cannot deadlock
        product_ids = sorted({item.product_id for item in items})
        result = await db.execute(
            select(Product)
            .where(Product.id.in_(product_ids))
            .order_by(Product.id)
            .with_for_update()
        )
        products = {product.id: product for product in result.scalars().all()}

        for item in items:
            product = products.get(item.product_id)
            if product is None:
                logger.warning(
                    f"Order {order.order_number}: product {item.product_id} no longer exists, skipping deduction"
                )
                continue
            InventoryService.apply_change(
                db,
                product,
                InventoryChangeType.SUBTRACT,
                item.quantity,
                note=f"Order {order.order_number} confirmed",
            )

    # =========================================================================
    # Deletion
    # =========================================================================

    @staticmethod
    async def delete_order(db: AsyncSession, order_id: int) -> None:
        """Delete shipping record, items and order atomically."""
        try:
            result = await db.execute(select(Order.id).where(Order.id == order_id).with_for_update())
            if result.scalar_one_or_none() is None:
                raise OrderNotFoundError(f"Order {order_id} not found", order_id=order_id)

            await db.execute(delete(ShippingRecord).where(ShippingRecord.order_id == order_id))
            await db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
            await db.execute(delete(Order).where(Order.id == order_id))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Order {order_id} deleted")

    # =========================================================================
    # Shipping record
    # =========================================================================

    @staticmethod
    async def get_shipping(db: AsyncSession, order_id: int) -> Optional[ShippingRecord]:
        result = await db.execute(select(ShippingRecord).where(ShippingRecord.order_id == order_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def update_shipping(db: AsyncSession, shipping_id: int, fields: Dict[str, Any]) -> Optional[ShippingRecord]:
        """Update carrier/tracking/date/status fields. Returns None if missing."""
        result = await db.execute(
            select(ShippingRecord).where(ShippingRecord.id == shipping_id).with_for_update()
        )
        record = result.scalar_one_or_none()
        if not record:
            return None

        for key, value in fields.items():
            if key in SHIPPING_UPDATABLE_FIELDS:
                setattr(record, key, value)
        record.updated_at = datetime.now(timezone.utc)
        await db.commit()

        logger.info(f"Shipping record {shipping_id} updated: {sorted(fields)}")
        return record
