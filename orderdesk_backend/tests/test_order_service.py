"""
OrderService: confirmation side effect, creation totals and atomic delete.
"""
import re
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from conftest import many, one

from app.core.exceptions import InvalidOrderStatusError, OrderNotFoundError, ProductNotFoundError
from app.models import Customer, InventoryHistory, Order, OrderItem, Product, ShippingCarrier
from app.schemas.order import OrderCreate
from app.services.order_service import OrderService


def make_order(status="pending") -> Order:
    order = Order(id=1, order_number="ORD-2025-AB12CD", status=status, customer_id=1)
    order.items = [
        OrderItem(id=11, product_id=1, quantity=3, price=Decimal("100000"), subtotal=Decimal("300000")),
        OrderItem(id=12, product_id=2, quantity=5, price=Decimal("50000"), subtotal=Decimal("250000")),
    ]
    return order


def make_products(stock_a=10, stock_b=10):
    return [
        Product(id=1, sku="SKU-A", name="Product A", price=Decimal("100000"), stock=stock_a),
        Product(id=2, sku="SKU-B", name="Product B", price=Decimal("50000"), stock=stock_b),
    ]


def ledger_rows(mock_db):
    return [c.args[0] for c in mock_db.add.call_args_list if isinstance(c.args[0], InventoryHistory)]


class TestSetStatus:

    @pytest.mark.asyncio
    async def test_confirm_deducts_stock_once(self, mock_db):
        order = make_order("pending")
        product_a, product_b = make_products()
        mock_db.execute.side_effect = [one(order), many([product_a, product_b])]

        result = await OrderService.set_status(mock_db, 1, "confirmed")

        assert result.status == "confirmed"
        assert (product_a.stock, product_b.stock) == (7, 5)
        rows = ledger_rows(mock_db)
        assert [(r.product_id, r.type, r.quantity, r.previous_stock, r.new_stock) for r in rows] == [
            (1, "subtract", 3, 10, 7),
            (2, "subtract", 5, 10, 5),
        ]
        assert all("ORD-2025-AB12CD" in r.note for r in rows)
        mock_db.commit.assert_awaited_once()

        # Re-confirming an already confirmed order touches nothing
        mock_db.execute.side_effect = [one(order)]
        await OrderService.set_status(mock_db, 1, "confirmed")

        assert (product_a.stock, product_b.stock) == (7, 5)
        assert len(ledger_rows(mock_db)) == 2
        assert mock_db.execute.await_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("previous", ["pending", "shipping", "cancelled", "completed"])
    async def test_confirm_from_any_other_status_deducts(self, mock_db, previous):
        order = make_order(previous)
        products = make_products()
        mock_db.execute.side_effect = [one(order), many(products)]

        await OrderService.set_status(mock_db, 1, "confirmed")

        assert [p.stock for p in products] == [7, 5]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("new_status", ["shipping", "completed", "cancelled", "pending"])
    async def test_other_transitions_leave_stock_alone(self, mock_db, new_status):
        order = make_order("confirmed")
        mock_db.execute.side_effect = [one(order)]

        result = await OrderService.set_status(mock_db, 1, new_status)

        assert result.status == new_status
        assert mock_db.execute.await_count == 1
        assert ledger_rows(mock_db) == []

    @pytest.mark.asyncio
    async def test_deduction_clamps_at_zero(self, mock_db):
        order = make_order("pending")
        products = make_products(stock_a=2, stock_b=10)
        mock_db.execute.side_effect = [one(order), many(products)]

        await OrderService.set_status(mock_db, 1, "confirmed")

        assert products[0].stock == 0
        assert ledger_rows(mock_db)[0].new_stock == 0

    @pytest.mark.asyncio
    async def test_products_locked_in_id_order(self, mock_db):
        order = make_order("pending")
        mock_db.execute.side_effect = [one(order), many(make_products())]

        await OrderService.set_status(mock_db, 1, "confirmed")

        product_query = mock_db.execute.await_args_list[1].args[0]
        assert product_query._for_update_arg is not None
        assert "ORDER BY products.id" in str(product_query)

    @pytest.mark.asyncio
    async def test_failure_mid_deduction_rolls_back(self, mock_db):
        order = make_order("pending")
        mock_db.execute.side_effect = [one(order), many(make_products())]
        mock_db.commit.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError):
            await OrderService.set_status(mock_db, 1, "confirmed")

        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_order(self, mock_db):
        mock_db.execute.side_effect = [one(None)]

        with pytest.raises(OrderNotFoundError):
            await OrderService.set_status(mock_db, 99, "confirmed")

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_status_rejected_before_db(self, mock_db):
        with pytest.raises(InvalidOrderStatusError):
            await OrderService.set_status(mock_db, 1, "lost")
        mock_db.execute.assert_not_awaited()


class TestCreateOrder:

    def payload(self, **overrides):
        data = {
            "customer": {"name": "Tran Thi B", "phone": "0987654321", "address": "7 Hai Ba Trung"},
            "items": [
                {"product_id": 1, "quantity": 2},
                {"product_id": 2, "quantity": 1, "price": 45000},
            ],
            "shipping_cost": 30000,
            "carrier": "ghn",
        }
        data.update(overrides)
        return OrderCreate(**data)

    @pytest.mark.asyncio
    async def test_totals_items_and_shipping_record(self, mock_db):
        mock_db.execute.side_effect = [one(None), many(make_products())]

        order = await OrderService.create_order(mock_db, self.payload())

        assert order.status == "pending"
        assert re.fullmatch(r"ORD-\d{4}-[0-9A-F]{6}", order.order_number)
        assert order.subtotal == Decimal("245000")
        assert order.shipping_cost == Decimal("30000")
        assert order.total == order.subtotal + order.shipping_cost
        assert [(i.product_id, i.quantity, i.price) for i in order.items] == [
            (1, 2, Decimal("100000")),
            (2, 1, Decimal("45000")),
        ]
        assert order.shipping.carrier == ShippingCarrier.GHN
        assert order.shipping.status == "pending"
        assert order.customer.phone == "0987654321"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_customer_reused_by_phone(self, mock_db):
        existing = Customer(id=7, name="Old Name", phone="0987654321", address="old address")
        mock_db.execute.side_effect = [one(existing), many(make_products())]

        order = await OrderService.create_order(mock_db, self.payload())

        assert order.customer is existing
        assert existing.address == "7 Hai Ba Trung"
        assert existing.name == "Tran Thi B"
        added = [c.args[0] for c in mock_db.add.call_args_list]
        assert added == [order]

    @pytest.mark.asyncio
    async def test_unknown_product_rolls_back(self, mock_db):
        mock_db.execute.side_effect = [one(None), many(make_products()[:1])]

        with pytest.raises(ProductNotFoundError):
            await OrderService.create_order(mock_db, self.payload())

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()


class TestDeleteOrder:

    @pytest.mark.asyncio
    async def test_deletes_shipping_items_then_order(self, mock_db):
        mock_db.execute.side_effect = [one(1), MagicMock(), MagicMock(), MagicMock()]

        await OrderService.delete_order(mock_db, 1)

        tables = [c.args[0].table.name for c in mock_db.execute.await_args_list[1:]]
        assert tables == ["shipping", "order_items", "orders"]
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_leaves_no_partial_state(self, mock_db):
        mock_db.execute.side_effect = [one(1), MagicMock(), RuntimeError("deadlock detected")]

        with pytest.raises(RuntimeError):
            await OrderService.delete_order(mock_db, 1)

        mock_db.commit.assert_not_awaited()
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_order(self, mock_db):
        mock_db.execute.side_effect = [one(None)]

        with pytest.raises(OrderNotFoundError):
            await OrderService.delete_order(mock_db, 5)

        assert mock_db.execute.await_count == 1


class TestShippingRecord:

    @pytest.mark.asyncio
    async def test_update_only_known_fields(self, mock_db):
        record = MagicMock()
        mock_db.execute.side_effect = [one(record)]

        result = await OrderService.update_shipping(
            mock_db, 3, {"tracking_number": "GHN1", "status": "delivering", "order_id": 99}
        )

        assert result is record
        assert record.tracking_number == "GHN1"
        assert record.status == "delivering"
        assert record.order_id != 99
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_missing_record(self, mock_db):
        mock_db.execute.side_effect = [one(None)]
        assert await OrderService.update_shipping(mock_db, 3, {"status": "x"}) is None
