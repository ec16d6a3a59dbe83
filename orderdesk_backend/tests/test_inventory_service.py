"""
InventoryService: manual adjustments and the stock floor.
"""
from decimal import Decimal

import pytest

from conftest import many, one

from app.core.exceptions import InvalidAdjustmentError, ProductNotFoundError
from app.models import InventoryChangeType, InventoryHistory, Product
from app.services.inventory_service import InventoryService, compute_new_stock


def make_product(stock=10) -> Product:
    return Product(id=4, sku="SKU-4", name="Notebook", price=Decimal("25000"), stock=stock)


@pytest.mark.parametrize("change_type,current,quantity,expected", [
    (InventoryChangeType.ADD, 10, 5, 15),
    (InventoryChangeType.SUBTRACT, 10, 4, 6),
    (InventoryChangeType.SUBTRACT, 3, 8, 0),
    (InventoryChangeType.SET, 10, 2, 2),
    (InventoryChangeType.SET, 0, 0, 0),
])
def test_compute_new_stock(change_type, current, quantity, expected):
    assert compute_new_stock(current, change_type, quantity) == expected


@pytest.mark.asyncio
async def test_subtract_more_than_available_clamps_to_zero(mock_db):
    product = make_product(stock=3)
    mock_db.execute.return_value = one(product)

    entry = await InventoryService.adjust_stock(mock_db, 4, "subtract", 10, note="Damaged")

    assert product.stock == 0
    assert isinstance(entry, InventoryHistory)
    assert (entry.type, entry.quantity, entry.previous_stock, entry.new_stock) == ("subtract", 10, 3, 0)
    assert entry.note == "Damaged"
    mock_db.add.assert_called_once_with(entry)
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_add_and_set(mock_db):
    product = make_product(stock=10)
    mock_db.execute.return_value = one(product)

    await InventoryService.adjust_stock(mock_db, 4, InventoryChangeType.ADD, 5)
    assert product.stock == 15

    entry = await InventoryService.adjust_stock(mock_db, 4, "set", 7)
    assert product.stock == 7
    assert (entry.previous_stock, entry.new_stock) == (15, 7)


@pytest.mark.asyncio
async def test_adjustment_locks_product_row(mock_db):
    mock_db.execute.return_value = one(make_product())

    await InventoryService.adjust_stock(mock_db, 4, "add", 1)

    query = mock_db.execute.await_args.args[0]
    assert query._for_update_arg is not None


@pytest.mark.asyncio
async def test_unknown_type_rejected(mock_db):
    with pytest.raises(InvalidAdjustmentError):
        await InventoryService.adjust_stock(mock_db, 4, "multiply", 2)
    mock_db.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_negative_quantity_rejected(mock_db):
    with pytest.raises(InvalidAdjustmentError):
        await InventoryService.adjust_stock(mock_db, 4, "add", -1)


@pytest.mark.asyncio
async def test_missing_product(mock_db):
    mock_db.execute.return_value = one(None)

    with pytest.raises(ProductNotFoundError):
        await InventoryService.adjust_stock(mock_db, 404, "add", 1)

    mock_db.rollback.assert_awaited_once()
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_list_history_newest_first(mock_db):
    rows = [InventoryHistory(id=2, product_id=4), InventoryHistory(id=1, product_id=4)]
    mock_db.execute.return_value = many(rows)

    result = await InventoryService.list_history(mock_db, 4, limit=10)

    assert result == rows
    query = str(mock_db.execute.await_args.args[0])
    assert "ORDER BY inventory_history.created_at DESC" in query
