"""
Order routes

Domain errors (unknown order, invalid status, missing product) propagate
to the OrderdeskError handler registered in main.py.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.order import OrderCreate, OrderList, OrderResponse, OrderStatusUpdate
from app.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


@router.get("", response_model=OrderList)
async def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None, description="Order number, customer name or phone"),
    customer_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
):
    orders, total = await OrderService.list_orders(
        db,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        search=search,
        customer_id=customer_id,
        page=page,
        limit=limit,
    )
    return OrderList(orders=orders, total=total, page=page, limit=limit)


@router.get("/number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(order_number: str, db: AsyncSession = Depends(get_db)):
    return await OrderService.get_order_by_number(db, order_number)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    return await OrderService.get_order(db, order_id)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(data: OrderCreate, db: AsyncSession = Depends(get_db)):
    order = await OrderService.create_order(db, data)
    return await OrderService.get_order(db, order.id)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: int, data: OrderStatusUpdate, db: AsyncSession = Depends(get_db)):
    """Change status; confirming a not-yet-confirmed order deducts stock."""
    await OrderService.set_status(db, order_id, data.status)
    return await OrderService.get_order(db, order_id)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: int, db: AsyncSession = Depends(get_db)):
    await OrderService.delete_order(db, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
