"""
Shipping record routes (one record per order)
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.shipping import ShippingResponse, ShippingUpdate
from app.services.order_service import OrderService

router = APIRouter()


@router.get("/{order_id}", response_model=ShippingResponse)
async def get_order_shipping(order_id: int, db: AsyncSession = Depends(get_db)):
    record = await OrderService.get_shipping(db, order_id)
    if not record:
        raise HTTPException(status_code=404, detail="Shipping record not found")
    return record


@router.patch("/{shipping_id}", response_model=ShippingResponse)
async def update_shipping(shipping_id: int, data: ShippingUpdate, db: AsyncSession = Depends(get_db)):
    record = await OrderService.update_shipping(db, shipping_id, data.model_dump(exclude_unset=True))
    if not record:
        raise HTTPException(status_code=404, detail="Shipping record not found")
    return record
