"""
Reference data: order statuses and carrier ids
"""
from fastapi import APIRouter

from app.models.order import OrderStatus
from app.models.shipping import ShippingCarrier

router = APIRouter()


@router.get("/order-statuses")
async def list_order_statuses():
    return OrderStatus.values()


@router.get("/shipping-carriers")
async def list_shipping_carriers():
    return ShippingCarrier.values()
