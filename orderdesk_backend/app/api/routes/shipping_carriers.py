"""
Carrier API routes

Every route answers with the OperationResult envelope. A failed result
(unsupported carrier, missing credential, carrier error) is returned with
HTTP 400.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_shipping_facade
from app.core.database import get_db
from app.modules.shipping import OperationResult, ShipmentRequest, ShippingFacade
from app.modules.shipping.carriers import parse_carrier_code
from app.modules.shipping.carriers.base import Parcel
from app.schemas.shipping import (
    CancelShipmentRequest,
    CarrierInfo,
    FeeQuoteRequest,
    OperationResultResponse,
    ShipmentCreateRequest,
)
from app.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()

SHIPPING_STATUS_CREATED = "created"


def _respond(result: OperationResult):
    if result.success:
        return result.to_dict()
    return JSONResponse(status_code=400, content=result.to_dict())


def _parcel_from(request: ShipmentCreateRequest) -> Optional[Parcel]:
    if request.parcel is None:
        return None
    parcel = request.parcel
    return Parcel(
        weight_grams=parcel.weight_grams,
        length_cm=parcel.length_cm,
        width_cm=parcel.width_cm,
        height_cm=parcel.height_cm,
        declared_value=Decimal(str(parcel.declared_value)) if parcel.declared_value is not None else None,
    )


@router.get("/info", response_model=List[CarrierInfo])
async def carriers_info(facade: ShippingFacade = Depends(get_shipping_facade)):
    """Supported carriers and whether each has a credential configured."""
    return facade.carrier_info()


@router.post("/{carrier}/create-shipment", response_model=OperationResultResponse)
async def create_shipment(
    carrier: str,
    request: ShipmentCreateRequest,
    db: AsyncSession = Depends(get_db),
    facade: ShippingFacade = Depends(get_shipping_facade),
):
    """
    Book a shipment.

    With order_id the shipment is built from the stored order and, on
    success, the carrier and tracking number are saved on its shipping
    record. Otherwise the body itself describes the shipment.
    """
    if request.order_id is None:
        return _respond(await facade.create_shipment(carrier, request.model_dump(exclude={"order_id"})))

    order = await OrderService.get_order(db, request.order_id)
    shipment = ShipmentRequest.from_order(
        order,
        parcel=_parcel_from(request),
        cod_amount=Decimal(str(request.cod_amount)) if request.cod_amount is not None else None,
        service_id=request.service_id,
    )
    result = await facade.create_shipment(carrier, shipment)

    if result.success and order.shipping is not None:
        tracking_number = facade.tracking_number_from(carrier, result.data)
        if not tracking_number:
            # Some carriers answer 200 with a rejection body
            logger.warning(
                f"Order {order.order_number}: {carrier} response has no tracking number, "
                f"shipping record left unchanged"
            )
            return _respond(result)
        await OrderService.update_shipping(db, order.shipping.id, {
            "carrier": parse_carrier_code(carrier),
            "tracking_number": tracking_number,
            "shipping_date": datetime.now(timezone.utc),
            "status": SHIPPING_STATUS_CREATED,
        })
        logger.info(f"Order {order.order_number} booked with {carrier}: {tracking_number}")

    return _respond(result)


@router.get("/{carrier}/track/{tracking_number}", response_model=OperationResultResponse)
async def track_shipment(
    carrier: str,
    tracking_number: str,
    facade: ShippingFacade = Depends(get_shipping_facade),
):
    return _respond(await facade.track_shipment(carrier, tracking_number))


@router.post("/{carrier}/cancel/{tracking_number}", response_model=OperationResultResponse)
async def cancel_shipment(
    carrier: str,
    tracking_number: str,
    request: Optional[CancelShipmentRequest] = Body(None),
    facade: ShippingFacade = Depends(get_shipping_facade),
):
    if request and request.reason:
        result = await facade.cancel_shipment(carrier, tracking_number, reason=request.reason)
    else:
        result = await facade.cancel_shipment(carrier, tracking_number)
    return _respond(result)


@router.get("/{carrier}/provinces", response_model=OperationResultResponse)
async def get_provinces(carrier: str, facade: ShippingFacade = Depends(get_shipping_facade)):
    return _respond(await facade.get_provinces(carrier))


@router.get("/{carrier}/services", response_model=OperationResultResponse)
async def get_services(carrier: str, facade: ShippingFacade = Depends(get_shipping_facade)):
    return _respond(await facade.get_services(carrier))


@router.post("/{carrier}/calculate-fee", response_model=OperationResultResponse)
async def calculate_fee(
    carrier: str,
    request: FeeQuoteRequest,
    facade: ShippingFacade = Depends(get_shipping_facade),
):
    return _respond(await facade.calculate_fee(carrier, request.model_dump(exclude_none=True)))
