"""
Shipping Module

- BaseCarrier interface with one pure mapper per carrier (GHN, GHTK,
  Viettel Post, J&T Express)
- CarrierRequestExecutor performs the authenticated HTTP call
- AfterShipTrackingDelegate tracks carriers without a tracking API
- ShippingFacade is the single entry point used by the API layer
"""
from app.modules.shipping.carriers import CarrierFactory, get_carrier
from app.modules.shipping.carriers.base import (
    BaseCarrier,
    FeeRequest,
    OperationResult,
    Sender,
    ShipmentRequest,
)
from app.modules.shipping.executor import CarrierRequestExecutor
from app.modules.shipping.facade import ShippingFacade, ShippingOperation
from app.modules.shipping.tracking import AfterShipTrackingDelegate

__all__ = [
    "CarrierFactory",
    "get_carrier",
    "BaseCarrier",
    "FeeRequest",
    "OperationResult",
    "Sender",
    "ShipmentRequest",
    "CarrierRequestExecutor",
    "ShippingFacade",
    "ShippingOperation",
    "AfterShipTrackingDelegate",
]
