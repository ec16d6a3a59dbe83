"""
Shipping Facade

One contract over every carrier:

    result = await facade.execute("ghn", ShippingOperation.CREATE_SHIPMENT, request)

- Unknown carrier ids (and "other") fail before any network call
- A missing credential fails as "not connected", also without a call
- Carriers without native tracking are routed to the tracking delegate
- Nothing raises across this boundary; every outcome is an OperationResult
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from app.core.exceptions import (
    CarrierNotConfiguredError,
    CarrierNotSupportedError,
    OrderdeskError,
    ShippingOperationError,
    ShippingPayloadError,
)
from app.models.shipping import ShippingCarrier
from app.modules.shipping.carriers import CarrierFactory
from app.modules.shipping.carriers.base import (
    BaseCarrier,
    CarrierCall,
    FeeRequest,
    OperationResult,
    Sender,
    ShipmentRequest,
    DEFAULT_CANCEL_REASON,
)
from app.modules.shipping.executor import CarrierRequestExecutor
from app.modules.shipping.tracking import AfterShipTrackingDelegate

logger = logging.getLogger(__name__)


class ShippingOperation(str, Enum):
    CREATE_SHIPMENT = "createShipment"
    TRACK_SHIPMENT = "trackShipment"
    CANCEL_SHIPMENT = "cancelShipment"
    GET_PROVINCES = "getProvinces"
    GET_SERVICES = "getServices"
    CALCULATE_FEE = "calculateFee"

    @classmethod
    def parse(cls, value: Union[str, "ShippingOperation"]) -> "ShippingOperation":
        """Accept enum members, camelCase values and snake_case names."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for op in cls:
            if text == op.value or text.upper() == op.name:
                return op
        raise ShippingOperationError(f"Unsupported shipping operation: {value}", details={"operation": text})


def _tracking_args(payload: Any) -> Dict[str, Any]:
    """tracking_number (and optional reason) from a string or mapping payload."""
    if isinstance(payload, str):
        args = {"tracking_number": payload}
    elif isinstance(payload, Mapping):
        args = dict(payload)
    else:
        raise ShippingPayloadError("Tracking number is required")
    tracking_number = str(args.get("tracking_number") or "").strip()
    if not tracking_number:
        raise ShippingPayloadError("Tracking number is required")
    args["tracking_number"] = tracking_number
    return args


class ShippingFacade:
    """
    Dispatches (carrier id, operation, payload) to mapper, executor and
    tracking delegate.

    Credentials are injected at construction as a carrier id -> API key
    mapping; carriers absent from it are reported as not connected.
    """

    def __init__(
        self,
        credentials: Mapping[str, str],
        sender: Sender,
        executor: Optional[CarrierRequestExecutor] = None,
        tracking_delegate: Optional[AfterShipTrackingDelegate] = None,
        timeout: float = 30.0,
    ):
        self.credentials = {str(k): v for k, v in credentials.items() if v}
        self.sender = sender
        self.executor = executor or CarrierRequestExecutor(timeout=timeout)
        self.tracking_delegate = tracking_delegate

    async def close(self):
        await self.executor.close()
        if self.tracking_delegate:
            await self.tracking_delegate.close()

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def execute(
        self,
        carrier_id: Union[str, ShippingCarrier],
        operation: Union[str, ShippingOperation],
        payload: Any = None,
    ) -> OperationResult:
        try:
            carrier = self._resolve_carrier(carrier_id)
            op = ShippingOperation.parse(operation)

            if op == ShippingOperation.TRACK_SHIPMENT and not carrier.profile.native_tracking:
                return await self._delegate_tracking(carrier, payload)

            api_key = self.credentials.get(carrier.carrier_code.value)
            if not api_key:
                raise CarrierNotConfiguredError(
                    f"{carrier.carrier_name} is not connected: API key missing",
                    carrier=carrier.carrier_code.value,
                )

            call = self._build_call(carrier, op, payload)
            result = await self.executor.execute(carrier.profile, api_key, call)
            if not result.success:
                logger.warning(
                    f"[{carrier.carrier_code.value}] {op.value} failed: {result.message}"
                )
            return result
        except OrderdeskError as e:
            logger.info(f"Shipping request rejected ({e.code}): {e.message}")
            return OperationResult.failure(e.message, error=e.to_dict())
        except Exception as e:
            logger.exception(f"Unexpected error in shipping {operation} for {carrier_id}")
            return OperationResult.failure(
                "Unexpected shipping error",
                error={"type": type(e).__name__, "detail": str(e)},
            )

    def _resolve_carrier(self, carrier_id: Union[str, ShippingCarrier]) -> BaseCarrier:
        carrier = CarrierFactory.get_carrier(carrier_id, self.sender)
        if carrier is None:
            raise CarrierNotSupportedError(
                f"Unsupported carrier: {getattr(carrier_id, 'value', carrier_id)}",
                carrier=str(getattr(carrier_id, "value", carrier_id)),
            )
        return carrier

    def _build_call(self, carrier: BaseCarrier, op: ShippingOperation, payload: Any) -> CarrierCall:
        try:
            if op == ShippingOperation.CREATE_SHIPMENT:
                request = payload if isinstance(payload, ShipmentRequest) else ShipmentRequest.from_dict(payload)
                return carrier.create_shipment(request)
            if op == ShippingOperation.TRACK_SHIPMENT:
                return carrier.track_shipment(_tracking_args(payload)["tracking_number"])
            if op == ShippingOperation.CANCEL_SHIPMENT:
                args = _tracking_args(payload)
                return carrier.cancel_shipment(
                    args["tracking_number"],
                    reason=args.get("reason") or DEFAULT_CANCEL_REASON,
                )
            if op == ShippingOperation.GET_PROVINCES:
                return carrier.get_provinces()
            if op == ShippingOperation.GET_SERVICES:
                return carrier.get_services()
            request = payload if isinstance(payload, FeeRequest) else FeeRequest.from_dict(payload or {})
            return carrier.calculate_fee(request)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ShippingPayloadError(
                f"Invalid payload for {op.value}: {e}",
                details={"carrier": carrier.carrier_code.value, "operation": op.value},
            )

    async def _delegate_tracking(self, carrier: BaseCarrier, payload: Any) -> OperationResult:
        tracking_number = _tracking_args(payload)["tracking_number"]
        if self.tracking_delegate is None:
            raise CarrierNotConfiguredError(
                f"Tracking for {carrier.carrier_name} requires AfterShip, which is not configured",
                carrier=carrier.carrier_code.value,
            )
        logger.info(
            f"[{carrier.carrier_code.value}] Tracking {tracking_number} via AfterShip "
            f"({carrier.profile.tracking_slug})"
        )
        return await self.tracking_delegate.track(tracking_number, carrier.profile.tracking_slug)

    # =========================================================================
    # Convenience wrappers
    # =========================================================================

    async def create_shipment(self, carrier_id, request: Union[ShipmentRequest, Mapping[str, Any]]) -> OperationResult:
        return await self.execute(carrier_id, ShippingOperation.CREATE_SHIPMENT, request)

    async def track_shipment(self, carrier_id, tracking_number: str) -> OperationResult:
        return await self.execute(carrier_id, ShippingOperation.TRACK_SHIPMENT, tracking_number)

    async def cancel_shipment(
        self, carrier_id, tracking_number: str, reason: str = DEFAULT_CANCEL_REASON
    ) -> OperationResult:
        return await self.execute(
            carrier_id,
            ShippingOperation.CANCEL_SHIPMENT,
            {"tracking_number": tracking_number, "reason": reason},
        )

    async def get_provinces(self, carrier_id) -> OperationResult:
        return await self.execute(carrier_id, ShippingOperation.GET_PROVINCES)

    async def get_services(self, carrier_id) -> OperationResult:
        return await self.execute(carrier_id, ShippingOperation.GET_SERVICES)

    async def calculate_fee(self, carrier_id, request: Union[FeeRequest, Mapping[str, Any]]) -> OperationResult:
        return await self.execute(carrier_id, ShippingOperation.CALCULATE_FEE, request)

    def tracking_number_from(self, carrier_id, data: Any) -> Optional[str]:
        """Tracking number from a successful create-shipment response."""
        carrier = CarrierFactory.get_carrier(carrier_id, self.sender)
        if carrier is None:
            return None
        return carrier.extract_tracking_number(data)

    def carrier_info(self) -> List[Dict[str, Any]]:
        """Supported carriers with connection and tracking capability flags."""
        info = []
        for profile in CarrierFactory.get_profiles():
            code = profile.code.value
            if profile.native_tracking:
                tracking_available = code in self.credentials
            else:
                tracking_available = self.tracking_delegate is not None
            info.append({
                "id": code,
                "name": profile.name,
                "api_connected": code in self.credentials,
                "native_tracking": profile.native_tracking,
                "tracking_available": tracking_available,
            })
        return info
