"""
J&T Express carrier

Units: kilograms and centimeters. Auth: `Authorization: Bearer`.
J&T exposes no tracking API; tracking goes through the aggregator using the
`jnt` courier slug (see TrackingDelegate).
"""
import logging
from typing import Any, Optional
from urllib.parse import quote

from app.models.shipping import ShippingCarrier
from app.modules.shipping.carriers.base import (
    BaseCarrier,
    CarrierCall,
    CarrierProfile,
    FeeRequest,
    ShipmentRequest,
    DEFAULT_CANCEL_REASON,
    grams_to_kg,
    to_money,
)
from app.modules.shipping.carriers import register_carrier

logger = logging.getLogger(__name__)

JT_SERVICE_TYPE = "EZ"


@register_carrier(ShippingCarrier.JT_EXPRESS)
class JTExpressCarrier(BaseCarrier):

    profile = CarrierProfile(
        code=ShippingCarrier.JT_EXPRESS,
        name="J&T Express",
        base_url="https://api.jtexpress.vn",
        auth_header="Authorization",
        auth_scheme="Bearer",
        native_tracking=False,
        tracking_slug="jnt",
    )

    def create_shipment(self, request: ShipmentRequest) -> CarrierCall:
        recipient = request.recipient
        parcel = request.parcel
        weight_kg = grams_to_kg(parcel.weight)
        goods_details = [
            {
                "goods_name": item.name,
                "goods_qty": item.quantity,
                "goods_weight": grams_to_kg(item.weight),
            }
            for item in request.items
        ]
        body = {
            "customer_order_no": request.order_number,
            "order_status": "REQUEST",
            "service_type": JT_SERVICE_TYPE,
            "sender": {
                "name": self.sender.name,
                "phone": self.sender.phone,
                "area": self.sender.province,
                "address": self.sender.address,
            },
            "receiver": {
                "name": recipient.name,
                "phone": recipient.phone,
                "area": recipient.province or "",
                "address": recipient.address,
            },
            "items_details": {
                "package_description": request.note or f"Order {request.order_number}",
                "package_weight": weight_kg,
                "actual_weight": weight_kg,
                "package_chargeable_weight": weight_kg,
                "package_length": parcel.length,
                "package_width": parcel.width,
                "package_height": parcel.height,
                "package_content": request.note,
                "goods_details": goods_details,
            },
            "transaction_details": {
                "cod_value": to_money(request.cod_amount),
                "transaction_amount": to_money(request.goods_value),
            },
        }
        return CarrierCall("POST", "/v1/orders", json=body)

    def cancel_shipment(self, tracking_number: str, reason: str = DEFAULT_CANCEL_REASON) -> CarrierCall:
        return CarrierCall("PUT", f"/v1/orders/{quote(tracking_number, safe='')}/cancel", json={"cancel_reason": reason})

    def get_provinces(self) -> CarrierCall:
        return CarrierCall("GET", "/v1/address/provinces")

    def get_services(self) -> CarrierCall:
        return CarrierCall("GET", "/v1/services")

    def calculate_fee(self, request: FeeRequest) -> CarrierCall:
        parcel = request.parcel
        body = {
            "service_type": JT_SERVICE_TYPE,
            "sender_area": request.from_province or self.sender.province,
            "receiver_area": request.to_province or "",
            "package_weight": grams_to_kg(parcel.weight),
            "package_length": parcel.length,
            "package_width": parcel.width,
            "package_height": parcel.height,
            "cod_value": to_money(request.cod_amount),
        }
        return CarrierCall("POST", "/v1/orders/shipment-fee", json=body)

    def extract_tracking_number(self, response: Any) -> Optional[str]:
        if isinstance(response, dict):
            data = response.get("data") or {}
            if isinstance(data, dict):
                return data.get("bill_code") or data.get("awb_no")
        return None
