"""
GHN (Giao Hang Nhanh) carrier

Units: grams (integer) and centimeters. Auth: `Token` header.
"""
import logging
from typing import Any, Optional

from app.models.shipping import ShippingCarrier
from app.modules.shipping.carriers.base import (
    BaseCarrier,
    CarrierCall,
    CarrierProfile,
    FeeRequest,
    ShipmentRequest,
    DEFAULT_CANCEL_REASON,
    to_money,
)
from app.modules.shipping.carriers import register_carrier

logger = logging.getLogger(__name__)

GHN_PAYMENT_TYPE_BUYER_PAYS = 2
GHN_REQUIRED_NOTE = "KHONGCHOXEMHANG"  # recipient may not inspect goods


@register_carrier(ShippingCarrier.GHN)
class GHNCarrier(BaseCarrier):

    profile = CarrierProfile(
        code=ShippingCarrier.GHN,
        name="Giao Hàng Nhanh",
        base_url="https://online-gateway.ghn.vn/shiip/public-api",
        auth_header="Token",
    )

    def create_shipment(self, request: ShipmentRequest) -> CarrierCall:
        recipient = request.recipient
        parcel = request.parcel
        items = [
            {
                "name": item.name,
                "code": item.sku,
                "quantity": item.quantity,
                "price": to_money(item.unit_price),
                "weight": int(round(item.weight)),
            }
            for item in request.items
        ]
        body = {
            "payment_type_id": GHN_PAYMENT_TYPE_BUYER_PAYS,
            "note": request.note,
            "required_note": GHN_REQUIRED_NOTE,
            "client_order_code": request.order_number,
            "to_name": recipient.name,
            "to_phone": recipient.phone,
            "to_address": recipient.address,
            "to_ward_name": recipient.ward or "",
            "to_district_name": recipient.district or "",
            "to_province_name": recipient.province or "",
            "cod_amount": to_money(request.cod_amount),
            "insurance_value": to_money(request.goods_value),
            "weight": int(round(parcel.weight)),
            "length": int(round(parcel.length)),
            "width": int(round(parcel.width)),
            "height": int(round(parcel.height)),
            "service_id": request.service_id or 0,
            "service_type_id": request.service_type_id or 0,
            "items": items,
        }
        return CarrierCall("POST", "/v2/shipping-order/create", json=body)

    def track_shipment(self, tracking_number: str) -> CarrierCall:
        return CarrierCall("GET", "/v2/shipping-order/detail", params={"order_code": tracking_number})

    def cancel_shipment(self, tracking_number: str, reason: str = DEFAULT_CANCEL_REASON) -> CarrierCall:
        return CarrierCall("POST", "/v2/shipping-order/cancel", json={"order_code": tracking_number})

    def get_provinces(self) -> CarrierCall:
        return CarrierCall("GET", "/master-data/province")

    def get_services(self) -> CarrierCall:
        return CarrierCall("GET", "/v2/shipping-order/available-services")

    def calculate_fee(self, request: FeeRequest) -> CarrierCall:
        parcel = request.parcel
        body = {
            "from_district_id": request.from_district_id or 0,
            "to_district_id": request.to_district_id or 0,
            "to_ward_code": request.to_ward_code or "",
            "service_id": request.service_id or 0,
            "weight": int(round(parcel.weight)),
            "length": int(round(parcel.length)),
            "width": int(round(parcel.width)),
            "height": int(round(parcel.height)),
            "insurance_value": to_money(request.declared_value),
            "coupon": request.coupon or None,
        }
        return CarrierCall("POST", "/v2/shipping-order/fee", json=body)

    def extract_tracking_number(self, response: Any) -> Optional[str]:
        if isinstance(response, dict):
            data = response.get("data") or {}
            if isinstance(data, dict):
                return data.get("order_code")
        return None
