"""
GHTK (Giao Hang Tiet Kiem) carrier

Units: shipment creation in kilograms (declared via weight_option), fee
quotes in grams. Auth: `X-API-Key` header.
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


@register_carrier(ShippingCarrier.GHTK)
class GHTKCarrier(BaseCarrier):

    profile = CarrierProfile(
        code=ShippingCarrier.GHTK,
        name="Giao Hàng Tiết Kiệm",
        base_url="https://services.giaohangtietkiem.vn",
        auth_header="X-API-Key",
    )

    def create_shipment(self, request: ShipmentRequest) -> CarrierCall:
        recipient = request.recipient
        products = [
            {
                "name": item.name,
                "product_code": item.sku,
                "weight": grams_to_kg(item.weight),
                "quantity": item.quantity,
                "price": to_money(item.unit_price),
            }
            for item in request.items
        ]
        body = {
            "order": {
                "id": request.order_number,
                "pick_name": self.sender.name,
                "pick_address": self.sender.address,
                "pick_province": self.sender.province,
                "pick_district": self.sender.district,
                "pick_tel": self.sender.phone,
                "name": recipient.name,
                "address": recipient.address,
                "province": recipient.province or "",
                "district": recipient.district or "",
                "ward": recipient.ward or "",
                "hamlet": "Khác",
                "tel": recipient.phone,
                "note": request.note,
                "value": to_money(request.goods_value),
                "transport": "road",
                "pick_money": to_money(request.cod_amount),
                "is_freeship": 0,
                "weight_option": "kilogram",
                "total_weight": grams_to_kg(request.parcel.weight),
            },
            "products": products,
        }
        return CarrierCall("POST", "/services/shipment/order", json=body)

    def track_shipment(self, tracking_number: str) -> CarrierCall:
        return CarrierCall("GET", f"/services/shipment/v2/{quote(tracking_number, safe='')}")

    def cancel_shipment(self, tracking_number: str, reason: str = DEFAULT_CANCEL_REASON) -> CarrierCall:
        return CarrierCall("POST", f"/services/shipment/cancel/{quote(tracking_number, safe='')}", json={})

    def get_provinces(self) -> CarrierCall:
        return CarrierCall("GET", "/services/address/provinces")

    def get_services(self) -> CarrierCall:
        return CarrierCall("GET", "/services/shipment/services")

    def calculate_fee(self, request: FeeRequest) -> CarrierCall:
        body = {
            "pick_province": request.from_province or self.sender.province,
            "pick_district": request.from_district or self.sender.district,
            "province": request.to_province or "",
            "district": request.to_district or "",
            "ward": request.to_ward or "",
            "weight": int(round(request.parcel.weight)),
            "value": to_money(request.declared_value),
            "transport": "road",
        }
        return CarrierCall("POST", "/services/shipment/fee", json=body)

    def extract_tracking_number(self, response: Any) -> Optional[str]:
        if isinstance(response, dict):
            order = response.get("order") or {}
            if isinstance(order, dict):
                return order.get("label")
        return None
