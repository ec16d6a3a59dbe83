"""
Viettel Post carrier

Units: grams and centimeters. Auth: `Token` header. Field names are upper
case and location fields are numeric ids (0 lets Viettel Post resolve the
address text).
"""
import logging
from datetime import datetime, timezone
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

VTP_DATE_FORMAT = "%d/%m/%Y %H:%M:%S"
VTP_PRODUCT_TYPE_GOODS = "HH"
VTP_NATIONAL_TYPE_DOMESTIC = 1
VTP_ALL_PROVINCES = -1


@register_carrier(ShippingCarrier.VIETTEL_POST)
class ViettelPostCarrier(BaseCarrier):

    profile = CarrierProfile(
        code=ShippingCarrier.VIETTEL_POST,
        name="Viettel Post",
        base_url="https://partner.viettelpost.vn/v2",
        auth_header="Token",
    )

    def create_shipment(self, request: ShipmentRequest) -> CarrierCall:
        recipient = request.recipient
        parcel = request.parcel
        pickup_date = request.pickup_date or datetime.now(timezone.utc)
        list_item = [
            {
                "PRODUCT_NAME": item.name,
                "PRODUCT_PRICE": to_money(item.unit_price),
                "PRODUCT_WEIGHT": int(round(item.weight)),
                "PRODUCT_QUANTITY": item.quantity,
            }
            for item in request.items
        ]
        body = {
            "ORDER_NUMBER": request.order_number,
            "GROUPADDRESS_ID": 0,
            "CUS_ID": 0,
            "DELIVERY_DATE": pickup_date.strftime(VTP_DATE_FORMAT),
            "SENDER_FULLNAME": self.sender.name,
            "SENDER_ADDRESS": self.sender.address,
            "SENDER_PHONE": self.sender.phone,
            "SENDER_WARD": 0,
            "SENDER_DISTRICT": 0,
            "SENDER_PROVINCE": 0,
            "RECEIVER_FULLNAME": recipient.name,
            "RECEIVER_ADDRESS": ", ".join(
                part for part in (recipient.address, recipient.ward, recipient.district, recipient.province) if part
            ),
            "RECEIVER_PHONE": recipient.phone,
            "RECEIVER_WARD": 0,
            "RECEIVER_DISTRICT": 0,
            "RECEIVER_PROVINCE": 0,
            "PRODUCT_NAME": f"Order {request.order_number}",
            "PRODUCT_DESCRIPTION": request.note,
            "PRODUCT_QUANTITY": 1,
            "PRODUCT_PRICE": to_money(request.goods_value),
            "PRODUCT_WEIGHT": int(round(parcel.weight)),
            "PRODUCT_LENGTH": int(round(parcel.length)),
            "PRODUCT_WIDTH": int(round(parcel.width)),
            "PRODUCT_HEIGHT": int(round(parcel.height)),
            "PRODUCT_TYPE": VTP_PRODUCT_TYPE_GOODS,
            "ORDER_PAYMENT": 0,
            "ORDER_SERVICE": str(request.service_id) if request.service_id else "",
            "ORDER_SERVICE_ADD": "",
            "ORDER_VOUCHER": "",
            "ORDER_NOTE": request.note,
            "MONEY_COLLECTION": to_money(request.cod_amount),
            "MONEY_TOTALFEE": 0,
            "LIST_ITEM": list_item,
        }
        return CarrierCall("POST", "/order/createOrder", json=body)

    def track_shipment(self, tracking_number: str) -> CarrierCall:
        return CarrierCall("GET", "/order/tracking", params={"order_number": tracking_number})

    def cancel_shipment(self, tracking_number: str, reason: str = DEFAULT_CANCEL_REASON) -> CarrierCall:
        return CarrierCall("POST", "/order/cancelOrder", json={"order_number": tracking_number})

    def get_provinces(self) -> CarrierCall:
        return CarrierCall("GET", "/categories/listProvinceById", params={"provinceId": VTP_ALL_PROVINCES})

    def get_services(self) -> CarrierCall:
        return CarrierCall("GET", "/categories/listService")

    def calculate_fee(self, request: FeeRequest) -> CarrierCall:
        parcel = request.parcel
        body = {
            "PRODUCT_WEIGHT": int(round(parcel.weight)),
            "PRODUCT_PRICE": to_money(request.declared_value),
            "MONEY_COLLECTION": to_money(request.cod_amount),
            "SENDER_PROVINCE": request.from_province_id or 0,
            "SENDER_DISTRICT": request.from_district_id or 0,
            "RECEIVER_PROVINCE": request.to_province_id or 0,
            "RECEIVER_DISTRICT": request.to_district_id or 0,
            "PRODUCT_LENGTH": int(round(parcel.length)),
            "PRODUCT_WIDTH": int(round(parcel.width)),
            "PRODUCT_HEIGHT": int(round(parcel.height)),
            "PRODUCT_TYPE": VTP_PRODUCT_TYPE_GOODS,
            "NATIONAL_TYPE": VTP_NATIONAL_TYPE_DOMESTIC,
        }
        return CarrierCall("POST", "/order/getPriceAll", json=body)

    def extract_tracking_number(self, response: Any) -> Optional[str]:
        if isinstance(response, dict):
            data = response.get("data") or {}
            if isinstance(data, dict):
                return data.get("ORDER_NUMBER")
        return None
