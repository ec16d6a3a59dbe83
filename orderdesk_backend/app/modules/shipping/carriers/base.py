"""
Base Carrier Interface

- Every carrier implements this interface as a pure translator: canonical
  request in, CarrierCall (method, path, body, query) out. No I/O happens
  here; the executor performs the call.
- Canonical units are grams and centimeters. Each carrier converts to its
  own convention and fills in defaults for missing physical data.
- OperationResult is the envelope returned by every carrier and tracking
  operation.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from app.models.shipping import ShippingCarrier

DEFAULT_ITEM_WEIGHT_GRAMS = 500
DEFAULT_PARCEL_WEIGHT_GRAMS = 1000
DEFAULT_DIMENSION_CM = 15

DEFAULT_CANCEL_REASON = "Customer requested cancellation"


def grams_to_kg(grams: float) -> float:
    return round(float(grams) / 1000, 3)


def to_money(value: Any) -> int:
    """Carriers take whole VND amounts."""
    if value is None:
        return 0
    return int(Decimal(str(value)).to_integral_value())


def _num(value: Any) -> Optional[float]:
    """Positive number or None (0 and missing both mean 'not provided')."""
    if value is None:
        return None
    value = float(value)
    return value if value > 0 else None


# =============================================================================
# Result envelope
# =============================================================================

@dataclass
class OperationResult:
    """Uniform result of every carrier/tracking operation."""
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[Any] = None

    @classmethod
    def ok(cls, data: Any = None, message: str = "Request succeeded") -> "OperationResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str, error: Any = None) -> "OperationResult":
        return cls(success=False, message=message, error=error)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        return result


# =============================================================================
# Carrier-Agnostic Data Classes
# =============================================================================

@dataclass(frozen=True)
class Recipient:
    name: str
    phone: str
    address: str
    ward: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None


@dataclass(frozen=True)
class Sender:
    """Pick-up point, taken from configuration."""
    name: str
    phone: str
    address: str
    province: str = ""
    district: str = ""


@dataclass(frozen=True)
class Parcel:
    """Parcel dimensions in grams / centimeters."""
    weight_grams: Optional[float] = None
    length_cm: Optional[float] = None
    width_cm: Optional[float] = None
    height_cm: Optional[float] = None
    declared_value: Optional[Decimal] = None

    @property
    def weight(self) -> float:
        return _num(self.weight_grams) or DEFAULT_PARCEL_WEIGHT_GRAMS

    @property
    def length(self) -> float:
        return _num(self.length_cm) or DEFAULT_DIMENSION_CM

    @property
    def width(self) -> float:
        return _num(self.width_cm) or DEFAULT_DIMENSION_CM

    @property
    def height(self) -> float:
        return _num(self.height_cm) or DEFAULT_DIMENSION_CM


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: int
    unit_price: Decimal
    sku: Optional[str] = None
    weight_grams: Optional[float] = None

    @property
    def weight(self) -> float:
        return _num(self.weight_grams) or DEFAULT_ITEM_WEIGHT_GRAMS


@dataclass(frozen=True)
class ShipmentRequest:
    """Carrier-agnostic data needed to book a shipment."""
    order_number: str
    recipient: Recipient
    items: List[LineItem] = field(default_factory=list)
    parcel: Parcel = field(default_factory=Parcel)
    cod_amount: Decimal = Decimal("0")
    note: str = ""
    service_id: Optional[int] = None
    service_type_id: Optional[int] = None
    pickup_date: Optional[datetime] = None

    @property
    def goods_value(self) -> Decimal:
        """Declared value, or the sum of the line items when not declared."""
        if self.parcel.declared_value is not None:
            return Decimal(str(self.parcel.declared_value))
        return sum(
            (Decimal(str(item.unit_price)) * item.quantity for item in self.items),
            Decimal("0"),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShipmentRequest":
        """Build from a plain mapping. Raises KeyError/TypeError/ValueError on bad input."""
        recipient = data["recipient"]
        parcel = data.get("parcel") or {}
        order_number = data["order_number"]
        if not order_number:
            raise ValueError("order_number is required")
        return cls(
            order_number=str(order_number),
            recipient=Recipient(**recipient),
            items=[
                LineItem(
                    name=item["name"],
                    quantity=int(item["quantity"]),
                    unit_price=Decimal(str(item.get("unit_price", 0))),
                    sku=item.get("sku"),
                    weight_grams=item.get("weight_grams"),
                )
                for item in data.get("items") or []
            ],
            parcel=Parcel(
                weight_grams=parcel.get("weight_grams"),
                length_cm=parcel.get("length_cm"),
                width_cm=parcel.get("width_cm"),
                height_cm=parcel.get("height_cm"),
                declared_value=(
                    Decimal(str(parcel["declared_value"]))
                    if parcel.get("declared_value") is not None else None
                ),
            ),
            cod_amount=Decimal(str(data.get("cod_amount") or 0)),
            note=data.get("note") or "",
            service_id=data.get("service_id"),
            service_type_id=data.get("service_type_id"),
        )

    @classmethod
    def from_order(
        cls,
        order: Any,
        parcel: Optional[Parcel] = None,
        cod_amount: Optional[Decimal] = None,
        service_id: Optional[int] = None,
    ) -> "ShipmentRequest":
        """
        Build from a stored order with its customer and items loaded.

        Cash-on-delivery defaults to the order total.
        """
        customer = order.customer
        items = [
            LineItem(
                name=item.product.name if item.product else f"Product #{item.product_id}",
                sku=item.product.sku if item.product else None,
                quantity=item.quantity,
                unit_price=Decimal(str(item.price)),
                weight_grams=item.product.weight_grams if item.product else None,
            )
            for item in order.items
        ]
        return cls(
            order_number=order.order_number,
            recipient=Recipient(
                name=customer.name,
                phone=customer.phone,
                address=customer.address,
                ward=customer.ward,
                district=customer.district,
                province=customer.province,
            ),
            items=items,
            parcel=parcel or Parcel(),
            cod_amount=Decimal(str(order.total)) if cod_amount is None else cod_amount,
            note=order.notes or "",
            service_id=service_id,
        )


@dataclass(frozen=True)
class FeeRequest:
    """Carrier-agnostic fee quote input. Carriers read the fields they need."""
    weight_grams: Optional[float] = None
    length_cm: Optional[float] = None
    width_cm: Optional[float] = None
    height_cm: Optional[float] = None
    declared_value: Decimal = Decimal("0")
    cod_amount: Decimal = Decimal("0")
    from_province: Optional[str] = None
    from_district: Optional[str] = None
    to_province: Optional[str] = None
    to_district: Optional[str] = None
    to_ward: Optional[str] = None
    from_province_id: Optional[int] = None
    from_district_id: Optional[int] = None
    to_province_id: Optional[int] = None
    to_district_id: Optional[int] = None
    to_ward_code: Optional[str] = None
    service_id: Optional[int] = None
    coupon: Optional[str] = None

    @property
    def parcel(self) -> Parcel:
        return Parcel(
            weight_grams=self.weight_grams,
            length_cm=self.length_cm,
            width_cm=self.width_cm,
            height_cm=self.height_cm,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeeRequest":
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown fee fields: {sorted(unknown)}")
        values = dict(data)
        for money_field in ("declared_value", "cod_amount"):
            if values.get(money_field) is not None:
                values[money_field] = Decimal(str(values[money_field]))
            else:
                values.pop(money_field, None)
        return cls(**values)


@dataclass(frozen=True)
class CarrierCall:
    """One HTTP call against a carrier API, relative to the profile base URL."""
    method: str
    path: str
    json: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class CarrierProfile:
    """Static per-carrier metadata."""
    code: ShippingCarrier
    name: str
    base_url: str
    auth_header: str
    auth_scheme: Optional[str] = None  # e.g. "Bearer"
    native_tracking: bool = True
    tracking_slug: Optional[str] = None  # aggregator courier slug when not native

    def auth_headers(self, api_key: str) -> Dict[str, str]:
        value = f"{self.auth_scheme} {api_key}" if self.auth_scheme else api_key
        return {self.auth_header: value}

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["code"] = self.code.value
        return data


# =============================================================================
# Base Carrier Interface
# =============================================================================

class BaseCarrier(ABC):
    """
    Abstract base class for all shipping carriers.

    Subclasses set `profile` and translate canonical requests into
    CarrierCall objects. They hold no mutable state beyond the sender.
    """

    profile: CarrierProfile

    def __init__(self, sender: Sender):
        self.sender = sender

    @property
    def carrier_code(self) -> ShippingCarrier:
        return self.profile.code

    @property
    def carrier_name(self) -> str:
        return self.profile.name

    @abstractmethod
    def create_shipment(self, request: ShipmentRequest) -> CarrierCall:
        """Map a ShipmentRequest to the carrier's create-order call."""

    def track_shipment(self, tracking_number: str) -> CarrierCall:
        """
        Native tracking call. Only carriers whose profile declares
        native_tracking override this; the facade never calls it otherwise.
        """
        raise NotImplementedError(f"{self.carrier_name} has no tracking API")

    @abstractmethod
    def cancel_shipment(self, tracking_number: str, reason: str = DEFAULT_CANCEL_REASON) -> CarrierCall:
        pass

    @abstractmethod
    def get_provinces(self) -> CarrierCall:
        pass

    @abstractmethod
    def get_services(self) -> CarrierCall:
        pass

    @abstractmethod
    def calculate_fee(self, request: FeeRequest) -> CarrierCall:
        pass

    @abstractmethod
    def extract_tracking_number(self, response: Any) -> Optional[str]:
        """Pull the carrier's tracking/order code out of a create-shipment response."""
