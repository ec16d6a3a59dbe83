"""
Orderdesk Exception Hierarchy

All exceptions include code, message, and details for logging and for the
machine-readable error bodies returned by the API.

Exception Hierarchy:
    OrderdeskError
    ├── ShippingError
    │   ├── CarrierNotSupportedError
    │   ├── CarrierNotConfiguredError
    │   ├── ShippingOperationError
    │   └── ShippingPayloadError
    ├── OrderError
    │   ├── OrderNotFoundError
    │   ├── OrderValidationError
    │   └── InvalidOrderStatusError
    └── InventoryError
        ├── ProductNotFoundError
        └── InvalidAdjustmentError

Carrier-layer exceptions never cross the shipping facade: the facade turns
them into an OperationResult with success=False.
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class OrderdeskError(Exception):
    """
    Base exception for all Orderdesk custom errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "ORDERDESK_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# SHIPPING ERRORS
# =============================================================================

class ShippingError(OrderdeskError):
    """Base exception for shipping-related errors."""
    default_code = "SHIPPING_ERROR"
    default_severity = "P1"


class CarrierNotSupportedError(ShippingError):
    """Carrier id has no live integration (unknown id or 'other')."""
    default_code = "CARRIER_NOT_SUPPORTED"
    default_severity = "P3"

    def __init__(self, message: str, carrier: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["carrier"] = carrier
        super().__init__(message, details=details, **kwargs)


class CarrierNotConfiguredError(ShippingError):
    """Credential for a carrier or the tracking aggregator is missing."""
    default_code = "CARRIER_NOT_CONFIGURED"
    default_severity = "P2"

    def __init__(self, message: str, carrier: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["carrier"] = carrier
        super().__init__(message, details=details, **kwargs)


class ShippingOperationError(ShippingError):
    """Operation name is not part of the shipping contract."""
    default_code = "SHIPPING_OPERATION_NOT_SUPPORTED"
    default_severity = "P3"


class ShippingPayloadError(ShippingError):
    """Payload could not be turned into a canonical shipping request."""
    default_code = "SHIPPING_INVALID_PAYLOAD"
    default_severity = "P3"


# =============================================================================
# ORDER ERRORS
# =============================================================================

class OrderError(OrderdeskError):
    """Base exception for order errors."""
    default_code = "ORDER_ERROR"


class OrderNotFoundError(OrderError):
    default_code = "ORDER_NOT_FOUND"
    default_severity = "P3"

    def __init__(self, message: str, order_id: Optional[int] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["order_id"] = order_id
        super().__init__(message, details=details, **kwargs)


class OrderValidationError(OrderError):
    """Order payload violates an order invariant (e.g. no items)."""
    default_code = "ORDER_VALIDATION_FAILED"
    default_severity = "P3"


class InvalidOrderStatusError(OrderError):
    default_code = "ORDER_STATUS_INVALID"
    default_severity = "P3"


# =============================================================================
# INVENTORY ERRORS
# =============================================================================

class InventoryError(OrderdeskError):
    """Base exception for inventory-related errors."""
    default_code = "INVENTORY_ERROR"
    default_severity = "P1"


class ProductNotFoundError(InventoryError):
    default_code = "PRODUCT_NOT_FOUND"
    default_severity = "P3"

    def __init__(self, message: str, product_id: Optional[int] = None, **kwargs):
        details = kwargs.pop("details", {})
        details["product_id"] = product_id
        super().__init__(message, details=details, **kwargs)


class InvalidAdjustmentError(InventoryError):
    """Manual stock adjustment with an unknown type or a negative quantity."""
    default_code = "INVENTORY_ADJUSTMENT_INVALID"
    default_severity = "P3"
