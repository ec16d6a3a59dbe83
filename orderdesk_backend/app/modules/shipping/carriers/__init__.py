"""
Carrier Registry and Factory

- Carrier implementations register themselves with @register_carrier
- The registry is the closed set of carriers with a live integration;
  ShippingCarrier.OTHER is never registered
"""
from typing import Dict, List, Optional, Type, Union
import logging

from app.models.shipping import ShippingCarrier
from app.modules.shipping.carriers.base import BaseCarrier, CarrierProfile, Sender

logger = logging.getLogger(__name__)

# Registry of carrier implementations
_CARRIER_REGISTRY: Dict[ShippingCarrier, Type[BaseCarrier]] = {}


def register_carrier(carrier_code: ShippingCarrier):
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier(ShippingCarrier.GHN)
        class GHNCarrier(BaseCarrier):
            ...
    """
    def decorator(cls: Type[BaseCarrier]):
        _CARRIER_REGISTRY[carrier_code] = cls
        logger.debug(f"Registered carrier: {carrier_code.value} -> {cls.__name__}")
        return cls
    return decorator


def parse_carrier_code(carrier_id: Union[str, ShippingCarrier, None]) -> Optional[ShippingCarrier]:
    """Return the registered carrier code for an id, or None if unsupported."""
    if isinstance(carrier_id, ShippingCarrier):
        code = carrier_id
    else:
        try:
            code = ShippingCarrier(str(carrier_id).strip().lower())
        except ValueError:
            return None
    return code if code in _CARRIER_REGISTRY else None


class CarrierFactory:
    """Factory for creating carrier instances."""

    @classmethod
    def get_carrier(cls, carrier_id: Union[str, ShippingCarrier, None], sender: Sender) -> Optional[BaseCarrier]:
        """
        Get a carrier instance.

        Returns:
            BaseCarrier instance or None if the id is unknown or has no integration
        """
        code = parse_carrier_code(carrier_id)
        if code is None:
            logger.debug(f"No implementation registered for carrier: {carrier_id}")
            return None
        return _CARRIER_REGISTRY[code](sender)

    @classmethod
    def get_registered_carriers(cls) -> List[ShippingCarrier]:
        """Get list of all registered carrier codes."""
        return list(_CARRIER_REGISTRY.keys())

    @classmethod
    def get_profiles(cls) -> List[CarrierProfile]:
        return [carrier_cls.profile for carrier_cls in _CARRIER_REGISTRY.values()]


def get_carrier(carrier_id: Union[str, ShippingCarrier, None], sender: Sender) -> Optional[BaseCarrier]:
    """
    Convenience function to get a carrier.

    Equivalent to CarrierFactory.get_carrier().
    """
    return CarrierFactory.get_carrier(carrier_id, sender)


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from app.modules.shipping.carriers.ghn import GHNCarrier  # noqa: E402, F401
from app.modules.shipping.carriers.ghtk import GHTKCarrier  # noqa: E402, F401
from app.modules.shipping.carriers.viettel_post import ViettelPostCarrier  # noqa: E402, F401
from app.modules.shipping.carriers.jt_express import JTExpressCarrier  # noqa: E402, F401
