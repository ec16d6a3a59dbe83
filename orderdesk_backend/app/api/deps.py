"""
API dependencies

The shipping facade is built once from settings and shared by every
request; main.py closes it on shutdown.
"""
from typing import Optional

from app.core.config import settings
from app.modules.shipping import AfterShipTrackingDelegate, Sender, ShippingFacade

_shipping_facade: Optional[ShippingFacade] = None


def build_shipping_facade() -> ShippingFacade:
    sender = Sender(
        name=settings.SHIPPING_SENDER_NAME,
        phone=settings.SHIPPING_SENDER_PHONE,
        address=settings.SHIPPING_SENDER_ADDRESS,
        province=settings.SHIPPING_SENDER_PROVINCE,
        district=settings.SHIPPING_SENDER_DISTRICT,
    )
    tracking_delegate = None
    if settings.aftership_key():
        tracking_delegate = AfterShipTrackingDelegate(
            api_key=settings.aftership_key(),
            base_url=settings.AFTERSHIP_API_BASE,
            timeout=settings.CARRIER_HTTP_TIMEOUT_SECONDS,
        )
    return ShippingFacade(
        credentials=settings.carrier_credentials(),
        sender=sender,
        tracking_delegate=tracking_delegate,
        timeout=settings.CARRIER_HTTP_TIMEOUT_SECONDS,
    )


def get_shipping_facade() -> ShippingFacade:
    """Dependency returning the process-wide shipping facade."""
    global _shipping_facade
    if _shipping_facade is None:
        _shipping_facade = build_shipping_facade()
    return _shipping_facade


async def close_shipping_facade():
    global _shipping_facade
    if _shipping_facade is not None:
        await _shipping_facade.close()
        _shipping_facade = None
