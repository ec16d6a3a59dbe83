from app.models.customer import Customer
from app.models.product import Product
from app.models.order import Order, OrderItem, OrderStatus
from app.models.shipping import ShippingRecord, ShippingCarrier
from app.models.inventory_history import InventoryHistory, InventoryChangeType

__all__ = [
    "Customer",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatus",
    "ShippingRecord",
    "ShippingCarrier",
    "InventoryHistory",
    "InventoryChangeType",
]
