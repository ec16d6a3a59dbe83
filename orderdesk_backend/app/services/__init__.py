# Services layer for business logic
from app.services.inventory_service import InventoryService
from app.services.order_service import OrderService

__all__ = [
    "InventoryService",
    "OrderService",
]
