from app.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse, CustomerList
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductList,
    StockAdjustmentRequest,
    InventoryHistoryResponse,
)
from app.schemas.shipping import (
    ShippingResponse,
    ShippingUpdate,
    ShipmentCreateRequest,
    CancelShipmentRequest,
    FeeQuoteRequest,
    OperationResultResponse,
    CarrierInfo,
)
from app.schemas.order import OrderCreate, OrderStatusUpdate, OrderResponse, OrderSummary, OrderList
