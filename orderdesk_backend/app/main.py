"""
Orderdesk Backend
FastAPI application entry point

- Error sanitization middleware plus a handler mapping domain errors to 4xx
- Shared carrier HTTP clients closed on shutdown
- Health endpoint with DB ping
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.api.deps import close_shipping_facade
from app.api.routes import customers, orders, products, reference, shipping, shipping_carriers
from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.error_handler import ErrorSanitizationMiddleware, orderdesk_error_handler
from app.core.exceptions import OrderdeskError

# Import models to register them with SQLAlchemy
from app.models import Customer, Product, Order, OrderItem, ShippingRecord, InventoryHistory  # noqa: F401

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configured carriers on startup, close carrier HTTP clients on shutdown."""
    connected = sorted(settings.carrier_credentials())
    logger.info(f"Carriers connected: {', '.join(connected) if connected else 'none'}")
    if not settings.aftership_key():
        logger.warning("AFTERSHIP_API_KEY not set - J&T Express tracking unavailable")

    yield

    await close_shipping_facade()
    logger.info("Carrier HTTP clients closed")


app = FastAPI(
    lifespan=lifespan,
    title=f"{settings.APP_NAME} API",
    description="Order management with GHN, GHTK, Viettel Post and J&T Express shipping",
    version="1.0.0",
)

app.add_exception_handler(OrderdeskError, orderdesk_error_handler)

app.add_middleware(ErrorSanitizationMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(customers.router, prefix="/api/customers", tags=["Customers"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(shipping.router, prefix="/api/shipping", tags=["Shipping"])
app.include_router(shipping_carriers.router, prefix="/api/shipping-carriers", tags=["Shipping Carriers"])
app.include_router(reference.router, prefix="/api", tags=["Reference"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check with DB ping. Returns 503 if the database is unreachable."""
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        health_status["database"] = f"error: {type(e).__name__}: {str(e)[:100]}"
        health_status["status"] = "unhealthy"
        return JSONResponse(status_code=503, content=health_status)

    return health_status
