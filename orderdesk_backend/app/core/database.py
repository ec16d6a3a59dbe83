"""
Database engine and request sessions

Services own their transactions: OrderService and InventoryService commit
or roll back themselves, and the customer/product routes commit their own
single-row writes. A request session is only opened and closed here;
closing it discards anything left uncommitted.
"""
from typing import AsyncIterator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings

# Local Postgres rarely needs more than a handful of connections
DEV_POOL_SIZE = 2
DEV_MAX_OVERFLOW = 5


def pool_options(environment: str) -> Dict[str, int]:
    """Connection pool settings for the given environment."""
    if environment == "production":
        return {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_pre_ping": True,
        }
    return {
        "pool_size": DEV_POOL_SIZE,
        "max_overflow": DEV_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **pool_options(settings.ENVIRONMENT),
)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session. Never commits; the service layer does."""
    async with AsyncSessionLocal() as session:
        yield session
