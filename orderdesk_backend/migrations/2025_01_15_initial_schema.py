"""
Migration: Initial schema

Creates customers, products, orders, order_items, shipping and
inventory_history from the ORM metadata, including the stock >= 0 and
inventory type check constraints.

Rollback:
    DROP TABLE IF EXISTS inventory_history, shipping, order_items, orders, products, customers CASCADE;
    DROP TYPE IF EXISTS shipping_carrier;
"""
import asyncio
import logging
import os
import sys

# Ensure app modules are importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.database import Base, engine  # noqa: E402
import app.models  # noqa: E402, F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")


async def main() -> None:
    try:
        await create_tables()
    except Exception:
        logger.exception("Initial schema migration failed")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
