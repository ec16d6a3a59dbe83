"""
Product routes

Stock changes go through adjust-stock so every change lands in the
inventory history.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.product import Product
from app.schemas.product import (
    InventoryHistoryResponse,
    ProductCreate,
    ProductList,
    ProductResponse,
    ProductUpdate,
    StockAdjustmentRequest,
)
from app.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


@router.get("", response_model=ProductList)
async def list_products(
    search: Optional[str] = Query(None, description="Name or SKU"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
):
    query = select(Product)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Product.name.ilike(pattern), Product.sku.ilike(pattern)))

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(query.order_by(Product.name).offset((page - 1) * limit).limit(limit))
    return ProductList(products=result.scalars().all(), total=total)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(data: ProductCreate, db: AsyncSession = Depends(get_db)):
    existing = await db.execute(select(Product.id).where(Product.sku == data.sku))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail=f"SKU {data.sku} already exists")

    product = Product(**data.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info(f"Product {product.id} created (sku={product.sku}, stock={product.stock})")
    return product


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: int, data: ProductUpdate, db: AsyncSession = Depends(get_db)):
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(product, key, value)
    await db.commit()
    await db.refresh(product)
    return product


@router.post("/{product_id}/adjust-stock", response_model=InventoryHistoryResponse)
async def adjust_product_stock(
    product_id: int,
    request: StockAdjustmentRequest,
    db: AsyncSession = Depends(get_db),
):
    """Adjust stock (add / subtract / set) with a ledger entry."""
    entry = await InventoryService.adjust_stock(
        db, product_id, request.type, request.quantity, request.note
    )
    await db.refresh(entry)
    return entry


@router.get("/{product_id}/inventory-history", response_model=List[InventoryHistoryResponse])
async def get_inventory_history(
    product_id: int,
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    """Stock change history for a product, newest first."""
    return await InventoryService.list_history(db, product_id, limit)
