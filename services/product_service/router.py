from dataclasses import replace
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security.dependencies import require_admin
from .models import Category
from .schemas import SORT_FIELDS, ProductCreate, ProductListParams, ProductResponse, ProductUpdate, StockUpdate
from .service import ProductService

# Catalogue writes are admin only; reads are public
router = APIRouter(dependencies=[Depends(require_admin)])
public_router = APIRouter()


def list_params(
    category: Category | None = None,
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    sort: str = "createdAt",
    order: str = "desc",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> ProductListParams:
    # Unknown sort fields fall back to newest first rather than failing the listing
    return ProductListParams(
        category=category,
        min_price=min_price,
        max_price=max_price,
        sort=sort if sort in SORT_FIELDS else "createdAt",
        order="asc" if order.lower() == "asc" else "desc",
        page=page,
        limit=limit,
    )


def admin_list_params(
    params: ProductListParams = Depends(list_params),
    is_active: bool | None = Query(None, alias="isActive"),
) -> ProductListParams:
    return replace(params, is_active=is_active)


@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "product", "status": "running"}


@public_router.get("/", response_model=list[ProductResponse])
async def list_products(params: ProductListParams = Depends(list_params), db: AsyncSession = Depends(get_db)):
    return await ProductService.list_products(db, params)


@router.get("/admin/all", response_model=list[ProductResponse])
async def list_all_products(params: ProductListParams = Depends(admin_list_params), db: AsyncSession = Depends(get_db)):
    """Active and soft-deleted products alike, so deleted ones can be found and restored."""
    return await ProductService.list_products(db, params, include_inactive=True)


@public_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    return await ProductService.get_product_by_id(db, product_id)


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, db: AsyncSession = Depends(get_db)):
    return await ProductService.create_product(db, product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, payload: ProductUpdate, db: AsyncSession = Depends(get_db)):
    return await ProductService.update_product(db, product_id, payload)


@router.post("/{product_id}/restock", response_model=ProductResponse)
async def restock(product_id: str, payload: StockUpdate, db: AsyncSession = Depends(get_db)):
    return await ProductService.restock(db, product_id, payload.quantity)


@router.delete("/{product_id}", response_model=ProductResponse)
async def deactivate_product(product_id: str, db: AsyncSession = Depends(get_db)):
    return await ProductService.set_active(db, product_id, False)


@router.post("/{product_id}/restore", response_model=ProductResponse)
async def restore_product(product_id: str, db: AsyncSession = Depends(get_db)):
    return await ProductService.set_active(db, product_id, True)
