from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import ORDER_RATE_LIMIT, Identity, get_current_identity, limiter, require_admin
from .schemas import OrderCreate, OrderResponse, StatusUpdate
from .service import OrderService

router = APIRouter()
public_router = APIRouter()  # For any public endpoints (e.g. health check)

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "order", "status": "running"}


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ORDER_RATE_LIMIT)  # per user id, or per IP when unauthenticated
async def create_order(
    request: Request,                                   # REQUIRED: slowapi needs this to check IP/Headers
    payload: OrderCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.place_order(db, identity, payload.line_items)


@router.get("/", response_model=list[OrderResponse])
async def list_orders(
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.list_orders(db)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.get_order(db, identity, order_id)


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    payload: StatusUpdate,
    identity: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.update_status(db, order_id, payload.status)
