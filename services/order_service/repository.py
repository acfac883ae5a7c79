from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from .models import Order
from .status import OrderStatus

class OrderRepository:
    @staticmethod
    async def create_order(db: AsyncSession, order: Order):
        db.add(order)
        await db.commit()
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: str):
        # populate_existing so a re-read reflects committed status changes
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def list_orders(db: AsyncSession):
        result = await db.execute(select(Order).order_by(Order.created_at.desc()))
        return result.scalars().all()

    @staticmethod
    async def update_status(db: AsyncSession, order: Order, status: OrderStatus):
        order.status = status.value
        await db.commit()
        await db.refresh(order)
        return order

    @staticmethod
    async def mark_stock_committed(db: AsyncSession, order_id: str):
        await db.execute(
            update(Order)
            .where(Order.id == order_id)
            .values(stock_committed=True)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

    @staticmethod
    async def mark_failed(db: AsyncSession, order_id: str):
        await db.execute(
            update(Order)
            .where(Order.id == order_id)
            .values(status=OrderStatus.FAILED.value, stock_committed=False)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
