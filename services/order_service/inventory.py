"""
Stock commitment for a persisted order.

Each line is debited with the store's conditional UPDATE. The availability
pass ran earlier on a separate read, so a debit can still lose to a
concurrent order; when that happens the debits already applied for this
order are credited back, the order is marked failed, and the same
InsufficientStockError the availability pass would have raised surfaces.

Flagging the order as committed is the saga's last step, so a failure to
write the flag is compensated like any other.
"""
import asyncio

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import InsufficientStockError
from shared.observability import ecomm_stock_debit_conflicts_total
from services.product_service.repository import ProductRepository
from .availability import AcceptedLine
from .repository import OrderRepository
from .saga import SagaOrchestrator

logger = structlog.get_logger(__name__)


async def _run_statement(db: AsyncSession, statement):
    try:
        return await statement
    except (Exception, asyncio.CancelledError):
        # Leave the session usable for the compensating credits
        await db.rollback()
        raise


def _debit_action(db: AsyncSession, line: AcceptedLine):
    product_id, product_name, quantity = line.product.id, line.product.name, line.quantity

    async def debit(ctx: dict):
        applied = await _run_statement(db, ProductRepository.debit_stock(db, product_id, quantity))

        if not applied:
            ecomm_stock_debit_conflicts_total.inc()
            # Same meaning as the availability pass: units this order asks for
            # in total, against what was there before this order took any
            already_taken = sum(q for pid, q in ctx["debited"] if pid == product_id)
            available = await ProductRepository.get_stock(db, product_id)
            raise InsufficientStockError(
                product_id=product_id,
                product_name=product_name,
                available=(available or 0) + already_taken,
                requested=already_taken + quantity,
            )
        ctx["debited"].append((product_id, quantity))

    return debit


def _credit_action(db: AsyncSession, line: AcceptedLine):
    product_id, quantity = line.product.id, line.quantity

    async def credit(ctx: dict):
        await _run_statement(db, ProductRepository.credit_stock(db, product_id, quantity))
        ctx["debited"].remove((product_id, quantity))

    return credit


def _flag_committed_action(db: AsyncSession, order_id: str):
    async def flag_committed(ctx: dict):
        await _run_statement(db, OrderRepository.mark_stock_committed(db, order_id))

    return flag_committed


class InventoryAdjuster:

    @staticmethod
    def build_saga(db: AsyncSession, order_id: str, lines: list[AcceptedLine]) -> SagaOrchestrator:
        saga = SagaOrchestrator()
        for index, line in enumerate(lines):
            saga.add_step(
                f"debit_stock[{index}]:{line.product.id}",
                _debit_action(db, line),
                _credit_action(db, line),
                label="debit_stock",
            )
        saga.add_step("mark_stock_committed", _flag_committed_action(db, order_id))
        return saga

    @staticmethod
    async def commit_stock(db: AsyncSession, order_id: str, lines: list[AcceptedLine]) -> None:
        """Debit every line and flag the order, or undo the debits and fail the order."""
        ctx = {"order_id": order_id, "debited": []}
        saga = InventoryAdjuster.build_saga(db, order_id, lines)
        try:
            await saga.execute(ctx)
        except (Exception, asyncio.CancelledError):
            if ctx.get("compensation_failures"):
                logger.critical(
                    "stock_left_uncompensated",
                    order_id=order_id,
                    debits=ctx["debited"],
                )
            await InventoryAdjuster.fail_order(db, order_id)
            raise

        logger.info("stock_committed", order_id=order_id, lines=len(lines))

    @staticmethod
    async def fail_order(db: AsyncSession, order_id: str) -> bool:
        """Mark the order failed. A no-op when no row with this id was ever committed.

        Returns False when the write itself failed; the order is then left
        pending with stock_committed=False, which reconciliation can find.
        """
        try:
            await db.rollback()
            await OrderRepository.mark_failed(db, order_id)
        except SQLAlchemyError:
            logger.critical("order_fail_marking_failed", order_id=order_id, exc_info=True)
            return False
        return True
