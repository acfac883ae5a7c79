import asyncio
import uuid

import structlog
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import AppError, AuthorizationError, NotFoundError, ValidationError
from shared.observability import ecomm_order_placement_duration_seconds, ecomm_orders_placed_total
from shared.security.dependencies import Identity
from .availability import AvailabilityChecker
from .inventory import InventoryAdjuster
from .models import Order, OrderItem
from .pricing import PricingCalculator
from .repository import OrderRepository
from .status import OrderStatus, parse_status, validate_transition
from .validation import OrderValidator

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


def _check_order_id(order_id: str) -> str:
    try:
        return str(uuid.UUID(order_id))
    except (TypeError, ValueError):
        raise ValidationError("Invalid Order ID format", field="id")


class OrderService:
    @staticmethod
    async def place_order(db: AsyncSession, identity: Identity, line_items):
        """Validate, price, persist as pending, then commit stock.

        The order row exists before any stock moves. If a debit loses a race
        the adjuster credits back what this order took and marks it failed,
        so callers see either a fully committed order or an exception. Any
        error or cancellation once the insert may have landed also leaves
        the row failed, never pending without its stock.
        """
        with ecomm_order_placement_duration_seconds.time(), tracer.start_as_current_span("place_order"):
            with structlog.contextvars.bound_contextvars(user_id=identity.id):
                try:
                    lines = OrderValidator.validate(line_items)
                    accepted = await AvailabilityChecker.check(db, lines)
                    priced = PricingCalculator.price(accepted)
                except AppError as e:
                    ecomm_orders_placed_total.labels(status="rejected").inc()
                    logger.info("order_rejected", error=e.error_code, reason=e.message)
                    raise

                order_id = str(uuid.uuid4())
                order = Order(
                    id=order_id,
                    user_id=identity.id,
                    total_amount=priced.total_amount,
                    status=OrderStatus.PENDING.value,
                    stock_committed=False,
                    line_items=[
                        OrderItem(
                            position=position,
                            product_id=line.product_id,
                            product=accepted_line.product,
                            quantity=line.quantity,
                            unit_price_at_order_time=line.unit_price,
                        )
                        for position, (line, accepted_line) in enumerate(zip(priced.lines, accepted))
                    ],
                )
                with structlog.contextvars.bound_contextvars(order_id=order_id):
                    try:
                        try:
                            await OrderRepository.create_order(db, order)
                        except (Exception, asyncio.CancelledError):
                            # The insert may have committed before the error reached us
                            await InventoryAdjuster.fail_order(db, order_id)
                            raise
                        await InventoryAdjuster.commit_stock(db, order_id, accepted)
                    except (Exception, asyncio.CancelledError) as e:
                        ecomm_orders_placed_total.labels(status="failed").inc()
                        logger.warning("order_failed", error=repr(e))
                        raise

                    ecomm_orders_placed_total.labels(status="success").inc()
                    logger.info("order_placed", total_amount=str(priced.total_amount), lines=len(accepted))

                return await OrderRepository.get_order(db, order_id)

    @staticmethod
    async def list_orders(db: AsyncSession):
        return await OrderRepository.list_orders(db)

    @staticmethod
    async def get_order(db: AsyncSession, identity: Identity, order_id: str):
        order_id = _check_order_id(order_id)
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise NotFoundError("Order not found", order_id=order_id)

        if not identity.is_admin and order.user_id != identity.id:
            raise AuthorizationError("Not authorized to view this order")
        return order

    @staticmethod
    async def update_status(db: AsyncSession, order_id: str, status_value):
        order_id = _check_order_id(order_id)
        # Unknown values are rejected before the order is even loaded
        parse_status(status_value)

        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise NotFoundError("Order not found", order_id=order_id)

        target = validate_transition(order.status, status_value)
        previous = order.status
        order = await OrderRepository.update_status(db, order, target)
        logger.info("order_status_changed", order_id=order_id, previous=previous, status=target.value)
        return order
