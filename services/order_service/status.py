"""Order lifecycle: pending -> confirmed -> shipped -> delivered, one step at a time."""
import enum

from shared.exceptions import InvalidStatusTransition, ValidationError


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    # Terminal state written only by placement when stock could not be committed
    FAILED = "failed"


ALLOWED_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

_NEXT_STATUS = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}


def parse_status(value) -> OrderStatus:
    allowed = ", ".join(s.value for s in ALLOWED_STATUSES)
    if not isinstance(value, str) or value not in {s.value for s in ALLOWED_STATUSES}:
        raise ValidationError(f"Status must be one of: {allowed}", field="status")
    return OrderStatus(value)


def next_status(current: OrderStatus) -> OrderStatus | None:
    return _NEXT_STATUS.get(OrderStatus(current))


def validate_transition(current, target) -> OrderStatus:
    """Return the parsed target status if `current -> target` is the single allowed step."""
    target_status = parse_status(target)
    current_status = OrderStatus(current)
    expected = next_status(current_status)
    if expected is None or target_status != expected:
        raise InvalidStatusTransition(
            f"Cannot move order from {current_status.value} to {target_status.value}",
            field="status",
            current=current_status.value,
            requested=target_status.value,
        )
    return target_status
