from .setup import setup_observability
from .metrics import (
    ecomm_orders_placed_total,
    ecomm_order_placement_duration_seconds,
    ecomm_stock_debit_conflicts_total,
    ecomm_saga_compensation_total,
    ecomm_compensation_failures_total
)
