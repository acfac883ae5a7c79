from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_orders_placed_total = Counter(
    "ecomm_orders_placed_total",
    "Total order placements processed",
    ["status"] # Labels: 'success', 'rejected', 'failed'
)

ecomm_order_placement_duration_seconds = Histogram(
    "ecomm_order_placement_duration_seconds",
    "Order placement duration in seconds"
)

ecomm_stock_debit_conflicts_total = Counter(
    "ecomm_stock_debit_conflicts_total",
    "Stock debits rejected by the conditional guard after the availability check passed"
)

ecomm_saga_compensation_total = Counter(
    "ecomm_saga_compensation_total",
    "Total saga compensations triggered",
    ["step_name"] # Labels: 'debit_stock'
)

ecomm_compensation_failures_total = Counter(
    "ecomm_compensation_failures_total",
    "Compensations that raised and need manual reconciliation",
    ["step_name"]
)
