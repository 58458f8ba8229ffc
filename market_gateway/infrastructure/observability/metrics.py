"""Prometheus metrics for transaction outcomes, financing volume and HTTP latency"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Transaction lifecycle metrics
transaction_operation_counter = Counter(
    "market_transaction_operations_total",
    "Transaction engine operations by outcome",
    ["operation", "outcome"],  # create|complete|cancel|update, success|<error code>
)

vehicle_sold_counter = Counter(
    "market_vehicles_sold_total",
    "Vehicles transferred to a buyer on completed sale",
)

financed_amount_histogram = Histogram(
    "market_financed_amount",
    "Principal financed per sale",
    buckets=[1_000, 5_000, 10_000, 20_000, 35_000, 50_000, 75_000, 100_000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_operation(operation: str, outcome: str = "success") -> None:
    """Count an engine operation; outcome is 'success' or an error code"""
    transaction_operation_counter.labels(operation=operation, outcome=outcome).inc()


def record_financing(financed_amount: Decimal) -> None:
    financed_amount_histogram.observe(float(financed_amount))
