from prometheus_client import Counter, Histogram

# outcome: success, not_found or error
OPERATIONS = Counter(
    "storage_operations_total",
    "Total object storage operations",
    ["operation", "outcome"],
)

LATENCY = Histogram(
    "storage_operation_duration_seconds",
    "Object storage operation latency in seconds",
    ["operation"],
)
