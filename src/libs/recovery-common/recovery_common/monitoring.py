# src/libs/recovery-common/recovery_common/monitoring.py
from prometheus_client import Counter, Histogram

# --------------------------------------------------------------------------------------
# HTTP metrics
# --------------------------------------------------------------------------------------
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "HTTP requests total",
    labelnames=("service", "method", "path", "status"),
)

HTTP_REQUEST_LATENCY_SECONDS = Histogram(
    "http_request_latency_seconds",
    "HTTP request latency in seconds",
    labelnames=("service", "method", "path"),
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)

# --------------------------------------------------------------------------------------
# Recovery calculator metrics
# --------------------------------------------------------------------------------------
RECOVERY_CALCULATIONS_TOTAL = Counter(
    "recovery_calculations_total",
    "Number of recovery calculations by outcome (SUCCESS or the failure reason).",
    labelnames=("outcome",),
)

RECOVERY_CALCULATION_DURATION_SECONDS = Histogram(
    "recovery_calculation_duration_seconds",
    "Time spent computing a recovery plan, including goal construction.",
    buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1),
)

def observe_recovery_outcome(outcome: str, count: int = 1) -> None:
    RECOVERY_CALCULATIONS_TOTAL.labels(outcome).inc(count)

def recovery_calculation_timer():
    """Context manager that observes recovery calculation latency."""
    return RECOVERY_CALCULATION_DURATION_SECONDS.time()
