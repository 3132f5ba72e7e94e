"""Prometheus metrics for hmacsign observability."""

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest

# Method label values; anything else is reported as OTHER.
KNOWN_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"}
)

# === Counters ===

SIGNATURES_TOTAL = Counter(
    "hmacsign_signatures_total",
    "Total number of signing calls",
    ["method", "outcome"],  # outcome: passed, invalid, failed
)

# === Histograms ===

SIGNING_LATENCY = Histogram(
    "hmacsign_signing_latency_seconds",
    "Signing latency in seconds",
    ["method"],
    buckets=[0.00005, 0.0001, 0.00025, 0.0005, 0.001, 0.005, 0.01],
)


# === Helper Functions ===


def method_label(method: object) -> str:
    """Map a caller-supplied method onto a bounded set of label values."""
    if not isinstance(method, str) or not method:
        return "NONE"
    upper = method.upper()
    return upper if upper in KNOWN_METHODS else "OTHER"


def record_signing(method: object, outcome: str, latency: float | None = None) -> None:
    """Record a signing call with metrics."""
    label = method_label(method)
    SIGNATURES_TOTAL.labels(method=label, outcome=outcome).inc()
    if latency is not None:
        SIGNING_LATENCY.labels(method=label).observe(latency)


def render_metrics(registry: CollectorRegistry = REGISTRY) -> str:
    """Return metrics in Prometheus text format."""
    return generate_latest(registry).decode("utf-8")
