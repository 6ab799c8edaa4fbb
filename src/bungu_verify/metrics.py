import prometheus_client
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Guard against duplicated metric registration when the module is imported
# multiple times (for example, when running uvicorn with the reloader).
REQUEST_COUNT = getattr(prometheus_client, "bungu_REQUEST_COUNT", None)
REQUEST_LATENCY = getattr(prometheus_client, "bungu_REQUEST_LATENCY", None)
CACHE_OPERATIONS = getattr(prometheus_client, "bungu_CACHE_OPERATIONS", None)
CACHE_OPERATION_DURATION = getattr(prometheus_client, "bungu_CACHE_OPERATION_DURATION", None)
CHALLENGES_ISSUED = getattr(prometheus_client, "bungu_CHALLENGES_ISSUED", None)
VERIFICATION_ATTEMPTS = getattr(prometheus_client, "bungu_VERIFICATION_ATTEMPTS", None)
EMAIL_DELIVERY_FAILURES = getattr(prometheus_client, "bungu_EMAIL_DELIVERY_FAILURES", None)
CHALLENGES_SWEPT = getattr(prometheus_client, "bungu_CHALLENGES_SWEPT", None)
RATE_LIMIT_HITS = getattr(prometheus_client, "bungu_RATE_LIMIT_HITS", None)

if REQUEST_COUNT is None:
    # HTTP Metrics
    REQUEST_COUNT = Counter(
        "http_requests_total", "Total HTTP requests", ["method", "endpoint", "http_status"]
    )
    REQUEST_LATENCY = Histogram(
        "http_request_latency_seconds", "HTTP request latency in seconds", ["method", "endpoint"]
    )

    # Cache Metrics
    CACHE_OPERATIONS = Counter(
        "cache_operations_total", "Total cache operations", ["operation", "cache_type"]
    )
    CACHE_OPERATION_DURATION = Histogram(
        "cache_operation_duration_seconds",
        "Cache operation duration in seconds",
        ["operation", "cache_type"],
    )

    # Verification Metrics
    CHALLENGES_ISSUED = Counter(
        "verification_challenges_issued_total",
        "Total verification challenges issued",
        ["flow"],  # flow: code/link
    )
    VERIFICATION_ATTEMPTS = Counter(
        "verification_attempts_total",
        "Total verification attempts",
        ["flow", "result"],  # result: success/not_found/expired/attempts_exhausted/mismatch
    )
    EMAIL_DELIVERY_FAILURES = Counter(
        "email_delivery_failures_total",
        "Verification emails the sender failed to deliver",
        ["kind"],
    )
    CHALLENGES_SWEPT = Counter(
        "verification_challenges_swept_total",
        "Expired challenges removed by the background sweep",
    )

    # Rate Limiting Metrics
    RATE_LIMIT_HITS = Counter(
        "rate_limit_hits_total",
        "Total rate limit hits (blocked requests)",
        ["endpoint"],
    )

    prometheus_client.bungu_REQUEST_COUNT = REQUEST_COUNT  # type: ignore[attr-defined]
    prometheus_client.bungu_REQUEST_LATENCY = REQUEST_LATENCY  # type: ignore[attr-defined]
    prometheus_client.bungu_CACHE_OPERATIONS = CACHE_OPERATIONS  # type: ignore[attr-defined]
    prometheus_client.bungu_CACHE_OPERATION_DURATION = CACHE_OPERATION_DURATION  # type: ignore[attr-defined]
    prometheus_client.bungu_CHALLENGES_ISSUED = CHALLENGES_ISSUED  # type: ignore[attr-defined]
    prometheus_client.bungu_VERIFICATION_ATTEMPTS = VERIFICATION_ATTEMPTS  # type: ignore[attr-defined]
    prometheus_client.bungu_EMAIL_DELIVERY_FAILURES = EMAIL_DELIVERY_FAILURES  # type: ignore[attr-defined]
    prometheus_client.bungu_CHALLENGES_SWEPT = CHALLENGES_SWEPT  # type: ignore[attr-defined]
    prometheus_client.bungu_RATE_LIMIT_HITS = RATE_LIMIT_HITS  # type: ignore[attr-defined]


def metrics_response():
    data = generate_latest()
    return data, CONTENT_TYPE_LATEST
