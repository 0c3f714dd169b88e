"""Prometheus metrics export."""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Request metrics
request_count = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

request_duration = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

# Content metrics
envelopes_built_total = Counter(
    "envelopes_built_total",
    "Total message envelopes built",
    ["type"],  # text, survey, splash
)

content_items_dropped_total = Counter(
    "content_items_dropped_total",
    "Content blocks dropped during normalization",
    ["reason"],  # unknown_kind, empty, malformed
)

# Delivery metrics
deliveries_total = Counter(
    "deliveries_total",
    "Total deliveries to the Cobalt connector",
    ["target", "status"],
)

delivery_duration = Histogram(
    "delivery_duration_seconds",
    "Connector delivery duration in seconds",
    ["target"],
)

# Inbound triggers
webhook_events_total = Counter(
    "webhook_events_total",
    "Total webhook trigger events received",
    ["trigger"],
)

# Tool metrics
tool_calls_total = Counter(
    "tool_calls_total",
    "Total chat tool invocations",
    ["tool_name", "status"],
)


def get_metrics_response() -> Response:
    """Get Prometheus metrics as HTTP response."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
