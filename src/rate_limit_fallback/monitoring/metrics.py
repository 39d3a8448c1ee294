"""Custom Prometheus metrics for the rate-limit fallback service.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- recoveries_total{outcome!="resubmitted"} (recoveries failing before resubmission)
- fallback_model_selections_total (sessions stuck on the last fallback)
- host_request_latency_seconds (slow host calls delay recovery)
"""

from prometheus_client import Counter, Histogram

# === Detection Metrics ===

rate_limit_detections_total = Counter(
    "rate_limit_detections_total",
    "Total retry status events matching a rate-limit pattern",
)

cooldown_skips_total = Counter(
    "cooldown_skips_total",
    "Total rate-limit detections suppressed by an active cooldown",
)

# === Recovery Metrics ===

recoveries_total = Counter(
    "recoveries_total",
    "Total recovery sequences by outcome",
    ["outcome"],
)
"""
Recovery sequences counter by outcome.

Labels:
- outcome: resubmitted, no_messages, no_user_message, no_valid_parts, client_error
"""

fallback_model_selections_total = Counter(
    "fallback_model_selections_total",
    "Total rotation decisions by selected model",
    ["model"],
)
"""
Rotation decisions counter.

Labels:
- model: "provider/model" of the selected fallback, or "main"
"""

# === Host Client Metrics ===

host_request_latency_seconds = Histogram(
    "host_request_latency_seconds",
    "Host session API call latency in seconds",
    ["operation", "success"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
)
"""
Host call latency histogram.

Labels:
- operation: abort, messages, revert, prompt, health
- success: true, false
"""
