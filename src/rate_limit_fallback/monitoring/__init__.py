"""Monitoring and metrics instrumentation for the rate-limit fallback service.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from rate_limit_fallback.monitoring.metrics import (
    cooldown_skips_total,
    fallback_model_selections_total,
    host_request_latency_seconds,
    rate_limit_detections_total,
    recoveries_total,
)

__all__ = [
    "rate_limit_detections_total",
    "cooldown_skips_total",
    "recoveries_total",
    "fallback_model_selections_total",
    "host_request_latency_seconds",
]
