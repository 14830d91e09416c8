"""Prometheus metric sink helpers."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from prometheus_client import Counter, Histogram, start_http_server

MetricSink = Callable[[str, float, Mapping[str, Any] | None], None]

_EVENTS = Counter(
    "dockernotify_events_total",
    "Lifecycle events turned into notifications",
    ["kind"],
)
_DROPPED = Counter(
    "dockernotify_dropped_events_total",
    "Lifecycle events dropped before dispatch",
    ["reason"],
)
_SUBSCRIPTIONS = Counter(
    "dockernotify_subscriptions_total",
    "Event stream subscriptions opened",
)
_DELIVERIES = Counter(
    "dockernotify_deliveries_total",
    "Webhook deliveries that succeeded",
    ["sink"],
)
_DELIVERY_FAILURES = Counter(
    "dockernotify_delivery_failures_total",
    "Webhook deliveries that failed",
    ["sink"],
)
_DELIVERY_DURATION = Histogram(
    "dockernotify_delivery_duration_seconds",
    "Duration of webhook POST requests",
    ["sink"],
)
_SERVER_STARTED = False


class PrometheusMetricSink:
    """Callable sink that forwards notifier metrics to Prometheus."""

    def __call__(self, name: str, value: float, tags: Mapping[str, Any] | None = None) -> None:
        tags = tags or {}
        if name == "event":
            _EVENTS.labels(kind=str(tags.get("kind", "unknown"))).inc(value)
        elif name == "event_dropped":
            _DROPPED.labels(reason=str(tags.get("reason", "unknown"))).inc(value)
        elif name == "subscription_opened":
            _SUBSCRIPTIONS.inc(value)
        elif name == "delivery":
            _DELIVERIES.labels(sink=str(tags.get("sink", "unknown"))).inc(value)
        elif name == "delivery_failure":
            _DELIVERY_FAILURES.labels(sink=str(tags.get("sink", "unknown"))).inc(value)
        elif name == "delivery_duration_seconds":
            _DELIVERY_DURATION.labels(sink=str(tags.get("sink", "unknown"))).observe(value)


def ensure_metrics_server(port: int) -> None:
    """Start the Prometheus scrape endpoint if it is not already running."""

    global _SERVER_STARTED
    if _SERVER_STARTED:
        return
    start_http_server(port)
    _SERVER_STARTED = True


__all__ = ["MetricSink", "PrometheusMetricSink", "ensure_metrics_server"]
