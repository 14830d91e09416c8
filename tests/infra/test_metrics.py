from __future__ import annotations

from prometheus_client import REGISTRY

from infra.metrics import PrometheusMetricSink


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_sink_routes_notifier_metrics() -> None:
    sink = PrometheusMetricSink()
    before_events = _sample("dockernotify_events_total", {"kind": "terminated"})
    before_failures = _sample("dockernotify_delivery_failures_total", {"sink": "slack"})
    before_subscriptions = _sample("dockernotify_subscriptions_total")

    sink("event", 1.0, {"kind": "terminated"})
    sink("delivery_failure", 1.0, {"sink": "slack"})
    sink("subscription_opened", 1.0, None)
    sink("delivery_duration_seconds", 0.25, {"sink": "slack"})

    assert _sample("dockernotify_events_total", {"kind": "terminated"}) == before_events + 1
    assert _sample("dockernotify_delivery_failures_total", {"sink": "slack"}) == before_failures + 1
    assert _sample("dockernotify_subscriptions_total") == before_subscriptions + 1
    assert _sample("dockernotify_delivery_duration_seconds_count", {"sink": "slack"}) >= 1


def test_unknown_metric_names_are_ignored() -> None:
    PrometheusMetricSink()("queue_depth", 3.0, {"sink": "slack"})
