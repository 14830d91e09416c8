"""Factory helpers for constructing an EventWatcher from a WatcherConfig."""

from __future__ import annotations

import docker

from events.classifier import EventClassifier
from events.logs import ContainerLogFetcher
from infra.metrics import PrometheusMetricSink, ensure_metrics_server
from notifications.dispatcher import NotificationDispatcher

from .config import WatcherConfig
from .loop import EventWatcher


def build_docker_client(config: WatcherConfig) -> docker.DockerClient:
    """Docker client honouring DOCKER_HOST/TLS settings, pinned to API_VERSION."""

    return docker.from_env(version=config.api_version)


def build_dispatcher(config: WatcherConfig) -> NotificationDispatcher:
    return NotificationDispatcher(
        config.sinks,
        timeout_seconds=config.webhook_timeout_seconds,
        max_workers=config.dispatch_workers,
        metric_sink=PrometheusMetricSink(),
    )


def build_watcher(config: WatcherConfig, client: docker.DockerClient) -> EventWatcher:
    """Wire classifier, log fetcher and dispatcher around an existing client."""

    metric_sink = PrometheusMetricSink()
    if config.metrics_port:
        ensure_metrics_server(config.metrics_port)
    classifier = EventClassifier(ContainerLogFetcher(client.api))
    return EventWatcher(
        client,
        classifier,
        build_dispatcher(config),
        reconnect_delay_seconds=config.reconnect_delay_seconds,
        metric_sink=metric_sink,
    )


__all__ = [
    "build_dispatcher",
    "build_docker_client",
    "build_watcher",
]
