"""Concurrent webhook fan-out for notification payloads."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Dict, Mapping, Protocol

import requests

from infra.metrics import MetricSink

from .payload import NotificationPayload
from .sinks import SinkConfig

_LOGGER = logging.getLogger("dockernotify.dispatcher")
CONTENT_TYPE = "application/json"


class DeliveryError(Exception):
    """Raised when a single sink rejects or cannot receive a payload."""

    def __init__(self, sink: str, reason: str) -> None:
        super().__init__(f"delivery to {sink} failed: {reason}")
        self.sink = sink
        self.reason = reason


class Transport(Protocol):
    name: str

    def send(self, body: bytes) -> None:  # pragma: no cover - Protocol definition
        ...


class WebhookTransport:
    """POSTs pre-serialized JSON bodies to one webhook URL."""

    def __init__(
        self,
        name: str,
        url: str,
        *,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.name = name
        self.url = url
        self.timeout_seconds = timeout_seconds

    def send(self, body: bytes) -> None:
        try:
            response = requests.post(
                self.url,
                data=body,
                headers={"Content-Type": CONTENT_TYPE},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DeliveryError(self.name, str(exc)) from exc


class DeliveryBatch:
    """Handle on the deliveries spawned for one payload."""

    def __init__(self, futures: Mapping[str, Future[bool]]) -> None:
        self._futures = dict(futures)

    @property
    def sinks(self) -> list[str]:
        return list(self._futures)

    def done(self) -> bool:
        return all(future.done() for future in self._futures.values())

    def wait(self, timeout: float | None = None) -> Dict[str, bool]:
        """Block until every delivery finished; unfinished ones report ``False``."""

        wait(list(self._futures.values()), timeout=timeout)
        return {
            sink: future.done() and future.result()
            for sink, future in self._futures.items()
        }


class NotificationDispatcher:
    """Delivers each payload to every sink as independent pool tasks.

    ``dispatch`` never waits on the network: it serializes once, submits one
    task per sink and returns. A failing sink is logged and does not affect
    the others. There are no retries.
    """

    def __init__(
        self,
        sinks: SinkConfig,
        *,
        timeout_seconds: float = 10.0,
        max_workers: int = 16,
        transports: Mapping[str, Transport] | None = None,
        metric_sink: MetricSink | None = None,
    ) -> None:
        if transports is None:
            transports = {
                name: WebhookTransport(name, url, timeout_seconds=timeout_seconds)
                for name, url in sinks.endpoints()
            }
        self._transports = dict(transports)
        self._metric_sink = metric_sink
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="notify-delivery",
        )

    @property
    def sink_names(self) -> list[str]:
        return list(self._transports)

    def dispatch(self, payload: NotificationPayload) -> DeliveryBatch:
        body = payload.to_json()
        futures = {
            name: self._executor.submit(self._deliver, transport, body)
            for name, transport in self._transports.items()
        }
        return DeliveryBatch(futures)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _deliver(self, transport: Transport, body: bytes) -> bool:
        start = time.perf_counter()
        try:
            transport.send(body)
        except DeliveryError as exc:
            _LOGGER.error("%s", exc)
            self._record("delivery_failure", 1.0, transport.name)
            return False
        except Exception:
            _LOGGER.exception("unexpected failure delivering to %s", transport.name)
            self._record("delivery_failure", 1.0, transport.name)
            return False
        finally:
            self._record("delivery_duration_seconds", time.perf_counter() - start, transport.name)
        _LOGGER.debug("delivered notification to %s", transport.name)
        self._record("delivery", 1.0, transport.name)
        return True

    def _record(self, name: str, value: float, sink: str) -> None:
        if self._metric_sink:
            self._metric_sink(name, value, {"sink": sink})


__all__ = [
    "CONTENT_TYPE",
    "DeliveryBatch",
    "DeliveryError",
    "NotificationDispatcher",
    "Transport",
    "WebhookTransport",
]
