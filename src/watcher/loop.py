"""Event subscription loop that reconnects after stream failures."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Protocol

from events.classifier import EventClassifier, MissingAttributeError
from events.model import WATCHED_ACTIONS, LifecycleEvent, MalformedEventError
from infra.metrics import MetricSink
from notifications.dispatcher import NotificationDispatcher

EVENT_FILTERS: Mapping[str, Any] = {"type": "container", "event": list(WATCHED_ACTIONS)}


class SubscriptionError(Exception):
    """Raised when the event stream cannot be opened or breaks mid-read."""


class WatchState(str, Enum):
    CONNECTING = "connecting"
    STREAMING = "streaming"
    DRAINING = "draining"


class EventStream(Protocol):
    def __iter__(self) -> Iterator[Mapping[str, Any]]:  # pragma: no cover - Protocol definition
        ...

    def close(self) -> None:  # pragma: no cover - Protocol definition
        ...


class EventSource(Protocol):
    def events(self, **kwargs: Any) -> EventStream:  # pragma: no cover - Protocol definition
        ...


class EventWatcher:
    """Single consumer of the Docker event stream.

    Each session walks CONNECTING -> STREAMING -> DRAINING. Payloads are handed
    to the dispatcher without waiting for delivery, so slow sinks never stall
    intake. Events seen before a disconnect are not replayed.
    """

    def __init__(
        self,
        client: EventSource,
        classifier: EventClassifier,
        dispatcher: NotificationDispatcher,
        *,
        reconnect_delay_seconds: float = 0.0,
        metric_sink: MetricSink | None = None,
    ) -> None:
        self.logger = logging.getLogger("dockernotify.watcher")
        self._client = client
        self._classifier = classifier
        self._dispatcher = dispatcher
        self._reconnect_delay = reconnect_delay_seconds
        self._metric_sink = metric_sink
        self._stop_event = threading.Event()
        self._stream: EventStream | None = None
        self._stream_lock = threading.Lock()
        self._state = WatchState.CONNECTING
        self._sessions = 0

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def sessions(self) -> int:
        return self._sessions

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run_forever(self) -> None:
        """Reconnect indefinitely until ``stop`` is called."""

        while not self._stop_event.is_set():
            self.run_session()
            if self._reconnect_delay and not self._stop_event.is_set():
                self._stop_event.wait(self._reconnect_delay)
        self.logger.info("event watcher stopped after %s sessions", self._sessions)

    def run_session(self) -> None:
        """Open one subscription and consume it until it fails or ends."""

        self._state = WatchState.CONNECTING
        try:
            stream = self._open_stream()
        except SubscriptionError as exc:
            if not self._stop_event.is_set():
                self.logger.error("%s; retrying", exc)
            return
        self._state = WatchState.STREAMING
        try:
            self._consume(stream)
        except SubscriptionError as exc:
            if not self._stop_event.is_set():
                self.logger.warning("%s; reconnecting", exc)
        finally:
            self._state = WatchState.DRAINING
            self._close_stream()

    def stop(self) -> None:
        self._stop_event.set()
        self._close_stream()

    def _open_stream(self) -> EventStream:
        try:
            stream = self._client.events(decode=True, filters=dict(EVENT_FILTERS))
        except Exception as exc:
            raise SubscriptionError(f"could not subscribe to docker events: {exc}") from exc
        with self._stream_lock:
            self._stream = stream
        if self._stop_event.is_set():
            # stop() ran while the subscription was opening
            self._close_stream()
            raise SubscriptionError("watcher stopped while subscribing")
        self._sessions += 1
        self._record("subscription_opened", 1.0)
        self.logger.info("subscribed to docker events (session %s)", self._sessions)
        return stream

    def _consume(self, stream: Iterable[Mapping[str, Any]]) -> None:
        try:
            for raw in stream:
                if self._stop_event.is_set():
                    return
                self._handle(raw)
        except Exception as exc:
            raise SubscriptionError(f"docker event stream failed: {exc}") from exc
        raise SubscriptionError("docker event stream closed")

    def _handle(self, raw: Mapping[str, Any]) -> None:
        try:
            event = LifecycleEvent.from_docker(raw)
            payload = self._classifier.classify(event)
        except (MalformedEventError, MissingAttributeError) as exc:
            self.logger.warning("dropping event: %s", exc)
            self._record("event_dropped", 1.0, {"reason": type(exc).__name__})
            return
        except Exception:
            self.logger.exception("failed to classify event %r", raw)
            self._record("event_dropped", 1.0, {"reason": "unexpected"})
            return
        if payload is None:
            return
        kind = event.kind.value if event.kind else event.status
        self.logger.info("%s: %s", kind, payload.attachments[0].title)
        self._record("event", 1.0, {"kind": kind})
        self._dispatcher.dispatch(payload)

    def _close_stream(self) -> None:
        with self._stream_lock:
            stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.close()
        except Exception as exc:
            self.logger.warning("error while closing docker event stream: %s", exc)

    def _record(self, name: str, value: float, tags: Mapping[str, Any] | None = None) -> None:
        if self._metric_sink:
            self._metric_sink(name, value, tags)


__all__ = ["EVENT_FILTERS", "EventWatcher", "SubscriptionError", "WatchState"]
