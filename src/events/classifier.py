"""Turns lifecycle events into webhook notifications."""

from __future__ import annotations

import logging

from notifications.payload import (
    STARTED_COLOR,
    TERMINATED_COLOR,
    Attachment,
    NotificationPayload,
)

from .logs import LogFetcher, LogUnavailableError
from .model import EventKind, LifecycleEvent

FENCE = "```"


class MissingAttributeError(Exception):
    """Raised when an event lacks an attribute its notification needs."""

    def __init__(self, attribute: str, status: str) -> None:
        super().__init__(f"{status} event has no {attribute!r} attribute")
        self.attribute = attribute
        self.status = status


def _require(event: LifecycleEvent, attribute: str) -> str:
    value = event.attributes.get(attribute)
    if value is None:
        raise MissingAttributeError(attribute, event.status)
    return value


class EventClassifier:
    """Builds one payload per start/die event; other statuses yield ``None``."""

    def __init__(self, log_fetcher: LogFetcher) -> None:
        self._log_fetcher = log_fetcher
        self.logger = logging.getLogger("dockernotify.classifier")

    def classify(self, event: LifecycleEvent) -> NotificationPayload | None:
        kind = event.kind
        if kind is EventKind.STARTED:
            return self.started_message(event)
        if kind is EventKind.TERMINATED:
            return self.terminated_message(event)
        return None

    def started_message(self, event: LifecycleEvent) -> NotificationPayload:
        name = _require(event, "name")
        return NotificationPayload.single(
            Attachment(
                title=f"Container started. name => {name} image => {event.image}",
                color=STARTED_COLOR,
                ts=event.time,
            )
        )

    def terminated_message(self, event: LifecycleEvent) -> NotificationPayload:
        name = _require(event, "name")
        exit_code = _require(event, "exitCode")
        return NotificationPayload.single(
            Attachment(
                title=(
                    f"Container died. name => {name} image => {event.image} "
                    f"status code => {exit_code}"
                ),
                color=TERMINATED_COLOR,
                ts=event.time,
                text=self._log_excerpt(event),
            )
        )

    def _log_excerpt(self, event: LifecycleEvent) -> str:
        # the notice goes out even when its logs cannot be read
        try:
            output = self._log_fetcher.fetch(event.actor_id)
        except LogUnavailableError as exc:
            self.logger.warning("sending termination notice without logs: %s", exc)
            return ""
        return f"{FENCE}{output.decode('utf-8', errors='replace')}{FENCE}"


__all__ = ["EventClassifier", "MissingAttributeError"]
