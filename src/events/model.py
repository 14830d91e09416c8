"""Container lifecycle events as read from the Docker event stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class EventKind(str, Enum):
    STARTED = "started"
    TERMINATED = "terminated"

    @classmethod
    def from_status(cls, status: str) -> "EventKind | None":
        """Map a Docker action (``start``/``die``) to a notification kind."""

        return _STATUS_KINDS.get(status)


_STATUS_KINDS: Mapping[str, EventKind] = {
    "start": EventKind.STARTED,
    "die": EventKind.TERMINATED,
    EventKind.STARTED.value: EventKind.STARTED,
    EventKind.TERMINATED.value: EventKind.TERMINATED,
}

# Docker actions the watcher subscribes to.
WATCHED_ACTIONS = ("start", "die")


class MalformedEventError(ValueError):
    """Raised when a raw event cannot be parsed into a LifecycleEvent."""


@dataclass(frozen=True, slots=True)
class LifecycleEvent:
    status: str
    image: str
    time: int
    actor_id: str
    attributes: Mapping[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> EventKind | None:
        return EventKind.from_status(self.status)

    @property
    def name(self) -> str | None:
        return self.attributes.get("name")

    @classmethod
    def from_docker(cls, raw: Mapping[str, Any]) -> "LifecycleEvent":
        """Build an event from a decoded Docker ``/events`` message.

        Newer API versions drop the legacy ``status``/``from``/``id`` keys, so
        the ``Action`` and ``Actor`` fields are used as fallbacks.
        """

        actor = raw.get("Actor") or {}
        attributes = {str(key): str(value) for key, value in (actor.get("Attributes") or {}).items()}
        status = raw.get("status") or raw.get("Action")
        if not status:
            raise MalformedEventError("event has no status or Action")
        try:
            timestamp = int(raw.get("time") or 0)
        except (TypeError, ValueError) as exc:
            raise MalformedEventError(f"invalid event time {raw.get('time')!r}") from exc
        return cls(
            status=str(status),
            image=str(raw.get("from") or attributes.get("image", "")),
            time=timestamp,
            actor_id=str(actor.get("ID") or raw.get("id") or ""),
            attributes=attributes,
        )


__all__ = ["EventKind", "LifecycleEvent", "MalformedEventError", "WATCHED_ACTIONS"]
