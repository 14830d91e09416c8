"""Recent container output retrieval for termination notices."""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol

import docker.errors
import requests

LOG_WINDOW_SECONDS = 30


class LogUnavailableError(Exception):
    """Raised when a container's recent output cannot be read."""

    def __init__(self, container_id: str, reason: str) -> None:
        super().__init__(f"logs unavailable for container {container_id[:12]}: {reason}")
        self.container_id = container_id
        self.reason = reason


class LogSource(Protocol):
    def logs(self, container: str, **kwargs: Any) -> Any:  # pragma: no cover - Protocol definition
        ...


class LogFetcher(Protocol):
    def fetch(self, container_id: str) -> bytes:  # pragma: no cover - Protocol definition
        ...


class ContainerLogFetcher:
    """Reads the trailing stdout+stderr window through the Docker low-level API.

    No timeout is applied beyond the Docker client's own request timeout.
    """

    def __init__(self, api: LogSource, *, window_seconds: int = LOG_WINDOW_SECONDS) -> None:
        self._api = api
        self._window_seconds = window_seconds
        self.logger = logging.getLogger("dockernotify.logs")

    def fetch(self, container_id: str) -> bytes:
        since = int(time.time()) - self._window_seconds
        try:
            output = self._api.logs(
                container_id,
                stdout=True,
                stderr=True,
                stream=False,
                timestamps=False,
                since=since,
            )
        except (docker.errors.DockerException, requests.RequestException) as exc:
            raise LogUnavailableError(container_id, str(exc)) from exc
        if isinstance(output, str):
            output = output.encode("utf-8")
        if not isinstance(output, (bytes, bytearray)):
            raise LogUnavailableError(container_id, f"unexpected log payload {type(output).__name__}")
        self.logger.debug("fetched %s log bytes for %s", len(output), container_id[:12])
        return bytes(output)


__all__ = ["ContainerLogFetcher", "LOG_WINDOW_SECONDS", "LogFetcher", "LogUnavailableError"]
