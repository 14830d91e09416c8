"""Watcher configuration surface."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from notifications.sinks import ConfigurationError, SinkConfig


def _get_float(env: Mapping[str, str], key: str, default: float, *, allow_zero: bool = False) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from exc
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(f"{key} must be positive, got {value}")
    return value


def _get_int(env: Mapping[str, str], key: str, default: int, *, allow_zero: bool = False) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(f"{key} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class WatcherConfig:
    """Immutable settings read once at startup."""

    api_version: str
    sinks: SinkConfig
    webhook_timeout_seconds: float = 10.0
    dispatch_workers: int = 16
    reconnect_delay_seconds: float = 0.0
    metrics_port: int = 0

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "WatcherConfig":
        source = env if env is not None else os.environ
        api_version = (source.get("API_VERSION") or "").strip()
        if not api_version:
            raise ConfigurationError("API_VERSION must be set as your docker api version")
        return cls(
            api_version=api_version,
            sinks=SinkConfig.from_env(source),
            webhook_timeout_seconds=_get_float(source, "WEBHOOK_TIMEOUT_SECONDS", 10.0),
            dispatch_workers=_get_int(source, "DISPATCH_WORKERS", 16),
            reconnect_delay_seconds=_get_float(
                source, "RECONNECT_DELAY_SECONDS", 0.0, allow_zero=True
            ),
            metrics_port=_get_int(source, "METRICS_PORT", 0, allow_zero=True),
        )

    def as_dict(self) -> Mapping[str, object]:
        """Expose non-secret settings for health output; webhook URLs are omitted."""

        return {
            "api_version": self.api_version,
            "sinks": self.sinks.names,
            "webhook_timeout_seconds": self.webhook_timeout_seconds,
            "dispatch_workers": self.dispatch_workers,
            "reconnect_delay_seconds": self.reconnect_delay_seconds,
            "metrics_port": self.metrics_port,
        }


__all__ = ["ConfigurationError", "WatcherConfig"]
