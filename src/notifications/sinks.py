"""Webhook sink configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Tuple

SINK_ENV_KEYS: Mapping[str, str] = {
    "slack": "SLACK_URL",
    "discord": "DISCORD_URL",
}


class ConfigurationError(ValueError):
    """Raised at startup when required settings are missing or invalid."""


@dataclass(frozen=True)
class SinkConfig:
    """Named webhook endpoints; blank URLs are treated as unset."""

    urls: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned = {name: url.strip() for name, url in self.urls.items() if url and url.strip()}
        if not cleaned:
            keys = " and/or ".join(SINK_ENV_KEYS.values())
            raise ConfigurationError(f"{keys} must be set")
        object.__setattr__(self, "urls", cleaned)

    def endpoints(self) -> Iterator[Tuple[str, str]]:
        return iter(self.urls.items())

    @property
    def names(self) -> list[str]:
        return list(self.urls)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "SinkConfig":
        source = env if env is not None else os.environ
        return cls({name: source.get(key, "") for name, key in SINK_ENV_KEYS.items()})


__all__ = ["ConfigurationError", "SINK_ENV_KEYS", "SinkConfig"]
