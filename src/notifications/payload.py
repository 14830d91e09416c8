"""Slack-compatible webhook payload model."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

STARTED_COLOR = "#9ccc65"
TERMINATED_COLOR = "#c62828"


@dataclass(frozen=True, slots=True)
class Field:
    title: str
    value: str
    short: bool = False

    def as_dict(self) -> Mapping[str, Any]:
        return {"title": self.title, "value": self.value, "short": self.short}


@dataclass(frozen=True, slots=True)
class Attachment:
    """Styled block rendered by the receiving chat service."""

    title: str
    color: str
    ts: int
    text: str = ""
    fallback: str = ""
    pretext: str = ""
    title_link: str = ""
    author_name: str = ""
    author_link: str = ""
    author_icon: str = ""
    footer: str = ""
    footer_icon: str = ""
    fields: Sequence[Field] = ()

    def as_dict(self) -> Dict[str, Any]:
        # key order matches the webhook wire format
        return {
            "fallback": self.fallback,
            "pretext": self.pretext,
            "color": self.color,
            "title": self.title,
            "title_link": self.title_link,
            "text": self.text,
            "author_name": self.author_name,
            "author_link": self.author_link,
            "author_icon": self.author_icon,
            "footer": self.footer,
            "footer_icon": self.footer_icon,
            "ts": self.ts,
            "fields": [item.as_dict() for item in self.fields],
        }


@dataclass(frozen=True, slots=True)
class NotificationPayload:
    """Message body posted to every configured sink."""

    attachments: Sequence[Attachment]
    text: str = ""

    def __post_init__(self) -> None:
        if not self.attachments:
            raise ValueError("NotificationPayload requires at least one attachment")
        object.__setattr__(self, "attachments", tuple(self.attachments))

    @classmethod
    def single(cls, attachment: Attachment) -> "NotificationPayload":
        return cls(attachments=(attachment,))

    def as_dict(self) -> Dict[str, Any]:
        attachments: List[Dict[str, Any]] = [item.as_dict() for item in self.attachments]
        return {"text": self.text, "attachments": attachments}

    def to_json(self) -> bytes:
        """Serialize to compact UTF-8 JSON; equal payloads yield equal bytes."""

        return json.dumps(
            self.as_dict(),
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")


__all__ = [
    "Attachment",
    "Field",
    "NotificationPayload",
    "STARTED_COLOR",
    "TERMINATED_COLOR",
]
