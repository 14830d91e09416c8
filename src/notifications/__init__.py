"""Webhook notification payloads and delivery."""

from .dispatcher import DeliveryBatch, DeliveryError, NotificationDispatcher, WebhookTransport
from .payload import Attachment, Field, NotificationPayload
from .sinks import ConfigurationError, SinkConfig

__all__ = [
    "Attachment",
    "ConfigurationError",
    "DeliveryBatch",
    "DeliveryError",
    "Field",
    "NotificationDispatcher",
    "NotificationPayload",
    "SinkConfig",
    "WebhookTransport",
]
