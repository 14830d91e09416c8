"""Docker lifecycle event parsing and classification."""

from .classifier import EventClassifier, MissingAttributeError
from .logs import ContainerLogFetcher, LogUnavailableError
from .model import EventKind, LifecycleEvent, MalformedEventError

__all__ = [
    "ContainerLogFetcher",
    "EventClassifier",
    "EventKind",
    "LifecycleEvent",
    "LogUnavailableError",
    "MalformedEventError",
    "MissingAttributeError",
]
