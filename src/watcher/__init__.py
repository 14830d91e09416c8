"""Docker event watch loop and its configuration."""

from .config import ConfigurationError, WatcherConfig
from .loop import EventWatcher, SubscriptionError, WatchState

__all__ = ["ConfigurationError", "EventWatcher", "SubscriptionError", "WatchState", "WatcherConfig"]
