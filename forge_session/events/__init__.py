"""Change notifications for tracked documents."""
from .feed import ChangeFeed, DirectoryPoller, EventHandler, Subscription
from .types import ChangeEvent, FileCreated, FileModified

__all__ = [
    "ChangeEvent",
    "FileCreated",
    "FileModified",
    "ChangeFeed",
    "DirectoryPoller",
    "EventHandler",
    "Subscription",
]
