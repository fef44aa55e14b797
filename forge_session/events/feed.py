"""
In-process change notification feed.

Events are filtered by path suffix before any handler sees them and are
dispatched one at a time: a handler runs to completion before the next
event is delivered.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from stat import S_ISREG
from typing import Any

from .types import ChangeEvent, FileCreated, FileModified

logger = logging.getLogger(__name__)

EventHandler = Callable[[ChangeEvent], Awaitable[Any]]


class Subscription:
    """Handle returned by ChangeFeed.subscribe."""

    def __init__(self, feed: "ChangeFeed", handler: EventHandler):
        self._feed = feed
        self.handler = handler
        self.active = True

    def cancel(self) -> None:
        """Stop delivery. Synchronous; an in-flight handler still finishes."""
        if self.active:
            self.active = False
            self._feed._remove(self)


class ChangeFeed:
    """
    Serial, suffix-filtered event feed.

    Args:
        suffix: Only paths ending with this suffix are delivered
        exclude_suffixes: Paths ending with any of these are dropped
    """

    def __init__(self, suffix: str, exclude_suffixes: tuple[str, ...] = ()):
        self.suffix = suffix
        self.exclude_suffixes = exclude_suffixes
        self._subscriptions: list[Subscription] = []
        self._dispatch_lock = asyncio.Lock()

    def matches(self, path: str) -> bool:
        if any(path.endswith(s) for s in self.exclude_suffixes):
            return False
        return path.endswith(self.suffix)

    def subscribe(self, handler: EventHandler) -> Subscription:
        subscription = Subscription(self, handler)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every active subscriber, in order."""
        if not self.matches(event.path):
            logger.debug(f"Ignoring event for untracked path {event.path}")
            return

        async with self._dispatch_lock:
            for subscription in list(self._subscriptions):
                # Cancelled while an earlier handler was running
                if not subscription.active:
                    continue
                await subscription.handler(event)


class DirectoryPoller:
    """
    Produce create/modify events for a directory by polling.

    Stands in for an editor's file watcher when running from the command
    line. A file is reported as modified when its mtime or size changes.
    """

    def __init__(self, feed: ChangeFeed, root: Path | str, directory: str):
        self.feed = feed
        self.root = Path(root)
        self.directory = directory
        self._seen: dict[str, tuple[float, int]] = {}

    def _scan(self) -> dict[str, tuple[float, int]]:
        base = self.root / self.directory
        if not base.is_dir():
            return {}
        found = {}
        for path in base.rglob(f"*{self.feed.suffix}"):
            try:
                info = path.stat()
            except FileNotFoundError:
                # Deleted since rglob listed it
                continue
            if not S_ISREG(info.st_mode):
                continue
            found[path.relative_to(self.root).as_posix()] = (info.st_mtime, info.st_size)
        return found

    def prime(self) -> None:
        """Record the current state without emitting events."""
        self._seen = self._scan()

    async def poll_once(self) -> list[ChangeEvent]:
        """Scan once and publish an event for each new or changed file."""
        current = self._scan()
        events: list[ChangeEvent] = []
        for path, signature in sorted(current.items()):
            previous = self._seen.get(path)
            if previous is None:
                events.append(FileCreated(path))
            elif previous != signature:
                events.append(FileModified(path))
        self._seen = current

        for event in events:
            await self.feed.publish(event)
        return events

    async def run(self, interval: float, stop: asyncio.Event) -> None:
        """Poll every `interval` seconds until `stop` is set."""
        while not stop.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass


__all__ = ["ChangeFeed", "DirectoryPoller", "EventHandler", "Subscription"]
