"""
Change capture for an open design session.

Implements the loop: notification → read → parse old/new → diff → merge →
persist. Only this class mutates the baseline map and the session's
`changed_files`.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, AsyncIterator, assert_never

import yaml

from .errors import NotInDesign, StorageFailure
from .events.types import ChangeEvent, FileCreated, FileModified
from .git import exists_at_commit
from .scenario.differ import diff
from .scenario.parser import parse
from .session.aggregator import find_entry, upsert
from .session.lifecycle import SessionLifecycle
from .session.schema import ChangeEntry, ChangeType, SessionRecord, SessionStatus
from .session.store import load_document

if TYPE_CHECKING:
    from .context import SessionContext
    from .events.feed import Subscription

logger = logging.getLogger(__name__)


@dataclass
class CaptureResult:
    """Outcome of handling one change event."""

    path: str
    entry: ChangeEntry | None = None
    error: StorageFailure | None = None
    ignored: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.ignored


def document_body(text: str) -> str:
    """Strip a frontmatter header if one parses; otherwise return the text."""
    try:
        _, body = load_document(text)
    except yaml.YAMLError:
        return text
    return body


class ChangeCaptureOrchestrator:
    """
    Track scenario changes to feature documents while a session is in DESIGN.

    Events are handled one at a time. A failed read or write leaves the
    baseline and `changed_files` untouched, so the next event for that
    path retries from the same baseline; other paths are unaffected.
    """

    def __init__(self, context: "SessionContext"):
        self.context = context
        self.lifecycle = SessionLifecycle()
        self._record: SessionRecord | None = None
        self._baselines: dict[str, str] = {}
        self._subscription: "Subscription | None" = None
        self._handling = asyncio.Lock()

    @property
    def record(self) -> SessionRecord | None:
        """The session being tracked, with the latest changed_files."""
        return self._record

    @property
    def baselines(self) -> dict[str, str]:
        """Copy of the last-seen content per path."""
        return dict(self._baselines)

    @property
    def is_running(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def start(self, record: SessionRecord, resume: bool = False) -> NotInDesign | None:
        """
        Capture baselines and subscribe to the feed.

        Switching to another session stops the current one first.

        Args:
            record: Session to track
            resume: The session was started earlier, possibly by another
                process. Files that are not in `record.start_commit` get
                no baseline, so their next change is captured as `added`.

        Returns:
            None on success, NotInDesign if the session is not in DESIGN
        """
        if not self.lifecycle.is_tracking_active(record.status):
            return NotInDesign(record.session_id, SessionStatus(record.status).value)

        if self.is_running:
            self.stop()

        self._record = record
        self._baselines = await asyncio.to_thread(self._capture_baselines, record, resume)
        self._subscription = self.context.feed.subscribe(self.handle)
        logger.info(
            f"Tracking changes for session {record.session_id} "
            f"({len(self._baselines)} baseline documents)"
        )
        return None

    def stop(self) -> None:
        """
        Unsubscribe from the feed. Synchronous.

        An event already being handled finishes, including its write; use
        `wait_idle` to wait for it.
        """
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
            logger.info(f"Stopped tracking session {self._record.session_id if self._record else '?'}")
        self._baselines = {}

    async def wait_idle(self) -> None:
        """Wait until no event is being handled."""
        async with self._handling:
            pass

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        """Hold off event handling for the duration of the block."""
        async with self._handling:
            yield

    def _created_since_start(self, record: SessionRecord, path: str) -> bool:
        """True when `path` is known to be absent from the session's start commit."""
        if not record.start_commit:
            return False
        existing = next((e for e in record.changed_files if e.path == path), None)
        if existing is not None and existing.change_type == ChangeType.MODIFIED:
            return False
        return exists_at_commit(self.context.config.project_root, record.start_commit, path) is False

    def _capture_baselines(self, record: SessionRecord, resume: bool) -> dict[str, str]:
        config = self.context.config
        documents = self.context.documents
        baselines = {}
        for path in documents.list(config.ai_dir, config.tracked_suffix):
            if not self._is_tracked(path):
                continue
            if resume and self._created_since_start(record, path):
                logger.debug(f"No baseline for {path}: created after session start")
                continue
            try:
                baselines[path] = documents.read(path)
            except StorageFailure as e:
                # Unreadable now; its first event is treated as a creation
                logger.warning(f"No baseline for {path}: {e}")
        return baselines

    def _is_tracked(self, path: str) -> bool:
        config = self.context.config
        return path.endswith(config.tracked_suffix) and not path.endswith(config.session_suffix)

    async def handle(self, event: ChangeEvent) -> CaptureResult:
        """
        Capture one create/modify notification.

        Returns:
            CaptureResult with the updated entry, the storage error, or
            `ignored` when tracking is stopped or the path is not a feature document
        """
        async with self._handling:
            record = self._record
            if record is None or not self.is_running or not self._is_tracked(event.path):
                logger.debug(f"Ignoring {type(event).__name__} for {event.path}")
                return CaptureResult(path=event.path, ignored=True)

            match event:
                case FileCreated(path=path):
                    old_content = ""
                    is_new_file = True
                case FileModified(path=path):
                    old_content = self._baselines.get(path, "")
                    is_new_file = old_content == ""
                case _:
                    assert_never(event)

            documents = self.context.documents
            sessions = self.context.sessions

            try:
                new_content = await asyncio.to_thread(documents.read, path)
            except StorageFailure as e:
                logger.warning(f"Change capture failed for {path}: {e}")
                return CaptureResult(path=path, error=e)

            changes = diff(parse(document_body(old_content)), parse(document_body(new_content)))
            entries = upsert(record.changed_files, path, changes, is_new_file)

            try:
                await asyncio.to_thread(sessions.write_changed_files, record.session_id, entries)
            except StorageFailure as e:
                logger.warning(f"Change capture failed for {path}: {e}")
                return CaptureResult(path=path, error=e)

            updated = record.model_copy(update={"changed_files": entries})
            if self._record is record:
                self._record = updated
                self._baselines[path] = new_content

            entry = find_entry(entries, path)
            logger.info(
                f"Captured {path}: +{len(changes.added)} ~{len(changes.modified)} "
                f"-{len(changes.removed)} ({entry.change_type if entry else '?'})"
            )
            return CaptureResult(path=path, entry=entry)


__all__ = ["CaptureResult", "ChangeCaptureOrchestrator", "document_body"]
