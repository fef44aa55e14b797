"""Session records, change aggregation, migration and lifecycle."""

from .aggregator import find_entry, merge, upsert
from .lifecycle import SessionLifecycle, TransitionResult
from .migrator import MigrationResult, migrate
from .schema import ChangeEntry, ChangeType, SessionRecord, SessionStatus, utc_now
from .store import DocumentStore, FileDocumentStore, SessionStore
from .work_items import FileWorkItemSource, WorkItem, WorkItemSource

__all__ = [
    "ChangeEntry",
    "ChangeType",
    "SessionRecord",
    "SessionStatus",
    "utc_now",
    "find_entry",
    "merge",
    "upsert",
    "MigrationResult",
    "migrate",
    "SessionLifecycle",
    "TransitionResult",
    "DocumentStore",
    "FileDocumentStore",
    "SessionStore",
    "FileWorkItemSource",
    "WorkItem",
    "WorkItemSource",
]
