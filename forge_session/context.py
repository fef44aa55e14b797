"""SessionContext - the collaborators one open session works against."""

from __future__ import annotations

from dataclasses import dataclass

from .config import ForgeConfig
from .events.feed import ChangeFeed
from .session.store import DocumentStore, FileDocumentStore, SessionStore
from .session.work_items import FileWorkItemSource, WorkItemSource


@dataclass
class SessionContext:
    """
    Explicit bundle of config and collaborators.

    Passed to the orchestrator and session manager instead of module-level
    singletons, so several contexts can coexist (e.g. in tests).
    """

    config: ForgeConfig
    documents: DocumentStore
    feed: ChangeFeed
    work_items: WorkItemSource

    @property
    def sessions(self) -> SessionStore:
        return SessionStore(self.documents, self.config)

    @classmethod
    def for_project(cls, config: ForgeConfig) -> "SessionContext":
        """Filesystem-backed context for `config.project_root`."""
        documents = FileDocumentStore(config.root)
        return cls(
            config=config,
            documents=documents,
            feed=ChangeFeed(config.tracked_suffix, exclude_suffixes=(config.session_suffix,)),
            work_items=FileWorkItemSource(documents, config),
        )


__all__ = ["SessionContext"]
