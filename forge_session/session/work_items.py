"""Work items (stories and tasks) generated for a session after design ends."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Protocol

import yaml

from ..errors import StorageFailure
from .store import load_document

if TYPE_CHECKING:
    from ..config import ForgeConfig
    from .store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    """A story or task file and its reported status."""

    id: str
    status: str
    path: str | None = None


class WorkItemSource(Protocol):
    """Anything that can report the work items of a session."""

    def list_work_items(self, session_id: str) -> list[WorkItem]:
        ...


class FileWorkItemSource:
    """
    Read work items from `<sessions_dir>/<id>/tickets/**`.

    The status comes from each file's frontmatter `status`; files whose
    frontmatter cannot be read report `unknown`.
    """

    def __init__(self, documents: "DocumentStore", config: "ForgeConfig"):
        self.documents = documents
        self.config = config

    def tickets_dir(self, session_id: str) -> str:
        return f"{self.config.sessions_dir}/{session_id}/tickets"

    def list_work_items(self, session_id: str) -> list[WorkItem]:
        directory = self.tickets_dir(session_id)
        paths: list[str] = []
        for suffix in self.config.work_item_suffixes:
            paths.extend(self.documents.list(directory, suffix))

        items = []
        for path in sorted(set(paths)):
            items.append(self._read_item(path))
        return items

    def _read_item(self, path: str) -> WorkItem:
        name = PurePosixPath(path).name
        fallback_id = name
        for suffix in self.config.work_item_suffixes:
            if name.endswith(suffix):
                fallback_id = name[: -len(suffix)]
                break

        try:
            metadata, _ = load_document(self.documents.read(path))
        except (StorageFailure, yaml.YAMLError) as e:
            logger.warning(f"Could not read work item {path}: {e}")
            return WorkItem(id=fallback_id, status="unknown", path=path)

        item_id = metadata.get("id") or metadata.get("story_id") or metadata.get("task_id") or fallback_id
        return WorkItem(
            id=str(item_id),
            status=str(metadata.get("status") or "unknown"),
            path=path,
        )


__all__ = ["FileWorkItemSource", "WorkItem", "WorkItemSource"]
