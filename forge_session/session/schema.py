"""
Session record models.

Pydantic models for the frontmatter of `<session_id>.session.md` documents.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Current time, UTC, second precision."""
    return datetime.now(timezone.utc).replace(microsecond=0)


class SessionStatus(str, Enum):
    """Lifecycle phase of a design session."""

    DESIGN = "design"
    SCRIBE = "scribe"
    DEVELOPMENT = "development"
    COMPLETED = "completed"


class ChangeType(str, Enum):
    """How a tracked file changed during a session."""

    ADDED = "added"  # did not exist at session start
    MODIFIED = "modified"


class ChangeEntry(BaseModel):
    """
    Per-file record of scenario changes within one session.

    Title lists are ordered and duplicate-free. `None` means "no titles";
    the migrator's normalised read shape uses empty lists instead.
    """

    path: str
    change_type: ChangeType = ChangeType.MODIFIED
    scenarios_added: list[str] | None = None
    scenarios_modified: list[str] | None = None
    scenarios_removed: list[str] | None = None

    model_config = {
        "use_enum_values": True,
        "validate_default": True,
    }

    def titles(self, kind: str) -> list[str]:
        """Titles for `added`, `modified` or `removed`, never None."""
        return list(getattr(self, f"scenarios_{kind}") or [])

    def to_frontmatter(self) -> dict[str, Any]:
        """Compact persisted shape: empty title lists are omitted."""
        data: dict[str, Any] = {
            "path": self.path,
            "change_type": ChangeType(self.change_type).value,
        }
        for kind in ("added", "modified", "removed"):
            titles = self.titles(kind)
            if titles:
                data[f"scenarios_{kind}"] = titles
        return data


class SessionRecord(BaseModel):
    """
    A design session, as stored in the session document frontmatter.

    `body` is the markdown below the frontmatter and `extra` holds any
    frontmatter keys this model does not know about; both round-trip
    untouched.
    """

    session_id: str
    start_time: datetime
    end_time: datetime | None = None
    status: SessionStatus = SessionStatus.DESIGN
    problem_statement: str = ""
    changed_files: list[ChangeEntry] = Field(default_factory=list)
    start_commit: str | None = None

    body: str = Field(default="", exclude=True)
    extra: dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = {
        "use_enum_values": True,
        "validate_default": True,
    }

    @property
    def is_design(self) -> bool:
        return self.status == SessionStatus.DESIGN

    def to_frontmatter(self) -> dict[str, Any]:
        """Ordered frontmatter mapping for YAML output."""
        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "session_id": self.session_id,
                "start_time": _isoformat(self.start_time),
                "end_time": _isoformat(self.end_time) if self.end_time else None,
                "status": SessionStatus(self.status).value,
                "problem_statement": self.problem_statement,
                "changed_files": [entry.to_frontmatter() for entry in self.changed_files],
            }
        )
        if self.start_commit:
            data["start_commit"] = self.start_commit
        return data


def _isoformat(value: datetime) -> str:
    text = value.isoformat()
    return text.replace("+00:00", "Z")


KNOWN_FIELDS = {
    "session_id",
    "start_time",
    "end_time",
    "status",
    "problem_statement",
    "changed_files",
    "start_commit",
}


__all__ = [
    "ChangeEntry",
    "ChangeType",
    "KNOWN_FIELDS",
    "SessionRecord",
    "SessionStatus",
    "utc_now",
]
