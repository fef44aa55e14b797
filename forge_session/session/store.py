"""
Document and session record persistence.

Documents are addressed by POSIX paths relative to the project root.
Session records live in `<sessions_dir>/<id>/<id>.session.md` as YAML
frontmatter over a markdown body.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any, Protocol

import frontmatter
import yaml
from pydantic import ValidationError

from ..errors import DocumentNotFound, SessionNotFound, StorageFailure
from .migrator import migrate
from .schema import KNOWN_FIELDS, ChangeEntry, SessionRecord, utc_now

if TYPE_CHECKING:
    from ..config import ForgeConfig

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Read/write access to project documents."""

    def read(self, path: str) -> str:
        """Return document text. Raises DocumentNotFound or StorageFailure."""
        ...

    def write(self, path: str, content: str) -> None:
        """Replace document text atomically. Raises StorageFailure."""
        ...

    def exists(self, path: str) -> bool:
        ...

    def list(self, directory: str, suffix: str) -> list[str]:
        """Paths under `directory` (recursive) ending with `suffix`."""
        ...


class FileDocumentStore:
    """
    Filesystem-backed DocumentStore rooted at the project directory.

    Writes use write-to-temp-then-rename, so a concurrent reader sees either
    the old or the new content.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def resolve(self, path: str) -> Path:
        return self.root / PurePosixPath(path)

    def relative(self, full_path: Path | str) -> str:
        """Project-relative POSIX path for a filesystem path."""
        return Path(os.path.relpath(full_path, self.root)).as_posix()

    def read(self, path: str) -> str:
        target = self.resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise DocumentNotFound(path) from None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageFailure(path, "read", e) from e

    def write(self, path: str, content: str) -> None:
        target = self.resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                suffix=".tmp",
                prefix=f".{target.name}.",
                dir=target.parent,
            )
        except OSError as e:
            raise StorageFailure(path, "write", e) from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            # Atomic rename
            os.replace(temp_path, target)
        except OSError as e:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageFailure(path, "write", e) from e

    def exists(self, path: str) -> bool:
        return self.resolve(path).is_file()

    def list(self, directory: str, suffix: str) -> list[str]:
        base = self.resolve(directory)
        if not base.is_dir():
            return []
        return sorted(
            self.relative(p) for p in base.rglob(f"*{suffix}") if p.is_file()
        )


def load_document(text: str) -> tuple[dict[str, Any], str]:
    """Split a markdown document into (frontmatter, body)."""
    post = frontmatter.loads(text)
    return dict(post.metadata), post.content


def dump_document(metadata: dict[str, Any], body: str) -> str:
    """Render frontmatter and body back into a markdown document."""
    post = frontmatter.Post(body)
    post.metadata.update(metadata)
    return frontmatter.dumps(post, sort_keys=False) + "\n"


class SessionStore:
    """Load and save SessionRecords through a DocumentStore."""

    def __init__(self, documents: DocumentStore, config: "ForgeConfig"):
        self.documents = documents
        self.config = config

    def session_path(self, session_id: str) -> str:
        return f"{self.config.sessions_dir}/{session_id}/{session_id}{self.config.session_suffix}"

    def exists(self, session_id: str) -> bool:
        return self.documents.exists(self.session_path(session_id))

    def list_paths(self) -> list[str]:
        return self.documents.list(self.config.sessions_dir, self.config.session_suffix)

    def read(self, path: str) -> tuple[SessionRecord, bool]:
        """
        Read a session document.

        Returns:
            (record, was_migrated) where was_migrated reports a legacy
            changed_files list that was upgraded on read

        Raises:
            DocumentNotFound, StorageFailure
        """
        text = self.documents.read(path)
        try:
            metadata, body = load_document(text)
        except yaml.YAMLError as e:
            raise StorageFailure(path, "parse", e) from e

        migration = migrate(metadata.get("changed_files"))
        fallback_id = PurePosixPath(path).name.removesuffix(self.config.session_suffix)

        try:
            record = SessionRecord(
                session_id=str(metadata.get("session_id") or fallback_id),
                start_time=metadata.get("start_time") or utc_now(),
                end_time=metadata.get("end_time"),
                status=metadata.get("status") or "design",
                problem_statement=metadata.get("problem_statement") or "",
                changed_files=migration.entries,
                start_commit=metadata.get("start_commit"),
                body=body,
                extra={k: v for k, v in metadata.items() if k not in KNOWN_FIELDS},
            )
        except ValidationError as e:
            raise StorageFailure(path, "parse", e) from e

        return record, migration.was_migrated

    def load(self, session_id: str) -> SessionRecord:
        """
        Load a session by id.

        Raises:
            SessionNotFound: If no session document exists
        """
        try:
            record, _ = self.read(self.session_path(session_id))
        except DocumentNotFound:
            raise SessionNotFound(session_id) from None
        return record

    def save(self, record: SessionRecord) -> str:
        """Write the whole record. Returns the document path."""
        path = self.session_path(record.session_id)
        self.documents.write(path, dump_document(record.to_frontmatter(), record.body))
        return path

    def write_changed_files(self, session_id: str, entries: list[ChangeEntry]) -> None:
        """
        Replace only `changed_files` in the stored document.

        Other frontmatter and the body are re-read from disk so edits made
        outside this process are kept.
        """
        path = self.session_path(session_id)
        text = self.documents.read(path)
        try:
            metadata, body = load_document(text)
        except yaml.YAMLError as e:
            raise StorageFailure(path, "parse", e) from e
        metadata["changed_files"] = [entry.to_frontmatter() for entry in entries]
        self.documents.write(path, dump_document(metadata, body))

    def list_records(self) -> list[SessionRecord]:
        """All readable sessions, newest start_time first. Invalid ones are skipped."""
        records = []
        for path in self.list_paths():
            try:
                record, _ = self.read(path)
            except StorageFailure as e:
                logger.warning(f"Skipping unreadable session document: {e}")
                continue
            records.append(record)
        records.sort(key=lambda r: r.start_time.isoformat(), reverse=True)
        return records


__all__ = [
    "DocumentStore",
    "FileDocumentStore",
    "SessionStore",
    "dump_document",
    "load_document",
]
