"""Merge scenario diffs into per-file change entries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from .schema import ChangeEntry, ChangeType

if TYPE_CHECKING:
    from ..scenario.differ import ScenarioDiff


def _union(existing: Iterable[str] | None, incoming: Iterable[str] | None) -> list[str] | None:
    """Order-preserving union; None when empty."""
    merged = list(dict.fromkeys([*(existing or []), *(incoming or [])]))
    return merged or None


def merge(
    existing: ChangeEntry | None,
    incoming: "ScenarioDiff",
    path: str,
    is_new_file: bool,
) -> ChangeEntry:
    """
    Fold a diff into the change entry for `path`.

    A path that was ever `added` stays `added`. Title lists only grow, so
    merging the same diff twice is a no-op.

    Args:
        existing: Current entry for the path, or None
        incoming: Diff from the latest edit
        path: Project-relative path of the document
        is_new_file: True if the document did not exist before this edit

    Returns:
        New ChangeEntry; `existing` is not modified
    """
    was_added = existing is not None and existing.change_type == ChangeType.ADDED
    change_type = ChangeType.ADDED if (was_added or is_new_file) else ChangeType.MODIFIED

    return ChangeEntry(
        path=path,
        change_type=change_type,
        scenarios_added=_union(existing and existing.scenarios_added, incoming.added),
        scenarios_modified=_union(existing and existing.scenarios_modified, incoming.modified),
        scenarios_removed=_union(existing and existing.scenarios_removed, incoming.removed),
    )


def find_entry(entries: list[ChangeEntry], path: str) -> ChangeEntry | None:
    """Return the entry for `path`, or None."""
    for entry in entries:
        if entry.path == path:
            return entry
    return None


def upsert(
    entries: list[ChangeEntry],
    path: str,
    incoming: "ScenarioDiff",
    is_new_file: bool,
) -> list[ChangeEntry]:
    """
    Return a copy of `entries` with the diff merged into `path`'s entry.

    The entry keeps its position; a new path is appended.
    """
    updated = list(entries)
    for i, entry in enumerate(updated):
        if entry.path == path:
            updated[i] = merge(entry, incoming, path, is_new_file)
            return updated
    updated.append(merge(None, incoming, path, is_new_file))
    return updated


__all__ = ["find_entry", "merge", "upsert"]
