"""
Normalise `changed_files` as read from a session document.

Older session documents stored `changed_files` as a flat list of paths.
`migrate` upgrades that shape to ChangeEntry records and normalises the
current shape. It never raises: unrecognised input degrades to an empty
result.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .schema import ChangeEntry, ChangeType

logger = logging.getLogger(__name__)

_SCENARIO_KEYS = ("scenarios_added", "scenarios_modified", "scenarios_removed")


@dataclass
class MigrationResult:
    """Entries in the normalised read shape, and whether a legacy list was upgraded."""

    entries: list[ChangeEntry] = field(default_factory=list)
    was_migrated: bool = False


def _as_mapping(item: Any) -> Mapping | None:
    if isinstance(item, ChangeEntry):
        return item.model_dump()
    if isinstance(item, Mapping):
        return item
    return None


def _is_structured(item: Any) -> bool:
    mapping = _as_mapping(item)
    return mapping is not None and bool(mapping.get("path"))


def _titles(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return list(dict.fromkeys(t for t in value if isinstance(t, str)))


def _change_type(value: Any) -> ChangeType:
    try:
        return ChangeType(value)
    except (TypeError, ValueError):
        return ChangeType.MODIFIED


def _normalise(item: Any) -> ChangeEntry | None:
    mapping = _as_mapping(item)
    if mapping is None:
        return None
    path = mapping.get("path")
    if not isinstance(path, str) or not path:
        return None
    return ChangeEntry(
        path=path,
        change_type=_change_type(mapping.get("change_type")),
        **{key: _titles(mapping.get(key)) for key in _SCENARIO_KEYS},
    )


def _unique_paths(entries: list[ChangeEntry]) -> list[ChangeEntry]:
    seen: set[str] = set()
    unique = []
    for entry in entries:
        if entry.path not in seen:
            seen.add(entry.path)
            unique.append(entry)
    return unique


def migrate(raw: Any) -> MigrationResult:
    """
    Upgrade or normalise a raw `changed_files` value.

    Args:
        raw: Whatever the frontmatter held under `changed_files`

    Returns:
        MigrationResult with scenario lists defaulted to empty lists
    """
    if not isinstance(raw, (list, tuple)):
        return MigrationResult()

    if raw and _is_structured(raw[0]):
        entries = [entry for entry in map(_normalise, raw) if entry is not None]
        return MigrationResult(entries=_unique_paths(entries), was_migrated=False)

    entries = [
        ChangeEntry(
            path=item,
            change_type=ChangeType.MODIFIED,
            scenarios_added=[],
            scenarios_modified=[],
            scenarios_removed=[],
        )
        for item in raw
        if isinstance(item, str) and item
    ]
    entries = _unique_paths(entries)
    if entries:
        logger.info(f"Migrated {len(entries)} legacy changed_files entries")
    return MigrationResult(entries=entries, was_migrated=bool(entries))


__all__ = ["MigrationResult", "migrate"]
