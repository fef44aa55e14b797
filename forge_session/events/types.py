"""Change notification event types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class FileCreated:
    """A tracked document appeared."""

    path: str


@dataclass(frozen=True)
class FileModified:
    """A tracked document's content changed."""

    path: str


# Closed set of events; handlers match on it exhaustively.
ChangeEvent = Union[FileCreated, FileModified]


__all__ = ["ChangeEvent", "FileCreated", "FileModified"]
