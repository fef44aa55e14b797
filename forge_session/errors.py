"""Error taxonomy for forge-session.

Parse leniency and migration no-ops are not errors and have no class here.
The lifecycle and the orchestrator return these as failure values; the
document store raises them.
"""

from __future__ import annotations


class ForgeError(Exception):
    """Base class for forge-session failures."""

    recoverable: bool = True


class InvalidTransition(ForgeError):
    """A lifecycle transition was requested from the wrong state."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot transition session from '{current}' to '{requested}'"
        )


class IncompleteWorkItems(ForgeError):
    """Completion refused because some work items are not completed."""

    def __init__(self, item_ids: list[str], reason: str | None = None):
        self.item_ids = list(item_ids)
        self.reason = reason or "work items are not completed"
        if self.item_ids:
            detail = ", ".join(self.item_ids)
            message = f"Cannot complete session: {self.reason}: {detail}"
        else:
            message = f"Cannot complete session: {self.reason}"
        super().__init__(message)


class StorageFailure(ForgeError):
    """Reading or writing a document failed."""

    def __init__(self, path: str, operation: str, cause: BaseException | None = None):
        self.path = path
        self.operation = operation
        self.cause = cause
        message = f"Failed to {operation} {path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class DocumentNotFound(StorageFailure):
    """The requested document does not exist."""

    def __init__(self, path: str):
        super().__init__(path, "read", None)
        self.args = (f"Document not found: {path}",)

    def __str__(self) -> str:
        return self.args[0]


class SessionNotFound(ForgeError):
    """No session document exists for the given id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class NotInDesign(ForgeError):
    """Change tracking was requested for a session that is not in DESIGN."""

    def __init__(self, session_id: str, status: str):
        self.session_id = session_id
        self.status = status
        super().__init__(
            f"Cannot track changes for session '{session_id}': status is '{status}', not 'design'"
        )


class SessionAlreadyActive(ForgeError):
    """A design session is already open."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Design session '{session_id}' is already active")


__all__ = [
    "ForgeError",
    "InvalidTransition",
    "IncompleteWorkItems",
    "StorageFailure",
    "DocumentNotFound",
    "SessionNotFound",
    "NotInDesign",
    "SessionAlreadyActive",
]
