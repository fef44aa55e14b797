"""forge-session: scenario-level change tracking for design sessions.

While a design session is open, edits to `*.feature.md` documents are
reduced to scenario-title diffs (added / modified / removed) and merged
into the session's `changed_files` record.

Layers:
- scenario: parse and diff the Given/When/Then blocks of a document
- session: records, aggregation, migration, lifecycle, storage
- events + orchestrator: turn file notifications into captured changes
"""

__version__ = "0.1.0"

# Scenario layer
from .scenario import ParsedDocument, Rule, Scenario, ScenarioDiff, ScenarioStep, StepKeyword, diff, parse, serialize

# Session layer
from .session import (
    ChangeEntry,
    ChangeType,
    FileDocumentStore,
    MigrationResult,
    SessionLifecycle,
    SessionRecord,
    SessionStatus,
    SessionStore,
    TransitionResult,
    WorkItem,
    merge,
    migrate,
)

# Capture
from .events import ChangeFeed, FileCreated, FileModified
from .orchestrator import CaptureResult, ChangeCaptureOrchestrator
from .session_manager import SessionManager

# Types & Config
from .context import SessionContext
from .config import ForgeConfig
from .errors import (
    ForgeError,
    IncompleteWorkItems,
    InvalidTransition,
    NotInDesign,
    StorageFailure,
)

__all__ = [
    # Scenario
    "ParsedDocument",
    "Rule",
    "Scenario",
    "ScenarioDiff",
    "ScenarioStep",
    "StepKeyword",
    "diff",
    "parse",
    "serialize",
    # Session
    "ChangeEntry",
    "ChangeType",
    "FileDocumentStore",
    "MigrationResult",
    "SessionLifecycle",
    "SessionRecord",
    "SessionStatus",
    "SessionStore",
    "TransitionResult",
    "WorkItem",
    "merge",
    "migrate",
    # Capture
    "ChangeFeed",
    "FileCreated",
    "FileModified",
    "CaptureResult",
    "ChangeCaptureOrchestrator",
    "SessionManager",
    # Types & Config
    "SessionContext",
    "ForgeConfig",
    "ForgeError",
    "IncompleteWorkItems",
    "InvalidTransition",
    "NotInDesign",
    "StorageFailure",
]
