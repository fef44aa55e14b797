"""
Design session management for forge-session.

Creates, resumes and transitions session documents under
`<project>/ai/sessions/<session_id>/`, and starts/stops change capture
as sessions enter and leave DESIGN.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING

from .errors import ForgeError, SessionAlreadyActive, StorageFailure
from .git import current_git_commit
from .orchestrator import ChangeCaptureOrchestrator
from .session.lifecycle import SessionLifecycle
from .session.schema import SessionRecord, SessionStatus, utc_now

if TYPE_CHECKING:
    from .context import SessionContext

logger = logging.getLogger(__name__)

MAX_SESSION_ID_LENGTH = 50

SESSION_BODY_TEMPLATE = """## Problem Statement

{problem_statement}

## Goals

(To be filled during the session)

## Approach

(To be filled during the session)

## Key Decisions

(Track important decisions made during the session)

## Notes

(Additional context, concerns, or considerations)
"""


def generate_session_id(problem_statement: str) -> str:
    """
    Slug for a problem statement.

    Lower-case, keeps [a-z0-9 -], spaces become dashes, dash runs collapse,
    at most 50 characters.
    """
    slug = problem_statement.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug[:MAX_SESSION_ID_LENGTH].strip("-")
    return slug or "session"


class SessionManager:
    """
    Manage design sessions for one project.

    At most one session is tracked at a time. Operations raise ForgeError
    subclasses; lifecycle refusals are raised as the InvalidTransition or
    IncompleteWorkItems the lifecycle returned.
    """

    def __init__(self, context: "SessionContext"):
        self.context = context
        self.store = context.sessions
        self.lifecycle = SessionLifecycle()
        self.orchestrator = ChangeCaptureOrchestrator(context)

    @property
    def active_session(self) -> SessionRecord | None:
        """The session being tracked, if any."""
        if self.orchestrator.is_running:
            return self.orchestrator.record
        return None

    def _unique_session_id(self, problem_statement: str) -> str:
        base = generate_session_id(problem_statement)
        session_id = base
        counter = 2
        while self.store.exists(session_id):
            session_id = f"{base}-{counter}"
            counter += 1
        return session_id

    def _find_design_session(self) -> tuple[SessionRecord, bool] | None:
        for path in self.store.list_paths():
            try:
                record, was_migrated = self.store.read(path)
            except StorageFailure as e:
                logger.warning(f"Skipping unreadable session document: {e}")
                continue
            if record.status == SessionStatus.DESIGN:
                return record, was_migrated
        return None

    async def start_session(self, problem_statement: str) -> SessionRecord:
        """
        Create a new design session and start tracking changes.

        Raises:
            SessionAlreadyActive: If a design session already exists
            StorageFailure: If the session document cannot be written
        """
        existing = self.active_session
        if existing is None:
            found = await asyncio.to_thread(self._find_design_session)
            existing = found[0] if found else None
        if existing is not None:
            raise SessionAlreadyActive(existing.session_id)

        session_id = self._unique_session_id(problem_statement)
        record = SessionRecord(
            session_id=session_id,
            start_time=utc_now(),
            status=SessionStatus.DESIGN,
            problem_statement=problem_statement,
            start_commit=await asyncio.to_thread(current_git_commit, self.context.config.project_root),
            body=SESSION_BODY_TEMPLATE.format(problem_statement=problem_statement),
        )
        await asyncio.to_thread(self.store.save, record)
        logger.info(f"Design session {session_id} started")

        await self.orchestrator.start(record)
        return record

    async def load_active_session(self) -> SessionRecord | None:
        """
        Resume tracking the first session found in DESIGN status.

        A legacy `changed_files` list is migrated and, when configured,
        written back with `_migrated: true`. Baselines are taken as a
        resume: files not in `start_commit` count as new.
        """
        found = await asyncio.to_thread(self._find_design_session)
        if found is None:
            self.orchestrator.stop()
            return None

        record, was_migrated = found
        if was_migrated and self.context.config.persist_migrations:
            record = record.model_copy(update={"extra": {**record.extra, "_migrated": True}})
            try:
                await asyncio.to_thread(self.store.save, record)
                logger.warning(f"Migrated legacy changed_files in session {record.session_id}")
            except StorageFailure as e:
                logger.error(f"Failed to save migrated session {record.session_id}: {e}")

        await self.orchestrator.start(record, resume=True)
        return record

    async def list_sessions(self) -> list[SessionRecord]:
        """All sessions, newest first."""
        return await asyncio.to_thread(self.store.list_records)

    async def get_session(self, session_id: str) -> SessionRecord:
        """Load one session. Raises SessionNotFound."""
        return await asyncio.to_thread(self.store.load, session_id)

    async def _stop_if_active(self, session_id: str) -> None:
        record = self.orchestrator.record
        if self.orchestrator.is_running and record is not None and record.session_id == session_id:
            self.orchestrator.stop()
            await self.orchestrator.wait_idle()

    async def _transition(self, session_id: str, to_status: SessionStatus) -> SessionRecord:
        record = await self.get_session(session_id)

        work_items = None
        if to_status == SessionStatus.COMPLETED:
            work_items = await asyncio.to_thread(self.context.work_items.list_work_items, session_id)

        # Refuse before touching tracking state
        result = self.lifecycle.transition(record, to_status, work_items)
        if not result.ok:
            raise result.error

        if to_status == SessionStatus.SCRIBE:
            await self._stop_if_active(session_id)
            # Reload: the last in-flight capture may have written changed_files
            record = await self.get_session(session_id)
            result = self.lifecycle.transition(record, to_status, work_items)
            if not result.ok:
                raise result.error

        await asyncio.to_thread(self.store.save, result.record)
        return result.record

    async def end_session(self, session_id: str | None = None) -> SessionRecord:
        """
        End a design session: DESIGN → SCRIBE, stop tracking, set end_time.

        Args:
            session_id: Session to end (default: the active session)
        """
        if session_id is None:
            active = self.active_session
            if active is None:
                raise ForgeError("No active design session")
            session_id = active.session_id
        return await self._transition(session_id, SessionStatus.SCRIBE)

    async def begin_development(self, session_id: str) -> SessionRecord:
        """SCRIBE → DEVELOPMENT, once work items have been written."""
        return await self._transition(session_id, SessionStatus.DEVELOPMENT)

    async def complete_session(self, session_id: str) -> SessionRecord:
        """DEVELOPMENT → COMPLETED; refused while any work item is open."""
        return await self._transition(session_id, SessionStatus.COMPLETED)

    async def update_problem_statement(self, problem_statement: str) -> SessionRecord:
        """Edit the active session's problem statement, keeping system fields."""
        active = self.active_session
        if active is None:
            raise ForgeError("No active design session")

        # No capture may land between the read and the save
        async with self.orchestrator.exclusive():
            stored = await self.get_session(active.session_id)
            updated = stored.model_copy(
                update={
                    "problem_statement": problem_statement,
                    "status": SessionStatus.DESIGN.value,
                    "start_time": active.start_time,
                }
            )
            await asyncio.to_thread(self.store.save, updated)
        return updated

    def close(self) -> None:
        """Stop tracking without changing any session's status."""
        self.orchestrator.stop()


__all__ = [
    "SESSION_BODY_TEMPLATE",
    "SessionManager",
    "current_git_commit",
    "generate_session_id",
]
