"""SessionLifecycle - manage design session phase transitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import IncompleteWorkItems, InvalidTransition
from .schema import SessionRecord, SessionStatus, utc_now

if TYPE_CHECKING:
    from .work_items import WorkItem

logger = logging.getLogger(__name__)

COMPLETED_WORK_ITEM_STATUS = "completed"


@dataclass
class TransitionResult:
    """Outcome of a requested transition. Exactly one of record/error is set."""

    record: SessionRecord | None = None
    error: InvalidTransition | IncompleteWorkItems | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionLifecycle:
    """
    Manage session phase transitions.

    Valid transitions:
    - DESIGN → SCRIBE (user ends the session; sets end_time)
    - SCRIBE → DEVELOPMENT (work items have been written)
    - DEVELOPMENT → COMPLETED (every work item is completed)
    - COMPLETED → (terminal)

    Change tracking and feature document edits are only allowed in DESIGN.
    """

    VALID_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
        SessionStatus.DESIGN: {SessionStatus.SCRIBE},
        SessionStatus.SCRIBE: {SessionStatus.DEVELOPMENT},
        SessionStatus.DEVELOPMENT: {SessionStatus.COMPLETED},
        SessionStatus.COMPLETED: set(),  # Terminal
    }

    def can_transition(self, from_status: SessionStatus | str, to_status: SessionStatus | str) -> bool:
        """Check if a transition is valid."""
        return SessionStatus(to_status) in self.VALID_TRANSITIONS.get(SessionStatus(from_status), set())

    @staticmethod
    def is_tracking_active(status: SessionStatus | str) -> bool:
        """Whether feature document edits are captured in this phase."""
        return SessionStatus(status) == SessionStatus.DESIGN

    @staticmethod
    def allows_feature_edits(status: SessionStatus | str) -> bool:
        """Whether feature documents may be edited in this phase."""
        return SessionStatus(status) == SessionStatus.DESIGN

    def transition(
        self,
        record: SessionRecord,
        to_status: SessionStatus | str,
        work_items: list["WorkItem"] | None = None,
    ) -> TransitionResult:
        """
        Attempt to move a session to a new phase.

        Never raises for refused transitions; the refusal is returned.

        Args:
            record: Session to transition (left unchanged)
            to_status: Requested phase
            work_items: Work items of the session, checked for COMPLETED

        Returns:
            TransitionResult with the updated copy of the record or the error
        """
        current = SessionStatus(record.status)
        requested = SessionStatus(to_status)

        if not self.can_transition(current, requested):
            logger.warning(f"Refused transition {current.value} -> {requested.value} for {record.session_id}")
            return TransitionResult(error=InvalidTransition(current.value, requested.value))

        update: dict = {"status": requested.value}

        if requested == SessionStatus.SCRIBE:
            update["end_time"] = utc_now()

        if requested == SessionStatus.COMPLETED:
            items = work_items or []
            if not items:
                return TransitionResult(
                    error=IncompleteWorkItems([], "no work items found for session")
                )
            incomplete = [item.id for item in items if item.status != COMPLETED_WORK_ITEM_STATUS]
            if incomplete:
                return TransitionResult(error=IncompleteWorkItems(incomplete))

        logger.info(f"Session {record.session_id}: {current.value} -> {requested.value}")
        return TransitionResult(record=record.model_copy(update=update))


__all__ = ["COMPLETED_WORK_ITEM_STATUS", "SessionLifecycle", "TransitionResult"]
