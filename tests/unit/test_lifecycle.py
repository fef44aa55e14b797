"""Tests for session lifecycle transitions."""

from datetime import datetime, timezone

import pytest

from forge_session.errors import IncompleteWorkItems, InvalidTransition
from forge_session.session.lifecycle import SessionLifecycle
from forge_session.session.schema import SessionRecord, SessionStatus
from forge_session.session.work_items import WorkItem


def make_record(status: SessionStatus) -> SessionRecord:
    return SessionRecord(
        session_id="add-password-reset",
        start_time=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        status=status,
        problem_statement="Add password reset",
    )


class TestSessionLifecycle:
    """Tests for SessionLifecycle."""

    @pytest.fixture
    def lifecycle(self):
        return SessionLifecycle()

    def test_design_to_scribe_sets_end_time(self, lifecycle):
        """Ending a session records end_time."""
        record = make_record(SessionStatus.DESIGN)

        result = lifecycle.transition(record, SessionStatus.SCRIBE)

        assert result.ok
        assert result.record.status == SessionStatus.SCRIBE
        assert result.record.end_time is not None
        assert record.status == SessionStatus.DESIGN
        assert record.end_time is None

    def test_scribe_to_development(self, lifecycle):
        result = lifecycle.transition(make_record(SessionStatus.SCRIBE), SessionStatus.DEVELOPMENT)

        assert result.ok
        assert result.record.status == SessionStatus.DEVELOPMENT

    def test_design_to_development_refused(self, lifecycle):
        """Phases cannot be skipped."""
        result = lifecycle.transition(make_record(SessionStatus.DESIGN), SessionStatus.DEVELOPMENT)

        assert not result.ok
        assert result.record is None
        assert isinstance(result.error, InvalidTransition)
        assert result.error.current == "design"
        assert result.error.requested == "development"

    @pytest.mark.parametrize(
        "current,requested",
        [
            (SessionStatus.SCRIBE, SessionStatus.DESIGN),
            (SessionStatus.DEVELOPMENT, SessionStatus.SCRIBE),
            (SessionStatus.COMPLETED, SessionStatus.DESIGN),
            (SessionStatus.COMPLETED, SessionStatus.COMPLETED),
            (SessionStatus.DESIGN, SessionStatus.DESIGN),
        ],
    )
    def test_backward_and_terminal_transitions_refused(self, lifecycle, current, requested):
        result = lifecycle.transition(make_record(current), requested)

        assert isinstance(result.error, InvalidTransition)

    def test_complete_with_all_items_done(self, lifecycle):
        items = [WorkItem("story-1", "completed"), WorkItem("task-1", "completed")]

        result = lifecycle.transition(make_record(SessionStatus.DEVELOPMENT), SessionStatus.COMPLETED, items)

        assert result.ok
        assert result.record.status == SessionStatus.COMPLETED

    def test_complete_with_pending_item_names_it(self, lifecycle):
        """The refusal lists the ids of unfinished work items."""
        items = [WorkItem("story-1", "completed"), WorkItem("task-2", "in_progress")]

        result = lifecycle.transition(make_record(SessionStatus.DEVELOPMENT), SessionStatus.COMPLETED, items)

        assert isinstance(result.error, IncompleteWorkItems)
        assert result.error.item_ids == ["task-2"]
        assert "task-2" in str(result.error)

    def test_complete_without_work_items_refused(self, lifecycle):
        result = lifecycle.transition(make_record(SessionStatus.DEVELOPMENT), SessionStatus.COMPLETED, [])

        assert isinstance(result.error, IncompleteWorkItems)
        assert result.error.item_ids == []
        assert "no work items" in str(result.error)

    def test_accepts_string_statuses(self, lifecycle):
        assert lifecycle.can_transition("design", "scribe")
        assert not lifecycle.can_transition("scribe", "completed")

    @pytest.mark.parametrize("status", list(SessionStatus))
    def test_tracking_only_in_design(self, status):
        expected = status == SessionStatus.DESIGN

        assert SessionLifecycle.is_tracking_active(status) is expected
        assert SessionLifecycle.allows_feature_edits(status) is expected
