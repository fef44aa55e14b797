"""Tests for legacy changed_files migration."""

import pytest

from forge_session.session.migrator import MigrationResult, migrate
from forge_session.session.schema import ChangeEntry, ChangeType


class TestLegacyShape:
    """A flat list of paths is upgraded."""

    def test_paths_become_modified_entries(self):
        result = migrate(["ai/features/a.feature.md", "ai/features/b.feature.md"])

        assert result.was_migrated is True
        assert [e.path for e in result.entries] == [
            "ai/features/a.feature.md",
            "ai/features/b.feature.md",
        ]
        for entry in result.entries:
            assert entry.change_type == ChangeType.MODIFIED
            assert entry.scenarios_added == []
            assert entry.scenarios_modified == []
            assert entry.scenarios_removed == []

    def test_duplicate_paths_collapse(self):
        result = migrate(["a.feature.md", "a.feature.md", "b.feature.md"])

        assert [e.path for e in result.entries] == ["a.feature.md", "b.feature.md"]

    def test_non_string_items_dropped(self):
        result = migrate(["a.feature.md", 3, None, ""])

        assert [e.path for e in result.entries] == ["a.feature.md"]


class TestStructuredShape:
    """Already-structured input is normalised, not migrated."""

    def test_dicts_are_normalised(self):
        raw = [
            {
                "path": "ai/features/a.feature.md",
                "change_type": "added",
                "scenarios_added": ["Login"],
            }
        ]

        result = migrate(raw)

        assert result.was_migrated is False
        entry = result.entries[0]
        assert entry.change_type == ChangeType.ADDED
        assert entry.scenarios_added == ["Login"]
        assert entry.scenarios_modified == []
        assert entry.scenarios_removed == []

    def test_change_entries_accepted(self):
        result = migrate([ChangeEntry(path="a.feature.md", scenarios_modified=["X"])])

        assert result.was_migrated is False
        assert result.entries[0].scenarios_modified == ["X"]

    def test_unknown_change_type_defaults_to_modified(self):
        result = migrate([{"path": "a.feature.md", "change_type": "deleted"}])

        assert result.entries[0].change_type == ChangeType.MODIFIED

    def test_idempotent(self):
        """migrate(migrate(x).entries) gives the same entries."""
        first = migrate(["a.feature.md", "b.feature.md"])

        second = migrate(first.entries)

        assert second.entries == first.entries
        assert second.was_migrated is False

    def test_invalid_items_in_structured_list_dropped(self):
        result = migrate([{"path": "a.feature.md"}, "stray", {"path": ""}, {"no_path": 1}])

        assert [e.path for e in result.entries] == ["a.feature.md"]


class TestDegenerateInput:
    """migrate never raises."""

    @pytest.mark.parametrize("raw", [None, "a.feature.md", 42, {"path": "x"}, []])
    def test_unrecognised_input_is_empty(self, raw):
        assert migrate(raw) == MigrationResult()

    def test_empty_list_is_not_a_migration(self):
        assert migrate([]).was_migrated is False
