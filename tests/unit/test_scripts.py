"""Tests for the command line scripts."""

import json

import pytest

from forge_session.config import ForgeConfig
from forge_session.session.store import FileDocumentStore, SessionStore, load_document

LEGACY_SESSION = """---
session_id: legacy
start_time: '2024-01-02T03:04:05Z'
status: scribe
problem_statement: Legacy work
changed_files:
  - ai/features/reset.feature.md
---
Body
"""

SESSION_PATH = "ai/sessions/legacy/legacy.session.md"


@pytest.fixture(autouse=True)
def no_forge_env(monkeypatch):
    monkeypatch.delenv("FORGE_LOG_LEVEL", raising=False)
    monkeypatch.delenv("FORGE_PROJECT_ROOT", raising=False)


class TestMigrateChangedFiles:
    """Tests for scripts/migrate_changed_files.py."""

    def setup_method(self):
        """Import the module under test."""
        from scripts import migrate_changed_files

        self.script = migrate_changed_files

    def write_legacy(self, root):
        FileDocumentStore(root).write(SESSION_PATH, LEGACY_SESSION)

    def test_dry_run_changes_nothing(self, tmp_path, capsys):
        self.write_legacy(tmp_path)

        code = self.script.main(["--dry-run", "--project-root", str(tmp_path)])

        assert code == 0
        assert (tmp_path / SESSION_PATH).read_text() == LEGACY_SESSION
        assert "DRY RUN" in capsys.readouterr().out

    def test_migrates_with_backup(self, tmp_path):
        self.write_legacy(tmp_path)

        code = self.script.main(["--backup", "--project-root", str(tmp_path)])

        assert code == 0
        metadata, _ = load_document((tmp_path / SESSION_PATH).read_text())
        assert metadata["_migrated"] is True
        assert metadata["status"] == "scribe"
        assert metadata["changed_files"] == [
            {"path": "ai/features/reset.feature.md", "change_type": "modified"}
        ]
        backup = tmp_path / ".forge" / "migration-backup" / "legacy" / "legacy.session.md"
        assert backup.read_text() == LEGACY_SESSION

    def test_current_documents_untouched(self, tmp_path):
        config = ForgeConfig(project_root=str(tmp_path))
        self.write_legacy(tmp_path)
        migrator = self.script.ChangedFilesMigrator(config)
        migrator.run_migration()
        migrated_text = (tmp_path / SESSION_PATH).read_text()

        second = self.script.ChangedFilesMigrator(config)
        results = second.run_migration()

        assert results[0].message == "Already current"
        assert (tmp_path / SESSION_PATH).read_text() == migrated_text

    def test_unreadable_document_fails(self, tmp_path):
        FileDocumentStore(tmp_path).write(SESSION_PATH, "---\nstatus: [oops\n---\n")

        assert self.script.main(["--project-root", str(tmp_path)]) == 1


class TestForgeSessionCli:
    """Tests for scripts/forge_session_cli.py."""

    def setup_method(self):
        """Import the module under test."""
        from scripts import forge_session_cli

        self.cli = forge_session_cli

    def run(self, tmp_path, *args):
        return self.cli.main(["--project-root", str(tmp_path), *args])

    def test_start_status_end(self, tmp_path, capsys):
        assert self.run(tmp_path, "start", "Add password reset") == 0
        assert "add-password-reset" in capsys.readouterr().out

        assert self.run(tmp_path, "status") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["session_id"] == "add-password-reset"
        assert status["status"] == "design"

        assert self.run(tmp_path, "end") == 0
        assert "scribe" in capsys.readouterr().out

        store = SessionStore(FileDocumentStore(tmp_path), ForgeConfig(project_root=str(tmp_path)))
        assert store.load("add-password-reset").status == "scribe"

    def test_status_without_session(self, tmp_path, capsys):
        assert self.run(tmp_path, "status") == 0
        assert json.loads(capsys.readouterr().out) == {"status": "no_active_session"}

    def test_refused_transition_exits_1(self, tmp_path, capsys):
        self.run(tmp_path, "start", "Reset")
        capsys.readouterr()

        assert self.run(tmp_path, "develop", "reset") == 1
        assert capsys.readouterr().out.startswith("Error: Cannot transition")

    def test_diff(self, tmp_path, capsys):
        before = tmp_path / "before.feature.md"
        after = tmp_path / "after.feature.md"
        before.write_text("```gherkin\nScenario: A\nGiven x\n```\n")
        after.write_text("```gherkin\nScenario: A\nGiven y\nScenario: B\nGiven z\n```\n")

        assert self.run(tmp_path, "diff", str(before), str(after)) == 0
        assert json.loads(capsys.readouterr().out) == {"added": ["B"], "modified": ["A"], "removed": []}

    def test_lint(self, tmp_path, capsys):
        feature = tmp_path / "a.feature.md"
        feature.write_text("```gherkin\nGiven orphan\nScenario: A\nGiven x\n```\n")

        assert self.run(tmp_path, "lint", str(feature)) == 1
        assert ":1: step outside of a scenario" in capsys.readouterr().out

    def test_lint_defaults_to_features_dir(self, tmp_path, capsys):
        documents = FileDocumentStore(tmp_path)
        documents.write("ai/features/clean.feature.md", "```gherkin\nScenario: A\nGiven x\n```\n")
        documents.write("ai/features/messy.feature.md", "```gherkin\nScenario: A\nWhen\n```\n")

        assert self.run(tmp_path, "lint") == 1

        out = capsys.readouterr().out
        assert "messy.feature.md:2: step keyword without text" in out
        assert "clean.feature.md" not in out
