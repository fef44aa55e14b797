#!/usr/bin/env python3
"""
Migration script for session `changed_files`.

Rewrites session documents whose `changed_files` is a legacy flat list of
paths into the per-file change entry shape. Already-current documents are
left untouched.

Usage:
    # Dry run (preview changes)
    python scripts/migrate_changed_files.py --dry-run

    # Run migration
    python scripts/migrate_changed_files.py

    # Run with backup
    python scripts/migrate_changed_files.py --backup
"""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path

# Add project root to path for forge_session imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from forge_session.config import ForgeConfig
from forge_session.errors import StorageFailure
from forge_session.session.store import FileDocumentStore, SessionStore


class MigrationReport:
    """Result of migrating a single session document."""

    def __init__(
        self,
        session_id: str,
        success: bool,
        message: str = "",
        backup_path: Path | None = None,
    ):
        self.session_id = session_id
        self.success = success
        self.message = message
        self.backup_path = backup_path

    def __repr__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"{status} {self.session_id}: {self.message}"


class ChangedFilesMigrator:
    """Migrates legacy `changed_files` lists in every session document."""

    def __init__(
        self,
        config: ForgeConfig,
        dry_run: bool = False,
        create_backup: bool = False,
    ):
        """
        Initialize migrator.

        Args:
            config: Project configuration
            dry_run: If True, preview changes without executing
            create_backup: If True, copy each document before rewriting it
        """
        self.config = config
        self.documents = FileDocumentStore(config.root)
        self.store = SessionStore(self.documents, config)
        self.dry_run = dry_run
        self.create_backup = create_backup
        self.backup_dir = config.root / ".forge" / "migration-backup"

        self.results: list[MigrationReport] = []

    def discover_sessions(self) -> list[str]:
        """Project-relative paths of all session documents."""
        return self.store.list_paths()

    def backup(self, path: str, session_id: str) -> Path | None:
        if not self.create_backup:
            return None

        backup_path = self.backup_dir / session_id
        if self.dry_run:
            return backup_path

        backup_path.mkdir(parents=True, exist_ok=True)
        source = self.documents.resolve(path)
        shutil.copy2(source, backup_path / source.name)
        return backup_path

    def migrate_session(self, path: str) -> MigrationReport:
        """
        Migrate one session document.

        Args:
            path: Project-relative path of the session document

        Returns:
            MigrationReport indicating success/failure
        """
        try:
            record, was_migrated = self.store.read(path)
        except StorageFailure as e:
            return MigrationReport(session_id=path, success=False, message=str(e))

        if not was_migrated:
            return MigrationReport(
                session_id=record.session_id,
                success=True,
                message="Already current",
            )

        backup_path = self.backup(path, record.session_id)

        if self.dry_run:
            return MigrationReport(
                session_id=record.session_id,
                success=True,
                message=f"Would migrate {len(record.changed_files)} entries (dry run)",
                backup_path=backup_path,
            )

        record = record.model_copy(update={"extra": {**record.extra, "_migrated": True}})
        try:
            self.store.save(record)
        except StorageFailure as e:
            return MigrationReport(session_id=record.session_id, success=False, message=str(e))

        return MigrationReport(
            session_id=record.session_id,
            success=True,
            message=f"Migrated {len(record.changed_files)} entries",
            backup_path=backup_path,
        )

    def run_migration(self) -> list[MigrationReport]:
        """Migrate every session document."""
        paths = self.discover_sessions()

        if not paths:
            print("No session documents found.")
            return []

        print(f"Found {len(paths)} session documents.")
        if self.dry_run:
            print("DRY RUN - No changes will be made.")

        for path in paths:
            result = self.migrate_session(path)
            self.results.append(result)
            print(result)

        return self.results

    def print_summary(self) -> None:
        """Print migration summary."""
        if not self.results:
            return

        success_count = sum(1 for r in self.results if r.success)
        failure_count = len(self.results) - success_count

        print("\n" + "=" * 60)
        print("Migration Summary")
        print("=" * 60)
        print(f"Total sessions: {len(self.results)}")
        print(f"Successful: {success_count}")
        print(f"Failed: {failure_count}")

        if self.create_backup and success_count > 0:
            print(f"Backup location: {self.backup_dir}")

        if self.dry_run:
            print("\nThis was a DRY RUN. Run without --dry-run to apply changes.")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Migrate legacy changed_files lists in session documents"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview changes without executing",
    )
    parser.add_argument(
        "--backup",
        action="store_true",
        help="Create backup before migration",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        help="Project directory (default: FORGE_PROJECT_ROOT or cwd)",
    )

    args = parser.parse_args(argv)

    migrator = ChangedFilesMigrator(
        config=ForgeConfig.load(args.project_root),
        dry_run=args.dry_run,
        create_backup=args.backup,
    )
    migrator.run_migration()
    migrator.print_summary()

    failures = sum(1 for r in migrator.results if not r.success)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
