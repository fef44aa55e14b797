#!/usr/bin/env python3
"""
Command line interface for design sessions.

Usage:
    python scripts/forge_session_cli.py start "Add password reset"
    python scripts/forge_session_cli.py status
    python scripts/forge_session_cli.py watch
    python scripts/forge_session_cli.py end
    python scripts/forge_session_cli.py develop add-password-reset
    python scripts/forge_session_cli.py complete add-password-reset
    python scripts/forge_session_cli.py list
    python scripts/forge_session_cli.py diff old.feature.md new.feature.md
    python scripts/forge_session_cli.py lint ai/features/login.feature.md
    python scripts/forge_session_cli.py lint
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add project root to path for forge_session imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from forge_session.config import ForgeConfig
from forge_session.context import SessionContext
from forge_session.errors import ForgeError, IncompleteWorkItems
from forge_session.events.feed import DirectoryPoller
from forge_session.scenario.differ import diff_bodies
from forge_session.scenario.parser import lint
from forge_session.session.schema import SessionRecord
from forge_session.session_manager import SessionManager


def _summary(record: SessionRecord) -> dict:
    return {
        "session_id": record.session_id,
        "status": record.status,
        "start_time": record.start_time.isoformat(),
        "end_time": record.end_time.isoformat() if record.end_time else None,
        "problem_statement": record.problem_statement,
        "changed_files": [entry.to_frontmatter() for entry in record.changed_files],
    }


async def cmd_start(manager: SessionManager, args: argparse.Namespace) -> int:
    record = await manager.start_session(args.problem_statement)
    manager.close()
    print(f"Design session '{record.session_id}' started.")
    return 0


async def cmd_status(manager: SessionManager, args: argparse.Namespace) -> int:
    record = await manager.load_active_session()
    manager.close()
    if record is None:
        print(json.dumps({"status": "no_active_session"}))
        return 0
    print(json.dumps(_summary(record), indent=2))
    return 0


async def cmd_list(manager: SessionManager, args: argparse.Namespace) -> int:
    for record in await manager.list_sessions():
        print(f"{record.session_id}\t{record.status}\t{len(record.changed_files)} files")
    return 0


async def cmd_watch(manager: SessionManager, args: argparse.Namespace) -> int:
    record = await manager.load_active_session()
    if record is None:
        print("No active design session. Run 'start' first.")
        return 1

    config = manager.context.config
    poller = DirectoryPoller(manager.context.feed, config.root, config.ai_dir)
    poller.prime()
    stop = asyncio.Event()
    print(f"Watching {config.ai_dir}/ for session '{record.session_id}' (Ctrl-C to stop)")
    try:
        await poller.run(config.poll_interval, stop)
    except (KeyboardInterrupt, asyncio.CancelledError):
        stop.set()
    finally:
        manager.close()
    return 0


async def cmd_end(manager: SessionManager, args: argparse.Namespace) -> int:
    session_id = args.session_id
    if session_id is None:
        active = await manager.load_active_session()
        if active is None:
            print("No active design session.")
            return 1
        session_id = active.session_id
    record = await manager.end_session(session_id)
    print(f"Session '{record.session_id}' ended. Status changed to '{record.status}'.")
    return 0


async def cmd_develop(manager: SessionManager, args: argparse.Namespace) -> int:
    record = await manager.begin_development(args.session_id)
    print(f"Session '{record.session_id}' is now in '{record.status}'.")
    return 0


async def cmd_complete(manager: SessionManager, args: argparse.Namespace) -> int:
    try:
        record = await manager.complete_session(args.session_id)
    except IncompleteWorkItems as e:
        print(f"Error: {e}")
        for item_id in e.item_ids:
            print(f"  - {item_id}")
        return 1
    print(f"Session '{record.session_id}' marked as completed.")
    return 0


async def cmd_diff(manager: SessionManager, args: argparse.Namespace) -> int:
    before = Path(args.before).read_text(encoding="utf-8")
    after = Path(args.after).read_text(encoding="utf-8")
    changes = diff_bodies(before, after)
    print(json.dumps({"added": changes.added, "modified": changes.modified, "removed": changes.removed}, indent=2))
    return 0


async def cmd_lint(manager: SessionManager, args: argparse.Namespace) -> int:
    if args.path:
        paths = [Path(args.path)]
    else:
        config = manager.context.config
        documents = manager.context.documents
        paths = [
            config.root / path
            for path in documents.list(config.features_dir, config.tracked_suffix)
        ]

    found = 0
    for path in paths:
        for issue in lint(path.read_text(encoding="utf-8")):
            found += 1
            print(f"{path}:{issue.line_number}: {issue.reason}: {issue.line}")
    return 1 if found else 0


COMMANDS = {
    "start": cmd_start,
    "status": cmd_status,
    "list": cmd_list,
    "watch": cmd_watch,
    "end": cmd_end,
    "develop": cmd_develop,
    "complete": cmd_complete,
    "diff": cmd_diff,
    "lint": cmd_lint,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage forge design sessions")
    parser.add_argument(
        "--project-root",
        type=Path,
        help="Project directory (default: FORGE_PROJECT_ROOT or cwd)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser("start", help="Start a design session")
    start.add_argument("problem_statement")

    sub.add_parser("status", help="Show the active design session")
    sub.add_parser("list", help="List all sessions")
    sub.add_parser("watch", help="Capture feature document changes for the active session")

    end = sub.add_parser("end", help="End a design session (design -> scribe)")
    end.add_argument("session_id", nargs="?")

    develop = sub.add_parser("develop", help="Move a session to development")
    develop.add_argument("session_id")

    complete = sub.add_parser("complete", help="Mark a session completed")
    complete.add_argument("session_id")

    diff = sub.add_parser("diff", help="Scenario diff between two documents")
    diff.add_argument("before")
    diff.add_argument("after")

    lint_cmd = sub.add_parser("lint", help="Report scenario lines that are ignored")
    lint_cmd.add_argument("path", nargs="?", help="Document to check (default: every feature document in features_dir)")

    return parser


async def run(args: argparse.Namespace) -> int:
    config = ForgeConfig.load(args.project_root)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
    manager = SessionManager(SessionContext.for_project(config))
    try:
        return await COMMANDS[args.command](manager, args)
    except ForgeError as e:
        print(f"Error: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
