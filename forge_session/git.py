"""Read-only git queries against the project repository."""

from __future__ import annotations

import subprocess

GIT_TIMEOUT = 5


def _git(cwd: str, *args: str) -> subprocess.CompletedProcess | None:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
    except (OSError, subprocess.SubprocessError):
        return None


def current_git_commit(cwd: str) -> str | None:
    """HEAD commit of the repository at `cwd`, or None outside git."""
    result = _git(cwd, "rev-parse", "HEAD")
    if result is None or result.returncode != 0:
        return None
    return result.stdout.strip() or None


def exists_at_commit(cwd: str, commit: str, path: str) -> bool | None:
    """
    Whether `path` (relative to `cwd`) is in the tree of `commit`.

    Returns None when the answer is unknown: git is missing, `cwd` is not
    a repository, or `commit` does not exist.
    """
    known = _git(cwd, "cat-file", "-e", f"{commit}^{{commit}}")
    if known is None or known.returncode != 0:
        return None
    result = _git(cwd, "cat-file", "-e", f"{commit}:./{path}")
    if result is None:
        return None
    return result.returncode == 0


__all__ = ["current_git_commit", "exists_at_commit"]
