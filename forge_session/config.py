"""
Configuration management for forge-session.

Settings are read from `<project_root>/.forge/forge-config.json` over the
defaults below, then environment variables (a project `.env` is loaded
first) take precedence.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_RELATIVE_PATH = Path(".forge") / "forge-config.json"


def _filter_dataclass_fields(data: dict[str, Any], cls: type) -> dict[str, Any]:
    """Filter dict to only include fields that exist in the dataclass."""
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_fields}


@dataclass
class ForgeConfig:
    """
    Project layout and runtime settings.

    Directory settings are POSIX paths relative to `project_root`.
    """

    project_root: str = "."
    ai_dir: str = "ai"
    features_dir: str = "ai/features"
    sessions_dir: str = "ai/sessions"
    tracked_suffix: str = ".feature.md"
    session_suffix: str = ".session.md"
    work_item_suffixes: list[str] = field(default_factory=lambda: [".story.md", ".task.md"])
    persist_migrations: bool = True
    log_level: str = "INFO"
    poll_interval: float = 1.0

    @property
    def root(self) -> Path:
        return Path(self.project_root)

    @classmethod
    def load(cls, project_root: Path | str | None = None) -> "ForgeConfig":
        """
        Load config for a project.

        Args:
            project_root: Project directory. Defaults to FORGE_PROJECT_ROOT
                or the current directory.

        Returns:
            ForgeConfig with file settings and env overrides applied
        """
        if project_root is None:
            load_dotenv()
            project_root = os.getenv("FORGE_PROJECT_ROOT", ".")
        root = Path(project_root)

        env_file = root / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        data: dict[str, Any] = {}
        config_path = root / CONFIG_RELATIVE_PATH
        if config_path.exists():
            try:
                data = json.loads(config_path.read_text())
            except (json.JSONDecodeError, OSError) as e:
                # Use defaults on error
                logger.warning(f"Ignoring unreadable config {config_path}: {e}")
                data = {}
            if not isinstance(data, dict):
                logger.warning(f"Ignoring config {config_path}: expected a JSON object")
                data = {}

        config = cls(**_filter_dataclass_fields(data, cls))
        config.project_root = str(root)

        log_level = os.getenv("FORGE_LOG_LEVEL")
        if log_level:
            config.log_level = log_level.upper()

        return config

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file (project_root itself is not stored)."""
        if path is None:
            path = self.root / CONFIG_RELATIVE_PATH

        path.parent.mkdir(parents=True, exist_ok=True)

        data = asdict(self)
        data.pop("project_root")
        with open(path, "w") as f:
            json.dump(data, f, indent=2)


__all__ = ["CONFIG_RELATIVE_PATH", "ForgeConfig"]
