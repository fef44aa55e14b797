"""Tests for configuration loading."""

import json

import pytest

from forge_session.config import CONFIG_RELATIVE_PATH, ForgeConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start without FORGE_* variables and undo anything a .env file sets."""
    for name in ("FORGE_LOG_LEVEL", "FORGE_PROJECT_ROOT"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestForgeConfig:
    """Tests for ForgeConfig."""

    def test_defaults(self, tmp_path):
        config = ForgeConfig.load(tmp_path)

        assert config.project_root == str(tmp_path)
        assert config.ai_dir == "ai"
        assert config.features_dir == "ai/features"
        assert config.sessions_dir == "ai/sessions"
        assert config.tracked_suffix == ".feature.md"
        assert config.session_suffix == ".session.md"
        assert config.work_item_suffixes == [".story.md", ".task.md"]
        assert config.persist_migrations is True
        assert config.log_level == "INFO"

    def test_file_overrides_defaults(self, tmp_path):
        path = tmp_path / CONFIG_RELATIVE_PATH
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"sessions_dir": "docs/sessions", "persist_migrations": False}))

        config = ForgeConfig.load(tmp_path)

        assert config.sessions_dir == "docs/sessions"
        assert config.persist_migrations is False
        assert config.ai_dir == "ai"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / CONFIG_RELATIVE_PATH
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"retired_option": 1, "log_level": "DEBUG"}))

        assert ForgeConfig.load(tmp_path).log_level == "DEBUG"

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_bad_file_falls_back_to_defaults(self, tmp_path, content):
        path = tmp_path / CONFIG_RELATIVE_PATH
        path.parent.mkdir(parents=True)
        path.write_text(content)

        assert ForgeConfig.load(tmp_path).sessions_dir == "ai/sessions"

    def test_env_overrides_log_level(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FORGE_LOG_LEVEL", "debug")

        assert ForgeConfig.load(tmp_path).log_level == "DEBUG"

    def test_dotenv_in_project_root(self, tmp_path):
        (tmp_path / ".env").write_text("FORGE_LOG_LEVEL=warning\n")

        assert ForgeConfig.load(tmp_path).log_level == "WARNING"

    def test_project_root_from_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        project = tmp_path / "project"
        project.mkdir()
        monkeypatch.setenv("FORGE_PROJECT_ROOT", str(project))

        assert ForgeConfig.load().root == project

    def test_save_round_trip(self, tmp_path):
        config = ForgeConfig(project_root=str(tmp_path), features_dir="ai/specs", poll_interval=0.5)

        config.save()
        data = json.loads((tmp_path / CONFIG_RELATIVE_PATH).read_text())
        loaded = ForgeConfig.load(tmp_path)

        assert "project_root" not in data
        assert loaded.features_dir == "ai/specs"
        assert loaded.poll_interval == 0.5
