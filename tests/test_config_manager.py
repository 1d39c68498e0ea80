"""Tests for subrelay.config.manager module.

Tests cover:
- ConfigManager.load with the cascading hierarchy
- Value parsing (booleans, integers, quoting)
- ConfigManager.save with validation and atomic writes
- Config source tracking and override warnings
- ConfigManager.show
"""

import stat
from unittest.mock import patch

import pytest

from subrelay.config.manager import ConfigManager
from subrelay.config.settings import Settings


@pytest.fixture
def global_config(tmp_path):
    return tmp_path / ".subrelay-config"


@pytest.fixture
def repo(tmp_path):
    """A repository with a nested working directory."""
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    (root / "src" / "pkg").mkdir(parents=True)
    return root


class TestConfigManagerLoad:
    """Tests for ConfigManager.load."""

    def test_defaults_without_files(self, global_config, repo):
        manager = ConfigManager(global_config, start_dir=repo)

        settings = manager.load()

        assert settings == Settings()
        assert manager.local_config_path is None

    def test_loads_global_file(self, global_config, repo):
        global_config.write_text(
            """# SUBRELAY configuration
GLOBAL_SUBAGENTS_DIR="/srv/agents"
OPEN_LOG_VIEWER="true"
LOG_VIEWER_LINES=500

SETUP_ISOLATION='false'
"""
        )
        manager = ConfigManager(global_config, start_dir=repo)

        settings = manager.load()

        assert settings.global_subagents_dir == "/srv/agents"
        assert settings.open_log_viewer is True
        assert settings.log_viewer_lines == 500
        assert settings.setup_isolation is False

    def test_local_overrides_global(self, global_config, repo):
        global_config.write_text('SUBAGENTS_DIR_NAME="global-agents"\n')
        (repo / ".subrelay").write_text('SUBAGENTS_DIR_NAME="local-agents"\n')
        manager = ConfigManager(global_config, start_dir=repo / "src" / "pkg")

        settings = manager.load()

        assert settings.subagents_dir_name == "local-agents"
        assert manager.local_config_path == (repo / ".subrelay").resolve()
        assert manager.get_config_source("SUBAGENTS_DIR_NAME").startswith("local")

    def test_environment_overrides_files(self, global_config, repo, monkeypatch):
        (repo / ".subrelay").write_text('LOG_VIEWER_LINES="100"\n')
        monkeypatch.setenv("LOG_VIEWER_LINES", "42")
        manager = ConfigManager(global_config, start_dir=repo)

        settings = manager.load()

        assert settings.log_viewer_lines == 42
        assert manager.get_config_source("LOG_VIEWER_LINES") == "environment"

    def test_local_search_stops_at_repo_root(self, global_config, tmp_path, repo):
        (tmp_path / ".subrelay").write_text('SUBAGENTS_DIR_NAME="outside"\n')
        manager = ConfigManager(global_config, start_dir=repo / "src")

        settings = manager.load()

        assert settings.subagents_dir_name == ".subagents"

    def test_invalid_integer_keeps_default(self, global_config, repo):
        global_config.write_text('LOG_VIEWER_LINES="lots"\n')
        manager = ConfigManager(global_config, start_dir=repo)

        assert manager.load().log_viewer_lines == 200

    def test_unknown_keys_are_ignored(self, global_config, repo):
        global_config.write_text('SOMETHING_ELSE="x"\nnot a config line\n')
        manager = ConfigManager(global_config, start_dir=repo)

        manager.load()

        assert manager.get("SOMETHING_ELSE") == "x"
        assert manager.get("MISSING", "fallback") == "fallback"

    def test_escaped_quotes(self, global_config, repo):
        global_config.write_text('TERMINAL_COMMAND="xterm -T \\"{name}\\" -e {command}"\n')
        manager = ConfigManager(global_config, start_dir=repo)

        assert manager.load().terminal_command == 'xterm -T "{name}" -e {command}'

    def test_reload_starts_from_defaults(self, global_config, repo):
        global_config.write_text('OPEN_LOG_VIEWER="true"\n')
        manager = ConfigManager(global_config, start_dir=repo)
        manager.load()

        global_config.write_text("")

        assert manager.load().open_log_viewer is False


class TestConfigManagerSave:
    """Tests for ConfigManager.save."""

    def test_save_global_creates_private_file(self, global_config, repo):
        manager = ConfigManager(global_config, start_dir=repo)
        manager.load()

        warning = manager.save("OPEN_LOG_VIEWER", "true")

        assert warning is None
        assert global_config.read_text() == 'OPEN_LOG_VIEWER="true"\n'
        assert stat.S_IMODE(global_config.stat().st_mode) == 0o600
        assert manager.settings.open_log_viewer is True

    def test_save_replaces_key_and_keeps_comments(self, global_config, repo):
        global_config.write_text('# mine\nLOG_VIEWER_LINES="10"\nOPEN_LOG_VIEWER="true"\n')
        manager = ConfigManager(global_config, start_dir=repo)
        manager.load()

        manager.save("LOG_VIEWER_LINES", "20")

        assert global_config.read_text() == (
            '# mine\nLOG_VIEWER_LINES="20"\nOPEN_LOG_VIEWER="true"\n'
        )

    def test_save_local_writes_at_repo_root(self, global_config, repo):
        manager = ConfigManager(global_config, start_dir=repo / "src" / "pkg")
        manager.load()

        manager.save("SUBAGENTS_DIR_NAME", "agents", scope="local")

        assert (repo / ".subrelay").read_text() == 'SUBAGENTS_DIR_NAME="agents"\n'
        assert manager.settings.subagents_dir_name == "agents"

    def test_save_escapes_quotes(self, global_config, repo):
        manager = ConfigManager(global_config, start_dir=repo)
        manager.load()

        manager.save("TERMINAL_COMMAND", 'kitty --title "{name}" {command}')

        assert manager.settings.terminal_command == 'kitty --title "{name}" {command}'

    def test_invalid_key(self, global_config, repo):
        manager = ConfigManager(global_config, start_dir=repo)

        with pytest.raises(ValueError, match="Invalid config key"):
            manager.save("BAD-KEY", "x")

    def test_invalid_scope(self, global_config, repo):
        manager = ConfigManager(global_config, start_dir=repo)

        with pytest.raises(ValueError, match="Invalid scope"):
            manager.save("OPEN_LOG_VIEWER", "true", scope="system")

    def test_warns_when_environment_overrides(self, global_config, repo, monkeypatch):
        monkeypatch.setenv("OPEN_LOG_VIEWER", "false")
        manager = ConfigManager(global_config, start_dir=repo)
        manager.load()

        warning = manager.save("OPEN_LOG_VIEWER", "true")

        assert "environment variable" in warning

    def test_warns_when_local_overrides_global(self, global_config, repo):
        (repo / ".subrelay").write_text('OPEN_LOG_VIEWER="false"\n')
        manager = ConfigManager(global_config, start_dir=repo)
        manager.load()

        warning = manager.save("OPEN_LOG_VIEWER", "true")

        assert "local config" in warning
        assert manager.settings.open_log_viewer is False


class TestConfigManagerShow:
    """Tests for ConfigManager.show."""

    @patch("subrelay.config.manager.console")
    @patch("subrelay.config.manager.print_info")
    @patch("subrelay.config.manager.print_header")
    def test_show_lists_settings(self, mock_header, mock_info, mock_console, global_config, repo):
        manager = ConfigManager(global_config, start_dir=repo)
        manager.load()

        manager.show()

        mock_header.assert_called_once_with("Current Configuration")
        printed = " ".join(str(call.args[0]) for call in mock_console.print.call_args_list if call.args)
        assert "Routing Config: ~/.gemini/GEMINI.md" in printed
        assert "Log Viewer Lines: 200" in printed
        assert any("(not found)" in call.args[0] for call in mock_info.call_args_list)
