"""Configuration manager for SUBRELAY.

This module provides the ConfigManager class for loading, saving, and
managing configuration values with a cascading hierarchy:

    1. Environment Variables (highest priority)
    2. Local Config (.subrelay in project/parent directories)
    3. Global Config (~/.subrelay-config)
    4. Built-in Defaults (lowest priority)
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Literal

from subrelay.config.settings import CONFIG_FILE, Settings
from subrelay.integrations.git import find_repo_root
from subrelay.utils.console import console, print_header, print_info
from subrelay.utils.fs import atomic_write_text
from subrelay.utils.logging import log_message

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_LINE_PATTERN = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)=(.*)$")


class ConfigManager:
    """Manages configuration loading and saving with cascading hierarchy.

    Configuration Precedence (highest to lowest):
    1. Environment Variables - CI/CD, temporary overrides
    2. Local Config (.subrelay) - Project-specific settings
    3. Global Config (~/.subrelay-config) - User defaults
    4. Built-in Defaults - Fallback values

    Files are parsed line by line as KEY=VALUE or KEY="VALUE" pairs; nothing
    is evaluated.

    Attributes:
        settings: Current settings instance
        global_config_path: Path to global ~/.subrelay-config file
        local_config_path: Path to discovered local .subrelay file (after load)
    """

    LOCAL_CONFIG_NAME = ".subrelay"
    GLOBAL_CONFIG_NAME = ".subrelay-config"

    def __init__(
        self,
        global_config_path: Path | None = None,
        start_dir: Path | None = None,
    ) -> None:
        """Initialize the configuration manager.

        Args:
            global_config_path: Optional custom path to global config file.
                                Defaults to ~/.subrelay-config.
            start_dir: Directory where local config discovery starts.
                       Defaults to the current working directory.
        """
        self.global_config_path = global_config_path or CONFIG_FILE
        self.start_dir = start_dir
        self.local_config_path: Path | None = None
        self.settings = Settings()
        self._raw_values: dict[str, str] = {}
        self._config_sources: dict[str, str] = {}

    def load(self) -> Settings:
        """Load configuration from all sources with cascading precedence.

        Each call starts from clean defaults, so repeated loads never keep
        stale values.

        Returns:
            Settings instance with loaded values
        """
        self.settings = Settings()
        self.local_config_path = None
        self._raw_values = {}
        self._config_sources = {}

        if self.global_config_path.exists():
            log_message(f"Loading global configuration from {self.global_config_path}")
            self._load_file(self.global_config_path, source="global")

        local_path = self._find_local_config()
        if local_path:
            self.local_config_path = local_path
            log_message(f"Loading local configuration from {local_path}")
            self._load_file(local_path, source=f"local ({local_path})")

        self._load_environment()

        for key, value in self._raw_values.items():
            self._apply_value_to_settings(key, value)

        log_message(f"Configuration loaded successfully ({len(self._raw_values)} keys)")
        return self.settings

    def _find_local_config(self) -> Path | None:
        """Find local .subrelay config by traversing up from the start directory.

        Stops at the first .subrelay file, at the repository root (a .git
        entry), or at the filesystem root.
        """
        current = (self.start_dir or Path.cwd()).resolve()
        while True:
            config_path = current / self.LOCAL_CONFIG_NAME
            if config_path.is_file():
                return config_path

            if (current / ".git").exists():
                break

            parent = current.parent
            if parent == current:
                break
            current = parent

        return None

    def _read_file_values(self, path: Path) -> dict[str, str]:
        """Read key=value pairs from a config file without modifying state."""
        values: dict[str, str] = {}
        if not path.exists():
            return values

        with path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                match = _LINE_PATTERN.match(line)
                if not match:
                    continue
                key, value = match.groups()
                # Only double-quoted values are unescaped; single quotes are literal
                if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
                    value = self._unescape_value(value[1:-1])
                elif len(value) >= 2 and value.startswith("'") and value.endswith("'"):
                    value = value[1:-1]
                values[key] = value
        return values

    def _load_file(self, path: Path, source: str = "file") -> None:
        for key, value in self._read_file_values(path).items():
            self._raw_values[key] = value
            self._config_sources[key] = source

    def _load_environment(self) -> None:
        """Override config with environment variables for known keys only."""
        for key in Settings.get_config_keys():
            env_value = os.environ.get(key)
            if env_value is not None:
                self._raw_values[key] = env_value
                self._config_sources[key] = "environment"

    def _apply_value_to_settings(self, key: str, value: str) -> None:
        """Apply a raw config value to the settings object."""
        attr = self.settings.get_attribute_for_key(key)
        if attr is None:
            return  # Unknown key, ignore

        current_value = getattr(self.settings, attr)

        if isinstance(current_value, bool):
            setattr(self.settings, attr, value.strip().lower() in ("true", "1", "yes"))
        elif isinstance(current_value, int):
            try:
                setattr(self.settings, attr, int(value))
            except ValueError:
                logger.warning(f"Invalid integer for {key}: '{value}', keeping default")
        else:
            setattr(self.settings, attr, value)

    def save(
        self,
        key: str,
        value: str,
        scope: Literal["global", "local"] = "global",
    ) -> str | None:
        """Save a configuration value to a config file.

        Writes the value to the global or local config file, preserving
        comments and other keys, then reloads so ``settings`` reflects the
        effective value after precedence is applied.

        Args:
            key: Configuration key (must match pattern: [a-zA-Z_][a-zA-Z0-9_]*)
            value: Configuration value to save
            scope: Target config file - "global" or "local"

        Returns:
            Warning message if a higher-priority source overrides the saved
            value, None otherwise.

        Raises:
            ValueError: If key name is invalid or scope is unknown
        """
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid config key: {key}")

        if scope not in ("global", "local"):
            raise ValueError(f"Invalid scope: {scope}. Must be 'global' or 'local'")

        if scope == "local":
            if self.local_config_path is None:
                start = self.start_dir or Path.cwd()
                repo_root = find_repo_root(start)
                self.local_config_path = (repo_root or start) / self.LOCAL_CONFIG_NAME
            target_path = self.local_config_path
        else:
            target_path = self.global_config_path

        existing_lines: list[str] = []
        if target_path.exists():
            existing_lines = target_path.read_text(encoding="utf-8").splitlines()

        new_line = f'{key}="{self._escape_value_for_storage(value)}"'
        new_lines: list[str] = []
        written = False
        for line in existing_lines:
            match = _LINE_PATTERN.match(line.strip())
            if match and match.group(1) == key:
                new_lines.append(new_line)
                written = True
            else:
                # Comments, blank lines, other keys and malformed lines are kept
                new_lines.append(line)

        if not written:
            new_lines.append(new_line)

        atomic_write_text(target_path, "\n".join(new_lines) + "\n", mode=0o600)
        log_message(f"Configuration saved to {scope}: {key}")

        warning = self._check_override_warning(key, scope)
        self.load()
        return warning

    def _check_override_warning(self, key: str, scope: str) -> str | None:
        """Describe a higher-priority source that masks a just-saved value."""
        env_value = os.environ.get(key)
        if env_value is not None:
            return (
                f"Warning: '{key}' saved to {scope} config but is overridden "
                f"by environment variable (effective value: '{env_value}')"
            )

        if scope == "global" and self.local_config_path and self.local_config_path.exists():
            local_values = self._read_file_values(self.local_config_path)
            if key in local_values:
                return (
                    f"Warning: '{key}' saved to global config but is overridden "
                    f"by local config at {self.local_config_path} "
                    f"(effective value: '{local_values[key]}')"
                )

        return None

    @staticmethod
    def _escape_value_for_storage(value: str) -> str:
        # Backslashes first, then quotes
        return value.replace("\\", "\\\\").replace('"', '\\"')

    @staticmethod
    def _unescape_value(value: str) -> str:
        # Reverse order of escaping to handle \\\" correctly
        return value.replace("\\\\", "\\").replace('\\"', '"')

    def get(self, key: str, default: str = "") -> str:
        """Get a raw configuration value."""
        return self._raw_values.get(key, default)

    def get_config_source(self, key: str) -> str:
        """Report where a configuration value came from."""
        return self._config_sources.get(key, "default")

    def show(self) -> None:
        """Display current configuration using Rich formatting."""
        print_header("Current Configuration")

        print_info(f"Global config: {self.global_config_path}")
        if self.local_config_path:
            print_info(f"Local config:  {self.local_config_path}")
        else:
            print_info("Local config:  (not found)")
        console.print()

        s = self.settings

        console.print("  [bold]Layout:[/bold]")
        console.print(f"    Project SubAgents Dir: {s.subagents_dir_name}")
        console.print(f"    Global SubAgents Dir: {s.global_subagents_dir}")
        console.print(f"    Project Workflows: {s.project_workflows_dir}")
        console.print(f"    Global Workflows: {s.global_workflows_dir}")
        console.print(f"    Routing Config: {s.routing_config_file}")
        console.print()

        console.print("  [bold]Deploy:[/bold]")
        console.print(f"    Vendor Isolation: {s.setup_isolation}")
        console.print(f"    Open Log Viewer: {s.open_log_viewer}")
        console.print(f"    Log Viewer Lines: {s.log_viewer_lines}")
        console.print(f"    Terminal Command: {s.terminal_command or '(print command)'}")
        console.print()


__all__ = [
    "ConfigManager",
]
