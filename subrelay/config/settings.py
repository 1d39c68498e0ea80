"""Settings dataclass for SUBRELAY configuration.

This module defines the Settings dataclass that holds all configuration
values. Path settings may start with "~", which is expanded against the
home directory handed to the deploy layout, never against process state.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Settings:
    """Configuration settings for SUBRELAY.

    All settings have sensible defaults and can be loaded from
    the configuration file (~/.subrelay-config).

    Attributes:
        subagents_dir_name: Name of the per-project SubAgent directory
        global_subagents_dir: Root of globally deployed SubAgents
        project_workflows_dir: Workflow document directory, relative to the workspace
        global_workflows_dir: Workflow document directory for global deploys
        routing_config_file: Host config file receiving the routing section
        setup_isolation: Link vendor credentials into each agent directory
        open_log_viewer: Open a live log terminal after each deploy
        log_viewer_lines: Lines of history shown when the log viewer opens
        terminal_command: Command template used to open a terminal ({command}
            is replaced with the command to run); empty prints the command instead
    """

    # Layout settings
    subagents_dir_name: str = ".subagents"
    global_subagents_dir: str = "~/.subagents"
    project_workflows_dir: str = ".agent/workflows"
    global_workflows_dir: str = "~/.gemini/antigravity/global_workflows"
    routing_config_file: str = "~/.gemini/GEMINI.md"

    # Deploy behaviour
    setup_isolation: bool = True

    # Log viewer settings
    open_log_viewer: bool = False
    log_viewer_lines: int = 200
    terminal_command: str = ""

    # Config key to attribute mapping
    _key_mapping: dict[str, str] = field(
        default_factory=lambda: {
            "SUBAGENTS_DIR_NAME": "subagents_dir_name",
            "GLOBAL_SUBAGENTS_DIR": "global_subagents_dir",
            "PROJECT_WORKFLOWS_DIR": "project_workflows_dir",
            "GLOBAL_WORKFLOWS_DIR": "global_workflows_dir",
            "ROUTING_CONFIG_FILE": "routing_config_file",
            "SETUP_ISOLATION": "setup_isolation",
            "OPEN_LOG_VIEWER": "open_log_viewer",
            "LOG_VIEWER_LINES": "log_viewer_lines",
            "TERMINAL_COMMAND": "terminal_command",
        },
        repr=False,
    )

    def get_attribute_for_key(self, key: str) -> str | None:
        """Get the attribute name for a config key, or None if unknown."""
        return self._key_mapping.get(key)

    def get_key_for_attribute(self, attr: str) -> str | None:
        """Get the config key for an attribute name, or None if unknown."""
        for key, value in self._key_mapping.items():
            if value == attr:
                return key
        return None

    @classmethod
    def get_config_keys(cls) -> list[str]:
        """Get list of all valid configuration keys."""
        temp = cls()
        return list(temp._key_mapping.keys())


# Default configuration file path
CONFIG_FILE = Path.home() / ".subrelay-config"


__all__ = [
    "Settings",
    "CONFIG_FILE",
]
