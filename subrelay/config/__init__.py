"""Configuration management for SUBRELAY.

This package contains:
- settings: Settings dataclass with configuration fields
- manager: ConfigManager class for loading/saving configuration

Configuration Format
====================
Flat KEY=VALUE (environment variable style), for example:

    GLOBAL_SUBAGENTS_DIR=~/.subagents
    ROUTING_CONFIG_FILE="~/.gemini/GEMINI.md"
    OPEN_LOG_VIEWER=true
"""

from subrelay.config.manager import ConfigManager
from subrelay.config.settings import CONFIG_FILE, Settings

__all__ = [
    "Settings",
    "ConfigManager",
    "CONFIG_FILE",
]
