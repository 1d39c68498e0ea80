"""Utility modules for SUBRELAY.

This package contains:
- console: Rich-based terminal output utilities
- errors: Custom exceptions and exit codes
- fs: Absence-aware reads and atomic writes
- logging: Logging configuration
"""

from subrelay.utils.console import (
    console,
    print_error,
    print_header,
    print_info,
    print_step,
    print_success,
    print_warning,
)
from subrelay.utils.errors import (
    AgentDefinitionError,
    AgentNotDeployedError,
    ExitCode,
    InvalidAgentError,
    RoutingFileError,
    SubrelayError,
    WorkspaceNotFoundError,
)
from subrelay.utils.fs import atomic_write_text, read_text_if_exists
from subrelay.utils.logging import log_command, log_message, setup_logging

__all__ = [
    # Console
    "console",
    "print_error",
    "print_success",
    "print_warning",
    "print_info",
    "print_header",
    "print_step",
    # Errors
    "ExitCode",
    "SubrelayError",
    "WorkspaceNotFoundError",
    "InvalidAgentError",
    "AgentDefinitionError",
    "AgentNotDeployedError",
    "RoutingFileError",
    # Filesystem
    "atomic_write_text",
    "read_text_if_exists",
    # Logging
    "setup_logging",
    "log_message",
    "log_command",
]
