"""Live view of a scope's ``subagent.log``."""

import shlex
from pathlib import Path

from subrelay.integrations.host import HostIntegration
from subrelay.utils.logging import log_message

LOG_TERMINAL_NAME = "SubAgent Log"
DEFAULT_LOG_LINES = 200


def build_tail_command(log_file: Path, lines: int = DEFAULT_LOG_LINES) -> str:
    """Shell command following the log, starting with the last ``lines`` lines."""
    return f"tail -n {max(lines, 0)} -f {shlex.quote(str(log_file))}"


def open_log_viewer(
    host: HostIntegration, log_file: Path, lines: int = DEFAULT_LOG_LINES
) -> str:
    """Open a terminal tailing ``log_file``.

    The log file is created empty if needed so ``tail -f`` has something
    to follow before the first run.

    Returns:
        The command handed to the host
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    log_file.touch(exist_ok=True)

    command = build_tail_command(log_file, lines)
    host.open_terminal(LOG_TERMINAL_NAME, command)
    log_message(f"Opened log viewer: {command}")
    return command


__all__ = [
    "LOG_TERMINAL_NAME",
    "DEFAULT_LOG_LINES",
    "build_tail_command",
    "open_log_viewer",
]
