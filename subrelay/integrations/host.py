"""Host integration: where the workspace is and how terminals are opened.

The deploy service only needs two capabilities from its surroundings.
``TerminalHost`` provides them for command-line use; tests and editor
integrations can pass any object satisfying ``HostIntegration``.
"""

import shlex
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from subrelay.integrations.git import find_repo_root
from subrelay.utils.console import print_info
from subrelay.utils.logging import log_command, log_message


@runtime_checkable
class HostIntegration(Protocol):
    """Capabilities the deploy service needs from its host."""

    def workspace_root(self) -> Path | None:
        """Root of the open workspace, or None when there is none."""
        ...

    def open_terminal(self, name: str, command: str) -> None:
        """Run ``command`` in a new terminal titled ``name``."""
        ...


class TerminalHost:
    """Host for the command line.

    The workspace is the git repository containing ``workspace`` (default:
    the current directory). Terminals are opened with ``terminal_command``,
    a template in which ``{command}`` and ``{name}`` are substituted, e.g.
    ``gnome-terminal --title {name} -- bash -c {command}``. Without a
    template the command is printed for the user to run.
    """

    def __init__(self, workspace: Path | None = None, terminal_command: str = "") -> None:
        self._workspace = workspace
        self._terminal_command = terminal_command

    def workspace_root(self) -> Path | None:
        if self._workspace is not None:
            root = find_repo_root(self._workspace)
            # An explicit workspace outside any repository is used as is
            return root or self._workspace.resolve()
        return find_repo_root()

    def build_terminal_argv(self, name: str, command: str) -> list[str]:
        """Split the terminal template into argv, one token per placeholder."""
        argv = []
        for token in shlex.split(self._terminal_command):
            argv.append(token.replace("{command}", command).replace("{name}", name))
        return argv

    def open_terminal(self, name: str, command: str) -> None:
        if not self._terminal_command:
            print_info(f"{name}: run `{command}` in a terminal to follow the log")
            return

        argv = self.build_terminal_argv(name, command)
        subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        log_command(" ".join(argv))
        log_message(f"Opened terminal '{name}'")


__all__ = [
    "HostIntegration",
    "TerminalHost",
]
