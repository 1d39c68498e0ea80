"""Custom exceptions and exit codes for SUBRELAY.

This module defines the exit codes and exception hierarchy used throughout
the application. Every error raised on purpose by subrelay derives from
SubrelayError so the CLI can map it to a stable exit code.
"""

from enum import IntEnum
from typing import ClassVar


class ExitCode(IntEnum):
    """Exit codes reported by the subrelay CLI."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    WORKSPACE_NOT_FOUND = 2
    INVALID_AGENT = 3
    AGENT_NOT_DEPLOYED = 4
    FILESYSTEM_ERROR = 5


class SubrelayError(Exception):
    """Base exception for SUBRELAY errors.

    Each exception type has an associated exit code for proper error reporting.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, exit_code: ExitCode | None = None) -> None:
        """Initialize the exception."""
        super().__init__(message)
        self._exit_code = exit_code

    @property
    def exit_code(self) -> ExitCode:
        """Get the exit code for this exception."""
        if self._exit_code is not None:
            return self._exit_code
        return self.__class__._default_exit_code


class WorkspaceNotFoundError(SubrelayError):
    """No workspace root could be resolved for a project-scoped operation.

    Raised when:
    - Deploying or undeploying with scope=project outside any workspace
    - The host integration cannot report a root directory
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.WORKSPACE_NOT_FOUND


class InvalidAgentError(SubrelayError):
    """The SubAgent definition cannot be deployed.

    Raised when:
    - The agent name is empty or not filename/shell safe
    - The vendor is not one of the supported vendors
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.INVALID_AGENT


class AgentDefinitionError(InvalidAgentError):
    """An agent definition file is missing required frontmatter fields."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path and not message.startswith(f"{path}:"):
            message = f"{path}: {message}"
        super().__init__(message)


class AgentNotDeployedError(SubrelayError):
    """Undeploy was requested for an agent absent from the scope manifest."""

    _default_exit_code: ClassVar[ExitCode] = ExitCode.AGENT_NOT_DEPLOYED

    def __init__(self, name: str, scope: str) -> None:
        self.name = name
        self.scope = scope
        super().__init__(f"SubAgent '{name}' is not deployed in {scope} scope")


class RoutingFileError(SubrelayError):
    """A host config file exists but could not be read.

    A missing file is not an error; this covers permission problems and
    content that is not valid UTF-8, where editing blindly could destroy
    user content.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.FILESYSTEM_ERROR

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


__all__ = [
    "ExitCode",
    "SubrelayError",
    "WorkspaceNotFoundError",
    "InvalidAgentError",
    "AgentDefinitionError",
    "AgentNotDeployedError",
    "RoutingFileError",
]
