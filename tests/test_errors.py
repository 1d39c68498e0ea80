"""Tests for subrelay.utils.errors module."""

from subrelay.utils.errors import (
    AgentDefinitionError,
    AgentNotDeployedError,
    ExitCode,
    InvalidAgentError,
    RoutingFileError,
    SubrelayError,
    WorkspaceNotFoundError,
)


class TestExitCode:
    """Tests for ExitCode enum."""

    def test_exit_code_values(self):
        assert ExitCode.SUCCESS == 0
        assert ExitCode.GENERAL_ERROR == 1
        assert ExitCode.WORKSPACE_NOT_FOUND == 2
        assert ExitCode.INVALID_AGENT == 3
        assert ExitCode.AGENT_NOT_DEPLOYED == 4
        assert ExitCode.FILESYSTEM_ERROR == 5


class TestSubrelayError:
    """Tests for the exception hierarchy."""

    def test_default_exit_code(self):
        assert SubrelayError("boom").exit_code == ExitCode.GENERAL_ERROR

    def test_custom_exit_code(self):
        error = SubrelayError("boom", exit_code=ExitCode.FILESYSTEM_ERROR)

        assert error.exit_code == ExitCode.FILESYSTEM_ERROR

    def test_subclass_exit_codes(self):
        assert WorkspaceNotFoundError("x").exit_code == ExitCode.WORKSPACE_NOT_FOUND
        assert InvalidAgentError("x").exit_code == ExitCode.INVALID_AGENT
        assert RoutingFileError("x").exit_code == ExitCode.FILESYSTEM_ERROR

    def test_agent_definition_error_prefixes_path(self):
        error = AgentDefinitionError("missing vendor", path="agents/a.md")

        assert str(error) == "agents/a.md: missing vendor"
        assert error.path == "agents/a.md"
        assert isinstance(error, InvalidAgentError)
        assert error.exit_code == ExitCode.INVALID_AGENT

    def test_agent_not_deployed_message(self):
        error = AgentNotDeployedError("helper", "global")

        assert str(error) == "SubAgent 'helper' is not deployed in global scope"
        assert error.exit_code == ExitCode.AGENT_NOT_DEPLOYED
        assert error.name == "helper"
