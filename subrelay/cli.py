"""Typer application and entry point for the SUBRELAY CLI.

Every command loads the cascading configuration, builds a DeployService
for the command-line host and maps SubrelayError to its exit code.
"""

import dataclasses
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from subrelay.config.manager import ConfigManager
from subrelay.deploy.models import DeployScope, SubAgent, load_agent_file, parse_vendor
from subrelay.deploy.routing import RoutingChange
from subrelay.deploy.service import DeployService
from subrelay.deploy.vendors import IsolationResult
from subrelay.integrations.host import TerminalHost
from subrelay.utils.console import (
    console,
    print_error,
    print_info,
    print_step,
    print_success,
    print_warning,
    show_version,
)
from subrelay.utils.errors import ExitCode, InvalidAgentError, SubrelayError
from subrelay.utils.fs import read_text_if_exists
from subrelay.utils.logging import log_message, setup_logging

app = typer.Typer(
    name="subrelay",
    help="SUBRELAY - Deploy SubAgents that AI assistants delegate work to",
    add_completion=False,
    no_args_is_help=True,
)
routing_app = typer.Typer(help="Inspect or repair the routing section", no_args_is_help=True)
config_app = typer.Typer(help="Show or change configuration", no_args_is_help=True)
app.add_typer(routing_app, name="routing")
app.add_typer(config_app, name="config")

ScopeOption = Annotated[
    DeployScope,
    typer.Option("--scope", "-s", help="Deploy scope: project (current workspace) or global"),
]
WorkspaceOption = Annotated[
    Path | None,
    typer.Option(
        "--workspace",
        "-w",
        help="Workspace directory (default: git repository of the current directory)",
    ),
]

_ROUTING_MESSAGES = {
    RoutingChange.CREATED: "Created {path} with the routing section",
    RoutingChange.APPENDED: "Added the routing section to {path}",
    RoutingChange.REPLACED: "Updated the routing section in {path}",
    RoutingChange.REMOVED: "Removed the routing section from {path}",
    RoutingChange.UNCHANGED: "Routing section in {path} is up to date",
    RoutingChange.ABSENT: "{path} does not exist",
}


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        show_version()
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version information",
        ),
    ] = None,
) -> None:
    """SUBRELAY - Deploy SubAgents that AI assistants delegate work to."""
    setup_logging()


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except SubrelayError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e
    except OSError as e:
        print_error(f"Filesystem error: {e}")
        raise typer.Exit(ExitCode.FILESYSTEM_ERROR) from e


def _load_config(workspace: Path | None) -> ConfigManager:
    config = ConfigManager(start_dir=workspace)
    config.load()
    return config


def _build_service(workspace: Path | None) -> DeployService:
    settings = _load_config(workspace).settings
    host = TerminalHost(workspace=workspace, terminal_command=settings.terminal_command)
    return DeployService(host, settings)


def _report_routing(change: RoutingChange, path: Path) -> None:
    if change == RoutingChange.MALFORMED:
        print_warning(
            f"{path} has a routing start marker without an end marker; "
            "fix or remove it by hand"
        )
        return
    print_info(_ROUTING_MESSAGES[change].format(path=path))


def _build_agent(
    name: str | None,
    definition: Path | None,
    vendor: str | None,
    description: str | None,
    instructions: str | None,
    instructions_file: Path | None,
) -> SubAgent:
    vendor_enum = parse_vendor(vendor) if vendor else None

    if definition is not None:
        agent = load_agent_file(definition, vendor_override=vendor_enum)
        overrides = {}
        if name:
            overrides["name"] = name
        if description:
            overrides["description"] = description
        return dataclasses.replace(agent, **overrides) if overrides else agent

    if not name:
        raise InvalidAgentError("Pass a SubAgent NAME or --from FILE")
    if vendor_enum is None:
        raise InvalidAgentError("--vendor is required without --from")
    if not description:
        raise InvalidAgentError("--description is required without --from")

    text = instructions or ""
    if instructions_file is not None:
        text = instructions_file.read_text(encoding="utf-8")
    return SubAgent(name=name, description=description, vendor=vendor_enum, instructions=text)


@app.command()
def deploy(
    name: Annotated[str | None, typer.Argument(help="SubAgent name")] = None,
    definition: Annotated[
        Path | None,
        typer.Option(
            "--from",
            "-f",
            exists=True,
            dir_okay=False,
            help="Markdown definition with name/description/vendor frontmatter",
        ),
    ] = None,
    vendor: Annotated[
        str | None, typer.Option("--vendor", help="Vendor CLI: codex or claude")
    ] = None,
    description: Annotated[
        str | None,
        typer.Option("--description", "-d", help="What the SubAgent does (used for routing)"),
    ] = None,
    instructions: Annotated[
        str | None, typer.Option("--instructions", "-i", help="Instruction text")
    ] = None,
    instructions_file: Annotated[
        Path | None,
        typer.Option("--instructions-file", exists=True, dir_okay=False, help="Instruction file"),
    ] = None,
    open_log: Annotated[
        bool | None,
        typer.Option("--open-log/--no-open-log", help="Open the live log viewer (default: from config)"),
    ] = None,
    scope: ScopeOption = DeployScope.PROJECT,
    workspace: WorkspaceOption = None,
) -> None:
    """Deploy (or redeploy) a SubAgent."""
    with _handle_errors():
        agent = _build_agent(name, definition, vendor, description, instructions, instructions_file)
        service = _build_service(workspace)
        if open_log is not None:
            service.settings.open_log_viewer = open_log

        result = service.deploy(agent, scope)

        verb = "Redeployed" if result.updated else "Deployed"
        print_success(f"{verb} SubAgent '{agent.name}' ({agent.vendor.value}) to {result.layout.root}")
        for path in result.workflow_files:
            print_step(f"Workflow: {path}")
        if result.isolation == IsolationResult.NO_CREDENTIALS:
            print_warning("No Codex credentials found; Codex will ask for a login on first run")
        _report_routing(result.routing, result.layout.routing_config_path)


@app.command()
def undeploy(
    name: Annotated[str, typer.Argument(help="SubAgent name")],
    purge: Annotated[
        bool, typer.Option("--purge", help="Also delete the SubAgent directory")
    ] = False,
    scope: ScopeOption = DeployScope.PROJECT,
    workspace: WorkspaceOption = None,
) -> None:
    """Remove a SubAgent from a scope."""
    with _handle_errors():
        service = _build_service(workspace)
        result = service.undeploy(name, scope, purge=purge)

        print_success(f"Undeployed SubAgent '{name}' from {scope.value} scope")
        for path in result.removed_files:
            print_step(f"Removed {path}")
        if result.purged:
            print_step(f"Deleted {result.layout.agent_dir(name)}")
        if result.routing is not None:
            _report_routing(result.routing, result.layout.routing_config_path)


@app.command("list")
def list_agents(
    scope: ScopeOption = DeployScope.PROJECT,
    workspace: WorkspaceOption = None,
) -> None:
    """List deployed SubAgents."""
    with _handle_errors():
        service = _build_service(workspace)
        entries = service.list_agents(scope)

    if not entries:
        print_info(f"No SubAgents deployed in {scope.value} scope")
        return

    table = Table(title=f"SubAgents ({scope.value})")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Start command", overflow="fold")
    for entry in entries:
        table.add_row(entry.name, entry.description, entry.commands.start)
    console.print(table)


@app.command()
def logs(
    follow: Annotated[
        bool, typer.Option("--follow", "-F", help="Open a terminal following the log")
    ] = False,
    lines: Annotated[int, typer.Option("--lines", "-n", help="Lines to show")] = 50,
    scope: ScopeOption = DeployScope.PROJECT,
    workspace: WorkspaceOption = None,
) -> None:
    """Show the SubAgent log of a scope."""
    with _handle_errors():
        service = _build_service(workspace)
        if follow:
            service.open_log(scope)
            return

        log_file = service.resolve_layout(scope).log_file
        content = read_text_if_exists(log_file)

    if not content:
        print_info(f"No log output yet ({log_file})")
        return
    for line in content.splitlines()[-lines:]:
        console.print(line, markup=False, highlight=False)


@routing_app.command("status")
def routing_status(workspace: WorkspaceOption = None) -> None:
    """Show whether the host config file carries the routing section."""
    with _handle_errors():
        service = _build_service(workspace)
        path = service.routing_config_path
        present = service.routing_status()

    if present:
        print_success(f"Routing section present in {path}")
    else:
        print_info(f"No routing section in {path}")


@routing_app.command("refresh")
def routing_refresh(workspace: WorkspaceOption = None) -> None:
    """Rewrite an outdated routing section, or add a missing one."""
    with _handle_errors():
        service = _build_service(workspace)
        change = service.refresh_routing()
        _report_routing(change, service.routing_config_path)
    if change == RoutingChange.MALFORMED:
        raise typer.Exit(ExitCode.FILESYSTEM_ERROR)


@routing_app.command("remove")
def routing_remove(workspace: WorkspaceOption = None) -> None:
    """Remove the routing section even while SubAgents are deployed."""
    with _handle_errors():
        service = _build_service(workspace)
        change = service.remove_routing()
        _report_routing(change, service.routing_config_path)
    if change == RoutingChange.MALFORMED:
        raise typer.Exit(ExitCode.FILESYSTEM_ERROR)


@config_app.command("show")
def config_show(workspace: WorkspaceOption = None) -> None:
    """Show the effective configuration."""
    _load_config(workspace).show()


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Configuration key, e.g. OPEN_LOG_VIEWER")],
    value: Annotated[str, typer.Argument(help="New value")],
    local: Annotated[
        bool, typer.Option("--local", help="Write to the project .subrelay file")
    ] = False,
    workspace: WorkspaceOption = None,
) -> None:
    """Save a configuration value."""
    config = _load_config(workspace)
    if config.settings.get_attribute_for_key(key) is None:
        valid = ", ".join(config.settings.get_config_keys())
        print_error(f"Unknown configuration key '{key}'. Valid keys: {valid}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    scope = "local" if local else "global"
    try:
        warning = config.save(key, value, scope=scope)
    except (ValueError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    log_message(f"config set {key} ({scope})")
    print_success(f"Saved {key} to {scope} configuration")
    if warning:
        print_warning(warning)


__all__ = ["app", "main"]
