"""Deploy, undeploy and list SubAgents.

DeployService ties the pieces of a deployment together: control scripts,
the agent directory, the manifest, workflow documents and the routing
section in the host config file. Each operation runs sequentially and
aborts on the first failure; steps already done are not rolled back, but
every step is idempotent, so re-running a deploy converges.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from subrelay.config.settings import Settings
from subrelay.deploy.layout import ScopeLayout, resolve_layout
from subrelay.deploy.log_viewer import open_log_viewer
from subrelay.deploy.manifest import (
    MANIFEST_FILENAME,
    load_or_create,
    remove_agent,
    save_manifest,
    upsert_agent,
)
from subrelay.deploy.models import DeployScope, ManifestEntry, SubAgent
from subrelay.deploy.routing import (
    RoutingChange,
    build_routing_section,
    ensure_routing_section,
    has_routing_section,
    refresh_routing_section,
    remove_routing_section,
)
from subrelay.deploy.scripts import ensure_scripts, setup_isolation
from subrelay.deploy.templates import (
    AUTO_COMMAND_FILENAME,
    individual_command_filename,
    render_auto_command,
    render_individual_command,
)
from subrelay.deploy.vendors import IsolationResult
from subrelay.integrations.host import HostIntegration
from subrelay.utils.errors import AgentNotDeployedError
from subrelay.utils.logging import log_message


@dataclass
class DeployResult:
    """What a deploy wrote."""

    agent: SubAgent
    layout: ScopeLayout
    updated: bool
    scripts: list[Path] = field(default_factory=list)
    workflow_files: list[Path] = field(default_factory=list)
    isolation: IsolationResult | None = None
    routing: RoutingChange = RoutingChange.UNCHANGED
    log_viewer_command: str | None = None


@dataclass
class UndeployResult:
    """What an undeploy removed."""

    name: str
    layout: ScopeLayout
    remaining_agents: int
    purged: bool = False
    removed_files: list[Path] = field(default_factory=list)
    routing: RoutingChange | None = None


class DeployService:
    """SubAgent deployment use cases.

    Args:
        host: Provides the workspace root and opens terminals
        settings: Loaded configuration
        home: Home directory used to expand ``~`` (default: the user's)
    """

    def __init__(
        self,
        host: HostIntegration,
        settings: Settings | None = None,
        home: Path | None = None,
    ) -> None:
        self.host = host
        self.settings = settings or Settings()
        self.home = home or Path.home()

    def resolve_layout(self, scope: DeployScope) -> ScopeLayout:
        """Resolve the paths of a scope.

        Raises:
            WorkspaceNotFoundError: For the project scope when the host has
                no workspace
        """
        workspace_root = self.host.workspace_root() if scope == DeployScope.PROJECT else None
        return resolve_layout(scope, self.settings, self.home, workspace_root)

    @property
    def routing_config_path(self) -> Path:
        return self.resolve_layout(DeployScope.GLOBAL).routing_config_path

    def _manifest_locations(self) -> tuple[str, str]:
        """Manifest paths as shown to the host assistant."""
        project = f"{self.settings.subagents_dir_name}/{MANIFEST_FILENAME}"
        global_ = f"{self.settings.global_subagents_dir.rstrip('/')}/{MANIFEST_FILENAME}"
        return project, global_

    def routing_section(self) -> str:
        """Routing section text for the configured manifest locations."""
        project, global_ = self._manifest_locations()
        return build_routing_section(project_manifest=f"./{project}", global_manifest=global_)

    def deploy(self, agent: SubAgent, scope: DeployScope) -> DeployResult:
        """Deploy or redeploy an agent into a scope.

        Raises:
            WorkspaceNotFoundError: Project scope without a workspace
            RoutingFileError: The host config file exists but is unreadable
            OSError: Any filesystem write failure
        """
        layout = self.resolve_layout(scope)
        log_message(f"Deploying SubAgent '{agent.name}' ({agent.vendor.value}) to {layout.root}")

        agent_dir = layout.agent_dir(agent.name)
        agent_dir.mkdir(parents=True, exist_ok=True)
        scripts = ensure_scripts(layout.scripts_dir)

        layout.instructions_path(agent.name).write_text(agent.instructions, encoding="utf-8")

        isolation = None
        if self.settings.setup_isolation:
            isolation = setup_isolation(agent.vendor, agent_dir, self.home)

        manifest = load_or_create(layout.manifest_path)
        updated = manifest.find(agent.name) is not None
        upsert_agent(manifest, agent, layout.scripts_dir)
        save_manifest(layout.manifest_path, manifest)

        entry = manifest.find(agent.name)
        workflow_files = self._write_workflows(layout, entry)

        routing = ensure_routing_section(layout.routing_config_path, self.routing_section())

        log_viewer_command = None
        if self.settings.open_log_viewer:
            log_viewer_command = self.open_log(scope)

        return DeployResult(
            agent=agent,
            layout=layout,
            updated=updated,
            scripts=scripts,
            workflow_files=workflow_files,
            isolation=isolation,
            routing=routing,
            log_viewer_command=log_viewer_command,
        )

    def _write_workflows(self, layout: ScopeLayout, entry: ManifestEntry) -> list[Path]:
        layout.workflows_dir.mkdir(parents=True, exist_ok=True)
        project, global_ = self._manifest_locations()

        auto_path = layout.workflows_dir / AUTO_COMMAND_FILENAME
        auto_path.write_text(
            render_auto_command(project_manifest=project, global_manifest=global_),
            encoding="utf-8",
        )

        agent_path = layout.workflows_dir / individual_command_filename(entry.name)
        agent_path.write_text(
            render_individual_command(entry, str(layout.agent_dir(entry.name))),
            encoding="utf-8",
        )
        return [auto_path, agent_path]

    def undeploy(self, name: str, scope: DeployScope, purge: bool = False) -> UndeployResult:
        """Remove an agent from a scope.

        The agent directory is kept unless ``purge`` is set. Once the scope
        is empty its auto-select document goes too; the routing section is
        removed only when no agent is left in either scope that uses it.

        Raises:
            AgentNotDeployedError: If the agent is not in the scope's manifest
        """
        layout = self.resolve_layout(scope)
        manifest = load_or_create(layout.manifest_path)
        if not remove_agent(manifest, name):
            raise AgentNotDeployedError(name, scope.value)
        save_manifest(layout.manifest_path, manifest)

        result = UndeployResult(name=name, layout=layout, remaining_agents=len(manifest.agents))

        agent_doc = layout.workflows_dir / individual_command_filename(name)
        if agent_doc.exists():
            agent_doc.unlink()
            result.removed_files.append(agent_doc)

        agent_dir = layout.agent_dir(name)
        if purge and agent_dir.is_dir():
            shutil.rmtree(agent_dir)
            result.purged = True

        if manifest.agents:
            log_message(f"Undeployed '{name}', {len(manifest.agents)} agents remain in {scope.value} scope")
            return result

        auto_doc = layout.workflows_dir / AUTO_COMMAND_FILENAME
        if auto_doc.exists():
            auto_doc.unlink()
            result.removed_files.append(auto_doc)

        other = DeployScope.PROJECT if scope == DeployScope.GLOBAL else DeployScope.GLOBAL
        if self._scope_empty(other):
            result.routing = remove_routing_section(layout.routing_config_path)
        else:
            log_message(f"Keeping routing section: {other.value} SubAgents remain")

        return result

    def _scope_empty(self, scope: DeployScope) -> bool:
        # Only the current workspace's project scope is visible
        if scope == DeployScope.PROJECT and self.host.workspace_root() is None:
            return True
        return not load_or_create(self.resolve_layout(scope).manifest_path).agents

    def list_agents(self, scope: DeployScope) -> list[ManifestEntry]:
        """Agents recorded in a scope's manifest, in deploy order."""
        layout = self.resolve_layout(scope)
        return list(load_or_create(layout.manifest_path).agents)

    def open_log(self, scope: DeployScope) -> str:
        """Open the live log viewer for a scope. Returns the tail command."""
        layout = self.resolve_layout(scope)
        return open_log_viewer(self.host, layout.log_file, self.settings.log_viewer_lines)

    def routing_status(self) -> bool:
        """Whether the host config file carries a routing section."""
        return has_routing_section(self.routing_config_path)

    def refresh_routing(self) -> RoutingChange:
        """Rewrite an outdated routing section (or add a missing one)."""
        return refresh_routing_section(self.routing_config_path, self.routing_section())

    def remove_routing(self) -> RoutingChange:
        """Remove the routing section regardless of deployed agents."""
        return remove_routing_section(self.routing_config_path)


__all__ = [
    "DeployResult",
    "UndeployResult",
    "DeployService",
]
