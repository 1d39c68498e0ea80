"""Per-scope filesystem layout of deployed SubAgents.

All paths are resolved from the settings, an explicit home directory and
an explicit workspace root. Nothing here consults ``Path.home()`` or the
current directory, so tests can point a scope at any temporary tree.
"""

from dataclasses import dataclass
from pathlib import Path

from subrelay.config.settings import Settings
from subrelay.deploy.manifest import MANIFEST_FILENAME
from subrelay.deploy.models import DeployScope
from subrelay.deploy.scripts import LOG_FILE_NAME
from subrelay.utils.errors import WorkspaceNotFoundError


@dataclass(frozen=True)
class ScopeLayout:
    """Resolved paths of one deployment scope.

    Attributes:
        scope: The scope these paths belong to
        root: SubAgents directory (manifest, scripts, log, agent dirs)
        workflows_dir: Directory receiving the workflow documents
        routing_config_path: Host config file carrying the routing section
    """

    scope: DeployScope
    root: Path
    workflows_dir: Path
    routing_config_path: Path

    @property
    def scripts_dir(self) -> Path:
        return self.root

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILENAME

    @property
    def log_file(self) -> Path:
        return self.root / LOG_FILE_NAME

    def agent_dir(self, name: str) -> Path:
        return self.root / name

    def instructions_path(self, name: str) -> Path:
        return self.agent_dir(name) / f"{name}.md"


def expand_path(value: str, home: Path, base: Path | None = None) -> Path:
    """Turn a configured path into an absolute one.

    ``~`` expands against ``home``; relative paths are anchored at ``base``
    (or ``home`` when no base is given).
    """
    if value == "~":
        return home
    if value.startswith("~/"):
        return home / value[2:]
    path = Path(value)
    if path.is_absolute():
        return path
    return (base or home) / path


def resolve_layout(
    scope: DeployScope,
    settings: Settings,
    home: Path,
    workspace_root: Path | None,
) -> ScopeLayout:
    """Resolve the paths of a scope.

    Args:
        scope: Project or global
        settings: Loaded configuration
        home: User home directory
        workspace_root: Workspace root, required for the project scope

    Raises:
        WorkspaceNotFoundError: For the project scope without a workspace
    """
    routing_config = expand_path(settings.routing_config_file, home)

    if scope == DeployScope.GLOBAL:
        return ScopeLayout(
            scope=scope,
            root=expand_path(settings.global_subagents_dir, home),
            workflows_dir=expand_path(settings.global_workflows_dir, home),
            routing_config_path=routing_config,
        )

    if workspace_root is None:
        raise WorkspaceNotFoundError(
            "No workspace found. Run inside a git repository, pass --workspace, "
            "or deploy with --scope global."
        )
    return ScopeLayout(
        scope=scope,
        root=expand_path(settings.subagents_dir_name, home, base=workspace_root),
        workflows_dir=expand_path(settings.project_workflows_dir, home, base=workspace_root),
        routing_config_path=routing_config,
    )


__all__ = [
    "ScopeLayout",
    "expand_path",
    "resolve_layout",
]
