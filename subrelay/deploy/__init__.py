"""SubAgent deployment for SUBRELAY.

This package contains:
- models: SubAgent, manifest and scope types
- vendors: Per-vendor shell bridges
- scripts: start.sh / resume.sh / format-log.sh generation
- commands: Manifest command lines
- templates: Workflow documents
- manifest: Manifest persistence
- routing: Routing section in the host config file
- layout: Per-scope paths
- log_viewer: Live log terminal
- service: Deploy / undeploy use cases
"""

from subrelay.deploy.models import (
    AgentCommands,
    DeployScope,
    Manifest,
    ManifestEntry,
    SubAgent,
    Vendor,
    load_agent_file,
    parse_vendor,
)
from subrelay.deploy.routing import RoutingChange
from subrelay.deploy.service import DeployResult, DeployService, UndeployResult

__all__ = [
    "AgentCommands",
    "DeployScope",
    "Manifest",
    "ManifestEntry",
    "SubAgent",
    "Vendor",
    "load_agent_file",
    "parse_vendor",
    "RoutingChange",
    "DeployResult",
    "DeployService",
    "UndeployResult",
]
