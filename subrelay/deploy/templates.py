"""Slash command (workflow) documents for host assistants.

Two documents are written per scope: ``subagent-auto.md``, which lets the
host pick an agent from the manifest, and ``subagent-<name>.md`` for
calling one agent directly.
"""

from subrelay.deploy.models import ManifestEntry

AGENT_DIR_PLACEHOLDER = "$AGENT_DIR"
AUTO_COMMAND_FILENAME = "subagent-auto.md"

SUBAGENT_AUTO_TEMPLATE = """---
description: Auto-select and run the best SubAgent for the task
---
# SubAgent Auto-Routing

Read `{project_manifest}` (or `{global_manifest}` for global agents).
Analyze available SubAgents and their descriptions.
Pick the best one for this task.
Execute using the agent's `commands.start`.
Handle follow-ups with `commands.resume`.
"""


def individual_command_filename(name: str) -> str:
    return f"subagent-{name}.md"


def render_auto_command(
    project_manifest: str = ".subagents/manifest.json",
    global_manifest: str = "~/.subagents/manifest.json",
) -> str:
    """Render the auto-select document."""
    return SUBAGENT_AUTO_TEMPLATE.format(
        project_manifest=project_manifest,
        global_manifest=global_manifest,
    )


def render_individual_command(entry: ManifestEntry, agent_dir: str) -> str:
    """Render the document that calls one agent.

    Any $AGENT_DIR placeholder in the recorded commands is resolved to the
    absolute agent directory.

    Args:
        entry: Manifest entry of the agent
        agent_dir: Absolute path of the agent's directory
    """
    start = entry.commands.start.replace(AGENT_DIR_PLACEHOLDER, str(agent_dir))
    resume = entry.commands.resume.replace(AGENT_DIR_PLACEHOLDER, str(agent_dir))

    return f"""---
description: Call SubAgent "{entry.name}" - {entry.description}
---
# SubAgent: {entry.name}

Execute this SubAgent with the given task.

Start command:
```bash
{start}
```

Resume command (if questions are asked):
```bash
{resume}
```
"""


__all__ = [
    "AGENT_DIR_PLACEHOLDER",
    "AUTO_COMMAND_FILENAME",
    "SUBAGENT_AUTO_TEMPLATE",
    "individual_command_filename",
    "render_auto_command",
    "render_individual_command",
]
