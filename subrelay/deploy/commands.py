"""Manifest command lines for deployed SubAgents.

The host assistant copies these strings into its shell, substituting
$TASK, $SESSION_ID and $ANSWER itself. Logging (stderr into
subagent.log) is handled inside the scripts, not here.
"""

from subrelay.deploy.models import AgentCommands, Vendor

START_SCRIPT_NAME = "start.sh"
RESUME_SCRIPT_NAME = "resume.sh"


def generate_commands(name: str, vendor: Vendor, scripts_dir: str) -> AgentCommands:
    """Build the start/resume invocations for one agent.

    Args:
        name: Agent name (already validated as shell safe)
        vendor: Vendor bridge the scripts dispatch on
        scripts_dir: Directory holding start.sh and resume.sh

    Returns:
        AgentCommands with the two shell command strings
    """
    scripts_dir = str(scripts_dir)
    return AgentCommands(
        start=f'"{scripts_dir}/{START_SCRIPT_NAME}" {vendor.value} {name} "$TASK"',
        resume=f'"{scripts_dir}/{RESUME_SCRIPT_NAME}" {vendor.value} {name} $SESSION_ID "$ANSWER"',
    )


__all__ = [
    "START_SCRIPT_NAME",
    "RESUME_SCRIPT_NAME",
    "generate_commands",
]
