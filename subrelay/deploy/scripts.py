"""Control script generation for a SubAgent scripts directory.

Every scripts directory holds:

- ``start.sh <vendor> <agent> <task>``: starts a new delegated session,
- ``resume.sh <vendor> <agent> [<session-id>] <answer>``: continues one,
- ``format-log.sh <agent>``: formats vendor diagnostics for the live log.

Output contract of start/resume: stdout carries only the vendor's final
result. When the vendor reported a session id, a blank line and a
``[SESSION_ID: <id>]`` marker line are appended. Diagnostics go to
``subagent.log`` next to the scripts, which a log viewer can tail.

The scripts are regenerated on every deploy, so the templates in this
module are the single source of truth for their content.
"""

import re
from pathlib import Path

from subrelay.deploy.commands import RESUME_SCRIPT_NAME, START_SCRIPT_NAME
from subrelay.deploy.models import Vendor
from subrelay.deploy.vendors import VENDOR_BRIDGES, IsolationResult, VendorBridge, get_bridge
from subrelay.utils.logging import log_message

SCRIPT_TEMPLATE_VERSION = "2"
FORMAT_LOG_SCRIPT_NAME = "format-log.sh"
LOG_FILE_NAME = "subagent.log"
SCRIPT_MODE = 0o755

SESSION_MARKER_RE = re.compile(r"^\[SESSION_ID: ([^\]\s]+)\]\s*$", re.MULTILINE)

_HEADER = f"""#!/bin/bash
# Generated by subrelay (control script templates v{SCRIPT_TEMPLATE_VERSION}).
# Rewritten on every deploy: local edits are overwritten."""

# Shared setup. Diagnostics are piped through format-log.sh into the log,
# stdout stays clean for the calling assistant.
_PRELUDE = f"""set -o pipefail

SUBAGENTS_DIR="$(cd "$(dirname "$0")" && pwd)"
AGENT_DIR="$SUBAGENTS_DIR/$AGENT"
LOG_FILE="$SUBAGENTS_DIR/{LOG_FILE_NAME}"
FORMAT_LOG="$SUBAGENTS_DIR/{FORMAT_LOG_SCRIPT_NAME}"
TEMP_OUTPUT=$(mktemp)
trap 'rm -f "$TEMP_OUTPUT"' EXIT

ESC=$(printf '\\033')
strip_ansi() {{
  sed "s/${{ESC}}\\[[0-9;]*m//g"
}}

if [ -z "$VENDOR" ] || [ -z "$AGENT" ]; then
  echo "usage: $USAGE" >&2
  exit 2
fi

cd "$AGENT_DIR" || {{ echo "SubAgent directory not found: $AGENT_DIR" >&2; exit 1; }}"""

# Print the marker only for a real id; vendors without ids never print one
_SESSION_MARKER = """if [ -n "$SESSION_ID" ] && [ "$SESSION_ID" != "null" ]; then
  echo ""
  echo "[SESSION_ID: $SESSION_ID]"
fi

exit $STATUS"""


def _run_line(invocation: str) -> str:
    # vendor stdout -> our stdout (fd 3); vendor stderr -> temp copy + log
    return (
        f"{{ {invocation} 2>&1 1>&3 3>&- "
        '| tee "$TEMP_OUTPUT" | "$FORMAT_LOG" "$AGENT" >> "$LOG_FILE"; } 3>&1'
    )


def _case_branch(bridge: VendorBridge, invocation: str) -> str:
    lines = [
        f"  {bridge.vendor.value})",
        f"    {_run_line(invocation)}",
        "    STATUS=$?",
    ]
    lines.extend(f"    {line}" for line in bridge.session_capture_lines())
    lines.append("    ;;")
    return "\n".join(lines)


def _case_block(resume: bool) -> str:
    branches = []
    for bridge in VENDOR_BRIDGES.values():
        invocation = bridge.resume_invocation() if resume else bridge.start_invocation()
        branches.append(_case_branch(bridge, invocation))

    valid = "|".join(vendor.value for vendor in VENDOR_BRIDGES)
    branches.append(
        "  *)\n"
        f'    echo "Unknown vendor: $VENDOR (expected {valid})" >&2\n'
        "    exit 2\n"
        "    ;;"
    )
    return 'case "$VENDOR" in\n' + "\n".join(branches) + "\nesac"


def render_start_script() -> str:
    """Render start.sh: truncates the log and runs a new task."""
    return "\n".join(
        [
            _HEADER,
            'VENDOR="$1"',
            'AGENT="$2"',
            'TASK="$3"',
            f'USAGE="{START_SCRIPT_NAME} <vendor> <agent> <task>"',
            "",
            _PRELUDE,
            "",
            'PROMPT="First, read ${AGENT}.md. Then: $TASK"',
            'echo "=== [$AGENT] START $(date +%H:%M:%S) ===" > "$LOG_FILE"',
            "",
            _case_block(resume=False),
            "",
            _SESSION_MARKER,
            "",
        ]
    )


def render_resume_script() -> str:
    """Render resume.sh: appends to the log and continues a session.

    Hosts substitute an unquoted $SESSION_ID; for vendors without ids it
    expands to nothing, so a three-argument call means "no session id".
    """
    return "\n".join(
        [
            _HEADER,
            'VENDOR="$1"',
            'AGENT="$2"',
            'if [ "$#" -ge 4 ]; then',
            '  PREV_SESSION_ID="$3"',
            '  ANSWER="$4"',
            "else",
            '  PREV_SESSION_ID=""',
            '  ANSWER="$3"',
            "fi",
            f'USAGE="{RESUME_SCRIPT_NAME} <vendor> <agent> [<session-id>] <answer>"',
            "",
            _PRELUDE,
            "",
            'echo "=== [$AGENT] RESUME $(date +%H:%M:%S) ===" >> "$LOG_FILE"',
            "",
            _case_block(resume=True),
            "",
            _SESSION_MARKER,
            "",
        ]
    )


def render_format_log_script() -> str:
    """Render format-log.sh: timestamps and de-colours diagnostic lines."""
    return "\n".join(
        [
            _HEADER,
            "# Usage: <vendor cli> 2>&1 | format-log.sh <agent>",
            'AGENT="${1:-subagent}"',
            "ESC=$(printf '\\033')",
            "",
            'while IFS= read -r line || [ -n "$line" ]; do',
            '  line=$(printf \'%s\' "$line" | sed "s/${ESC}\\[[0-9;]*m//g")',
            '  printf \'%s [%s] %s\\n\' "$(date +%H:%M:%S)" "$AGENT" "$line"',
            "done",
            "",
        ]
    )


SCRIPT_RENDERERS = {
    START_SCRIPT_NAME: render_start_script,
    RESUME_SCRIPT_NAME: render_resume_script,
    FORMAT_LOG_SCRIPT_NAME: render_format_log_script,
}


def ensure_scripts(scripts_dir: Path) -> list[Path]:
    """Write all control scripts into ``scripts_dir`` and make them executable.

    Existing scripts are always overwritten so they converge on the current
    templates.

    Returns:
        Paths of the written scripts
    """
    scripts_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for filename, render in SCRIPT_RENDERERS.items():
        path = scripts_dir / filename
        path.write_text(render(), encoding="utf-8")
        path.chmod(SCRIPT_MODE)
        written.append(path)

    log_message(f"Control scripts (v{SCRIPT_TEMPLATE_VERSION}) written to {scripts_dir}")
    return written


def setup_isolation(vendor: Vendor, agent_dir: Path, home: Path) -> IsolationResult:
    """Prepare an agent directory for isolated runs of its vendor CLI.

    Args:
        vendor: Vendor of the agent
        agent_dir: The agent's directory (working directory of the scripts)
        home: User home directory holding the vendor's credentials
    """
    return get_bridge(vendor).setup_isolation(agent_dir, home)


def parse_session_marker(output: str) -> str | None:
    """Return the session id from start/resume output, if one was reported.

    The last marker wins if the vendor output happens to contain several.
    """
    matches = SESSION_MARKER_RE.findall(output)
    if not matches:
        return None
    return matches[-1]


def strip_session_marker(output: str) -> str:
    """Return start/resume output without the trailing session marker."""
    matches = list(SESSION_MARKER_RE.finditer(output))
    if not matches:
        return output
    match = matches[-1]
    result = output[: match.start()]
    # drop the blank separator line printed before the marker
    if result.endswith("\n\n"):
        result = result[:-1]
    return result


__all__ = [
    "SCRIPT_TEMPLATE_VERSION",
    "FORMAT_LOG_SCRIPT_NAME",
    "LOG_FILE_NAME",
    "SESSION_MARKER_RE",
    "render_start_script",
    "render_resume_script",
    "render_format_log_script",
    "ensure_scripts",
    "setup_isolation",
    "parse_session_marker",
    "strip_session_marker",
]
