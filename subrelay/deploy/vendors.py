"""Vendor bridges for the SubAgent control scripts.

Each supported vendor CLI has its own session model:

- Codex prints ``session id: <uuid>`` on stderr and can resume that exact
  session with ``codex exec resume <id>``.
- Claude Code in print mode exposes no session id; follow-ups rely on
  ``--continue`` (most recent session in the working directory).

A VendorBridge supplies the shell invocations and the session id
extraction for one vendor. The script generator renders one ``case``
branch per registered bridge, so adding a vendor means adding a bridge
here, not editing the script templates.

Isolation from the user's global instruction files:

- Codex: CODEX_HOME points at ``<agent_dir>/.codex`` holding a symlink to
  ``~/.codex/auth.json``. ``~/.codex/AGENTS.md`` is not read while
  authentication keeps working.
- Claude: ``--setting-sources ""`` skips every CLAUDE.md; credentials stay
  in the OS keychain, so nothing needs to be linked.
"""

import re
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import ClassVar

from subrelay.deploy.models import Vendor
from subrelay.utils.logging import log_message


ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")


class IsolationResult(Enum):
    """Outcome of preparing an agent directory for isolated vendor runs."""

    LINKED = "linked"
    ALREADY_PRESENT = "already_present"
    NO_CREDENTIALS = "no_credentials"
    NOT_REQUIRED = "not_required"


class VendorBridge(ABC):
    """Shell-level protocol of one vendor CLI.

    Invocations may use these variables, all set by the control scripts:
    ``$AGENT``, ``$AGENT_DIR``, ``$PROMPT`` (start only), ``$ANSWER`` and
    ``$PREV_SESSION_ID`` (resume only, may be empty).
    """

    vendor: ClassVar[Vendor]
    # Literal text preceding the session id in the vendor's diagnostics.
    # None means the vendor has no resumable session id.
    session_label: ClassVar[str | None] = None
    session_value_pattern: ClassVar[str] = r"[0-9a-fA-F-]+"

    @abstractmethod
    def start_invocation(self) -> str:
        """Shell command that runs a new task non-interactively."""

    @abstractmethod
    def resume_invocation(self) -> str:
        """Shell command that continues a previous session with $ANSWER."""

    def setup_isolation(self, agent_dir: Path, home: Path) -> IsolationResult:
        """Prepare ``agent_dir`` so runs do not read global instruction files."""
        return IsolationResult.NOT_REQUIRED

    @property
    def has_session_ids(self) -> bool:
        return self.session_label is not None

    def extract_session_id(self, diagnostics: str) -> str | None:
        """Find the first session id in vendor diagnostic output.

        ANSI colour codes are stripped first, as the scripts do.
        """
        if self.session_label is None:
            return None
        clean = ANSI_ESCAPE_RE.sub("", diagnostics)
        match = re.search(re.escape(self.session_label) + f"({self.session_value_pattern})", clean)
        if match is None:
            return None
        return match.group(1)

    def session_capture_lines(self) -> list[str]:
        """Shell lines that set SESSION_ID from the captured diagnostics."""
        if self.session_label is None:
            return ['SESSION_ID=""']
        label = self.session_label
        return [
            'SESSION_ID=$(strip_ansi < "$TEMP_OUTPUT" '
            f'| grep -oE "{label}{self.session_value_pattern}" '
            f'| head -1 | sed "s/^{label}//")',
        ]


class CodexBridge(VendorBridge):
    """OpenAI Codex CLI: explicit session ids on stderr."""

    vendor = Vendor.CODEX
    session_label = "session id: "

    CODEX_HOME_DIR = ".codex"
    AUTH_FILE = "auth.json"

    _EXEC = (
        'CODEX_HOME="$AGENT_DIR/.codex" codex exec --skip-git-repo-check '
        "--dangerously-bypass-approvals-and-sandbox"
    )

    def start_invocation(self) -> str:
        return f'{self._EXEC} "$PROMPT"'

    def resume_invocation(self) -> str:
        # Without a captured id, fall back to the most recent session
        return f'{self._EXEC} resume "${{PREV_SESSION_ID:---last}}" "$ANSWER"'

    def setup_isolation(self, agent_dir: Path, home: Path) -> IsolationResult:
        """Create ``<agent_dir>/.codex`` with a link to the user's auth.json.

        A user without ``~/.codex/auth.json`` (API key users, or not logged
        in yet) is not an error: Codex asks for a login on first run.
        """
        codex_dir = agent_dir / self.CODEX_HOME_DIR
        codex_dir.mkdir(parents=True, exist_ok=True)

        auth_link = codex_dir / self.AUTH_FILE
        if auth_link.exists() or auth_link.is_symlink():
            return IsolationResult.ALREADY_PRESENT

        user_auth = home / self.CODEX_HOME_DIR / self.AUTH_FILE
        if not user_auth.is_file():
            log_message(f"No Codex credentials at {user_auth}; login will be requested on first run")
            return IsolationResult.NO_CREDENTIALS

        auth_link.symlink_to(user_auth)
        log_message(f"Linked {auth_link} -> {user_auth}")
        return IsolationResult.LINKED


class ClaudeBridge(VendorBridge):
    """Claude Code CLI: plain print mode, resume via --continue."""

    vendor = Vendor.CLAUDE

    _FLAGS = '--dangerously-skip-permissions --setting-sources ""'

    def start_invocation(self) -> str:
        return f'claude -p "$PROMPT" {self._FLAGS}'

    def resume_invocation(self) -> str:
        return f'claude -p "$ANSWER" --continue {self._FLAGS}'


# Order defines the order of the case branches in the rendered scripts
VENDOR_BRIDGES: dict[Vendor, VendorBridge] = {
    Vendor.CODEX: CodexBridge(),
    Vendor.CLAUDE: ClaudeBridge(),
}


def get_bridge(vendor: Vendor) -> VendorBridge:
    """Return the bridge for a vendor."""
    return VENDOR_BRIDGES[vendor]


__all__ = [
    "ANSI_ESCAPE_RE",
    "IsolationResult",
    "VendorBridge",
    "CodexBridge",
    "ClaudeBridge",
    "VENDOR_BRIDGES",
    "get_bridge",
]
