"""Routing instructions inside host assistant config files.

The routing section tells the host assistant (Gemini / Antigravity by
default, through ``~/.gemini/GEMINI.md``) to scan the SubAgent manifests
and delegate matching requests. The section is a delimited block:

    <!-- SUBAGENT-ROUTING -->
    ...
    <!-- /SUBAGENT-ROUTING -->

Only the text between and including the markers belongs to subrelay.
Everything else in the host file is user content and is never rewritten,
apart from whitespace normalisation after a block is removed.
"""

import logging
from enum import Enum
from pathlib import Path

from subrelay.utils.errors import RoutingFileError
from subrelay.utils.fs import read_text_if_exists
from subrelay.utils.logging import log_message

logger = logging.getLogger(__name__)

ROUTING_MARKER_START = "<!-- SUBAGENT-ROUTING -->"
ROUTING_MARKER_END = "<!-- /SUBAGENT-ROUTING -->"


class RoutingChange(Enum):
    """What an ensure/remove/refresh call did to the host file."""

    CREATED = "created"
    APPENDED = "appended"
    REPLACED = "replaced"
    REMOVED = "removed"
    UNCHANGED = "unchanged"
    MALFORMED = "malformed"
    ABSENT = "absent"


def build_routing_section(
    project_manifest: str = "./.subagents/manifest.json",
    global_manifest: str = "~/.subagents/manifest.json",
) -> str:
    """Render the canonical routing section, markers included.

    The block starts and ends with a newline so it sits on its own lines
    when appended to existing content.
    """
    return f"""
{ROUTING_MARKER_START}
# 🚦 CRITICAL: SUBAGENT DELEGATION PROTOCOL

**PRIORITY 0 (HIGHEST):** Before analyzing the user request depth or planning, you MUST perform a "Capability Scan":

1.  🔍 **SCAN**: Check for manifests in these locations:
    *   **Project**: `{project_manifest}` (relative to workspace root)
    *   **Global**: `{global_manifest}`
2.  🧩 **MATCH**: Check if the User Request semantically overlaps with ANY Agent's `description` found in the manifests.
    *   *Example:* Request "Translate file X" matches Agent "Translator".
    *   *Example:* Request "Fix these bugs" matches Agent "Debugger".
3.  🛑 **DECISION**:
    *   **IF MATCH FOUND**: You are **FORBIDDEN** from performing the task yourself with your own tools.
        *   You **MUST** delegate immediately using the `commands.start` from the manifest.
        *   **Do NOT** ask for confirmation.
        *   **Do NOT** attempt to "quickly fix" it yourself.
    *   **IF NO MATCH**: Proceed with your own standard tools.

**Philosophy**: "Never manually do what a SubAgent is configured to do."
{ROUTING_MARKER_END}
"""


ROUTING_SECTION = build_routing_section()


def _canonical_block(section: str) -> str:
    """Return the marker-to-marker part of a section.

    Raises:
        ValueError: If the section does not carry both markers in order
    """
    start = section.find(ROUTING_MARKER_START)
    end = section.find(ROUTING_MARKER_END, start + len(ROUTING_MARKER_START))
    if start == -1 or end == -1:
        raise ValueError("Routing section must contain both routing markers")
    return section[start : end + len(ROUTING_MARKER_END)]


class _MalformedBlock(Exception):
    def __init__(self, start: int) -> None:
        super().__init__(f"routing start marker at offset {start} has no end marker")
        self.start = start


def _find_block(content: str) -> tuple[int, int] | None:
    """Locate the first block as (start, end_exclusive).

    Returns None when the start marker is absent.

    Raises:
        _MalformedBlock: If the start marker has no end marker after it
    """
    start = content.find(ROUTING_MARKER_START)
    if start == -1:
        return None
    end = content.find(ROUTING_MARKER_END, start + len(ROUTING_MARKER_START))
    if end == -1:
        raise _MalformedBlock(start)
    return start, end + len(ROUTING_MARKER_END)


def _read_host_file(file_path: Path) -> str | None:
    try:
        return read_text_if_exists(file_path)
    except (OSError, UnicodeDecodeError) as e:
        raise RoutingFileError(f"Cannot read {file_path}: {e}", path=str(file_path)) from e


def _create_host_file(file_path: Path, section: str) -> RoutingChange:
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # The write below reports the real failure if the directory is unusable
        logger.warning(f"Failed to create directory for {file_path}: {e}")
        log_message(f"Failed to create directory for {file_path}: {e}")

    file_path.write_text(section, encoding="utf-8")
    log_message(f"Created {file_path} with routing section")
    return RoutingChange.CREATED


def _append_section(file_path: Path, content: str, section: str) -> RoutingChange:
    separator = "\n" if content and not content.endswith("\n") else ""
    file_path.write_text(content + separator + section, encoding="utf-8")
    log_message(f"Appended routing section to {file_path}")
    return RoutingChange.APPENDED


def ensure_routing_section(
    file_path: Path,
    section: str = ROUTING_SECTION,
    refresh: bool = False,
) -> RoutingChange:
    """Make sure the host file contains exactly one routing section.

    - Missing file: parent directories are created best-effort and the
      file is written with exactly ``section``.
    - File with the start marker: left alone, unless ``refresh`` is set
      (see refresh_routing_section).
    - File without the marker: the section is appended, preceded by one
      newline when the existing content does not already end with one.

    Args:
        file_path: Host config file
        section: Canonical section text, markers included
        refresh: Replace an existing block that differs from ``section``

    Returns:
        The change applied

    Raises:
        RoutingFileError: If the file exists but cannot be read
        OSError: If writing the file fails
    """
    _canonical_block(section)

    content = _read_host_file(file_path)
    if content is None:
        return _create_host_file(file_path, section)

    if ROUTING_MARKER_START in content:
        if refresh:
            return _replace_block(file_path, content, section)
        log_message(f"Routing section already present in {file_path}")
        return RoutingChange.UNCHANGED

    return _append_section(file_path, content, section)


def refresh_routing_section(file_path: Path, section: str = ROUTING_SECTION) -> RoutingChange:
    """Bring an existing routing block in line with the canonical section.

    ensure_routing_section only checks for the start marker, so text
    updates never reach files that already carry a block. This performs
    the reconciliation explicitly; a file without a block gets one added.
    """
    return ensure_routing_section(file_path, section, refresh=True)


def _replace_block(file_path: Path, content: str, section: str) -> RoutingChange:
    try:
        span = _find_block(content)
    except _MalformedBlock as e:
        logger.warning(f"Malformed routing section in {file_path}: {e}")
        log_message(f"Not refreshing malformed routing section in {file_path}: {e}")
        return RoutingChange.MALFORMED

    if span is None:
        return _append_section(file_path, content, section)
    start, end = span
    canonical = _canonical_block(section)
    if content[start:end] == canonical:
        return RoutingChange.UNCHANGED

    file_path.write_text(content[:start] + canonical + content[end:], encoding="utf-8")
    log_message(f"Replaced outdated routing section in {file_path}")
    return RoutingChange.REPLACED


def remove_routing_section(file_path: Path) -> RoutingChange:
    """Remove every well-formed routing block from the host file.

    The remaining content is stripped of leading/trailing whitespace and,
    when anything is left, ends with exactly one newline. An emptied file
    is kept (empty), not deleted. A start marker without an end marker is
    left untouched: cutting only up to the start marker could destroy user
    content that follows it.

    Args:
        file_path: Host config file

    Returns:
        REMOVED, UNCHANGED (no block), ABSENT (no file) or MALFORMED

    Raises:
        RoutingFileError: If the file exists but cannot be read
        OSError: If writing the file fails
    """
    content = _read_host_file(file_path)
    if content is None:
        return RoutingChange.ABSENT

    remaining = content
    removed = 0
    while True:
        try:
            span = _find_block(remaining)
        except _MalformedBlock as e:
            logger.warning(f"Malformed routing section in {file_path}: {e}")
            log_message(f"Refusing to edit malformed routing section in {file_path}: {e}")
            if removed == 0:
                return RoutingChange.MALFORMED
            break
        if span is None:
            break
        start, end = span
        remaining = remaining[:start] + remaining[end:]
        removed += 1

    if removed == 0:
        return RoutingChange.UNCHANGED

    remaining = remaining.strip()
    if remaining:
        remaining += "\n"

    file_path.write_text(remaining, encoding="utf-8")
    log_message(f"Removed {removed} routing section(s) from {file_path}")
    return RoutingChange.REMOVED


def has_routing_section(file_path: Path) -> bool:
    """Check whether the host file currently carries a routing start marker."""
    content = _read_host_file(file_path)
    return content is not None and ROUTING_MARKER_START in content


__all__ = [
    "ROUTING_MARKER_START",
    "ROUTING_MARKER_END",
    "ROUTING_SECTION",
    "RoutingChange",
    "build_routing_section",
    "ensure_routing_section",
    "refresh_routing_section",
    "remove_routing_section",
    "has_routing_section",
]
