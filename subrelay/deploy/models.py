"""Data model for SubAgent deployments.

Defines the SubAgent definition supplied by callers, the manifest records
persisted per scope, and the markdown definition file format:

    ---
    name: translator
    description: Translates documents between languages
    vendor: codex
    ---
    You are a translator. ...
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from subrelay import MANIFEST_VERSION
from subrelay.utils.errors import AgentDefinitionError, InvalidAgentError

logger = logging.getLogger(__name__)

# Names end up in file paths and unquoted shell arguments
AGENT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class Vendor(Enum):
    """AI CLI products a SubAgent can run on.

    Attributes:
        CODEX: OpenAI Codex CLI (explicit resumable session ids)
        CLAUDE: Claude Code CLI ("continue most recent session" only)
    """

    CODEX = "codex"
    CLAUDE = "claude"


class DeployScope(Enum):
    """Deployment breadth.

    Attributes:
        PROJECT: Deployed into the current workspace
        GLOBAL: Deployed into the user's home directory
    """

    PROJECT = "project"
    GLOBAL = "global"


def parse_vendor(value: str) -> Vendor:
    """Parse a vendor name case-insensitively.

    Raises:
        InvalidAgentError: If the value is not a supported vendor
    """
    try:
        return Vendor(value.strip().lower())
    except ValueError:
        valid = ", ".join(v.value for v in Vendor)
        raise InvalidAgentError(f"Unknown vendor '{value}'. Valid options: {valid}") from None


def validate_agent_name(name: str) -> str:
    """Return the name unchanged if it is safe for paths and shell arguments.

    Raises:
        InvalidAgentError: If the name is empty or contains unsafe characters
    """
    if not AGENT_NAME_PATTERN.match(name or ""):
        raise InvalidAgentError(
            f"Invalid SubAgent name '{name}': use letters, digits, '-', '_' or '.' "
            "(lowercase hyphen-separated names are recommended)"
        )
    return name


@dataclass(frozen=True)
class SubAgent:
    """A named delegate agent configuration.

    Attributes:
        name: Unique identifier, used as directory and file name
        description: Capability summary the host assistant matches requests against
        vendor: Which vendor CLI bridge the control scripts use
        instructions: Free text written verbatim to <name>/<name>.md
    """

    name: str
    description: str
    vendor: Vendor
    instructions: str = ""

    def __post_init__(self) -> None:
        validate_agent_name(self.name)
        if not isinstance(self.vendor, Vendor):
            raise InvalidAgentError(f"Unsupported vendor: {self.vendor!r}")


@dataclass(frozen=True)
class AgentCommands:
    """Shell invocations recorded in the manifest for one agent."""

    start: str
    resume: str

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "resume": self.resume}


@dataclass
class ManifestEntry:
    """One agent record in manifest.json."""

    name: str
    description: str
    commands: AgentCommands

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "commands": self.commands.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManifestEntry":
        """Build an entry from parsed JSON.

        Raises:
            ValueError: If the entry is not an object with a string name
        """
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ValueError(f"Manifest entry without a name: {data!r}")
        commands = data.get("commands") or {}
        if not isinstance(commands, dict):
            raise ValueError(f"Manifest entry '{data['name']}' has invalid commands")
        return cls(
            name=data["name"],
            description=str(data.get("description", "")),
            commands=AgentCommands(
                start=str(commands.get("start", "")),
                resume=str(commands.get("resume", "")),
            ),
        )


@dataclass
class Manifest:
    """Durable record of the SubAgents deployed in one scope.

    Entries are unique by name and keep their deployment order.
    """

    version: str = MANIFEST_VERSION
    agents: list[ManifestEntry] = field(default_factory=list)

    def find(self, name: str) -> ManifestEntry | None:
        for entry in self.agents:
            if entry.name == name:
                return entry
        return None

    def index_of(self, name: str) -> int:
        """Return the position of the named entry, or -1."""
        for index, entry in enumerate(self.agents):
            if entry.name == name:
                return index
        return -1

    def names(self) -> list[str]:
        return [entry.name for entry in self.agents]

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "agents": [entry.to_dict() for entry in self.agents],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        """Build a manifest from parsed JSON.

        Unreadable entries are skipped with a warning; the rest are kept.

        Raises:
            ValueError: If the document does not have the manifest shape
        """
        if not isinstance(data, dict):
            raise ValueError("Manifest root must be a JSON object")
        agents = data.get("agents", [])
        if not isinstance(agents, list):
            raise ValueError("Manifest 'agents' must be a list")
        entries = []
        for item in agents:
            try:
                entries.append(ManifestEntry.from_dict(item))
            except ValueError as e:
                logger.warning(f"Skipping manifest entry: {e}")
        return cls(version=str(data.get("version", MANIFEST_VERSION)), agents=entries)


# --- Agent definition files ---


def parse_agent_frontmatter(content: str) -> dict[str, str]:
    """Parse the simple key: value frontmatter block of a definition file.

    Args:
        content: Full file content

    Returns:
        Dictionary of frontmatter key-value pairs (empty if no frontmatter)
    """
    content = content.strip()
    if not content.startswith("---"):
        return {}

    lines = content.split("\n")
    end_idx = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            end_idx = i
            break

    if end_idx is None:
        return {}

    frontmatter = {}
    for line in lines[1:end_idx]:
        if ":" in line:
            key, _, value = line.partition(":")
            frontmatter[key.strip()] = value.strip().strip("'\"")

    return frontmatter


def extract_agent_body(content: str) -> str:
    """Extract body content after frontmatter.

    Returns the whole (stripped) content when there is no closed
    frontmatter block.
    """
    content = content.strip()
    if not content.startswith("---"):
        return content

    lines = content.split("\n")
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            return "\n".join(lines[i + 1 :]).strip()

    return content


def load_agent_file(path: Path, vendor_override: Vendor | None = None) -> SubAgent:
    """Load a SubAgent from a markdown definition file.

    The name defaults to the file stem when the frontmatter omits it.

    Args:
        path: Definition file
        vendor_override: Vendor to use instead of the frontmatter value

    Raises:
        AgentDefinitionError: If the file is unreadable or required fields are missing
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise AgentDefinitionError(f"cannot read agent definition: {e}", path=str(path)) from e

    meta = parse_agent_frontmatter(content)
    name = meta.get("name") or path.stem
    description = meta.get("description", "")
    if not description:
        raise AgentDefinitionError("frontmatter is missing 'description'", path=str(path))

    if vendor_override is not None:
        vendor = vendor_override
    elif meta.get("vendor"):
        vendor = parse_vendor(meta["vendor"])
    else:
        raise AgentDefinitionError("frontmatter is missing 'vendor'", path=str(path))

    return SubAgent(
        name=name,
        description=description,
        vendor=vendor,
        instructions=extract_agent_body(content) + "\n",
    )


__all__ = [
    "AGENT_NAME_PATTERN",
    "Vendor",
    "DeployScope",
    "SubAgent",
    "AgentCommands",
    "ManifestEntry",
    "Manifest",
    "parse_vendor",
    "validate_agent_name",
    "parse_agent_frontmatter",
    "extract_agent_body",
    "load_agent_file",
]
