"""Manifest persistence for a deployment scope.

``manifest.json`` is read by host assistants to discover SubAgents. A
missing or corrupt manifest is replaced by an empty one rather than
blocking deploys; every other I/O failure propagates.
"""

import json
import logging
from pathlib import Path

from subrelay.deploy.commands import generate_commands
from subrelay.deploy.models import Manifest, ManifestEntry, SubAgent
from subrelay.utils.fs import atomic_write_text, read_text_if_exists
from subrelay.utils.logging import log_message

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


def load_or_create(manifest_path: Path) -> Manifest:
    """Load the manifest, or return a fresh one if absent or corrupt.

    Args:
        manifest_path: Path to manifest.json

    Returns:
        Parsed manifest, or ``Manifest()`` for a missing/unparsable file

    Raises:
        OSError: If the file exists but cannot be read
    """
    try:
        content = read_text_if_exists(manifest_path)
    except UnicodeDecodeError as e:
        logger.warning(f"Ignoring undecodable manifest {manifest_path}: {e}")
        return Manifest()

    if content is None:
        log_message(f"No manifest at {manifest_path}, starting a new one")
        return Manifest()

    try:
        return Manifest.from_dict(json.loads(content))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError subclass
        logger.warning(f"Ignoring corrupt manifest {manifest_path}: {e}")
        log_message(f"Corrupt manifest {manifest_path} replaced with empty manifest: {e}")
        return Manifest()


def upsert_agent(manifest: Manifest, agent: SubAgent, scripts_dir: Path | str) -> Manifest:
    """Insert or replace the agent's entry, keeping its position on update.

    Args:
        manifest: Manifest to mutate
        agent: Agent being deployed
        scripts_dir: Directory holding the control scripts

    Returns:
        The same manifest, for the caller to persist
    """
    entry = ManifestEntry(
        name=agent.name,
        description=agent.description,
        commands=generate_commands(agent.name, agent.vendor, str(scripts_dir)),
    )

    existing_index = manifest.index_of(agent.name)
    if existing_index != -1:
        manifest.agents[existing_index] = entry
    else:
        manifest.agents.append(entry)
    return manifest


def remove_agent(manifest: Manifest, name: str) -> bool:
    """Drop the named entry. Returns True if an entry was removed."""
    index = manifest.index_of(name)
    if index == -1:
        return False
    del manifest.agents[index]
    return True


def save_manifest(manifest_path: Path, manifest: Manifest) -> None:
    """Write the manifest as pretty-printed JSON, replacing the file atomically."""
    atomic_write_text(
        manifest_path, json.dumps(manifest.to_dict(), indent=2) + "\n", mode=0o644
    )
    log_message(f"Saved manifest {manifest_path} ({len(manifest.agents)} agents)")


__all__ = [
    "MANIFEST_FILENAME",
    "load_or_create",
    "upsert_agent",
    "remove_agent",
    "save_manifest",
]
