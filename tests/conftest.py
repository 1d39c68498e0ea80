"""Shared pytest fixtures for SUBRELAY tests."""

from pathlib import Path

import pytest

from subrelay.config.settings import Settings
from subrelay.deploy.models import SubAgent, Vendor
from subrelay.deploy.service import DeployService
from tests.fakes import FakeHost


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    """Keep configuration keys from the developer's environment out of tests."""
    for key in Settings.get_config_keys():
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace that looks like a git repository."""
    path = tmp_path / "workspace"
    (path / ".git").mkdir(parents=True)
    return path


@pytest.fixture
def host(workspace: Path) -> FakeHost:
    return FakeHost(workspace)


@pytest.fixture
def service(host: FakeHost, home: Path) -> DeployService:
    """DeployService with default settings and isolated paths."""
    return DeployService(host, Settings(), home=home)


@pytest.fixture
def codex_agent() -> SubAgent:
    return SubAgent(
        name="translator",
        description="Translates documents between languages",
        vendor=Vendor.CODEX,
        instructions="You translate files.\n",
    )


@pytest.fixture
def claude_agent() -> SubAgent:
    return SubAgent(
        name="debugger",
        description="Finds and fixes bugs",
        vendor=Vendor.CLAUDE,
        instructions="You fix bugs.\n",
    )


@pytest.fixture
def agent_definition_file(tmp_path: Path) -> Path:
    """A markdown SubAgent definition with frontmatter."""
    path = tmp_path / "reviewer.md"
    path.write_text(
        """---
name: reviewer
description: Reviews pull requests for style issues
vendor: claude
---

# Reviewer

Review the diff and list style issues.
"""
    )
    return path
