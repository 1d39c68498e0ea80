"""Tests for subrelay.deploy.models module."""

import pytest

from subrelay.deploy.models import (
    Manifest,
    ManifestEntry,
    SubAgent,
    Vendor,
    extract_agent_body,
    load_agent_file,
    parse_agent_frontmatter,
    parse_vendor,
    validate_agent_name,
)
from subrelay.utils.errors import AgentDefinitionError, ExitCode, InvalidAgentError


class TestAgentNames:
    """Tests for validate_agent_name."""

    @pytest.mark.parametrize("name", ["translator", "code-reviewer", "agent_2", "v1.2", "A1"])
    def test_valid_names(self, name):
        assert validate_agent_name(name) == name

    @pytest.mark.parametrize("name", ["", "-lead", ".hidden", "has space", "a/b", "x;rm", "$HOME"])
    def test_invalid_names(self, name):
        with pytest.raises(InvalidAgentError):
            validate_agent_name(name)

    def test_subagent_validates_on_creation(self):
        with pytest.raises(InvalidAgentError) as exc_info:
            SubAgent(name="../escape", description="x", vendor=Vendor.CODEX)

        assert exc_info.value.exit_code == ExitCode.INVALID_AGENT


class TestParseVendor:
    """Tests for parse_vendor."""

    def test_case_insensitive(self):
        assert parse_vendor(" Codex ") == Vendor.CODEX
        assert parse_vendor("CLAUDE") == Vendor.CLAUDE

    def test_unknown_vendor(self):
        with pytest.raises(InvalidAgentError, match="Valid options: codex, claude"):
            parse_vendor("gemini")


class TestManifestModel:
    """Tests for Manifest and ManifestEntry."""

    def test_from_dict_defaults(self):
        manifest = Manifest.from_dict({})

        assert manifest.version == "1.0"
        assert manifest.agents == []

    def test_rejects_non_object(self):
        with pytest.raises(ValueError):
            Manifest.from_dict(["not", "a", "manifest"])

    def test_rejects_entry_without_name(self):
        with pytest.raises(ValueError):
            ManifestEntry.from_dict({"description": "x"})

    def test_skips_unreadable_entries(self):
        manifest = Manifest.from_dict(
            {"agents": [{"description": "x"}, {"name": "b", "commands": "bad"}, {"name": "c"}]}
        )

        assert manifest.names() == ["c"]

    def test_index_of(self):
        manifest = Manifest.from_dict(
            {"agents": [{"name": "a", "commands": {}}, {"name": "b", "commands": {}}]}
        )

        assert manifest.index_of("b") == 1
        assert manifest.index_of("c") == -1

    def test_to_dict_shape(self):
        entry = ManifestEntry.from_dict(
            {"name": "a", "description": "d", "commands": {"start": "s", "resume": "r"}}
        )

        assert Manifest(agents=[entry]).to_dict() == {
            "version": "1.0",
            "agents": [
                {"name": "a", "description": "d", "commands": {"start": "s", "resume": "r"}}
            ],
        }


class TestAgentDefinitionFiles:
    """Tests for frontmatter parsing and load_agent_file."""

    def test_parse_frontmatter(self):
        content = '---\nname: "helper"\ndescription: Helps out\n---\nBody\n'

        assert parse_agent_frontmatter(content) == {"name": "helper", "description": "Helps out"}

    def test_no_frontmatter(self):
        assert parse_agent_frontmatter("# Just text") == {}
        assert extract_agent_body("# Just text\n") == "# Just text"

    def test_load_agent_file(self, agent_definition_file):
        agent = load_agent_file(agent_definition_file)

        assert agent.name == "reviewer"
        assert agent.vendor == Vendor.CLAUDE
        assert agent.description == "Reviews pull requests for style issues"
        assert agent.instructions == "# Reviewer\n\nReview the diff and list style issues.\n"

    def test_vendor_override(self, agent_definition_file):
        agent = load_agent_file(agent_definition_file, vendor_override=Vendor.CODEX)

        assert agent.vendor == Vendor.CODEX

    def test_name_defaults_to_file_stem(self, tmp_path):
        path = tmp_path / "summarizer.md"
        path.write_text("---\ndescription: Summarizes\nvendor: codex\n---\nSummarize.\n")

        assert load_agent_file(path).name == "summarizer"

    def test_missing_description(self, tmp_path):
        path = tmp_path / "x.md"
        path.write_text("---\nvendor: codex\n---\nBody\n")

        with pytest.raises(AgentDefinitionError, match="description"):
            load_agent_file(path)

    def test_missing_vendor(self, tmp_path):
        path = tmp_path / "x.md"
        path.write_text("---\ndescription: d\n---\nBody\n")

        with pytest.raises(AgentDefinitionError) as exc_info:
            load_agent_file(path)

        assert str(exc_info.value).startswith(f"{path}: ")

    def test_missing_file(self, tmp_path):
        with pytest.raises(AgentDefinitionError):
            load_agent_file(tmp_path / "absent.md")
