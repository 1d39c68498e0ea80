"""Tests for subrelay.deploy.commands and subrelay.deploy.templates modules."""

from subrelay.deploy.commands import generate_commands
from subrelay.deploy.models import AgentCommands, ManifestEntry, Vendor
from subrelay.deploy.templates import (
    AUTO_COMMAND_FILENAME,
    individual_command_filename,
    render_auto_command,
    render_individual_command,
)


class TestGenerateCommands:
    """Tests for generate_commands."""

    def test_codex_commands(self):
        commands = generate_commands("translator", Vendor.CODEX, "/work/.subagents")

        assert commands.start == '"/work/.subagents/start.sh" codex translator "$TASK"'
        assert commands.resume == (
            '"/work/.subagents/resume.sh" codex translator $SESSION_ID "$ANSWER"'
        )

    def test_claude_commands(self):
        commands = generate_commands("debugger", Vendor.CLAUDE, "/home/u/.subagents")

        assert commands.start == '"/home/u/.subagents/start.sh" claude debugger "$TASK"'
        assert commands.resume.startswith('"/home/u/.subagents/resume.sh" claude debugger ')

    def test_accepts_path_like_dir(self, tmp_path):
        commands = generate_commands("a", Vendor.CODEX, tmp_path)

        assert commands.start.startswith(f'"{tmp_path}/start.sh"')


class TestTemplates:
    """Tests for workflow document rendering."""

    def test_auto_command_defaults(self):
        text = render_auto_command()

        assert text.startswith("---\ndescription: Auto-select and run the best SubAgent")
        assert "`.subagents/manifest.json`" in text
        assert "`~/.subagents/manifest.json`" in text
        assert AUTO_COMMAND_FILENAME == "subagent-auto.md"

    def test_individual_filename(self):
        assert individual_command_filename("translator") == "subagent-translator.md"

    def test_individual_command(self):
        entry = ManifestEntry(
            name="translator",
            description="Translates documents",
            commands=AgentCommands(
                start='"$AGENT_DIR/../start.sh" codex translator "$TASK"',
                resume='"/s/resume.sh" codex translator $SESSION_ID "$ANSWER"',
            ),
        )

        text = render_individual_command(entry, "/work/.subagents/translator")

        assert 'description: Call SubAgent "translator" - Translates documents' in text
        assert "# SubAgent: translator" in text
        assert '"/work/.subagents/translator/../start.sh" codex translator "$TASK"' in text
        assert '"/s/resume.sh" codex translator $SESSION_ID "$ANSWER"' in text
        assert "$AGENT_DIR" not in text
