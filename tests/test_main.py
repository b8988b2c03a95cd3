"""Tests for the CLI entry point."""

from click.testing import CliRunner

from main import main


class TestCli:
    """One-shot CLI invocations against the demo store."""

    def test_one_shot_message(self):
        result = CliRunner().invoke(
            main, ["--store", "memory", "--demo", "--user", "ana", "--message", "Muestra los proyectos"]
        )
        assert result.exit_code == 0, result.output
        assert "Mars Logistics App" in result.output
        assert "web_ana_" in result.output

    def test_empty_message(self):
        result = CliRunner().invoke(main, ["--store", "memory", "--message", "  "])
        assert result.exit_code == 1

    def test_clear_history(self):
        result = CliRunner().invoke(main, ["--store", "memory", "--session", "s1", "--clear-history"])
        assert result.exit_code == 0
        assert "Cleared session s1" in result.output

    def test_show_empty_history(self):
        result = CliRunner().invoke(main, ["--store", "memory", "--session", "s1", "--show-history"])
        assert result.exit_code == 0
        assert "No history" in result.output
