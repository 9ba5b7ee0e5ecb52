"""Smoke tests for the CLI entrypoint."""

from click.testing import CliRunner

from shelfmark.cli import cli


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Shelfmark catalogs links" in result.output
    for command in ("add", "edit", "ls", "tree", "stats", "config"):
        assert command in result.output
