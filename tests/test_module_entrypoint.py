"""Tests for ``python -m lastfm_scrobbler`` and the CLI application wiring."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from lastfm_scrobbler import __main__ as entrypoint
from lastfm_scrobbler import cli


def test_module_main_runs_cli_app(monkeypatch: pytest.MonkeyPatch) -> None:
    """``python -m lastfm_scrobbler`` should hand control to the typer app."""
    invoked: list[str] = []
    monkeypatch.setattr(cli, "app", lambda: invoked.append("app"))

    entrypoint.main()

    assert invoked == ["app"]


def test_app_is_named_for_the_console_script() -> None:
    assert cli.app.info.name == "lastfm-scrobbler"
    assert cli.APP_NAME == "lastfm-scrobbler"


def test_help_lists_scrobbling_commands() -> None:
    result = CliRunner().invoke(cli.app, ["--help"])

    assert result.exit_code == 0, result.output
    for command in ("auth", "now-playing", "scrobble", "batch", "setup"):
        assert command in result.output
