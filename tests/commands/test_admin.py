"""Tests for the ``admin`` CLI command group (clear, upgrade)."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from campuscoffee.cli import cli

CREATE = [
    "pos",
    "create",
    "A",
    "--type",
    "CAFE",
    "--campus",
    "NORTH",
    "--street",
    "Main",
    "--house-number",
    "1",
    "--postal-code",
    "12345",
    "--city",
    "Town",
]


@pytest.mark.usefixtures("_isolated_workdir")
class TestClearCommand:
    def test_clear_with_yes(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, CREATE)
        result = cli_runner.invoke(cli, ["--json", "admin", "clear", "--yes"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"] == {"removed": 1}

    def test_clear_twice(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, CREATE)
        cli_runner.invoke(cli, ["admin", "clear", "--yes"])
        result = cli_runner.invoke(cli, ["--json", "admin", "clear", "--yes"])
        assert json.loads(result.stdout)["data"] == {"removed": 0}

    def test_confirm_prompt(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, CREATE)
        result = cli_runner.invoke(cli, ["admin", "clear"], input="y\n")
        assert result.exit_code == 0
        assert "removed: 1" in result.stdout

    def test_declined_prompt_aborts(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, CREATE)
        result = cli_runner.invoke(cli, ["admin", "clear"], input="n\n")
        assert result.exit_code == 1
        listing = cli_runner.invoke(cli, ["--json", "pos", "list"])
        assert json.loads(listing.stdout)["data"]["count"] == 1

    def test_json_without_yes_still_confirms(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, CREATE)
        result = cli_runner.invoke(cli, ["--json", "admin", "clear"])
        assert result.exit_code == 1
        assert "removed" not in result.stdout
        listing = cli_runner.invoke(cli, ["--json", "pos", "list"])
        assert json.loads(listing.stdout)["data"]["count"] == 1

    def test_json_with_confirmed_prompt(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, CREATE)
        result = cli_runner.invoke(cli, ["--json", "admin", "clear"], input="y\n")
        assert result.exit_code == 0
        assert '"removed": 1' in result.stdout

    def test_name_reusable_after_clear(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, CREATE)
        cli_runner.invoke(cli, ["admin", "clear", "--yes"])
        assert cli_runner.invoke(cli, CREATE).exit_code == 0


@pytest.mark.usefixtures("_isolated_workdir")
class TestUpgradeCommand:
    def test_check(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "admin", "upgrade", "--check"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["head"] == "001_baseline"

    def test_apply_then_current(self, cli_runner: CliRunner) -> None:
        assert cli_runner.invoke(cli, ["admin", "upgrade"]).exit_code == 0
        result = cli_runner.invoke(cli, ["--json", "admin", "upgrade"])
        assert json.loads(result.stdout)["data"]["applied_count"] == 0
