"""Tests for the root CLI group: global flags, help, examples."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from campuscoffee import __version__
from campuscoffee.cli import cli


class TestRootGroup:
    def test_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "pos" in result.output
        assert "admin" in result.output

    def test_no_subcommand_shows_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.parametrize(
        "args",
        [
            ["pos", "--examples"],
            ["pos", "create", "--examples"],
            ["pos", "import", "--examples"],
            ["admin", "clear", "--examples"],
        ],
    )
    def test_examples(self, cli_runner: CliRunner, args: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert "Examples for" in result.output
        assert "campuscoffee" in result.output


@pytest.mark.usefixtures("_isolated_workdir")
class TestGlobalFlags:
    def test_db_flag(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        db = tmp_path / "custom" / "pos.db"
        result = cli_runner.invoke(cli, ["--db", f"sqlite:///{db}", "pos", "list"])
        assert result.exit_code == 0
        assert db.exists()
        assert not (tmp_path / "campuscoffee.db").exists()

    def test_config_file_database(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "campuscoffee.toml").write_text('[database]\nurl = "sqlite:///from-toml.db"\n')
        result = cli_runner.invoke(cli, ["pos", "list"])
        assert result.exit_code == 0
        assert (tmp_path / "from-toml.db").exists()

    def test_config_case_policy(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "campuscoffee.toml").write_text("[pos]\ncase_sensitive_names = false\n")
        base = ["--type", "CAFE", "--campus", "NORTH", "--street", "Main", "--house-number", "1"]
        base += ["--postal-code", "12345", "--city", "Town"]
        assert cli_runner.invoke(cli, ["pos", "create", "Lib Kiosk", *base]).exit_code == 0
        result = cli_runner.invoke(cli, ["--json", "pos", "create", "LIB KIOSK", *base])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "DUPLICATE_NAME"

    def test_env_database(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CAMPUSCOFFEE_DATABASE__URL", "sqlite:///from-env.db")
        assert cli_runner.invoke(cli, ["pos", "list"]).exit_code == 0
        assert (tmp_path / "from-env.db").exists()

    def test_log_json_keeps_stdout_clean(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "--log-json", "-v", "pos", "list"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["ok"] is True

    def test_case_policy_change_rekeys_names(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        base = ["--type", "CAFE", "--campus", "NORTH", "--street", "Main", "--house-number", "1"]
        base += ["--postal-code", "12345", "--city", "Town"]
        assert cli_runner.invoke(cli, ["pos", "create", "Lib Kiosk", *base]).exit_code == 0
        (tmp_path / "campuscoffee.toml").write_text("[pos]\ncase_sensitive_names = false\n")
        result = cli_runner.invoke(cli, ["--json", "pos", "get", "lib kiosk"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["name"] == "Lib Kiosk"

    def test_case_policy_collision_refuses_to_open(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        base = ["--type", "CAFE", "--campus", "NORTH", "--street", "Main", "--house-number", "1"]
        base += ["--postal-code", "12345", "--city", "Town"]
        assert cli_runner.invoke(cli, ["pos", "create", "Lib Kiosk", *base]).exit_code == 0
        assert cli_runner.invoke(cli, ["pos", "create", "LIB KIOSK", *base]).exit_code == 0
        (tmp_path / "campuscoffee.toml").write_text("[pos]\ncase_sensitive_names = false\n")
        result = cli_runner.invoke(cli, ["pos", "list"])
        assert result.exit_code == 1
        assert "Cannot open database" in result.stderr
        assert "collide" in result.stderr
