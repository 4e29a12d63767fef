"""CLI smoke tests using typer's CliRunner."""

import json
import logging
from dataclasses import dataclass

import pytest
from typer.testing import CliRunner

from specimen import __version__
from specimen.cli.app import app
from specimen.cli.commands import config_cmd

runner = CliRunner()


@dataclass
class Node:
    value: int
    next: "Node | None" = None


@dataclass
class Order:
    reference: str
    quantity: int


@pytest.fixture(autouse=True)
def cli_config(isolated_config, monkeypatch):
    """Keep the config command on the isolated config file."""
    monkeypatch.setattr(config_cmd, "CONFIG_FILE", isolated_config)
    yield isolated_config
    logging.getLogger("specimen").setLevel(logging.NOTSET)


def invoke_json(*args):
    result = runner.invoke(app, ["--json", *args])
    return result, json.loads(result.stdout)


class TestVersionFlag:
    def test_version_output(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"specimen {__version__}" in result.output


class TestCreateCommand:
    def test_create_builtin(self):
        result = runner.invoke(app, ["create", "int"])
        assert result.exit_code == 0
        assert "Created 1 specimen(s) of int" in result.output

    def test_create_json(self):
        result, data = invoke_json("create", "builtins:int", "-n", "2", "--seed", "5")
        assert result.exit_code == 0
        assert data["status"] == "success"
        assert data["exit_code"] == 0
        assert data["seed"] == 5
        assert data["count"] == 2
        assert len(data["specimens"]) == 2
        assert all(isinstance(s, int) for s in data["specimens"])

    def test_create_dataclass_json(self):
        _, data = invoke_json("create", f"{__name__}:Order")
        [order] = data["specimens"]
        assert order["reference"].startswith("reference")
        assert isinstance(order["quantity"], int)

    def test_seed_is_reproducible(self):
        _, first = invoke_json("create", "uuid:UUID", "--seed", "3")
        _, second = invoke_json("create", "uuid:UUID", "--seed", "3")
        assert first["specimens"] == second["specimens"]

    def test_count_must_be_positive(self):
        result = runner.invoke(app, ["create", "int", "-n", "0"])
        assert result.exit_code != 0

    def test_unknown_type(self):
        result, data = invoke_json("create", "no_such_module:Thing")
        assert result.exit_code == 3
        assert data["status"] == "error"
        assert "no_such_module" in data["errors"][0]["message"]

    def test_unresolvable_type(self):
        result = runner.invoke(app, ["create", "typing:Any"])
        assert result.exit_code == 4
        assert "No builder could create" in result.output

    def test_cycle(self):
        result, data = invoke_json("create", f"{__name__}:Node")
        assert result.exit_code == 5
        assert "Recursion detected" in data["errors"][0]["message"]

    def test_recursion_handler_from_config(self):
        runner.invoke(app, ["config", "set", "engine.recursion_handler", "omit"])
        result, data = invoke_json("create", f"{__name__}:Node")
        assert result.exit_code == 0
        assert data["specimens"][0]["next"] is None

    def test_trace_human(self):
        result = runner.invoke(app, ["create", f"{__name__}:Order", "--trace"])
        assert result.exit_code == 0
        assert "Requested:" in result.output
        assert "  Requested:" in result.output

    def test_trace_json(self):
        _, data = invoke_json("create", "int", "--trace")
        assert data["trace"][0].startswith("Requested:")
        assert data["trace"][-1].startswith("Created:")

    def test_profile(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("inject:\n  - type: int\n    value: 7\n")
        result, data = invoke_json("create", "int", "--profile", str(profile))
        assert result.exit_code == 0
        assert data["specimens"] == [7]

    def test_bad_profile(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("- not\n- a mapping\n")
        result = runner.invoke(app, ["create", "int", "--profile", str(profile)])
        assert result.exit_code == 1


class TestConfigCommand:
    def test_config_show(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Engine" in result.output
        assert "Generator" in result.output

    def test_config_show_json(self):
        result, data = invoke_json("config", "show")
        assert result.exit_code == 0
        assert data["config"]["engine"]["repeat_count"] == 3

    def test_config_set_and_reset(self, cli_config):
        result = runner.invoke(app, ["config", "set", "engine.repeat_count", "5"])
        assert result.exit_code == 0
        assert json.loads(cli_config.read_text())["engine"]["repeat_count"] == 5

        _, data = invoke_json("create", "builtins:list")
        assert len(data["specimens"][0]) == 5

        result = runner.invoke(app, ["config", "reset"])
        assert result.exit_code == 0
        assert not cli_config.exists()

    def test_config_set_seed_none(self, cli_config):
        runner.invoke(app, ["config", "set", "generator.seed", "42"])
        assert json.loads(cli_config.read_text())["generator"]["seed"] == 42
        result = runner.invoke(app, ["config", "set", "generator.seed", "none"])
        assert result.exit_code == 0
        assert json.loads(cli_config.read_text())["generator"]["seed"] is None

    def test_config_set_does_not_persist_env_overrides(self, cli_config, monkeypatch):
        monkeypatch.setenv("SPECIMEN_REPEAT_COUNT", "9")
        runner.invoke(app, ["config", "set", "generator.faker_locale", "nl_NL"])
        saved = json.loads(cli_config.read_text())
        assert saved["engine"]["repeat_count"] == 3
        assert saved["generator"]["faker_locale"] == "nl_NL"

    def test_config_set_invalid_key(self):
        result = runner.invoke(app, ["config", "set", "invalid.key", "value"])
        assert result.exit_code == 1
        assert "Unknown key" in result.output

    def test_config_set_invalid_int_value(self):
        result = runner.invoke(app, ["config", "set", "engine.repeat_count", "abc"])
        assert result.exit_code == 1
        assert "Invalid integer" in result.output

    def test_config_set_out_of_range(self):
        result = runner.invoke(app, ["config", "set", "engine.recursion_depth", "0"])
        assert result.exit_code == 1
        assert "Invalid value" in result.output

    def test_config_set_invalid_handler(self):
        result = runner.invoke(app, ["config", "set", "engine.recursion_handler", "skip"])
        assert result.exit_code == 1
        assert "Invalid recursion handler" in result.output

    def test_config_set_missing_args(self):
        result = runner.invoke(app, ["config", "set"])
        assert result.exit_code == 1

    def test_config_unknown_action(self):
        result = runner.invoke(app, ["config", "unknown_action"])
        assert result.exit_code == 1
        assert "Unknown action" in result.output
