import json

import pytest
import typer
from typer.testing import CliRunner

from cmdr.cli import app, parse_params
from cmdr.core.base import Param

CATALOG = """
commands:
  greet:
    path: echo
    params: "hello [{{WHO}}]"
  fail: "false"
"""


@pytest.fixture
def cli():
    return CliRunner()


@pytest.fixture
def catalog_file(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(CATALOG)
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("CMDR_LOG_LEVEL", "CMDR_LOG_FILE", "CMDR_CATALOG", "CMDR_ENCODING", "CMDR_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)


def test_parse_params_named_then_bare():
    params = parse_params(["WHAT=a=b", "EVER="], ["x"])
    assert params == [Param("WHAT", "a=b"), Param("EVER", ""), Param("", "x")]


def test_parse_params_rejects_missing_name():
    with pytest.raises(typer.BadParameter):
        parse_params(["novalue"], None)
    with pytest.raises(typer.BadParameter):
        parse_params(["=value"], None)


def test_help_lists_commands(cli):
    result = cli.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in ("render", "exec", "run", "list", "background"):
        assert name in result.output


def test_render(cli):
    result = cli.invoke(app, ["render", "-p", "WHAT=-a", "-a", "x", "--", "-l {{WHAT}} [{{EVER}}]"])
    assert result.exit_code == 0
    assert result.output.strip() == "-l -a  x"


def test_render_incomplete(cli):
    result = cli.invoke(app, ["render", "{{WHAT}}"])
    assert result.exit_code == 2
    assert "INCOMPLETE" in result.output


def test_exec_text(cli):
    result = cli.invoke(app, ["exec", "echo", "{{WHAT}}", "-p", "WHAT=hi-there"])
    assert result.exit_code == 0
    assert "hi-there" in result.output
    assert "RC : 0" in result.output


def test_exec_json(cli):
    result = cli.invoke(app, ["exec", "--format", "json", "echo", "{{WHAT}}", "-p", "WHAT=hi"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["stdout"] == "hi\n"
    assert data["rc"] == 0
    assert data["sid"] == 1


def test_exec_exits_with_child_code(cli):
    result = cli.invoke(app, ["exec", "false"])
    assert result.exit_code == 1


def test_exec_missing_executable(cli):
    result = cli.invoke(app, ["exec", "/does/not/exist"])
    assert result.exit_code == 2
    assert "NO_SUCH_FILE" in result.output


def test_exec_with_timeout(cli):
    result = cli.invoke(app, ["exec", "--timeout", "0.2", "sleep", "5"])
    assert result.exit_code == 2
    assert "TIMEOUT" in result.output


def test_exec_redacts_output(cli, monkeypatch):
    monkeypatch.setenv("CMDR_TEST_SECRET", "classified-value")
    result = cli.invoke(
        app, ["exec", "--redact", "--format", "json", "echo", "classified-value"]
    )
    assert result.exit_code == 0
    assert "classified-value" not in result.stdout


def test_list(cli, catalog_file):
    result = cli.invoke(app, ["list", "--catalog", str(catalog_file)])
    assert result.exit_code == 0
    assert "greet" in result.output
    assert "fail" in result.output


def test_run_catalog_entry(cli, catalog_file):
    result = cli.invoke(
        app,
        ["run", "greet", "-p", "WHO=world", "--catalog", str(catalog_file), "--format", "json"],
    )
    assert result.exit_code == 0
    assert json.loads(result.stdout)["stdout"] == "hello world\n"


def test_run_catalog_from_environment(cli, catalog_file, monkeypatch):
    monkeypatch.setenv("CMDR_CATALOG", str(catalog_file))
    result = cli.invoke(app, ["run", "fail"])
    assert result.exit_code == 1


def test_run_unknown_entry(cli, catalog_file):
    result = cli.invoke(app, ["run", "reboot", "--catalog", str(catalog_file)])
    assert result.exit_code == 2
    assert "Unknown command" in result.output


def test_run_without_catalog(cli):
    result = cli.invoke(app, ["run", "greet"])
    assert result.exit_code == 2


def test_config_file(cli, tmp_path, catalog_file):
    config = tmp_path / "cmdr.yaml"
    config.write_text(f"catalog: {catalog_file}\n")
    result = cli.invoke(app, ["--config", str(config), "run", "greet", "--format", "json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["stdout"] == "hello\n"


def test_background_missing_executable(cli):
    result = cli.invoke(app, ["background", "/does/not/exist"])
    assert result.exit_code == 2
