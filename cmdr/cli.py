"""
Command Line Interface for cmdr.

Render templates, run one-off commands or named catalog entries, and start
detached background processes from the terminal.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cmdr.core.base import Command, Param, Runtime
from cmdr.core.catalog import CommandCatalog
from cmdr.core.config import CmdrConfig, runner_from_config
from cmdr.core.exceptions import CmdrError
from cmdr.core.observability import configure_logging
from cmdr.core.redact import redact_text
from cmdr.core.template import render as render_template
from cmdr.utils.deadline import run_with_deadline

# Exit status for failures raised by cmdr itself
ERROR_EXIT_CODE = 2

console = Console()
app = typer.Typer(help="cmdr - run parameterized command templates")

state = {"config": CmdrConfig()}


def parse_params(named: Optional[List[str]], bare: Optional[List[str]]) -> List[Param]:
    """Build Params from NAME=VALUE strings followed by bare values."""
    params: List[Param] = []
    for item in named or []:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"expected NAME=VALUE, got {item!r}")
        params.append(Param(name, value))
    params.extend(Param("", value) for value in bare or [])
    return params


def _fail(error: CmdrError) -> None:
    console.print(f"[red]{escape(str(error))}[/red]")
    raise typer.Exit(ERROR_EXIT_CODE)


def _print_runtime(runtime: Runtime, output_format: str, redact: bool) -> None:
    if output_format == "json":
        data = runtime.to_dict()
        if redact:
            data["cmd"] = redact_text(data["cmd"])
            data["stdout"] = redact_text(data["stdout"])
            data["stderr"] = redact_text(data["stderr"])
        print(json.dumps(data, indent=2))
        return
    text = str(runtime).strip("\n")
    if redact:
        text = redact_text(text)
    style = "green" if runtime.rc == 0 else "red"
    console.print(
        Panel(escape(text), title=f"session {runtime.sid}", border_style=style)
    )


def _invoke(command: Command, params: List[Param], timeout: Optional[float]) -> Runtime:
    config: CmdrConfig = state["config"]
    runner = runner_from_config(config)
    timeout = timeout or config.runner.default_timeout
    if timeout:
        return asyncio.run(run_with_deadline(runner, command, *params, timeout=timeout))
    return runner.run(command, *params)


def _load_catalog(catalog: Optional[Path]) -> CommandCatalog:
    path = catalog or state["config"].catalog
    if not path:
        console.print("[red]No catalog given; use --catalog or CMDR_CATALOG[/red]")
        raise typer.Exit(ERROR_EXIT_CODE)
    return CommandCatalog.load(path)


@app.callback()
def setup(
    debug: bool = typer.Option(False, help="Enable debug logging"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML or JSON configuration file"
    ),
):
    """Load configuration and set up logging."""
    load_dotenv()
    try:
        cfg = CmdrConfig.load_from_file(config) if config else CmdrConfig.load_from_env()
    except CmdrError as e:
        _fail(e)
    if debug:
        cfg.logging.level = "DEBUG"
    state["config"] = cfg
    configure_logging(
        cfg.logging.level, Path(cfg.logging.file) if cfg.logging.file else None
    )
    # Errors are already reported on the console
    logging.getLogger("cmdr").setLevel(
        logging.NOTSET if debug or cfg.logging.file else logging.CRITICAL
    )


@app.command()
def render(
    template: str = typer.Argument(..., help="Argument template"),
    param: Optional[List[str]] = typer.Option(
        None, "--param", "-p", help="Named parameter as NAME=VALUE"
    ),
    arg: Optional[List[str]] = typer.Option(
        None, "--arg", "-a", help="Bare value appended to the arguments"
    ),
):
    """Render a template and print the resulting argument text."""
    try:
        print(render_template(template, parse_params(param, arg)))
    except CmdrError as e:
        _fail(e)


@app.command("exec")
def exec_command(
    path: str = typer.Argument(..., help="Executable name or path"),
    template: str = typer.Argument("", help="Argument template"),
    param: Optional[List[str]] = typer.Option(
        None, "--param", "-p", help="Named parameter as NAME=VALUE"
    ),
    arg: Optional[List[str]] = typer.Option(
        None, "--arg", "-a", help="Bare value appended to the arguments"
    ),
    dir: Optional[str] = typer.Option(None, "--dir", help="Working directory"),
    user: Optional[str] = typer.Option(None, "--user", help="Run as this user"),
    timeout: Optional[float] = typer.Option(None, help="Deadline in seconds"),
    output_format: str = typer.Option("text", "--format", help="Output format (text/json)"),
    redact: bool = typer.Option(False, help="Redact secrets from printed output"),
):
    """Run a single command and exit with its return code."""
    command = Command(path=path, params=template, dir=dir, user=user)
    try:
        runtime = _invoke(command, parse_params(param, arg), timeout)
    except CmdrError as e:
        _fail(e)
    _print_runtime(runtime, output_format, redact)
    raise typer.Exit(runtime.rc if runtime.rc >= 0 else 1)


@app.command()
def run(
    name: str = typer.Argument(..., help="Catalog entry to run"),
    param: Optional[List[str]] = typer.Option(
        None, "--param", "-p", help="Named parameter as NAME=VALUE"
    ),
    arg: Optional[List[str]] = typer.Option(
        None, "--arg", "-a", help="Bare value appended to the arguments"
    ),
    catalog: Optional[Path] = typer.Option(None, help="Catalog YAML file"),
    timeout: Optional[float] = typer.Option(None, help="Deadline in seconds"),
    output_format: str = typer.Option("text", "--format", help="Output format (text/json)"),
    redact: bool = typer.Option(False, help="Redact secrets from printed output"),
):
    """Run a named command from the catalog."""
    try:
        command = _load_catalog(catalog).get(name)
        runtime = _invoke(command, parse_params(param, arg), timeout)
    except CmdrError as e:
        _fail(e)
    _print_runtime(runtime, output_format, redact)
    raise typer.Exit(runtime.rc if runtime.rc >= 0 else 1)


@app.command("list")
def list_commands(
    catalog: Optional[Path] = typer.Option(None, help="Catalog YAML file"),
):
    """Show the commands in the catalog."""
    try:
        cat = _load_catalog(catalog)
    except CmdrError as e:
        _fail(e)
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Path")
    table.add_column("Template")
    table.add_column("Dir")
    table.add_column("User")
    for name in cat.names():
        c = cat.get(name)
        table.add_row(name, c.path, escape(c.params), c.dir or "", c.user or "")
    console.print(table)


@app.command()
def background(
    path: str = typer.Argument(..., help="Executable name or path"),
    dir: Optional[str] = typer.Option(None, "--dir", help="Working directory"),
):
    """Start an executable detached and print its process id."""
    runner = runner_from_config(state["config"])
    try:
        pid = runner.background(Command(path=path, dir=dir))
    except CmdrError as e:
        _fail(e)
    print(pid)


def main():
    """Main CLI entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
