"""pyguard CLI — Typer entry point with Rich formatting."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pyguard.guardfile import DEFAULT_GUARDFILE, GuardfileError, GuardfileEvaluator, GuardfileNotFoundError
from pyguard.packages import PackageNotFoundError
from pyguard.plugin_util import PluginUtil, short_name
from pyguard.session import Session
from pyguard.settings import load_settings

app = typer.Typer(
    name="pyguard",
    help="pyguard — discover, inspect and scaffold Guard plugins.",
    no_args_is_help=True,
)
console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a pyguard settings YAML file"),
]


def _session(config: Path | None) -> Session:
    """Load settings and build a session, exiting cleanly on bad config."""
    try:
        settings = load_settings(config)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    return Session(settings=settings)


def _included_plugins(guardfile: Path) -> set[str]:
    evaluator = GuardfileEvaluator(guardfile)
    try:
        evaluator.evaluate()
    except GuardfileNotFoundError:
        return set()
    return {short_name(spec.name) for spec in evaluator.plugins}


@app.command(name="list")
def list_cmd(config: ConfigOption = None) -> None:
    """List installed plugins and whether the Guardfile uses them."""
    session = _session(config)
    names = sorted(PluginUtil.plugin_names(session.packages, session.settings.ignored_packages))

    if not names:
        console.print("[dim]No plugins found.[/dim]")
        return

    try:
        included = _included_plugins(session.settings.guardfile_path())
    except GuardfileError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    table = Table(title="Available Guard plugins")
    table.add_column("Plugin", style="magenta")
    table.add_column("Guardfile")

    for name in names:
        mark = "[green]yes[/green]" if name in included else "[dim]no[/dim]"
        table.add_row(escape(name), mark)

    console.print(table)


@app.command()
def init(
    names: Annotated[list[str] | None, typer.Argument(help="Plugins to add (default: all installed)")] = None,
    config: ConfigOption = None,
) -> None:
    """Create a Guardfile if needed and add plugin templates to it."""
    session = _session(config)
    guardfile = session.settings.guardfile_path()

    if not guardfile.exists():
        guardfile.write_text(DEFAULT_GUARDFILE, encoding="utf-8")
        console.print(f"Writing new Guardfile to {guardfile.resolve()}")

    if not names:
        names = sorted(PluginUtil.plugin_names(session.packages, session.settings.ignored_packages))

    failed = False
    for name in names:
        try:
            session.plugin_util(name).add_to_guardfile()
        except GuardfileError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1) from exc
        except PackageNotFoundError as exc:
            console.print(f"[red]Could not find the guard-{name} package: {exc}[/red]")
            failed = True
        except OSError as exc:
            console.print(f"[red]Could not add {name} to the Guardfile: {exc}[/red]")
            failed = True

    if failed:
        raise typer.Exit(code=1)


@app.command()
def show(config: ConfigOption = None) -> None:
    """Show the plugins declared in the Guardfile."""
    session = _session(config)

    try:
        results = session.load_guardfile()
    except GuardfileError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if not results:
        console.print("[dim]The Guardfile declares no plugins.[/dim]")
        return

    table = Table(title="Guardfile plugins")
    table.add_column("Group", style="cyan")
    table.add_column("Plugin", style="magenta")
    table.add_column("Options")
    table.add_column("Status")

    for result in results:
        spec = result.spec
        options = ", ".join(f"{key}={value!r}" for key, value in spec.options.items()) or "-"
        status = "[green]loaded[/green]" if result.ok else "[red]unavailable[/red]"
        table.add_row(escape(spec.group), escape(spec.name), escape(options), status)

    console.print(table)
