"""
CLI Main for mdevcallout
========================
Typer-based CLI for exercising installed callout and notification scripts.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..callouts import Action, CalloutError, get_attributes, invoke
from ..callouts.matcher import sorted_entries
from ..device import Environment, MDev
from ..utils import LogConfig, setup_logging

# Configure module logger
logger = logging.getLogger(__name__)

# Console for Rich output
console = Console()

app = typer.Typer(
    name="mdevcallout",
    help="Run mediated device callout scripts",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich"
)


class AppState:
    """Global application state"""
    env: Environment = Environment()
    verbose: bool = False


state = AppState()


def version_callback(value: bool):
    """Print version and exit"""
    if value:
        from .. import __version__
        console.print(f"mdevcallout v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    root: Optional[Path] = typer.Option(
        None,
        "--root", "-r",
        help="Prefix for the default script directories"
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="YAML configuration file"
    ),
    log_dir: Optional[Path] = typer.Option(
        None,
        "--log-dir", "-l",
        help="Also write a rotating log file to this directory"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output"
    ),
    version: bool = typer.Option(
        None,
        "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
):
    """
    Run the callout scripts configured for mediated devices.

    [dim]Examples:[/dim]
        mdevcallout scripts
        mdevcallout run <uuid> -p 0000:00:02.0 -t i915-GVTg_V5_4 -a define
        mdevcallout attributes <uuid> -p 0000:00:02.0 -t i915-GVTg_V5_4
    """
    state.verbose = verbose
    setup_logging(
        config=LogConfig(enable_file=log_dir is not None, log_dir=log_dir),
        verbose=verbose
    )
    state.env = Environment.from_config(config, root=root)


def load_device(
    uuid: str,
    parent: str,
    mdev_type: Optional[str],
    jsonfile: Optional[Path],
    attrs: List[str]
) -> MDev:
    """Build the device from options, or from a JSON definition file"""
    try:
        if jsonfile:
            with open(jsonfile) as f:
                dev = MDev.from_json(state.env, uuid, parent, json.load(f))
            if mdev_type:
                dev.mdev_type = mdev_type
        else:
            dev = MDev(state.env, uuid, parent=parent, mdev_type=mdev_type)
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid device: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    for attr in attrs:
        if "=" not in attr:
            console.print(f"[red]Attribute must be NAME=VALUE: {attr}[/red]")
            raise typer.Exit(1)
        name, value = attr.split("=", 1)
        dev.attrs.append((name, value))

    if dev.mdev_type is None:
        console.print("[red]Device type is required (--type or jsonfile)[/red]")
        raise typer.Exit(1)

    return dev


def fail(e: Exception):
    """Report an engine failure and exit"""
    if state.verbose:
        console.print_exception()
    else:
        console.print(f"[red]Error: {escape(str(e))}[/red]", soft_wrap=True)
    raise typer.Exit(1)


@app.command()
def run(
    uuid: str = typer.Argument(..., help="Device UUID"),
    parent: str = typer.Option(..., "--parent", "-p", help="Parent device"),
    mdev_type: Optional[str] = typer.Option(None, "--type", "-t", help="Device type"),
    action: Action = typer.Option(Action.DEFINE, "--action", "-a", help="Lifecycle action"),
    force: bool = typer.Option(False, "--force", "-f", help="Proceed even if a pre script rejects"),
    jsonfile: Optional[Path] = typer.Option(None, "--jsonfile", "-j", help="Device definition"),
    attr: List[str] = typer.Option([], "--attr", help="Device attribute as NAME=VALUE")
):
    """
    Run pre, post and notify scripts around a no-op action.
    """
    if action is Action.ATTRIBUTES:
        console.print("[red]attributes is not a lifecycle action; use the attributes command[/red]")
        raise typer.Exit(2)

    dev = load_device(uuid, parent, mdev_type, jsonfile, attr)

    try:
        invoke(dev, action, force, lambda d: None)
    except (CalloutError, OSError) as e:
        fail(e)

    console.print(Panel(
        f"[green]{action} callouts completed[/green]\n\n"
        f"Device: {dev.uuid}\n"
        f"Parent: {escape(dev.parent)}\n"
        f"Type: {escape(dev.mdev_type)}",
        title="Success",
        border_style="green"
    ))


@app.command()
def attributes(
    uuid: str = typer.Argument(..., help="Device UUID"),
    parent: str = typer.Option(..., "--parent", "-p", help="Parent device"),
    mdev_type: Optional[str] = typer.Option(None, "--type", "-t", help="Device type"),
    jsonfile: Optional[Path] = typer.Option(None, "--jsonfile", "-j", help="Device definition"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON")
):
    """Show the attributes reported by the device's Get script"""
    dev = load_device(uuid, parent, mdev_type, jsonfile, [])

    try:
        attrs = get_attributes(dev)
    except (CalloutError, OSError) as e:
        fail(e)

    if json_output:
        typer.echo(json.dumps(attrs))
        return

    if attrs is None:
        console.print("[dim]No callout script provides attributes for this device.[/dim]")
        return

    console.print_json(data=attrs)


@app.command()
def scripts():
    """List script directories and entries in the order they are tried"""
    table = Table(title="Callout Scripts", border_style="cyan")
    table.add_column("Kind", style="bold", no_wrap=True)
    table.add_column("Directory", overflow="fold")
    table.add_column("Entries", no_wrap=True)

    for kind, dirs in (
        ("callout", state.env.callout_dirs()),
        ("notifier", state.env.notification_dirs()),
    ):
        for directory in dirs:
            if not directory.is_dir():
                table.add_row(kind, str(directory), "[dim]missing[/dim]")
                continue
            # notifiers run in directory order; sorted here for display
            names = [p.name for p in sorted_entries(directory)]
            table.add_row(kind, str(directory), "\n".join(names) or "[dim]empty[/dim]")

    console.print(table)


def main_entry():
    """Entry point for the CLI"""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        sys.exit(130)


if __name__ == "__main__":
    main_entry()
