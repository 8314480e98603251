"""ttywho CLI - command-line interface."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ttywho import __version__
from ttywho.config import ConfigError, TtywhoConfig, load_config
from ttywho.monitor import collect_snapshot
from ttywho.render import ColorRenderer, PlainRenderer, build_lines, terminal_width

app = typer.Typer(
    name="ttywho",
    help="Show who is logged in on each terminal and what they are running, multiplexers included.",
    add_completion=False,
)

err_console = Console(stderr=True)


def version_callback(value: bool):
    if value:
        typer.echo(f"ttywho {__version__}")
        raise typer.Exit()


def setup_logging(debug: bool) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=debug)],
        force=True,
    )


def resolve_config(
    config_file: Optional[Path],
    proc_root: Optional[str],
    dev_root: Optional[str],
) -> TtywhoConfig:
    """Load the config file and apply command-line overrides on top."""
    config = load_config(config_file)
    overrides = {}
    if proc_root is not None:
        overrides["proc_root"] = proc_root
    if dev_root is not None:
        overrides["dev_root"] = dev_root
    return config.model_copy(update=overrides) if overrides else config


@app.command()
def main(
    color: Optional[bool] = typer.Option(
        None,
        "--color/--plain",
        help="Colour the output. Defaults to colour when stdout is a terminal.",
    ),
    browse: bool = typer.Option(
        False,
        "--browse",
        "-b",
        help="Open the snapshot in an interactive table instead of printing it.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: ~/.config/ttywho/config.yaml or $TTYWHO_CONFIG).",
    ),
    proc_root: Optional[str] = typer.Option(None, "--proc-root", help="Process table root."),
    dev_root: Optional[str] = typer.Option(None, "--dev-root", help="Device node root."),
    width: Optional[int] = typer.Option(None, "--width", "-w", min=1, help="Clip lines to this width."),
    debug: bool = typer.Option(False, "--debug", help="Log skipped terminals and processes."),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Report terminal occupancy once and exit."""
    setup_logging(debug)

    try:
        config = resolve_config(config_file, proc_root, dev_root)
    except ConfigError as exc:
        err_console.print(f"[red]ttywho:[/red] {exc}", highlight=False)
        raise typer.Exit(code=2)

    if browse:
        from ttywho.app import TtywhoApp

        TtywhoApp(lambda: collect_snapshot(config)).run()
        return

    snapshot = collect_snapshot(config)
    lines = build_lines(snapshot)

    if color is None:
        color = sys.stdout.isatty()

    width = width or terminal_width(config.fallback_width)
    if color:
        console = Console(highlight=False, width=width)
        ColorRenderer(console, config.palette, width=width).render(lines)
    else:
        PlainRenderer(sys.stdout, width).render(lines)


def run() -> None:
    """Console script entry point."""
    app()
