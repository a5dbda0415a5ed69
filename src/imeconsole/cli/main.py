"""CLI entry point for ime-console.

Invoked as::

    ime-console [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m imeconsole.cli.main

Commands
--------
run         Start the interactive console (reads commands from stdin)
engines     List registered engines
version     Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import IO

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from imeconsole.errors import ImeConsoleError

console = Console()
err_console = Console(stderr=True)


def _configure_logging(level: int) -> None:
    """Route log records to the diagnostic stream through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="ime-console")
def cli() -> None:
    """Interactive console multiplexing input method engine sessions."""


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from imeconsole import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]ime-console[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# engines command
# ---------------------------------------------------------------------------


@cli.command(name="engines")
def engines_command() -> None:
    """List all registered engines, including those loaded from entry-points."""
    from imeconsole.engine import engine_registry

    engine_registry.load_entrypoints()
    table = Table(title="Registered engines")
    table.add_column("Name", style="bold")
    table.add_column("Class")
    for name in engine_registry.list_engines():
        cls = engine_registry.get(name)
        table.add_row(name, f"{cls.__module__}.{cls.__qualname__}")
    console.print(table)


# ---------------------------------------------------------------------------
# run command
# ---------------------------------------------------------------------------


@cli.command(name="run")
@click.argument("script", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--engine", "engine_name", default=None, help="Registered engine to drive (default: memory)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file",
)
@click.option("--app-name", default=None, help="Application name passed to the engine")
@click.option(
    "--user-data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory where synchronized user data is written",
)
@click.option(
    "--no-full-check",
    is_flag=True,
    default=False,
    help="Skip the full maintenance check at startup and on reload",
)
@click.option("--max-line-length", type=click.IntRange(min=1), default=None, help="Reject longer input lines")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def run_command(
    script: IO[str],
    engine_name: str | None,
    config_path: Path | None,
    app_name: str | None,
    user_data_dir: Path | None,
    no_full_check: bool,
    max_line_length: int | None,
    verbose: bool,
) -> None:
    """Start the interactive console.

    Commands and key sequences are read one per line from SCRIPT, or from
    standard input when SCRIPT is omitted or "-".

    Examples:

    \b
        ime-console run
        ime-console run session.txt --engine memory
        echo "ni" | ime-console run --config console.yaml
    """
    from imeconsole.config import load_config
    from imeconsole.console.app import ConsoleApp
    from imeconsole.console.output import ConsoleOutput
    from imeconsole.engine import EngineNotFoundError, engine_registry

    try:
        config = load_config(config_path).with_overrides(
            engine=engine_name,
            app_name=app_name,
            user_data_dir=user_data_dir,
            full_check=False if no_full_check else None,
            max_line_length=max_line_length,
        )
    except ImeConsoleError as exc:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(1)

    _configure_logging(logging.DEBUG if verbose else config.log_level_number)

    engine_registry.load_entrypoints()
    try:
        engine = engine_registry.create(config.engine, **config.engine_options)
    except EngineNotFoundError:
        err_console.print(
            f"[red]Error:[/red] Unknown engine {config.engine!r}. "
            f"Available: {', '.join(engine_registry.list_engines())}"
        )
        sys.exit(1)
    except TypeError as exc:
        err_console.print(f"[red]Error:[/red] Invalid options for engine {config.engine!r}: {escape(str(exc))}")
        sys.exit(1)

    app = ConsoleApp(engine, config, ConsoleOutput())
    try:
        exit_code = app.run(script)
    except ImeConsoleError as exc:
        err_console.print(f"[red]Engine error:[/red] {escape(str(exc))}")
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
