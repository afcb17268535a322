"""
Command-line interface for macroscope.
"""

import logging
import sys
from pathlib import Path

import click
from rich.table import Table

from .. import setup_logging
from ..core.analysis import Analysis, line_of_offset
from .expand import expand
from .helpers import console
from .render import render

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging")
def cli(verbose, debug):
    """Recursively expand declarative macros for reading."""
    if debug:
        setup_logging(logging.DEBUG)
    elif verbose:
        setup_logging(logging.INFO)
    else:
        setup_logging(logging.WARNING)


# Register commands
cli.add_command(expand)
cli.add_command(render)


@cli.command("list-macros")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def list_macros(file_path):
    """List the macro_rules! definitions in FILE_PATH."""
    analysis = Analysis()
    try:
        text = analysis.file_text(file_path)
        definitions = analysis.macro_definitions(file_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    if not definitions:
        console.print(f"[yellow]No macro_rules! definitions in {file_path}[/yellow]")
        return

    table = Table(title=f"Macros in {file_path.name}")
    table.add_column("Macro", style="cyan")
    table.add_column("Rules", style="green", justify="right")
    table.add_column("Line", justify="right")

    for definition in definitions:
        table.add_row(f"{definition.name}!", str(len(definition.rules)), str(line_of_offset(text, definition.offset)))

    console.print(table)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
