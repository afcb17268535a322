"""
Expand command - show the recursive expansion of the macro at a position.
"""

import sys
from pathlib import Path

import click
from rich.syntax import Syntax

from ..config import load_config
from ..core.analysis import Analysis
from .helpers import console, resolve_position


@click.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--offset", "-o", type=int, default=None, help="Text offset of the cursor (0-based)")
@click.option("--line", "-l", type=int, default=None, help="Line of the cursor (1-based)")
@click.option("--column", "-c", type=int, default=None, help="Column of the cursor (1-based)")
@click.option("--max-depth", type=click.IntRange(min=0), default=None, help="Maximum nesting of expanded calls")
@click.option("--markdown", is_flag=True, help="Print a markdown code block instead of highlighted text")
def expand(file_path, offset, line, column, max_depth, markdown):
    """
    Recursively expand the macro invocation at a position in FILE_PATH.

    Examples:
        macroscope expand src/lib.rs --line 12 --column 5
        macroscope expand src/lib.rs --offset 348 --markdown
    """
    config = load_config(file_path)
    if max_depth is not None:
        config.max_expansion_depth = max_depth

    analysis = Analysis(config=config)
    try:
        text = analysis.file_text(file_path)
        position = resolve_position(file_path, text, offset, line, column)
        expanded = analysis.expand_macro(position)
    except (OSError, ValueError) as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    if expanded is None:
        console.print("[yellow]No macro invocation to expand at this position[/yellow]")
        sys.exit(1)

    if markdown:
        click.echo(expanded.to_markdown())
        return

    console.print(f"[bold cyan]// Recursive expansion of {expanded.name}! macro[/bold cyan]")
    console.print(Syntax(expanded.expansion.rstrip(), "rust", word_wrap=True))
