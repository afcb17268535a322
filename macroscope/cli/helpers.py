"""
Shared helpers for CLI commands.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ..core.analysis import FilePosition, offset_from_line_column

# Shared console instance
console = Console()


def resolve_position(
    file_path: Path,
    text: str,
    offset: Optional[int],
    line: Optional[int],
    column: Optional[int],
) -> FilePosition:
    """
    Turn --offset or --line/--column into a FilePosition.

    Raises:
        click.UsageError: If neither or both forms are given, or the
            position is outside the file
    """
    if offset is not None and (line is not None or column is not None):
        raise click.UsageError("Use either --offset or --line/--column, not both")

    if offset is not None:
        if offset < 0 or offset > len(text):
            raise click.UsageError(f"Offset {offset} is outside the file ({len(text)} characters)")
        return FilePosition(file_path, offset)

    if line is None or column is None:
        raise click.UsageError("Specify --offset, or both --line and --column")

    try:
        return FilePosition(file_path, offset_from_line_column(text, line, column))
    except ValueError as e:
        raise click.UsageError(str(e))
