"""
Language-specific source parsers.
"""

import logging
from pathlib import Path

from .rust import RustParser

logger = logging.getLogger(__name__)

# Map file extensions to parsers
PARSERS = {
    ".rs": RustParser,
}


def get_parser(file_path: Path):
    """
    Get the appropriate parser for a file based on its extension.

    Args:
        file_path: Path to the file

    Returns:
        A parser instance

    Raises:
        ValueError: If no parser is available for the file type
    """
    suffix = Path(file_path).suffix.lower()

    if suffix not in PARSERS:
        supported = ", ".join(PARSERS.keys())
        raise ValueError(f"No parser for {suffix or 'extensionless'} files. Supported: {supported}")

    parser_class = PARSERS[suffix]
    return parser_class()


__all__ = ["get_parser", "RustParser"]
