"""
Expansion settings and per-project configuration.

Projects can tune expansion with a .macroscope.py file placed anywhere
between the expanded source file and the project root. If the file
defines `configure(config)`, it is called with the ExpandConfig to adjust.
"""

import importlib.util
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".macroscope.py"
DEFAULT_MAX_EXPANSION_DEPTH = 32


@dataclass
class ExpandConfig:
    """Settings for recursive expansion."""

    # Nested calls deeper than this are left unexpanded
    max_expansion_depth: int = DEFAULT_MAX_EXPANSION_DEPTH

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check the settings.

        Raises:
            ValueError: If max_expansion_depth is negative
        """
        if self.max_expansion_depth < 0:
            raise ValueError(f"max_expansion_depth must be non-negative, got {self.max_expansion_depth}")


class ConfigProvider(Protocol):
    """Protocol for .macroscope.py files (optional - for type checking)."""

    def configure(self, config: ExpandConfig) -> None:
        """
        Adjust expansion settings for this project.

        Args:
            config: The ExpandConfig to modify in place
        """
        ...


def find_config_file(start_path: Path, boundary: Optional[Path] = None) -> Optional[Path]:
    """
    Find .macroscope.py by walking up from start_path.

    Args:
        start_path: File or directory to start searching from
        boundary: Directory the search must not leave (default: filesystem root)

    Returns:
        Path to .macroscope.py if found, None otherwise
    """
    current = Path(start_path).resolve()
    if current.is_file():
        current = current.parent
    limit = Path(boundary).resolve() if boundary else None

    while True:
        config_file = current / CONFIG_FILENAME
        if config_file.exists():
            logger.info(f"Found config file at {config_file}")
            return config_file

        if limit is not None and current == limit:
            break
        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    return None


def load_config(start_path: Path, boundary: Optional[Path] = None, config: Optional[ExpandConfig] = None) -> ExpandConfig:
    """
    Build the ExpandConfig for a file, applying .macroscope.py if found.

    Errors in the project file are logged and the defaults are kept.
    """
    config = config or ExpandConfig()

    config_file = find_config_file(start_path, boundary)
    if not config_file:
        return config

    try:
        spec = importlib.util.spec_from_file_location("macroscope_project_config", config_file)
        if not spec or not spec.loader:
            logger.warning(f"Could not load {config_file}")
            return config

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        if hasattr(module, "configure"):
            # Adjust a copy so a failing hook leaves config untouched
            candidate = replace(config)
            module.configure(candidate)
            candidate.validate()
            config.max_expansion_depth = candidate.max_expansion_depth
            logger.info(f"Loaded config from {config_file}")
        else:
            logger.warning(f"{config_file} missing configure function")

    except Exception as e:
        logger.error(f"Error loading config from {config_file}: {e}")
        # Don't crash - just continue with the defaults

    return config
