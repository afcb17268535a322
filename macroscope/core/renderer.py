"""
Jinja2 template rendering with a macro expansion function.
"""

import logging
from pathlib import Path
from typing import Optional

import jinja2

from ..config import ExpandConfig
from .analysis import Analysis, FilePosition, line_of_offset, offset_from_line_column

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Render Jinja2 templates that embed macro expansions."""

    def __init__(self, template_dir: Path = None, repo_path: Path = None, config: Optional[ExpandConfig] = None):
        """
        Initialize the renderer.

        Args:
            template_dir: Directory containing templates (default: current dir)
            repo_path: Repository root path (default: current dir)
            config: Expansion settings (default: per-file .macroscope.py)
        """
        self.template_dir = template_dir or Path.cwd()
        self.repo_path = repo_path or Path.cwd()
        self.analysis = Analysis(config=config)

        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True
        )

        self.env.globals['expand'] = self._expand_function

    def _expand_function(self,
                         file_path: str,
                         line: int = None,
                         column: int = None,
                         offset: int = None,
                         macro: str = None) -> str:
        """
        Expansion function for templates.

        Args:
            file_path: Path to the source file, relative to the repo
            line: 1-based line of the cursor (with column)
            column: 1-based column of the cursor (with line)
            offset: Text offset of the cursor
            macro: Expand the first call of this macro instead

        Returns:
            Location header plus the expansion as a markdown code block

        Examples in templates:
            {{ expand('src/lib.rs', line=12, column=5) }}
            {{ expand('src/lib.rs', macro='vec_of') }}
        """
        try:
            file_path = Path(file_path)
            if not file_path.is_absolute():
                file_path = self.repo_path / file_path

            text = self.analysis.file_text(file_path)
            if macro:
                position = self.analysis.find_macro_call(file_path, macro)
                if position is None:
                    return f"❌ **ERROR**: No call to {macro}! in {file_path}"
            elif line is not None and column is not None:
                position = FilePosition(file_path, offset_from_line_column(text, line, column))
            elif offset is not None:
                position = FilePosition(file_path, offset)
            else:
                return f"❌ **ERROR**: Must specify line and column, offset, or macro for {file_path}"

            expanded = self.analysis.expand_macro(position)
            if expanded is None:
                return f"❌ **ERROR**: Nothing to expand at {file_path}:{line_of_offset(text, position.offset)}"

            try:
                rel_path = file_path.relative_to(self.repo_path)
            except ValueError:
                rel_path = file_path
            header = f"📍 `{rel_path}:{line_of_offset(text, position.offset)}`"
            logger.info(f"Expanded {expanded.name}! from {file_path}")
            return f"{header}\n{expanded.to_markdown()}"

        except Exception as e:
            error_msg = f"❌ **ERROR**: {e}"
            logger.error(f"Macro expansion failed: {e}")
            return error_msg

    def render_template(self, template_name: str, **context) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of the template file
            **context: Additional context variables

        Returns:
            Rendered template as string
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except jinja2.TemplateNotFound:
            logger.error(f"Template not found: {template_name}")
            raise
        except Exception as e:
            logger.error(f"Template rendering failed: {e}")
            raise

    def render_string(self, source: str, **context) -> str:
        """Render template source text (e.g. read from stdin)."""
        return self.env.from_string(source).render(**context)

    def render_template_file(self, template_path: Path, output_path: Path = None, **context):
        """
        Render a template file and optionally save the output.

        Args:
            template_path: Path to the template file
            output_path: Optional path to save the output
            **context: Additional context variables

        Returns:
            Rendered template as string
        """
        # Get template name relative to template_dir
        if template_path.is_absolute():
            template_name = template_path.relative_to(self.template_dir)
        else:
            template_name = template_path

        rendered = self.render_template(template_name.as_posix(), **context)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(rendered)
            logger.info(f"Rendered {template_name} -> {output_path}")

        return rendered
