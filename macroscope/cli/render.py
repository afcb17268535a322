"""
Render command for processing Jinja2 templates.
"""

import sys
from pathlib import Path

import click

from ..core.renderer import TemplateRenderer
from .helpers import console


@click.command()
@click.argument("input_path", type=click.Path(path_type=Path))
@click.argument("output_path", type=click.Path(path_type=Path), required=False)
@click.option(
    "--repo-path", "-r", type=click.Path(exists=True, path_type=Path), default=Path.cwd(), help="Repository root path"
)
def render(input_path, output_path, repo_path):
    """
    Render a Jinja2 template that embeds macro expansions.

    INPUT_PATH is a .j2 file, or '-' for stdin.
    OUTPUT_PATH is a file, or '-' for stdout. If omitted, foo.md.j2 renders
    to foo.md (stdin renders to stdout).

    Examples:
        macroscope render docs/macros.md.j2
        macroscope render docs/macros.md.j2 -
        echo "{{ expand('src/lib.rs', macro='foo') }}" | macroscope render - -
    """
    if str(input_path) == "-":
        renderer = TemplateRenderer(template_dir=Path.cwd(), repo_path=repo_path)
        rendered = renderer.render_string(sys.stdin.read())
        if output_path is None or str(output_path) == "-":
            click.echo(rendered)
        else:
            output_path.write_text(rendered)
            console.print(f"[green]✓[/green] Rendered stdin -> {output_path}")
        return

    if not input_path.is_file():
        console.print(f"[red]✗ Template not found: {input_path}[/red]")
        sys.exit(1)

    to_stdout = output_path is not None and str(output_path) == "-"
    if output_path is None:
        if input_path.suffix != ".j2":
            console.print("[red]✗ Input file must have .j2 extension for in-place rendering[/red]")
            sys.exit(1)
        output_path = input_path.with_suffix("")

    input_path = input_path.resolve()
    renderer = TemplateRenderer(template_dir=input_path.parent, repo_path=repo_path)
    try:
        rendered = renderer.render_template_file(
            input_path, output_path=None if to_stdout else output_path
        )
    except Exception as e:
        console.print(f"[red]✗ Failed to render {input_path.name}: {e}[/red]")
        sys.exit(1)

    if to_stdout:
        click.echo(rendered)
    else:
        console.print(f"[green]✓[/green] Rendered {input_path.name} -> {output_path}")
