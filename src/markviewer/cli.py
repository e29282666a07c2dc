"""CLI interface: render, pdf, highlight, css, paste-image, stats and init-config subcommands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .commands import highlight_code_block, render_markdown, save_pasted_image
from .config import MARGINS, PAGE_SIZES, ViewerConfig, load_config, write_config
from .errors import MarkviewerError
from .highlighter import THEME_STYLES
from .log_renderer import parse_log_content
from .models import PdfExportOptions, RenderOptions
from .stats import count_characters, count_words
from .themes import highlight_css

console = Console(stderr=True)

THEME_CHOICE = click.Choice(list(THEME_STYLES))


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Could not read {path}: {e}") from e


@click.group()
@click.version_option(package_name="markviewer")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to a markviewer.yaml config file.",
)
@click.option(
    "--verbose", "-v", is_flag=True, default=False, help="Show debug logging."
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool):
    """Render Markdown documents to HTML or PDF with highlighted code."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    try:
        ctx.obj = load_config(config_path)
    except MarkviewerError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output HTML file (defaults to SOURCE with an .html suffix).",
)
@click.option("--theme", type=THEME_CHOICE, default=None, help="Display theme.")
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the raw render result (html + special blocks) as JSON.",
)
@click.option(
    "--static",
    is_flag=True,
    default=False,
    help="Show diagram/chart source instead of loading the client-side renderer.",
)
@click.pass_obj
def render(
    config: ViewerConfig,
    source: Path,
    output: Path | None,
    theme: str | None,
    as_json: bool,
    static: bool,
):
    """Render a Markdown, log, code or text file to a standalone HTML page."""
    from .document import file_type, render_file_html

    theme = theme or config.theme
    text = _read_text(source)
    kind = file_type(source.name)

    try:
        if as_json:
            if kind == "log":
                payload = [entry.to_dict() for entry in parse_log_content(text)]
            elif kind == "markdown":
                result = render_markdown(
                    text, RenderOptions(theme=theme, base_path=str(source.resolve()))
                )
                payload = result.to_dict()
            else:
                raise click.UsageError(f"--json is not available for {kind} files")
            click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
            return
        page = render_file_html(text, source.resolve(), theme=theme, static=static)
    except MarkviewerError as e:
        raise click.ClickException(str(e)) from e

    out_path = output or source.with_suffix(".html")
    out_path.write_text(page, encoding="utf-8")
    console.print(f"[bold green]HTML written:[/bold green] {out_path}")


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output PDF file (defaults to SOURCE with a .pdf suffix).",
)
@click.option("--theme", type=THEME_CHOICE, default=None, help="Page theme.")
@click.option("--page-size", type=click.Choice(list(PAGE_SIZES)), default=None)
@click.option("--margins", type=click.Choice(list(MARGINS)), default=None)
@click.pass_obj
def pdf(
    config: ViewerConfig,
    source: Path,
    output: Path | None,
    theme: str | None,
    page_size: str | None,
    margins: str | None,
):
    """Export a Markdown file to PDF.

    Requires the pdf extra (pip install markviewer[pdf]).
    """
    from .pdf_renderer import render_document_pdf

    options = PdfExportOptions(
        theme=theme or config.theme,
        page_size=page_size or config.page_size,
        margins=margins or config.margins,
        max_image_width=config.max_image_width,
    )
    out_path = output or source.with_suffix(".pdf")

    with console.status(f"Rendering {source.name}..."):
        try:
            render_document_pdf(
                _read_text(source), out_path, source_path=source.resolve(), options=options
            )
        except (MarkviewerError, RuntimeError) as e:
            raise click.ClickException(str(e)) from e

    console.print(f"[bold green]PDF written:[/bold green] {out_path}")


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--lang",
    default=None,
    help="Language token or file extension (defaults to the file's extension).",
)
def highlight(source: Path, lang: str | None):
    """Print highlighted HTML for a source file."""
    lang = lang or source.suffix.lstrip(".") or "text"
    click.echo(highlight_code_block(_read_text(source), lang), nl=False)


@cli.command()
@click.option("--theme", type=THEME_CHOICE, default="light", show_default=True)
def css(theme: str):
    """Print the highlight stylesheet for a theme."""
    click.echo(highlight_css(theme), nl=False)


@cli.command("paste-image")
@click.argument("document", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--data",
    "data_file",
    type=click.File("r"),
    default="-",
    show_default=True,
    help="File holding base64 image data or a data: URL ('-' for stdin).",
)
@click.option("--filename", default=None, help="Name for the saved image.")
def paste_image(document: Path, data_file, filename: str | None):
    """Save a base64 image into images/ beside DOCUMENT and print its Markdown."""
    try:
        rel_path = save_pasted_image(data_file.read(), str(document), filename)
    except MarkviewerError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"![image]({rel_path})")


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def stats(source: Path):
    """Show word and character counts."""
    text = _read_text(source)
    table = Table(title=source.name, show_header=False)
    table.add_row("Words", str(count_words(text)))
    table.add_row("Characters", str(count_characters(text)))
    Console().print(table)


@cli.command("init-config")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("markviewer.yaml"),
    show_default=True,
)
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file.")
@click.pass_obj
def init_config(config: ViewerConfig, output: Path, force: bool):
    """Write a config file with the current settings."""
    if output.exists() and not force:
        raise click.ClickException(f"{output} already exists (use --force to overwrite)")
    write_config(config, output)
    console.print(f"[bold green]Config written:[/bold green] {output}")

