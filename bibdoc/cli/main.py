"""Main CLI entry point and application setup."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
from click.exceptions import Exit
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bibdoc import __version__
from bibdoc.cli.config import DEFAULT_FORMAT, load_config, parser_options
from bibdoc.core.bibliography import Bibliography
from bibdoc.storage.parser import ParserOptions

FORMATS = ("bibtex", "json", "yaml", "xml")


@dataclass
class Context:
    """CLI context that holds shared resources."""

    console: Console
    parser_options: ParserOptions
    config: dict[str, Any] = field(default_factory=dict)
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def render(bibliography: Bibliography, output_format: str) -> str:
    """Render a bibliography in one of ``FORMATS``."""
    if output_format == "bibtex":
        return bibliography.to_s()
    if output_format == "json":
        return bibliography.to_json() + "\n"
    if output_format == "yaml":
        return bibliography.to_yaml()
    if output_format == "xml":
        return bibliography.to_xml() + "\n"
    raise click.BadParameter(
        f"Unknown format {output_format!r}; choose from {', '.join(FORMATS)}"
    )


class BibdocGroup(click.Group):
    """Custom group that reports unexpected errors through the console."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=BibdocGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(
    version=__version__, prog_name="bibdoc", message="bibdoc version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """BibTeX document tool.

    Parse .bib files, resolve @string constants and export them as
    BibTeX, JSON, YAML or XML.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        config_data = load_config(config)
        options = parser_options(config_data)
    except ValueError as e:
        if debug:
            raise
        console.print(
            f"[red]Error loading configuration:[/red] {escape(str(e))}",
            highlight=False,
        )
        ctx.exit(1)

    ctx.obj = Context(
        console=console,
        parser_options=options,
        config=config_data,
        debug=debug,
    )


@cli.command()
@click.argument(
    "source", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(FORMATS),
    default=None,
    help="Output format (default: from configuration, else bibtex)",
)
@click.option(
    "--replace-strings", is_flag=True, help="Replace @string constants in values"
)
@click.option("--join-strings", is_flag=True, help="Join resolved value fragments")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to a file instead of standard output",
)
@click.pass_obj
def convert(
    obj: Context,
    source: Path,
    output_format: str | None,
    replace_strings: bool,
    join_strings: bool,
    output: Path | None,
) -> None:
    """Convert a BibTeX file to another format."""
    bibliography = Bibliography.open(source, obj.parser_options)

    if replace_strings:
        bibliography.replace_strings()
    if join_strings:
        bibliography.join_strings()

    output_format = output_format or obj.config.get("format", DEFAULT_FORMAT)
    text = render(bibliography, output_format)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        obj.console.print(f"[green]✓[/green] Wrote {output}", highlight=False)
    else:
        click.echo(text, nl=False)


@cli.command()
@click.argument(
    "source", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_context
def check(ctx: click.Context, source: Path) -> None:
    """Report parse errors and entries missing required fields."""
    obj: Context = ctx.obj
    console = obj.console
    bibliography = Bibliography.open(source, obj.parser_options)

    if bibliography.has_errors():
        table = Table(title="Parse errors")
        table.add_column("Line", justify="right", style="cyan")
        table.add_column("Message", style="red")
        for error in bibliography.errors:
            table.add_row(str(error.line), escape(error.message))
        console.print(table)

    invalid = [entry for entry in bibliography.entries.values() if not entry.valid()]
    if invalid:
        table = Table(title="Invalid entries")
        table.add_column("Key", style="cyan")
        table.add_column("Type")
        table.add_column("Missing fields", style="yellow")
        for entry in invalid:
            table.add_row(
                escape(entry.key), entry.type, ", ".join(entry.missing_fields())
            )
        console.print(table)

    console.print(
        f"{len(bibliography.entries)} entries, "
        f"{len(bibliography.strings)} strings, "
        f"{len(bibliography.errors)} errors",
        highlight=False,
    )

    if bibliography.valid():
        console.print("[green]✓[/green] Bibliography is valid")
    else:
        console.print("[red]✗[/red] Bibliography is not valid")
        ctx.exit(1)


@cli.command()
@click.argument(
    "source", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.argument("key")
@click.pass_context
def show(ctx: click.Context, source: Path, key: str) -> None:
    """Print a single entry as BibTeX."""
    obj: Context = ctx.obj
    bibliography = Bibliography.open(source, obj.parser_options)

    entry = bibliography[key]
    if entry is None:
        obj.console.print(f"[red]Entry not found:[/red] {escape(key)}", highlight=False)
        ctx.exit(1)

    click.echo(entry.to_s(), nl=False)


def main() -> None:
    cli()
