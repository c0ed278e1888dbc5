"""Command line entry point: ``tsdecl META [-o OUTPUT]``."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from tsdecl.codegen import DeclarationWriter
from tsdecl.logger import setup_logging
from tsdecl.metadb import MetaDatabase
from tsdecl.settings import load_settings

console = Console(stderr=True)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("meta", type=click.Path(exists=True, readable=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Declaration file to write (default: qooxdoo.d.ts).",
)
@click.option(
    "--root-dir",
    type=str,
    default="",
    help="Source root that classFilename entries are relative to.",
)
@click.option(
    "--base-declaration",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Template copied verbatim after the header (default: packaged template).",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with generator settings (ignore table, type mappings, ...).",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug logging.",
)
def main(
    meta: Path,
    output: Optional[Path],
    root_dir: str,
    base_declaration: Optional[Path],
    config_file: Optional[Path],
    debug: bool,
) -> None:
    """
    Generate TypeScript declarations from a class metadata database.

    META is either a directory of per-class JSON files or a single JSON file
    holding all classes.
    """
    setup_logging(debug)

    try:
        settings = load_settings(
            str(config_file) if config_file else None,
            output_to=str(output) if output else None,
            base_declaration=str(base_declaration) if base_declaration else None,
        )
        if meta.is_dir():
            db = MetaDatabase.load(meta, root_dir=root_dir)
        else:
            db = MetaDatabase.load_file(meta, root_dir=root_dir or None)
        DeclarationWriter(db, settings).process()
    except (ValueError, OSError) as e:
        # MetaDataError and pydantic validation errors are ValueErrors
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        raise SystemExit(1)

    console.print(
        f"  [dim]Wrote[/dim] [bold cyan]{len(db)}[/bold cyan] [dim]classes to[/dim] [bold]{settings.output_to}[/bold]"
    )


if __name__ == "__main__":
    main()
