"""tagnav complete command - completion items at a cursor in a markup file."""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tagnav.cli.utils import build_navigator


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("offset", type=click.IntRange(min=0))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def complete_command(path: Path, file: Path, offset: int, as_json: bool) -> None:
    """List completion items for a cursor in a markup FILE.

    PATH is the workspace root; OFFSET is a byte offset into FILE.
    """
    nav = build_navigator(path)
    asyncio.run(nav.scan_workspace())
    items = nav.completion(file.read_bytes(), offset)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {"label": i.label, "kind": i.kind.value, "insert_text": i.insert_text}
                    for i in items
                ]
            )
        )
        return

    console = Console()
    if not items:
        console.print("[dim]No completions[/dim]")
        return
    table = Table(show_header=False, box=None, padding=(0, 1), pad_edge=False)
    for item in items:
        table.add_row(f"[cyan]{item.kind.value}[/cyan]", item.label, item.insert_text or "")
    console.print(table)
