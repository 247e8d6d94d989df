"""tagnav scan command - index a workspace and list its components."""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from tagnav.cli.utils import build_navigator
from tagnav.index.models import ComponentRecord


def _make_component_table(root: Path, records: list[ComponentRecord]) -> Table:
    table = Table(show_header=True, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("Selector", style="cyan")
    table.add_column("Class")
    table.add_column("Location", style="dim")
    table.add_column("Inputs")
    table.add_column("Outputs")
    for record in records:
        try:
            location = record.path.relative_to(root).as_posix()
        except ValueError:
            location = str(record.path)
        table.add_row(
            record.selector,
            record.class_name,
            f"{location}:{record.line + 1}",
            ", ".join(record.inputs),
            ", ".join(record.outputs),
        )
    return table


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan_command(path: Path, as_json: bool) -> None:
    """Scan a workspace and list the components found.

    PATH is the workspace root (default: current directory).
    """
    nav = build_navigator(path)
    stats = asyncio.run(nav.scan_workspace())
    records = nav.index.records()

    if as_json:
        click.echo(
            json.dumps(
                {
                    "files_scanned": stats.files_scanned,
                    "files_skipped": stats.files_skipped,
                    "duration_ms": stats.duration_ms,
                    "components": [
                        {
                            "selector": r.selector,
                            "class_name": r.class_name,
                            "path": str(r.path),
                            "line": r.line,
                            "inputs": list(r.inputs),
                            "outputs": list(r.outputs),
                        }
                        for r in records
                    ],
                }
            )
        )
        return

    console = Console()
    if records:
        console.print(_make_component_table(nav.root, records))
        console.print()
    console.print(
        f"[green]Indexed {len(records)} component(s)[/green] from "
        f"{stats.files_scanned} file(s) in {stats.duration_ms} ms"
    )
    if stats.files_skipped:
        console.print(f"[yellow]Skipped {stats.files_skipped} unreadable file(s)[/yellow]")
