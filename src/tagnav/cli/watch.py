"""tagnav watch command - keep the index current and report changes."""

import asyncio
from pathlib import Path

import click
from rich.console import Console

from tagnav.cli.utils import build_navigator
from tagnav.ops import TagNavigator


async def _run(nav: TagNavigator, console: Console) -> None:
    stats = await nav.scan_workspace()
    console.print(
        f"[green]Indexed {len(nav.index)} component(s)[/green] from "
        f"{stats.files_scanned} file(s); watching [bold]{nav.root}[/bold] (Ctrl+C to stop)"
    )
    await nav.start_watching()
    try:
        known = set(nav.index.selectors())
        while True:
            await asyncio.sleep(1.0)
            current = set(nav.index.selectors())
            for selector in sorted(current - known):
                console.print(f"  [green]+[/green] {selector}")
            for selector in sorted(known - current):
                console.print(f"  [red]-[/red] {selector}")
            known = current
    finally:
        await nav.stop_watching()


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
def watch_command(path: Path) -> None:
    """Index a workspace and keep the index current until interrupted.

    PATH is the workspace root (default: current directory).
    """
    nav = build_navigator(path)
    console = Console(stderr=True)
    try:
        asyncio.run(_run(nav, console))
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")
