"""tagnav define command - locate the component declaring a selector."""

import asyncio
import json
from pathlib import Path

import click

from tagnav.cli.utils import build_navigator


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("selector")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def define_command(path: Path, selector: str, as_json: bool) -> None:
    """Print the declaration location of SELECTOR.

    PATH is the workspace root. Exits with status 1 when the selector is not
    declared anywhere in the workspace.
    """
    nav = build_navigator(path)
    asyncio.run(nav.scan_workspace())
    target = nav.definition(selector)

    if target is None:
        if as_json:
            click.echo(json.dumps({"selector": selector, "found": False}))
        else:
            click.echo(f"No component declares '{selector}'", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "selector": selector,
                    "found": True,
                    "path": str(target.path),
                    "uri": target.uri,
                    "line": target.start_line,
                }
            )
        )
    else:
        click.echo(f"{target.path}:{target.start_line + 1}")
