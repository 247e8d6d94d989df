"""TagNav CLI - tagnav command."""

import click

from tagnav import __version__
from tagnav.cli.complete import complete_command
from tagnav.cli.define import define_command
from tagnav.cli.scan import scan_command
from tagnav.cli.watch import watch_command
from tagnav.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="tagnav")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """TagNav - component tag navigation and completion for markup templates."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(scan_command, name="scan")
cli.add_command(define_command, name="define")
cli.add_command(complete_command, name="complete")
cli.add_command(watch_command, name="watch")


if __name__ == "__main__":
    cli()
