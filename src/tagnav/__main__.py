"""Allow ``python -m tagnav``."""

from tagnav.cli.main import cli

cli()
