"""CLI utilities."""

from pathlib import Path

import click

from tagnav.core.errors import TagNavError
from tagnav.core.logging import configure_logging
from tagnav.ops import TagNavigator


def _verbose() -> bool:
    ctx = click.get_current_context(silent=True)
    obj = ctx.find_root().obj if ctx is not None else None
    return bool(obj and obj.get("verbose"))


def build_navigator(root: Path) -> TagNavigator:
    """Create a navigator for ``root``, turning startup errors into CLI errors.

    Logging is reconfigured from the loaded ``logging`` section; ``-v``
    forces the DEBUG level.

    Raises:
        click.ClickException: Configuration or grammar loading failed
    """
    try:
        nav = TagNavigator.from_root(root.resolve())
    except TagNavError as e:
        raise click.ClickException(str(e)) from e

    logging_config = nav.config.logging
    if _verbose():
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)
    return nav
