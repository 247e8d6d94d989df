"""Config module exports."""

from tagnav.config.loader import load_config
from tagnav.config.models import (
    GrammarConfig,
    LoggingConfig,
    LogOutputConfig,
    TagNavConfig,
    WatchConfig,
    WorkspaceConfig,
)

__all__ = [
    "load_config",
    "TagNavConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "WorkspaceConfig",
    "GrammarConfig",
    "WatchConfig",
]
