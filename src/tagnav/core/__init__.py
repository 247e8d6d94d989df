"""Core module exports."""

from tagnav.core.errors import (
    ConfigError,
    ErrorCode,
    GrammarLoadError,
    QuerySyntaxError,
    TagNavError,
)
from tagnav.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "TagNavError",
    "ErrorCode",
    "ConfigError",
    "GrammarLoadError",
    "QuerySyntaxError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
