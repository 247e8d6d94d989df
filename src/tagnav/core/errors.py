"""TagNav error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Grammar
- 4xxx: Query

Only grammar and config errors are raised at runtime, and only while a
navigator is being constructed. Everything past startup degrades to empty
or partial results instead of raising.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Grammar (3xxx)
    GRAMMAR_UNKNOWN_KIND = 3001
    GRAMMAR_LOAD_FAILED = 3002

    # Query (4xxx)
    QUERY_SYNTAX_ERROR = 4001


@dataclass(frozen=True, slots=True)
class TagNavError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'GRAMMAR_LOAD_FAILED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(TagNavError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class GrammarLoadError(TagNavError):
    """A parser grammar could not be loaded. Fatal at startup."""

    @classmethod
    def unknown_kind(cls, kind: str) -> "GrammarLoadError":
        return cls(
            code=ErrorCode.GRAMMAR_UNKNOWN_KIND,
            message=f"No grammar location configured for language kind '{kind}'",
            details={"kind": kind},
        )

    @classmethod
    def load_failed(cls, kind: str, location: str, reason: str) -> "GrammarLoadError":
        return cls(
            code=ErrorCode.GRAMMAR_LOAD_FAILED,
            message=f"Failed to load {kind} grammar from '{location}': {reason}",
            details={"kind": kind, "location": location, "reason": reason},
        )


class QuerySyntaxError(TagNavError):
    """Malformed structural query text."""

    @classmethod
    def at(cls, position: int, reason: str) -> "QuerySyntaxError":
        return cls(
            code=ErrorCode.QUERY_SYNTAX_ERROR,
            message=f"Invalid query at offset {position}: {reason}",
            details={"position": position, "reason": reason},
        )
