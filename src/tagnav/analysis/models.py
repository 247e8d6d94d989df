"""Request-scoped models for completion and definition lookups."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from tagnav.index.models import Span


@dataclass(frozen=True, slots=True)
class CursorContext:
    """Where a cursor sits inside a markup tag.

    At most one of ``tag_name`` / ``attr_name`` is set. ``context_tag_name``
    is the name of the enclosing tag and is left unset when the cursor is on
    the tag name itself.
    """

    tag_name: Span | None = None
    attr_name: Span | None = None
    context_tag_name: Span | None = None

    def __post_init__(self) -> None:
        if self.tag_name is not None and self.attr_name is not None:
            raise ValueError("Cursor cannot be on a tag name and an attribute name at once")


class CompletionKind(Enum):
    """Kind of completion suggestion, mirrors editor item kinds."""

    KEYWORD = "keyword"
    FIELD = "field"
    EVENT = "event"


@dataclass(frozen=True, slots=True)
class CompletionItem:
    """A single completion suggestion.

    ``insert_text`` is a snippet with one ``$0`` placeholder, or None when
    the label is inserted as-is.
    """

    label: str
    kind: CompletionKind
    insert_text: str | None = None

    @property
    def is_snippet(self) -> bool:
        return self.insert_text is not None


@dataclass(frozen=True, slots=True)
class DefinitionTarget:
    """Navigation target: a one-line range at a component declaration."""

    path: Path
    start_line: int
    end_line: int

    @property
    def uri(self) -> str:
        return self.path.resolve().as_uri()


class Cancellable(Protocol):
    @property
    def is_cancelled(self) -> bool: ...


class CancellationToken:
    """Cancellation signal supplied by the editor integration.

    Thread-safe; once cancelled it stays cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()
