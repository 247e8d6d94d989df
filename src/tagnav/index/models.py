"""Data models for the tag index.

Records are frozen: a rescan of a file produces fresh records that replace
the previous ones wholesale, nothing is ever patched in place.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open byte range ``[start, end)`` into a document."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.start > self.end:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, offset: int) -> bool:
        """True if ``offset`` touches the span, end inclusive.

        A cursor placed right after the last character of a name is still
        considered to be on that name.
        """
        return self.start <= offset <= self.end

    def slice(self, source: bytes) -> str:
        return source[self.start : self.end].decode("utf-8", errors="replace")


def _unique(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


@dataclass(frozen=True, slots=True)
class ComponentRecord:
    """A component declaration found in a source file.

    ``line`` is the 0-based row of the class declaration. ``inputs`` and
    ``outputs`` keep the order of first appearance; duplicates are dropped.
    """

    selector: str
    path: Path
    line: int
    class_name: str = ""
    inputs: tuple[str, ...] = field(default=())
    outputs: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.selector:
            raise ValueError("Component selector must not be empty")
        object.__setattr__(self, "inputs", _unique(self.inputs))
        object.__setattr__(self, "outputs", _unique(self.outputs))
