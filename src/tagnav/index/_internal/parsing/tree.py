"""Immutable syntax tree produced from a tree-sitter parse.

Only named nodes are kept; punctuation and keywords are dropped. Every node
remembers the field name it hangs off its parent under, so field-qualified
query constraints can be checked without going back to tree-sitter.

ERROR and MISSING nodes produced by tree-sitter's error recovery are kept
and flagged, which lets the analyzers degrade gracefully on half-typed text.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

ERROR_TYPE = "ERROR"


@dataclass(frozen=True, slots=True, eq=False)
class SyntaxNode:
    """A named syntax node.

    Byte offsets are into the UTF-8 encoded source. Points are
    ``(row, column)`` pairs, 0-based, columns in bytes.
    """

    type: str
    start_byte: int
    end_byte: int
    start_point: tuple[int, int] = (0, 0)
    end_point: tuple[int, int] = (0, 0)
    children: tuple[SyntaxNode, ...] = ()
    field: str | None = None
    is_missing: bool = False

    @property
    def is_error(self) -> bool:
        return self.type == ERROR_TYPE

    def contains(self, offset: int) -> bool:
        """End-inclusive containment, see ``Span.contains``."""
        return self.start_byte <= offset <= self.end_byte

    def children_by_field(self, name: str) -> tuple[SyntaxNode, ...]:
        return tuple(c for c in self.children if c.field == name)

    def walk(self) -> Iterator[SyntaxNode]:
        """Depth-first pre-order traversal of this subtree."""
        stack: list[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True, slots=True, eq=False)
class SyntaxTree:
    """Source bytes plus the root of the parsed tree."""

    source: bytes
    root: SyntaxNode
    error_count: int = 0

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def text(self, node: SyntaxNode) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def from_tree_sitter(ts_tree: Any, source: bytes) -> SyntaxTree:
    """Convert a tree-sitter tree into an immutable SyntaxTree.

    The conversion is iterative; nesting depth is bounded only by memory.
    """
    cursor = ts_tree.walk()
    error_count = 0

    def is_error(node: Any) -> bool:
        return node.type == ERROR_TYPE or node.is_missing

    def goto_named(first: bool) -> bool:
        # Move to the first (or next) named child, counting anonymous error tokens
        nonlocal error_count
        entered = first and cursor.goto_first_child()
        moved = entered if first else cursor.goto_next_sibling()
        while moved:
            if cursor.node.is_named:
                return True
            if is_error(cursor.node):
                error_count += 1
            moved = cursor.goto_next_sibling()
        if entered:
            cursor.goto_parent()
        return False

    # Open frames: tree-sitter node, its field name, named children built so far
    frames: list[tuple[Any, str | None, list[SyntaxNode]]] = []
    field_name: str | None = None
    while True:
        node = cursor.node
        if is_error(node):
            error_count += 1
        frames.append((node, field_name, []))
        if goto_named(first=True):
            field_name = cursor.field_name
            continue
        while True:
            ts_node, name, children = frames.pop()
            built = SyntaxNode(
                type=ts_node.type,
                start_byte=ts_node.start_byte,
                end_byte=ts_node.end_byte,
                start_point=(ts_node.start_point[0], ts_node.start_point[1]),
                end_point=(ts_node.end_point[0], ts_node.end_point[1]),
                children=tuple(children),
                field=name,
                is_missing=ts_node.is_missing,
            )
            if not frames:
                return SyntaxTree(source=source, root=built, error_count=error_count)
            frames[-1][2].append(built)
            if goto_named(first=False):
                field_name = cursor.field_name
                break
            cursor.goto_parent()
