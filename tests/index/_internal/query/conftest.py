"""Hand-built syntax trees for query tests."""

from __future__ import annotations

import pytest

from tagnav.index._internal.parsing import SyntaxNode, SyntaxTree


class TreeBuilder:
    """Builds SyntaxTrees whose leaves carry real text.

    Leaves must be created in document order; each leaf's text is appended
    to the source followed by a space.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._pos = 0

    def leaf(self, type_: str, text: str, field: str | None = None) -> SyntaxNode:
        start = self._pos
        data = text.encode("utf-8")
        self._parts.append(text + " ")
        self._pos += len(data) + 1
        return SyntaxNode(type_, start, start + len(data), field=field)

    def node(self, type_: str, *children: SyntaxNode, field: str | None = None) -> SyntaxNode:
        start = children[0].start_byte if children else self._pos
        end = children[-1].end_byte if children else self._pos
        return SyntaxNode(type_, start, end, children=tuple(children), field=field)

    def tree(self, root: SyntaxNode) -> SyntaxTree:
        return SyntaxTree("".join(self._parts).encode("utf-8"), root)


@pytest.fixture
def builder() -> TreeBuilder:
    return TreeBuilder()
