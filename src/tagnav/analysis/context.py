"""Cursor-context analysis inside markup documents.

Given markup text and a byte offset, decide whether the cursor is on a tag
name, on an attribute name, or elsewhere inside a tag, and which tag
encloses it. Offsets and spans are byte offsets into the UTF-8 encoding of
the text.

Half-typed markup (``<app-foo fo``) usually parses into ERROR nodes, so the
tree-based descent is backed by a recovery pass over the error node and a
last-resort textual check for a bare ``<`` before the cursor.
"""

from __future__ import annotations

import structlog

from tagnav.analysis.models import CursorContext
from tagnav.index._internal.parsing import ParserHandle, SyntaxNode, SyntaxTree
from tagnav.index.models import Span

logger = structlog.get_logger()

TAG_TYPES = frozenset({"start_tag", "self_closing_tag"})
TAG_NAME = "tag_name"
ATTRIBUTE = "attribute"
ATTRIBUTE_NAME = "attribute_name"

# Bytes that end a tag or attribute name
_NAME_STOP = frozenset(b" \t\r\n<>\"'=/")


def _span(node: SyntaxNode) -> Span:
    return Span(node.start_byte, node.end_byte)


def _word_at(source: bytes, offset: int) -> Span:
    """Span of name bytes around ``offset`` (possibly empty)."""
    start = offset
    while start > 0 and source[start - 1] not in _NAME_STOP:
        start -= 1
    end = offset
    while end < len(source) and source[end] not in _NAME_STOP:
        end += 1
    return Span(start, end)


class ContextAnalyzer:
    """Maps a cursor offset in markup text to a CursorContext.

    Usage::

        analyzer = ContextAnalyzer(load_grammar("html"))
        ctx = analyzer.analyze("<app-foo >", 9)
        ctx.context_tag_name  # Span(1, 8)
    """

    def __init__(self, parser: ParserHandle) -> None:
        self._parser = parser

    def analyze(self, text: str | bytes, offset: int) -> CursorContext | None:
        """Analyze ``text`` at byte ``offset``. Out-of-range offsets give None."""
        tree = self._parser.parse(text)
        return self.analyze_tree(tree, offset)

    def analyze_tree(self, tree: SyntaxTree, offset: int) -> CursorContext | None:
        source = tree.source
        if offset < 0 or offset > len(source):
            return None

        tag, error = self._descend(tree, offset)
        if tag is not None:
            return self._in_tag(tag, offset)
        if error is not None:
            ctx = self._recover(tree, error, offset)
            if ctx is not None:
                logger.debug("context_recovered", offset=offset)
                return ctx
        if offset > 0 and source[offset - 1 : offset] == b"<":
            return CursorContext(tag_name=Span(offset, offset))
        return None

    def tag_name_at(self, text: str | bytes, offset: int) -> tuple[str, Span] | None:
        """The tag name under the cursor, in a start, end or self-closing tag."""
        tree = self._parser.parse(text)
        if offset < 0 or offset > len(tree.source):
            return None
        for node in tree.root.walk():
            if node.type == TAG_NAME and node.contains(offset):
                return tree.text(node), _span(node)
        ctx = self.analyze_tree(tree, offset)
        if ctx is not None and ctx.tag_name is not None and len(ctx.tag_name):
            return ctx.tag_name.slice(tree.source), ctx.tag_name
        return None

    # -- descent ---------------------------------------------------------------

    def _touches(self, node: SyntaxNode, offset: int, source: bytes) -> bool:
        if node.type not in TAG_TYPES:
            return node.contains(offset)
        # A cursor right before "<" or right after ">" is outside the tag
        if not node.start_byte < offset <= node.end_byte:
            return False
        return not (offset == node.end_byte and source[offset - 1 : offset] == b">")

    def _descend(
        self, tree: SyntaxTree, offset: int
    ) -> tuple[SyntaxNode | None, SyntaxNode | None]:
        """Linear descent towards the innermost tag touching ``offset``.

        Returns the tag (or None) and the outermost ERROR node passed on the
        way down (or None).
        """
        siblings: tuple[SyntaxNode, ...] = (tree.root,)
        i = 0
        error: SyntaxNode | None = None
        while i < len(siblings):
            node = siblings[i]
            if not self._touches(node, offset, tree.source):
                i += 1
                continue
            if node.type in TAG_TYPES:
                return node, error
            if node.is_error and error is None:
                error = node
            if node.children:
                siblings, i = node.children, 0
            else:
                i += 1
        return None, error

    def _in_tag(self, tag: SyntaxNode, offset: int) -> CursorContext:
        name = next((c for c in tag.children if c.type == TAG_NAME), None)
        if name is not None and name.contains(offset):
            return CursorContext(tag_name=_span(name))
        context = _span(name) if name is not None else None
        for child in tag.children:
            attr_name = self._attribute_name(child)
            if attr_name is not None and attr_name.contains(offset):
                return CursorContext(attr_name=_span(attr_name), context_tag_name=context)
        return CursorContext(context_tag_name=context)

    @staticmethod
    def _attribute_name(node: SyntaxNode) -> SyntaxNode | None:
        if node.type == ATTRIBUTE_NAME:
            return node
        if node.type == ATTRIBUTE:
            return next((c for c in node.children if c.type == ATTRIBUTE_NAME), None)
        return None

    # -- error recovery --------------------------------------------------------

    def _recover(
        self, tree: SyntaxTree, error: SyntaxNode, offset: int
    ) -> CursorContext | None:
        source = tree.source
        context = self._open_tag_name(tree, error, offset)
        word = _word_at(source, offset)
        opens_tag = word.start > 0 and source[word.start - 1 : word.start] == b"<"

        if context is None:
            return CursorContext(tag_name=word) if opens_tag else None
        if context.contains(offset):
            return CursorContext(tag_name=_span(context))
        if opens_tag:
            # A new tag started after the context tag's name
            return CursorContext(tag_name=word)
        ctx_span = _span(context)
        if len(word) and source[word.start - 1 : word.start].isspace():
            return CursorContext(attr_name=word, context_tag_name=ctx_span)
        return CursorContext(context_tag_name=ctx_span)

    @staticmethod
    def _open_tag_name(tree: SyntaxTree, error: SyntaxNode, offset: int) -> SyntaxNode | None:
        """Last ``<name`` in the error node still open at ``offset``."""
        source = tree.source
        found: SyntaxNode | None = None
        for node in error.walk():
            if node.type != TAG_NAME or node.start_byte == 0:
                continue
            if node.start_byte >= offset and not node.contains(offset):
                continue
            if source[node.start_byte - 1 : node.start_byte] != b"<":
                continue
            if b">" in source[node.end_byte : offset]:
                continue
            found = node
        return found
