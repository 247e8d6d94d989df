"""Tests for ContextAnalyzer."""

import pytest

from tagnav.analysis import ContextAnalyzer, CursorContext
from tagnav.index import Span
from tagnav.index._internal.parsing import SyntaxNode, SyntaxTree


def _node(type_: str, start: int, end: int, *children: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(type_, start, end, children=children)


@pytest.fixture
def analyzer(html_parser) -> ContextAnalyzer:
    return ContextAnalyzer(html_parser)


class TestWellFormedMarkup:
    """Cursor positions in markup that parses cleanly."""

    def test_on_tag_name(self, analyzer: ContextAnalyzer) -> None:
        ctx = analyzer.analyze("<app-foo></app-foo>", 4)
        assert ctx == CursorContext(tag_name=Span(1, 8))

    def test_end_of_tag_name_is_on_tag_name(self, analyzer: ContextAnalyzer) -> None:
        ctx = analyzer.analyze("<app-foo></app-foo>", 8)
        assert ctx == CursorContext(tag_name=Span(1, 8))

    def test_inside_tag_after_name(self, analyzer: ContextAnalyzer) -> None:
        ctx = analyzer.analyze("<app-foo ></app-foo>", 9)
        assert ctx == CursorContext(context_tag_name=Span(1, 8))

    def test_on_attribute_name(self, analyzer: ContextAnalyzer) -> None:
        # Given the cursor inside "value"
        text = '<app-foo value="1"></app-foo>'

        # When analyzed
        ctx = analyzer.analyze(text, 11)

        # Then the attribute and its enclosing tag are reported
        assert ctx == CursorContext(attr_name=Span(9, 14), context_tag_name=Span(1, 8))

    def test_after_closing_bracket_is_outside(self, analyzer: ContextAnalyzer) -> None:
        assert analyzer.analyze("<app-foo></app-foo>", 9) is None

    def test_before_opening_bracket_is_outside(self, analyzer: ContextAnalyzer) -> None:
        assert analyzer.analyze("<app-foo></app-foo>", 0) is None

    def test_nested_tag_wins(self, analyzer: ContextAnalyzer) -> None:
        text = "<div><app-bar ></app-bar></div>"
        ctx = analyzer.analyze(text, 14)
        assert ctx == CursorContext(context_tag_name=Span(6, 13))

    def test_text_content_is_outside(self, analyzer: ContextAnalyzer) -> None:
        assert analyzer.analyze("<p>hello</p>", 5) is None

    @pytest.mark.parametrize("offset", [-1, 100])
    def test_offset_out_of_range(self, analyzer: ContextAnalyzer, offset: int) -> None:
        assert analyzer.analyze("<app-foo></app-foo>", offset) is None

    def test_bytes_and_str_agree(self, analyzer: ContextAnalyzer) -> None:
        text = "<app-foo ></app-foo>"
        assert analyzer.analyze(text, 9) == analyzer.analyze(text.encode(), 9)


class TestHalfTypedMarkup:
    """Incomplete markup as the HTML grammar actually parses it."""

    def test_partial_attribute(self, analyzer: ContextAnalyzer) -> None:
        ctx = analyzer.analyze("<app-foo fo", 11)
        assert ctx == CursorContext(attr_name=Span(9, 11), context_tag_name=Span(1, 8))

    def test_partial_attribute_in_element(self, analyzer: ContextAnalyzer) -> None:
        ctx = analyzer.analyze("<div><app-foo fo</div>", 16)
        assert ctx == CursorContext(attr_name=Span(14, 16), context_tag_name=Span(6, 13))

    def test_bare_open_bracket(self, analyzer: ContextAnalyzer) -> None:
        ctx = analyzer.analyze("<", 1)
        assert ctx == CursorContext(tag_name=Span(1, 1))

    def test_bare_open_bracket_in_element(self, analyzer: ContextAnalyzer) -> None:
        ctx = analyzer.analyze("<div><</div>", 6)
        assert ctx == CursorContext(tag_name=Span(6, 6))


class TestErrorRecovery:
    """Half-typed markup, using hand-built error trees."""

    def test_partial_attribute(self, analyzer: ContextAnalyzer) -> None:
        source = b"<app-foo fo"
        error = _node("ERROR", 0, 11, _node("tag_name", 1, 8), _node("attribute_name", 9, 11))
        tree = SyntaxTree(source, _node("document", 0, 11, error), error_count=1)

        ctx = analyzer.analyze_tree(tree, 11)

        assert ctx == CursorContext(attr_name=Span(9, 11), context_tag_name=Span(1, 8))

    def test_space_after_open_tag_name(self, analyzer: ContextAnalyzer) -> None:
        source = b"<app-foo "
        error = _node("ERROR", 0, 9, _node("tag_name", 1, 8))
        tree = SyntaxTree(source, _node("document", 0, 9, error), error_count=1)

        ctx = analyzer.analyze_tree(tree, 9)

        assert ctx == CursorContext(context_tag_name=Span(1, 8))

    def test_partial_tag_name(self, analyzer: ContextAnalyzer) -> None:
        source = b"<ap"
        error = _node("ERROR", 0, 3, _node("tag_name", 1, 3))
        tree = SyntaxTree(source, _node("document", 0, 3, error), error_count=1)

        ctx = analyzer.analyze_tree(tree, 3)

        assert ctx == CursorContext(tag_name=Span(1, 3))

    def test_bare_open_bracket_in_error(self, analyzer: ContextAnalyzer) -> None:
        source = b"<"
        tree = SyntaxTree(source, _node("document", 0, 1, _node("ERROR", 0, 1)), error_count=1)

        ctx = analyzer.analyze_tree(tree, 1)

        assert ctx == CursorContext(tag_name=Span(1, 1))

    def test_closed_tag_is_not_reopened(self, analyzer: ContextAnalyzer) -> None:
        source = b"<app-foo> x"
        error = _node("ERROR", 0, 11, _node("tag_name", 1, 8), _node("text", 10, 11))
        tree = SyntaxTree(source, _node("document", 0, 11, error), error_count=1)

        assert analyzer.analyze_tree(tree, 11) is None

    def test_textual_fallback_without_error(self, analyzer: ContextAnalyzer) -> None:
        source = b"<div></div><"
        element = _node(
            "element",
            0,
            11,
            _node("start_tag", 0, 5, _node("tag_name", 1, 4)),
            _node("end_tag", 5, 11, _node("tag_name", 7, 10)),
        )
        tree = SyntaxTree(source, _node("document", 0, 12, element))

        ctx = analyzer.analyze_tree(tree, 12)

        assert ctx == CursorContext(tag_name=Span(12, 12))


class TestTagNameAt:
    """Tests for tag_name_at."""

    def test_start_tag(self, analyzer: ContextAnalyzer) -> None:
        assert analyzer.tag_name_at("<app-foo></app-foo>", 3) == ("app-foo", Span(1, 8))

    def test_end_tag(self, analyzer: ContextAnalyzer) -> None:
        assert analyzer.tag_name_at("<app-foo></app-foo>", 13) == ("app-foo", Span(11, 18))

    def test_not_on_a_name(self, analyzer: ContextAnalyzer) -> None:
        assert analyzer.tag_name_at("<p>hello</p>", 5) is None
