"""Tests for index data models."""

from pathlib import Path

import pytest

from tagnav.index.models import ComponentRecord, Span


class TestSpan:
    """Tests for Span."""

    def test_len_and_slice(self) -> None:
        source = "<app-foo>".encode()
        span = Span(1, 8)
        assert len(span) == 7
        assert span.slice(source) == "app-foo"

    def test_contains_is_end_inclusive(self) -> None:
        span = Span(1, 8)
        assert span.contains(1)
        assert span.contains(8)
        assert not span.contains(0)
        assert not span.contains(9)

    def test_empty_span_contains_its_offset(self) -> None:
        assert Span(3, 3).contains(3)

    @pytest.mark.parametrize(("start", "end"), [(-1, 2), (5, 4)])
    def test_invalid_span_raises(self, start: int, end: int) -> None:
        with pytest.raises(ValueError):
            Span(start, end)


class TestComponentRecord:
    """Tests for ComponentRecord."""

    def test_bindings_deduplicated_in_order(self) -> None:
        record = ComponentRecord(
            selector="app-foo",
            path=Path("/ws/foo.ts"),
            line=6,
            inputs=("value", "label", "value"),
            outputs=("changed", "changed"),
        )
        assert record.inputs == ("value", "label")
        assert record.outputs == ("changed",)

    def test_empty_selector_rejected(self) -> None:
        with pytest.raises(ValueError, match="selector"):
            ComponentRecord(selector="", path=Path("/ws/foo.ts"), line=0)

    def test_equality_by_value(self) -> None:
        a = ComponentRecord("app-foo", Path("/ws/foo.ts"), 1, inputs=("x",))
        b = ComponentRecord("app-foo", Path("/ws/foo.ts"), 1, inputs=("x",))
        assert a == b
