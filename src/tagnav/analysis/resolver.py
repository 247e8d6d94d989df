"""Completion and go-to-definition over the tag index."""

from __future__ import annotations

import structlog

from tagnav.analysis.context import ContextAnalyzer
from tagnav.analysis.models import (
    Cancellable,
    CompletionItem,
    CompletionKind,
    DefinitionTarget,
)
from tagnav.index.tag_index import TagIndex

logger = structlog.get_logger()


def _cancelled(cancel: Cancellable | None) -> bool:
    return cancel is not None and cancel.is_cancelled


def input_item(name: str) -> CompletionItem:
    return CompletionItem(label=name, kind=CompletionKind.FIELD, insert_text=f'[{name}]="$0"')


def output_item(name: str) -> CompletionItem:
    return CompletionItem(label=name, kind=CompletionKind.EVENT, insert_text=f'({name})="$0"')


class Resolver:
    """Answers definition and completion requests.

    Read-only with respect to the index; safe to call while a rescan is in
    flight (each lookup sees a consistent snapshot).
    """

    def __init__(self, index: TagIndex, analyzer: ContextAnalyzer) -> None:
        self._index = index
        self._analyzer = analyzer

    def definition(
        self, selector: str, cancel: Cancellable | None = None
    ) -> DefinitionTarget | None:
        """Location of the component declaring ``selector``, if indexed."""
        if _cancelled(cancel):
            return None
        record = self._index.lookup(selector)
        if record is None:
            logger.debug("definition_miss", selector=selector)
            return None
        return DefinitionTarget(path=record.path, start_line=record.line, end_line=record.line)

    def completion(
        self, text: str | bytes, offset: int, cancel: Cancellable | None = None
    ) -> list[CompletionItem]:
        """Completion items for the cursor at byte ``offset`` of ``text``.

        - On a tag name: every indexed selector, sorted.
        - Elsewhere in a tag of a known component: its inputs, then outputs.
        """
        if _cancelled(cancel):
            return []
        source = text.encode("utf-8") if isinstance(text, str) else text
        ctx = self._analyzer.analyze(source, offset)
        if ctx is None or _cancelled(cancel):
            return []

        if ctx.tag_name is not None:
            return [
                CompletionItem(label=selector, kind=CompletionKind.KEYWORD)
                for selector in self._index.selectors()
            ]

        if ctx.context_tag_name is None:
            return []
        record = self._index.lookup(ctx.context_tag_name.slice(source))
        if record is None:
            return []
        return [input_item(name) for name in record.inputs] + [
            output_item(name) for name in record.outputs
        ]
