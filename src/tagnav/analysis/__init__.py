"""Markup-side analysis: cursor context, completion and definition."""

from tagnav.analysis.context import ContextAnalyzer
from tagnav.analysis.models import (
    Cancellable,
    CancellationToken,
    CompletionItem,
    CompletionKind,
    CursorContext,
    DefinitionTarget,
)
from tagnav.analysis.resolver import Resolver

__all__ = [
    "Cancellable",
    "CancellationToken",
    "CompletionItem",
    "CompletionKind",
    "ContextAnalyzer",
    "CursorContext",
    "DefinitionTarget",
    "Resolver",
]
