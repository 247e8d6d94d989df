"""Grammar loading and parser handles.

Grammars come from the tree-sitter-* wheels. A grammar location is
``module:function`` where ``function()`` returns the language pointer, e.g.
``tree_sitter_typescript:language_typescript``.

Loading is the only fatal step of the whole core: a navigator cannot do
anything useful without its grammars, so failures raise GrammarLoadError.
Parsing itself never raises for malformed text.
"""

from __future__ import annotations

import importlib
from typing import Any

import structlog
import tree_sitter

from tagnav.core.errors import GrammarLoadError
from tagnav.index._internal.parsing.tree import SyntaxTree, from_tree_sitter

logger = structlog.get_logger()

# Language kind -> default grammar location
DEFAULT_GRAMMARS: dict[str, str] = {
    "typescript": "tree_sitter_typescript:language_typescript",
    "html": "tree_sitter_html:language",
}


class ParserHandle:
    """A tree-sitter parser bound to one language kind.

    Not thread-safe: parse from a single thread (the event loop).

    Usage::

        handle = load_grammar("html")
        tree = handle.parse("<app-foo></app-foo>")
    """

    def __init__(self, kind: str, language: Any) -> None:
        self.kind = kind
        self._language = language
        self._parser = tree_sitter.Parser(language)

    def parse(self, text: str | bytes) -> SyntaxTree:
        """Parse text into a SyntaxTree.

        Malformed input yields ERROR/MISSING nodes instead of an exception.
        """
        source = text.encode("utf-8") if isinstance(text, str) else text
        ts_tree = self._parser.parse(source)
        tree = from_tree_sitter(ts_tree, source)
        if tree.has_errors:
            logger.debug("incomplete_parse", kind=self.kind, error_nodes=tree.error_count)
        return tree


def _resolve_language(kind: str, location: str) -> Any:
    module_name, _, func_name = location.partition(":")
    try:
        module = importlib.import_module(module_name)
        language_fn = getattr(module, func_name or "language")
        return tree_sitter.Language(language_fn())
    except ImportError as err:
        raise GrammarLoadError.load_failed(kind, location, f"module not installed: {err}") from err
    except AttributeError as err:
        raise GrammarLoadError.load_failed(kind, location, f"no such function: {err}") from err
    except (TypeError, ValueError) as err:
        # Wrong return type or incompatible language ABI
        raise GrammarLoadError.load_failed(kind, location, str(err)) from err


def load_grammar(kind: str, location: str | None = None) -> ParserHandle:
    """Load the grammar for a language kind and return a parser for it.

    Args:
        kind: Language kind, e.g. "typescript" or "html"
        location: ``module:function`` override; defaults to DEFAULT_GRAMMARS

    Raises:
        GrammarLoadError: Unknown kind or grammar not loadable.
    """
    location = location or DEFAULT_GRAMMARS.get(kind)
    if location is None:
        raise GrammarLoadError.unknown_kind(kind)
    language = _resolve_language(kind, location)
    logger.debug("grammar_loaded", kind=kind, location=location)
    return ParserHandle(kind, language)
