"""Syntax parsing: grammar loading and the immutable syntax tree."""

from tagnav.index._internal.parsing.grammars import DEFAULT_GRAMMARS, ParserHandle, load_grammar
from tagnav.index._internal.parsing.tree import SyntaxNode, SyntaxTree, from_tree_sitter

__all__ = [
    "DEFAULT_GRAMMARS",
    "ParserHandle",
    "SyntaxNode",
    "SyntaxTree",
    "from_tree_sitter",
    "load_grammar",
]
