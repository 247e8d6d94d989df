"""Structural query engine: s-expression patterns over SyntaxTrees."""

from tagnav.index._internal.query.compiler import parse_query
from tagnav.index._internal.query.engine import Match, Query, compile_query

__all__ = ["Match", "Query", "compile_query", "parse_query"]
