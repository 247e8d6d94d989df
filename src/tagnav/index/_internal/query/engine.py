"""Structural pattern matching over SyntaxTrees.

Matching is a pre-order walk over the scoped subtree. At every node each
top-level pattern is tried in declaration order; a pattern that can bind
its captures in more than one way yields one match per binding. Results
are produced lazily by a generator, so callers can stop early.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from tagnav.index._internal.parsing.tree import SyntaxNode, SyntaxTree
from tagnav.index._internal.query.compiler import (
    Alternation,
    NodePattern,
    Pattern,
    Predicate,
    SiblingGroup,
    Step,
    TopLevelPattern,
    parse_query,
)

Captures = dict[str, tuple[SyntaxNode, ...]]


@dataclass(frozen=True, slots=True)
class Match:
    """One successful pattern match.

    ``captures`` maps capture name to the nodes bound to it, in tree order.
    A capture that sits in an unmatched alternative is simply absent.
    """

    pattern_index: int
    captures: Mapping[str, tuple[SyntaxNode, ...]]
    tree: SyntaxTree

    def node(self, name: str) -> SyntaxNode | None:
        nodes = self.captures.get(name)
        return nodes[0] if nodes else None

    def text(self, name: str) -> str | None:
        node = self.node(name)
        return self.tree.text(node) if node is not None else None


class Query:
    """A compiled query.

    Immutable after construction, so a single instance can be shared by
    every extraction.

    Usage::

        query = Query('(class_declaration name: (type_identifier) @name)')
        for match in query.matches(tree):
            print(match.text("name"))
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self._patterns: tuple[TopLevelPattern, ...] = parse_query(source)

    @property
    def pattern_count(self) -> int:
        return len(self._patterns)

    @property
    def capture_names(self) -> frozenset[str]:
        names: set[str] = set()
        for pattern in self._patterns:
            names |= pattern.capture_names
        return frozenset(names)

    def matches(self, tree: SyntaxTree, node: SyntaxNode | None = None) -> Iterator[Match]:
        """Yield matches in the subtree rooted at ``node`` (default: tree root).

        The returned iterator is single-use.
        """
        scope = node if node is not None else tree.root
        for current in scope.walk():
            for index, pattern in enumerate(self._patterns):
                for captures in _match_top(pattern.root, current):
                    if all(_check_predicate(p, captures, tree) for p in pattern.predicates):
                        yield Match(index, MappingProxyType(captures), tree)


def compile_query(source: str) -> Query:
    """Compile query text.

    Raises:
        QuerySyntaxError: Malformed or unsupported query text.
    """
    return Query(source)


def _match_top(root: Pattern | SiblingGroup, node: SyntaxNode) -> Iterator[Captures]:
    if isinstance(root, SiblingGroup):
        return _match_steps(root.steps, node.children, root.anchor_first, root.anchor_last)
    return _match_pattern(root, node)


def _match_pattern(pattern: Pattern, node: SyntaxNode) -> Iterator[Captures]:
    if pattern.field is not None and node.field != pattern.field:
        return
    if isinstance(pattern, Alternation):
        for alternative in pattern.alternatives:
            for captures in _match_pattern(alternative, node):
                yield _bind(captures, pattern.captures, node)
        return
    if not _type_matches(pattern, node):
        return
    for captures in _match_steps(
        pattern.steps, node.children, pattern.anchor_first, pattern.anchor_last
    ):
        yield _bind(captures, pattern.captures, node)


def _type_matches(pattern: NodePattern, node: SyntaxNode) -> bool:
    return pattern.node_type is None or pattern.node_type == node.type


def _match_steps(
    steps: Sequence[Step],
    siblings: Sequence[SyntaxNode],
    anchor_first: bool,
    anchor_last: bool,
    index: int = 0,
    position: int = 0,
) -> Iterator[Captures]:
    if index == len(steps):
        # Last-child anchor: the final step must have consumed the last sibling
        if anchor_last and steps and position != len(siblings):
            return
        yield {}
        return
    step = steps[index]
    if step.anchored or (index == 0 and anchor_first):
        candidates = range(position, min(position + 1, len(siblings)))
    else:
        candidates = range(position, len(siblings))
    for j in candidates:
        for head in _match_pattern(step.pattern, siblings[j]):
            for tail in _match_steps(steps, siblings, anchor_first, anchor_last, index + 1, j + 1):
                yield _merge(head, tail)


def _bind(captures: Captures, names: tuple[str, ...], node: SyntaxNode) -> Captures:
    if not names:
        return captures
    bound = dict(captures)
    for name in names:
        bound[name] = (node, *bound.get(name, ()))
    return bound


def _merge(head: Captures, tail: Captures) -> Captures:
    if not tail:
        return head
    merged = dict(head)
    for name, nodes in tail.items():
        merged[name] = merged.get(name, ()) + nodes
    return merged


def _check_predicate(predicate: Predicate, captures: Captures, tree: SyntaxTree) -> bool:
    nodes = captures.get(predicate.capture)
    if not nodes:
        # Capture lives in an unmatched optional branch
        return True
    texts = [tree.text(n) for n in nodes]
    if predicate.regex is not None:
        ok = all(predicate.regex.search(t) for t in texts)
    else:
        if predicate.other_capture is not None:
            others = captures.get(predicate.other_capture)
            if not others:
                return True
            expected = tree.text(others[0])
        else:
            expected = predicate.value
        ok = all(t == expected for t in texts)
    return not ok if predicate.negated else ok
