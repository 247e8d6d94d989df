"""Compile s-expression tree queries into constraint trees.

The notation is the one used by tree-sitter query files, restricted to what
structural matching over named nodes needs:

    (class_declaration                      ; node-type constraint
      name: (type_identifier) @class-name   ; field-qualified child + capture
      body: (class_body
        (decorator) . (method_definition))) ; immediate-sibling anchor
    [(identifier) (property_identifier)]    ; alternation
    ((a) . (b))                             ; top-level sibling sequence
    (#eq? @cap "text") (#match? @cap "re")  ; textual predicates

Anonymous-token patterns ("export"), quantifiers and negated fields are not
supported and raise QuerySyntaxError.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Union

from tagnav.core.errors import QuerySyntaxError


@dataclass(frozen=True, slots=True)
class NodePattern:
    """Matches one named node. ``node_type`` None is the ``_`` wildcard."""

    node_type: str | None
    field: str | None = None
    captures: tuple[str, ...] = ()
    steps: tuple[Step, ...] = ()
    anchor_first: bool = False
    anchor_last: bool = False


@dataclass(frozen=True, slots=True)
class Alternation:
    """Matches a node if any alternative does."""

    alternatives: tuple[NodePattern, ...]
    field: str | None = None
    captures: tuple[str, ...] = ()


Pattern = Union[NodePattern, Alternation]


@dataclass(frozen=True, slots=True)
class Step:
    """One child (or sibling) constraint in a sequence.

    ``anchored`` requires the matched node to be the named sibling right
    after the node matched by the previous step.
    """

    pattern: Pattern
    anchored: bool = False


@dataclass(frozen=True, slots=True)
class SiblingGroup:
    """Top-level sequence of sibling patterns, e.g. ``((a) . (b))``."""

    steps: tuple[Step, ...]
    anchor_first: bool = False
    anchor_last: bool = False


@dataclass(frozen=True, slots=True)
class Predicate:
    """Textual constraint applied after a full structural match."""

    name: str
    capture: str
    value: str | None = None
    other_capture: str | None = None
    regex: re.Pattern[str] | None = None

    @property
    def negated(self) -> bool:
        return self.name.startswith("not-")


@dataclass(frozen=True, slots=True)
class TopLevelPattern:
    root: Pattern | SiblingGroup
    predicates: tuple[Predicate, ...] = ()
    capture_names: frozenset[str] = frozenset()


_PREDICATES = frozenset({"eq?", "not-eq?", "match?", "not-match?"})

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<comment>;[^\n]*)
    | (?P<punct>[()\[\].])
    | (?P<capture>@[A-Za-z_][\w.\-]*)
    | (?P<predicate>\#[A-Za-z_][\w\-]*[?!]?)
    | (?P<string>"(?:[^"\\]|\\.)*")
    | (?P<field>[A-Za-z_]\w*:)
    | (?P<ident>[A-Za-z_][\w\-]*)
    | (?P<bad>.)
    """,
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    value: str
    pos: int


def _tokenize(text: str) -> Iterator[_Token]:
    for m in _TOKEN_RE.finditer(text):
        kind = m.lastgroup or "bad"
        if kind in ("ws", "comment"):
            continue
        value = m.group()
        if kind == "bad":
            raise QuerySyntaxError.at(m.start(), f"unexpected character {value!r}")
        if kind == "string":
            value = _unescape(value[1:-1])
        elif kind == "field":
            value = value[:-1]
        yield _Token(kind, value, m.start())


def _unescape(body: str) -> str:
    return re.sub(r"\\(.)", lambda m: {"n": "\n", "t": "\t"}.get(m.group(1), m.group(1)), body)


class _Parser:
    """Recursive-descent parser over the token stream."""

    def __init__(self, text: str) -> None:
        self._tokens = list(_tokenize(text))
        self._i = 0
        self._end = len(text)

    # -- token helpers -------------------------------------------------------

    def _peek(self, ahead: int = 0) -> _Token | None:
        j = self._i + ahead
        return self._tokens[j] if j < len(self._tokens) else None

    def _next(self) -> _Token:
        tok = self._peek()
        if tok is None:
            raise QuerySyntaxError.at(self._end, "unexpected end of query")
        self._i += 1
        return tok

    def _expect(self, value: str) -> _Token:
        tok = self._next()
        if tok.kind != "punct" or tok.value != value:
            raise QuerySyntaxError.at(tok.pos, f"expected {value!r}, got {tok.value!r}")
        return tok

    def _is_punct(self, tok: _Token | None, value: str) -> bool:
        return tok is not None and tok.kind == "punct" and tok.value == value

    def _starts_predicate(self) -> bool:
        after = self._peek(1)
        return after is not None and after.kind == "predicate"

    # -- grammar -------------------------------------------------------------

    def parse(self) -> tuple[TopLevelPattern, ...]:
        patterns: list[TopLevelPattern] = []
        while self._peek() is not None:
            predicates: list[Predicate] = []
            start = self._peek()
            root = self._parse_top(predicates)
            names = _capture_names(root)
            for pred in predicates:
                for cap in (pred.capture, pred.other_capture):
                    if cap is not None and cap not in names:
                        raise QuerySyntaxError.at(
                            start.pos if start else 0, f"predicate uses undefined capture @{cap}"
                        )
            patterns.append(TopLevelPattern(root, tuple(predicates), frozenset(names)))
        if not patterns:
            raise QuerySyntaxError.at(0, "query contains no patterns")
        return tuple(patterns)

    def _parse_top(self, predicates: list[Predicate]) -> Pattern | SiblingGroup:
        tok = self._peek()
        nxt = self._peek(1)
        if self._is_punct(tok, "(") and nxt is not None and (
            self._is_punct(nxt, "(") or self._is_punct(nxt, "[") or self._is_punct(nxt, ".")
        ):
            return self._parse_group(predicates)
        if tok is not None and tok.kind == "field":
            raise QuerySyntaxError.at(tok.pos, "field name on a top-level pattern")
        return self._parse_pattern(predicates)

    def _parse_group(self, predicates: list[Predicate]) -> Pattern | SiblingGroup:
        open_tok = self._expect("(")
        steps, anchor_first, anchor_last = self._parse_steps(predicates)
        self._expect(")")
        if (tok := self._peek()) is not None and tok.kind == "capture":
            raise QuerySyntaxError.at(open_tok.pos, "captures on a sibling group")
        if not steps:
            raise QuerySyntaxError.at(open_tok.pos, "empty group")
        if len(steps) == 1 and not (anchor_first or anchor_last):
            return steps[0].pattern
        return SiblingGroup(tuple(steps), anchor_first, anchor_last)

    def _parse_pattern(
        self, predicates: list[Predicate], field: str | None = None
    ) -> Pattern:
        tok = self._next()
        if tok.kind == "ident" and tok.value == "_":
            return NodePattern(None, field=field, captures=self._parse_captures())
        if self._is_punct(tok, "["):
            alternatives: list[NodePattern] = []
            while not self._is_punct(self._peek(), "]"):
                alt = self._parse_pattern(predicates)
                if isinstance(alt, Alternation):
                    alternatives.extend(
                        NodePattern(
                            a.node_type,
                            captures=a.captures + alt.captures,
                            steps=a.steps,
                            anchor_first=a.anchor_first,
                            anchor_last=a.anchor_last,
                        )
                        for a in alt.alternatives
                    )
                else:
                    alternatives.append(alt)
            self._expect("]")
            if not alternatives:
                raise QuerySyntaxError.at(tok.pos, "empty alternation")
            return Alternation(tuple(alternatives), field=field, captures=self._parse_captures())
        if self._is_punct(tok, "("):
            head = self._next()
            if head.kind == "ident":
                node_type = None if head.value == "_" else head.value
            elif head.kind == "string":
                raise QuerySyntaxError.at(head.pos, "anonymous node patterns are not supported")
            else:
                raise QuerySyntaxError.at(head.pos, f"expected node type, got {head.value!r}")
            steps, anchor_first, anchor_last = self._parse_steps(predicates)
            self._expect(")")
            return NodePattern(
                node_type,
                field=field,
                captures=self._parse_captures(),
                steps=tuple(steps),
                anchor_first=anchor_first,
                anchor_last=anchor_last,
            )
        if tok.kind == "string":
            raise QuerySyntaxError.at(tok.pos, "anonymous node patterns are not supported")
        raise QuerySyntaxError.at(tok.pos, f"unexpected token {tok.value!r}")

    def _parse_steps(self, predicates: list[Predicate]) -> tuple[list[Step], bool, bool]:
        steps: list[Step] = []
        anchor_first = False
        pending_anchor = False
        while True:
            tok = self._peek()
            if tok is None or self._is_punct(tok, ")"):
                break
            if self._is_punct(tok, "."):
                self._next()
                if not steps:
                    anchor_first = True
                else:
                    pending_anchor = True
                continue
            if self._is_punct(tok, "(") and self._starts_predicate():
                predicates.append(self._parse_predicate())
                continue
            field = None
            if tok.kind == "field":
                field = self._next().value
            steps.append(Step(self._parse_pattern(predicates, field), anchored=pending_anchor))
            pending_anchor = False
        return steps, anchor_first, pending_anchor

    def _parse_captures(self) -> tuple[str, ...]:
        names: list[str] = []
        while (tok := self._peek()) is not None and tok.kind == "capture":
            names.append(self._next().value[1:])
        return tuple(names)

    def _parse_predicate(self) -> Predicate:
        self._expect("(")
        head = self._next()
        name = head.value[1:]
        if name not in _PREDICATES:
            raise QuerySyntaxError.at(head.pos, f"unsupported predicate #{name}")
        args: list[_Token] = []
        while not self._is_punct(self._peek(), ")"):
            args.append(self._next())
        self._expect(")")
        if len(args) != 2 or args[0].kind != "capture":
            raise QuerySyntaxError.at(head.pos, f"#{name} takes a capture and one argument")
        capture = args[0].value[1:]
        arg = args[1]
        if name.endswith("match?"):
            if arg.kind not in ("string", "ident"):
                raise QuerySyntaxError.at(arg.pos, f"#{name} needs a regex string")
            try:
                regex = re.compile(arg.value)
            except re.error as err:
                raise QuerySyntaxError.at(arg.pos, f"bad regex: {err}") from err
            return Predicate(name, capture, value=arg.value, regex=regex)
        if arg.kind == "capture":
            return Predicate(name, capture, other_capture=arg.value[1:])
        if arg.kind not in ("string", "ident"):
            raise QuerySyntaxError.at(arg.pos, f"#{name} needs a string or capture")
        return Predicate(name, capture, value=arg.value)


def _capture_names(pattern: Pattern | SiblingGroup) -> set[str]:
    names: set[str] = set()
    if isinstance(pattern, SiblingGroup):
        for step in pattern.steps:
            names |= _capture_names(step.pattern)
        return names
    names.update(pattern.captures)
    if isinstance(pattern, Alternation):
        for alt in pattern.alternatives:
            names |= _capture_names(alt)
    else:
        for step in pattern.steps:
            names |= _capture_names(step.pattern)
    return names


def parse_query(text: str) -> tuple[TopLevelPattern, ...]:
    """Parse query text into its top-level patterns.

    Raises:
        QuerySyntaxError: Malformed or unsupported query text.
    """
    return _Parser(text).parse()
