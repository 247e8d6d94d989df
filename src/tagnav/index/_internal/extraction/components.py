"""Query-driven extraction of component declarations.

Two declarative queries do all the work:

- COMPONENT_QUERY finds exported classes decorated with
  ``@Component({selector: '...'})`` and captures the class and selector.
- MEMBER_QUERY, scoped to one class subtree, finds members decorated with
  ``@Input`` / ``@Output``.

tree-sitter-typescript attaches decorators in two shapes: field decorators
are children of ``public_field_definition``, while method decorators are
siblings that precede the ``method_definition`` in the class body. Both are
covered.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from tagnav.index._internal.parsing import ParserHandle, SyntaxNode, SyntaxTree
from tagnav.index._internal.query import Query, compile_query
from tagnav.index.models import ComponentRecord

logger = structlog.get_logger()

_SELECTOR_ARGS = """
    arguments: (arguments
      (object
        (pair
          key: (property_identifier) @prop-name
          value: (string . (string_fragment) @selector .))))
"""

COMPONENT_QUERY = f"""
; @Component({{selector: 'x'}}) export class Foo {{}}
(export_statement
  decorator: (decorator
    (call_expression
      function: (identifier) @dec-name
      {_SELECTOR_ARGS}))
  declaration: (class_declaration
    name: (type_identifier) @class-name) @declaration
  (#eq? @dec-name "Component")
  (#eq? @prop-name "selector"))

; export @Component({{selector: 'x'}}) class Foo {{}}
(export_statement
  declaration: (class_declaration
    decorator: (decorator
      (call_expression
        function: (identifier) @dec-name
        {_SELECTOR_ARGS}))
    name: (type_identifier) @class-name) @declaration
  (#eq? @dec-name "Component")
  (#eq? @prop-name "selector"))
"""

_BINDING_DECORATOR = """
[
  (call_expression function: (identifier) @dec-name)
  (identifier) @dec-name
]
"""

MEMBER_QUERY = f"""
; @Input() value: string;
(public_field_definition
  decorator: (decorator {_BINDING_DECORATOR})
  name: (property_identifier) @member-name
  (#match? @dec-name "^(Input|Output)$"))

(method_definition
  decorator: (decorator {_BINDING_DECORATOR})
  name: (property_identifier) @member-name
  (#match? @dec-name "^(Input|Output)$"))

; @Input() set value(v) {{}}
((decorator {_BINDING_DECORATOR})
  .
  [
    (method_definition name: (property_identifier) @member-name)
    (public_field_definition name: (property_identifier) @member-name)
  ]
  (#match? @dec-name "^(Input|Output)$"))
"""

# Any @Component decorator, used only to report declarations that were skipped
_DECORATOR_QUERY = """
(decorator
  (call_expression function: (identifier) @dec-name)
  (#eq? @dec-name "Component"))
"""


class ComponentExtractor:
    """Turns one TypeScript source file into ComponentRecords.

    Queries are compiled once per extractor; extraction itself keeps no
    state between calls.
    """

    def __init__(self, parser: ParserHandle) -> None:
        self._parser = parser
        self._component_query: Query = compile_query(COMPONENT_QUERY)
        self._member_query: Query = compile_query(MEMBER_QUERY)
        self._decorator_query: Query = compile_query(_DECORATOR_QUERY)

    def extract(self, path: Path, text: str | bytes) -> list[ComponentRecord]:
        """Extract component records from ``text``.

        Never raises for malformed source; a file without declarations
        yields an empty list.
        """
        tree = self._parser.parse(text)
        records: list[ComponentRecord] = []
        seen: set[str] = set()
        skipped = 0

        for match in self._component_query.matches(tree):
            selector = match.text("selector") or ""
            declaration = match.node("declaration")
            if not selector or declaration is None:
                logger.debug("component_skipped", path=str(path), reason="empty selector")
                skipped += 1
                continue
            if selector in seen:
                logger.debug(
                    "component_skipped",
                    path=str(path),
                    selector=selector,
                    reason="duplicate selector in file",
                )
                skipped += 1
                continue
            seen.add(selector)

            inputs, outputs = self._bindings(tree, declaration)
            records.append(
                ComponentRecord(
                    selector=selector,
                    path=path,
                    line=declaration.start_point[0],
                    class_name=match.text("class-name") or "",
                    inputs=tuple(inputs),
                    outputs=tuple(outputs),
                )
            )

        decorators = sum(1 for _ in self._decorator_query.matches(tree))
        unexplained = decorators - len(records) - skipped
        if unexplained > 0:
            logger.debug(
                "component_skipped",
                path=str(path),
                count=unexplained,
                reason="no literal selector or class not exported",
            )
        return records

    def _bindings(
        self, tree: SyntaxTree, declaration: SyntaxNode
    ) -> tuple[list[str], list[str]]:
        # Matches arrive grouped by member shape; restore source order
        members: list[tuple[int, bool, str]] = []
        for match in self._member_query.matches(tree, node=declaration):
            node = match.node("member-name")
            if node is None:
                continue
            members.append((node.start_byte, match.text("dec-name") == "Input", tree.text(node)))
        members.sort()
        inputs = [name for _, is_input, name in members if is_input]
        outputs = [name for _, is_input, name in members if not is_input]
        return inputs, outputs
